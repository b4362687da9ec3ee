import os
import enum
import logging
from dataclasses import dataclass

from medarch import (
    PlanningError,
    unique_path,
)
from medarch.config import RunConfig
from medarch.discover import Candidate

# ------------------------------------------------------------
# planned copies
# ------------------------------------------------------------

class Action(enum.Enum):
    COPY = "copy"
    SKIP_DUPLICATE = "skip_duplicate"


@dataclass(frozen=True)
class PlannedCopy:
    candidate: Candidate
    destination: str
    action: Action
    renamed: bool = False


# ------------------------------------------------------------
# planner
# ------------------------------------------------------------

class DestinationPlanner:
    """
    Map candidates to destination paths, one at a time.

    Plans are computed against the destination as it is right now, so each
    plan must be executed before the next candidate is planned. In dry-run
    mode nothing is written; instead the planner remembers every would-be
    copy and treats it as existing for later candidates.
    """

    def __init__(self, config: RunConfig):
        self.config = config
        self._pending_files: dict[str, int] = {}   # dry-run: path -> size
        self._pending_dirs: set[str] = set()       # dry-run: reported folders

    # filesystem view (real + simulated)
    def _exists(self, path: str) -> bool:
        return path in self._pending_files or os.path.lexists(path)

    def _existing_file_size(self, path: str) -> int | None:
        if path in self._pending_files:
            return self._pending_files[path]
        if os.path.isfile(path):
            return os.path.getsize(path)
        return None

    def _blocking_file(self, folder: str) -> str | None:
        """First existing non-directory between the destination root and 'folder'."""
        path = folder
        while path != self.config.destination and path != os.path.dirname(path):
            if os.path.lexists(path) and not os.path.isdir(path):
                return path
            path = os.path.dirname(path)
        return None

    def _target_folder(self, candidate: Candidate) -> str:
        if self.config.flatten or not candidate.rel_dir:
            return self.config.destination
        folder = os.path.join(self.config.destination, candidate.rel_dir)
        if os.path.isdir(folder):
            return folder
        if self.config.dry_run:
            blocker = self._blocking_file(folder)
            if blocker:
                raise PlanningError(f"Cannot create folder {folder}: {blocker} is not a directory")
            if folder not in self._pending_dirs:
                self._pending_dirs.add(folder)
                if self.config.verbose:
                    logging.debug("Would create folder: %s", folder, extra={"target": candidate.rel_dir})
            return folder
        try:
            os.makedirs(folder, exist_ok=True)
        except OSError as e:
            raise PlanningError(f"Cannot create folder {folder}: {e}") from e
        if self.config.verbose:
            logging.debug("Created folder: %s", folder, extra={"target": candidate.rel_dir})
        return folder

    def _is_duplicate(self, candidate: Candidate, base_path: str) -> bool:
        existing = self._existing_file_size(base_path)
        if existing is None:
            return False
        # empty files are never treated as duplicates
        return existing == candidate.size and candidate.size > 0

    def plan(self, candidate: Candidate) -> PlannedCopy:
        folder = self._target_folder(candidate)
        base_path = os.path.join(folder, candidate.name)

        if self.config.skip_duplicates and self._is_duplicate(candidate, base_path):
            return PlannedCopy(candidate=candidate, destination=base_path, action=Action.SKIP_DUPLICATE)

        final_path = unique_path(base_path, exists=self._exists)
        if self.config.dry_run:
            self._pending_files[final_path] = candidate.size
        return PlannedCopy(
            candidate=candidate,
            destination=final_path,
            action=Action.COPY,
            renamed=final_path != base_path,
        )
