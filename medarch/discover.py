import os
import stat
import logging
from dataclasses import dataclass

from medarch import (
    ScanError,
    category_for,
    RunStats,
)
from medarch.config import RunConfig

# ------------------------------------------------------------
# candidates
# ------------------------------------------------------------

@dataclass(frozen=True)
class Candidate:
    path: str
    name: str
    ext: str
    size: int
    rel_dir: str = ""


def _size_allowed(size: int, config: RunConfig) -> bool:
    # strict bounds, like find -size +N -size -N
    if config.min_size is not None and not size > config.min_size:
        return False
    if config.max_size is not None and not size < config.max_size:
        return False
    return True


def _inside(path: str, root: str) -> bool:
    return path != root and os.path.commonpath([path, root]) == root


# ------------------------------------------------------------
# walking
# ------------------------------------------------------------

def iter_candidates(config: RunConfig, *, summary: RunStats | None = None):
    """
    Walk config.source and yield a Candidate for every regular file whose
    extension and size pass the filters.

    Directories and files are visited in sorted order. Symlinked directories
    are not entered; symlinked files count only when they point at a regular file.
    """
    root = config.source
    categories = config.categories
    prune_destination = _inside(config.destination, root)

    def on_error(err: OSError):
        failed = err.filename or root
        if os.path.abspath(failed) == root:
            raise ScanError(f"Cannot read source directory {root}: {err.strerror or err}") from err
        logging.warning("Cannot read directory, skipping: %s", err.strerror or err, extra={"target": failed})
        if summary:
            summary.inc("unreadable_dirs")

    for current, dirs, files in os.walk(root, topdown=True, onerror=on_error, followlinks=False):
        dirs.sort()
        if prune_destination:
            dirs[:] = [d for d in dirs if os.path.join(current, d) != config.destination]

        rel_dir = os.path.relpath(current, root)
        if rel_dir == os.curdir:
            rel_dir = ""

        for name in sorted(files):
            ext = os.path.splitext(name)[1].lower()
            if category_for(name) not in categories:
                continue
            path = os.path.join(current, name)
            try:
                st = os.stat(path)
            except OSError as e:
                # broken symlink or file removed mid-walk
                logging.debug("Cannot stat, skipping: %s", e, extra={"target": name})
                continue
            if not stat.S_ISREG(st.st_mode):
                continue
            if not _size_allowed(st.st_size, config):
                continue
            yield Candidate(path=path, name=name, ext=ext, size=st.st_size, rel_dir=rel_dir)


def discover(config: RunConfig, *, summary: RunStats | None = None) -> list[Candidate]:
    """Materialize the candidate list with a single traversal."""
    candidates = list(iter_candidates(config, summary=summary))
    if summary:
        summary.inc("found", len(candidates))
    return candidates
