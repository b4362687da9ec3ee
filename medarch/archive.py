import sys
import logging

from medarch import (
    configure_logging,
    ConfigError,
    ScanError,
    PlanningError,
    RunStats,
)
from medarch.config import RunConfig, resolve_config, prepare_destination
from medarch.discover import discover
from medarch.planner import DestinationPlanner
from medarch.copier import execute

# ------------------------------------------------------------
# progress
# ------------------------------------------------------------

class ProgressLine:
    """Single status line on stdout, rewritten in place after every file."""

    def __init__(self, total: int, stream=None):
        self.total = total
        self.stream = stream or sys.stdout
        self._dirty = False

    def update(self, processed: int, stats: RunStats) -> None:
        self.stream.write(
            f"\rProcessed {processed}/{self.total} "
            f"(copied: {stats.copied}, skipped: {stats.skipped}, errors: {stats.errors})"
        )
        self.stream.flush()
        self._dirty = True

    def finish(self) -> None:
        if self._dirty:
            self.stream.write("\n")
            self.stream.flush()
            self._dirty = False


# ------------------------------------------------------------
# pipeline
# ------------------------------------------------------------

def run(config: RunConfig, summary: RunStats | None = None) -> RunStats:
    """
    Discover, plan and copy. Files are handled strictly one after another:
    each plan sees the files copied before it.
    """
    s = summary or RunStats()
    s.set("dry_run", config.dry_run)
    s.set("flatten", config.flatten)
    s.set("skip_duplicates", config.skip_duplicates)

    logging.info("Scanning for media files in: %s", config.source, extra={"target": "medarch"})
    candidates = discover(config, summary=s)
    total = len(candidates)
    if not candidates:
        logging.warning("No media files found in source directory.", extra={"target": "medarch"})
        return s
    logging.info("Found %d files to process.", total, extra={"target": "medarch"})

    planner = DestinationPlanner(config)
    progress = None if config.verbose else ProgressLine(total)
    try:
        for processed, candidate in enumerate(candidates, start=1):
            try:
                planned = planner.plan(candidate)
            except PlanningError as e:
                logging.error("%s", e, extra={"target": candidate.name})
                s.inc("errors")
            else:
                execute(planned, dry_run=config.dry_run, verbose=config.verbose, summary=s)
            if progress:
                progress.update(processed, s)
    finally:
        if progress:
            progress.finish()
    return s


def emit_summary(s: RunStats) -> None:
    lines = [
        "---------------------------------------------------",
        "Operation completed." if not s["dry_run"] else "Dry run completed; no files were written.",
        f"Total found:   {s.discovered}",
        f"Copied:        {s.copied} ({s.hbytes('copied_bytes')}, {s.counters['renamed']} renamed)",
        f"Skipped:       {s.skipped}",
        f"Errors:        {s.errors}",
        f"Duration:      {s.duration_hms}",
    ]
    if s.counters["unreadable_dirs"]:
        lines.append(f"Unreadable directories: {s.counters['unreadable_dirs']}")
    s.emit_lines(
        lines,
        json_extra={
            "found": s.discovered,
            "copied": s.copied,
            "skipped": s.skipped,
            "errors": s.errors,
        },
    )


# ------------------------------------------------------------
# CLI
# ------------------------------------------------------------

def main(argv=None) -> int:
    configure_logging(False)
    try:
        config = resolve_config(argv)
        configure_logging(config.verbose)
        prepare_destination(config)
    except ConfigError as e:
        logging.error("%s", e, extra={"target": "medarch"})
        return 1

    try:
        s = run(config)
    except ScanError as e:
        logging.error("%s", e, extra={"target": "medarch"})
        return 1

    emit_summary(s)
    # per-file errors are reported in the summary only
    return 0


if __name__ == "__main__":
    sys.exit(main())
