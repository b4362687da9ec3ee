import os
import sys
import enum
import argparse
import logging
from dataclasses import dataclass

from medarch import (
    __version__,
    ConfigError,
    MediaCategory,
    parse_size,
)

# ------------------------------------------------------------
# run configuration
# ------------------------------------------------------------

class StructureMode(enum.Enum):
    PRESERVE = "preserve"
    FLATTEN = "flatten"


class DuplicatePolicy(enum.Enum):
    SKIP_SAME_NAME_AND_SIZE = "skip"
    ALWAYS_COPY = "copy"


@dataclass(frozen=True)
class RunConfig:
    source: str
    destination: str
    categories: frozenset = frozenset(MediaCategory)
    min_size: int | None = None
    max_size: int | None = None
    structure: StructureMode = StructureMode.PRESERVE
    duplicates: DuplicatePolicy = DuplicatePolicy.ALWAYS_COPY
    dry_run: bool = False
    verbose: bool = False

    @property
    def extensions(self) -> frozenset:
        exts = set()
        for category in self.categories:
            exts.update(category.extensions)
        return frozenset(exts)

    @property
    def flatten(self) -> bool:
        return self.structure is StructureMode.FLATTEN

    @property
    def skip_duplicates(self) -> bool:
        return self.duplicates is DuplicatePolicy.SKIP_SAME_NAME_AND_SIZE


# ------------------------------------------------------------
# CLI parsing
# ------------------------------------------------------------

class _ArgumentParser(argparse.ArgumentParser):
    """argparse parser that raises ConfigError instead of exiting with status 2."""

    def error(self, message):
        self.print_usage(sys.stderr)
        raise ConfigError(message)


def _size_arg(text: str) -> int:
    try:
        return parse_size(text)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e)) from e


def build_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(
        prog="medarch",
        description=(
            "Archive media files from source_dir into destination_dir. "
            "Name collisions get a '(N)' counter; files identical in name and size "
            "can be skipped."
        ),
        epilog=(
            "examples:\n"
            "  medarch /path/to/camera /path/to/archive\n"
            "  medarch --skip-duplicates --exclude-type sound ~/Downloads ~/Media"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("source", metavar="source_dir", help="Directory to scan for media files")
    parser.add_argument("destination", metavar="destination_dir", help="Directory to copy media files into")
    parser.add_argument("-f", "--flatten", action="store_true", help="Flatten directory structure")
    parser.add_argument("-s", "--skip-duplicates", action="store_true", help="Skip files identical in name and size to an archived file")
    parser.add_argument(
        "-e", "--exclude-type",
        action="append",
        default=[],
        choices=[category.value for category in MediaCategory],
        metavar="TYPE",
        help="Exclude a category: photo, video or sound (repeatable)",
    )
    parser.add_argument("-m", "--min-size", type=_size_arg, metavar="SIZE", help="Only files larger than SIZE (e.g. 10M, 500k)")
    parser.add_argument("-M", "--max-size", type=_size_arg, metavar="SIZE", help="Only files smaller than SIZE")
    parser.add_argument("-n", "--dry-run", action="store_true", help="Show what would be done without copying files")
    parser.add_argument("-v", "--verbose", action="store_true", help="Per-file log lines instead of the progress counter")
    parser.add_argument("--version", action="version", version=f"%(prog)s v{__version__}")
    return parser


def _normalize(path: str) -> str:
    return os.path.realpath(os.path.abspath(os.path.expanduser(path)))


def resolve_config(argv=None) -> RunConfig:
    """
    Parse 'argv' and validate it into a RunConfig.
    Nothing on disk is touched here; see prepare_destination().
    """
    args = build_parser().parse_args(argv)

    source = _normalize(args.source)
    destination = _normalize(args.destination)

    if not os.path.isdir(source):
        raise ConfigError(f"Source directory does not exist: {args.source}")
    if os.path.exists(destination) and not os.path.isdir(destination):
        raise ConfigError(f"Destination exists and is not a directory: {args.destination}")
    if source == destination:
        raise ConfigError("Source and destination are the same directory.")

    excluded = {MediaCategory(value) for value in args.exclude_type}
    categories = frozenset(category for category in MediaCategory if category not in excluded)
    if not categories:
        raise ConfigError("All media types are excluded; nothing to archive.")

    if args.min_size is not None and args.max_size is not None and args.max_size < args.min_size:
        raise ConfigError(f"--max-size ({args.max_size} bytes) is smaller than --min-size ({args.min_size} bytes).")

    return RunConfig(
        source=source,
        destination=destination,
        categories=categories,
        min_size=args.min_size,
        max_size=args.max_size,
        structure=StructureMode.FLATTEN if args.flatten else StructureMode.PRESERVE,
        duplicates=DuplicatePolicy.SKIP_SAME_NAME_AND_SIZE if args.skip_duplicates else DuplicatePolicy.ALWAYS_COPY,
        dry_run=args.dry_run,
        verbose=args.verbose,
    )


def prepare_destination(config: RunConfig) -> None:
    """Create the destination root (with parents) unless this is a dry run."""
    if os.path.isdir(config.destination):
        return
    target = os.path.basename(config.destination)
    if config.dry_run:
        logging.info("Would create destination directory: %s", config.destination, extra={"target": target})
        return
    try:
        os.makedirs(config.destination, exist_ok=True)
    except OSError as e:
        raise ConfigError(f"Cannot create destination directory {config.destination}: {e}") from e
    logging.info("Created destination directory: %s", config.destination, extra={"target": target})
