from .__version__ import __version__

import os
import re
import sys
import enum
import datetime
import decimal
import logging
from collections import defaultdict
from colorama import Fore, Style, just_fix_windows_console





# ========================================
# logs with color
# ========================================
class ColoredFormatter(logging.Formatter):
    COLORS = {
        'DEBUG': Fore.CYAN,
        'INFO': Fore.GREEN,
        'WARNING': Fore.YELLOW,
        'ERROR': Fore.RED,
        'CRITICAL': Fore.MAGENTA
    }

    def __init__(self, use_color: bool = True):
        super().__init__()
        self.use_color = use_color

    def format(self, record):
        if not hasattr(record, 'target'):
            record.target = '-'  # Default value if 'target' is not provided
        log_format = "[%(levelname)s]\t%(target)s:\t%(message)s"
        if self.use_color:
            log_color = self.COLORS.get(record.levelname, '')
            log_format = f"{log_color}{log_format}{Style.RESET_ALL}"
        formatter = logging.Formatter(log_format)
        return formatter.format(record)


class _BelowWarning(logging.Filter):
    def filter(self, record):
        return record.levelno < logging.WARNING


def _stream_handler(stream) -> logging.StreamHandler:
    handler = logging.StreamHandler(stream)
    isatty = getattr(stream, "isatty", None)
    handler.setFormatter(ColoredFormatter(use_color=bool(isatty and isatty())))
    return handler


def configure_logging(verbose: bool = False) -> None:
    """
    Route DEBUG/INFO to stdout and WARNING+ to stderr.
    Verbose runs lower the level to DEBUG so per-file lines show up.
    """
    just_fix_windows_console()
    out_handler = _stream_handler(sys.stdout)
    out_handler.addFilter(_BelowWarning())
    err_handler = _stream_handler(sys.stderr)
    err_handler.setLevel(logging.WARNING)
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        handlers=[out_handler, err_handler],
        force=True,
    )




# ========================================
# errors
# ========================================
class MedarchError(Exception):
    """Base class for errors raised by medarch."""


class ConfigError(MedarchError):
    """Invalid arguments or paths. Fatal, raised before anything is written."""


class ScanError(MedarchError):
    """The source tree could not be enumerated at all."""


class PlanningError(MedarchError):
    """A destination subdirectory for one file could not be created."""




# ========================================
# definitions
# ========================================
PHOTO_EXTENSIONS = ['.jpg', '.jpeg', '.png', '.gif', '.bmp', '.tiff', '.tif', '.webp', '.heic']
AUDIO_EXTENSIONS = ['.mp3', '.flac', '.wav', '.aac', '.ogg', '.m4a', '.wma']
VIDEO_EXTENSIONS = ['.mp4', '.mkv', '.avi', '.mov', '.wmv', '.flv', '.webm', '.mpeg', '.mpg', '.m4v', '.3gp']


class MediaCategory(enum.Enum):
    PHOTO = "photo"
    AUDIO = "sound"
    VIDEO = "video"

    @property
    def extensions(self) -> frozenset:
        return CATEGORY_EXTENSIONS[self]


CATEGORY_EXTENSIONS = {
    MediaCategory.PHOTO: frozenset(PHOTO_EXTENSIONS),
    MediaCategory.AUDIO: frozenset(AUDIO_EXTENSIONS),
    MediaCategory.VIDEO: frozenset(VIDEO_EXTENSIONS),
}

EXTENSION_CATEGORIES = {
    ext: category
    for category, exts in CATEGORY_EXTENSIONS.items()
    for ext in exts
}


def category_for(filename: str) -> MediaCategory | None:
    """Return the media category of 'filename' by extension (case-insensitive), or None."""
    ext = os.path.splitext(filename)[1].lower()
    return EXTENSION_CATEGORIES.get(ext)




# ========================================
# sizes
# ========================================
SIZE_UNITS = {'': 1, 'k': 1024, 'm': 1024 ** 2, 'g': 1024 ** 3}
_SIZE_RE = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*([A-Za-z]*)\s*$")


def parse_size(text: str) -> int:
    """
    Parse a byte count like '500', '500k', '10M' or '1.5G' (base 1024).
    Raises ValueError for empty, negative or unrecognized input.
    """
    match = _SIZE_RE.match(text or "")
    if not match:
        raise ValueError(f"invalid size: {text!r}")
    number, unit = match.groups()
    multiplier = SIZE_UNITS.get(unit.lower())
    if multiplier is None:
        raise ValueError(f"unknown size suffix {unit!r} in {text!r} (use k, M or G)")
    if "." in number:
        return int(decimal.Decimal(number) * multiplier)
    return int(number) * multiplier


def human_bytes(num_bytes: int) -> str:
    """Return human friendly size (e.g., '31.7 GB')."""
    num = float(num_bytes)
    units = ['B', 'KB', 'MB', 'GB', 'TB', 'PB']
    for unit in units:
        if num < 1024.0 or unit == units[-1]:
            return f"{num:.1f} {unit}" if unit != 'B' else f"{int(num)} {unit}"
        num /= 1024.0


def format_duration(seconds: float) -> str:
    """Return HH:MM:SS for a duration in seconds."""
    if seconds is None:
        return "00:00:00"
    total_seconds = int(round(seconds))
    h = total_seconds // 3600
    m = (total_seconds % 3600) // 60
    s = total_seconds % 60
    return f"{h:02d}:{m:02d}:{s:02d}"




# ========================================
# naming
# ========================================
def unique_path(path: str, exists=os.path.lexists) -> str:
    """
    Return 'path' if it is free, otherwise the first free 'stem(N).ext' next to it.
    The counter starts at 1 on every call; nothing is reserved.
    """
    if not exists(path):
        return path
    folder, name = os.path.split(path)
    stem, ext = os.path.splitext(name)
    counter = 1
    while True:
        candidate = os.path.join(folder, f"{stem}({counter}){ext}")
        if not exists(candidate):
            return candidate
        counter += 1




# ========================================
# run statistics (end-of-run reporting)
# ========================================
class RunStats:
    """
    Counters for one archive run.

    Usage:
        s = RunStats()
        s.inc('found')
        s.add_bytes('copied_bytes', 12_345_678)
        # ... do your work ...
        s.emit_lines([
            f"Copied {s.copied} files in {s.duration_hms}.",
        ], json_extra={'copied': s.copied})
    """
    def __init__(self):
        self._t0 = datetime.datetime.now()
        self._t1 = None
        self.counters = defaultdict(int)   # any numeric counters
        self.metrics = {}                  # arbitrary other values

    # timing
    @property
    def duration_s(self) -> float:
        end = self._t1 or datetime.datetime.now()
        return (end - self._t0).total_seconds()

    @property
    def duration_hms(self) -> str:
        return format_duration(self.duration_s)

    def stop(self):
        self._t1 = datetime.datetime.now()

    # counters & metrics
    def inc(self, key: str, n: int = 1):
        self.counters[key] += n

    def add_bytes(self, key: str, n: int):
        self.counters[key] += int(n)

    def set(self, key: str, value):
        self.metrics[key] = value

    def get(self, key: str, default=None):
        if key in self.counters:
            return self.counters[key]
        return self.metrics.get(key, default)

    def __getitem__(self, key: str):
        return self.get(key)

    def hbytes(self, key: str) -> str:
        """human-readable bytes for a counter/metric name."""
        return human_bytes(int(self.get(key) or 0))

    @property
    def discovered(self) -> int:
        return self.counters['found']

    @property
    def copied(self) -> int:
        return self.counters['copied']

    @property
    def skipped(self) -> int:
        return self.counters['skipped']

    @property
    def errors(self) -> int:
        return self.counters['errors']

    # emission
    def emit_lines(self, lines, level=logging.INFO, json_extra=None):
        """Log one or more human lines, then a compact JSON-ish line at DEBUG."""
        self.stop()
        for line in lines:
            logging.log(level, line, extra={'target': 'SUMMARY'})
        payload = {
            'duration_s': int(round(self.duration_s)),
            'counters': dict(self.counters),
            'metrics': self.metrics,
        }
        if json_extra:
            payload.update(json_extra)
        logging.debug("%s", payload, extra={'target': 'SUMMARY'})
