import os
import shutil
import logging

from medarch import RunStats
from medarch.planner import Action, PlannedCopy

CHUNK_SIZE = 1024 * 1024

# ------------------------------------------------------------
# internal helpers
# ------------------------------------------------------------

def _remove_partial(path: str) -> None:
    try:
        os.remove(path)
    except FileNotFoundError:
        pass
    except OSError as e:
        logging.warning("Could not remove partial copy %s: %s", path, e, extra={"target": os.path.basename(path)})


def copy_file(src: str, dst: str, chunk_size: int = CHUNK_SIZE) -> int:
    """
    Stream 'src' into a new file 'dst' and return the number of bytes written.

    'dst' is opened in exclusive-create mode, so an existing file is never
    overwritten (FileExistsError). A failed copy removes what was written.
    """
    copied = 0
    with open(src, "rb") as fsrc:
        fdst = open(dst, "xb")
        try:
            with fdst:
                while True:
                    buf = fsrc.read(chunk_size)
                    if not buf:
                        break
                    fdst.write(buf)
                    copied += len(buf)
        except BaseException:
            _remove_partial(dst)
            raise
    return copied


def copy_metadata(src: str, dst: str) -> None:
    """Best effort: mtime/atime and permission bits."""
    try:
        shutil.copystat(src, dst)
    except OSError as e:
        logging.warning("Copied, but could not preserve metadata: %s", e, extra={"target": os.path.basename(dst)})


# ------------------------------------------------------------
# executor
# ------------------------------------------------------------

def execute(planned: PlannedCopy, *, dry_run: bool, verbose: bool, summary: RunStats) -> bool:
    """
    Realize one planned copy. Returns True when the file was (or would be) copied.
    Copy failures are logged and counted, never raised.
    """
    src = planned.candidate.path
    dst = planned.destination
    name = planned.candidate.name

    if planned.action is Action.SKIP_DUPLICATE:
        summary.inc("skipped")
        if verbose:
            logging.debug("Skipping duplicate: %s", dst, extra={"target": name})
        return False

    if dry_run:
        summary.add_bytes("copied_bytes", planned.candidate.size)
        if verbose:
            logging.debug("Would copy '%s' -> '%s'", src, dst, extra={"target": name})
    else:
        try:
            written = copy_file(src, dst)
        except FileExistsError:
            logging.error("Destination appeared since planning, not overwriting: %s", dst, extra={"target": name})
            summary.inc("errors")
            return False
        except OSError as e:
            logging.error("Failed to copy '%s': %s", src, e, extra={"target": name})
            summary.inc("errors")
            return False
        copy_metadata(src, dst)
        summary.add_bytes("copied_bytes", written)
        if verbose:
            logging.debug("Copied '%s' -> '%s'", src, dst, extra={"target": name})

    summary.inc("copied")
    if planned.renamed:
        summary.inc("renamed")
    return True
