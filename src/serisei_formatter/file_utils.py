import errno
import os
from pathlib import Path
import shutil
import tempfile
import time
from typing import Union

from loguru import logger

# errors editors and sync tools cause while they hold the file
BUSY_ERRNOS = {errno.EBUSY, errno.EAGAIN, errno.EACCES, errno.EPERM}


def read_source(path: Union[str, Path]) -> str:
    """Reads a file without translating its line endings."""
    with open(path, "r", encoding="utf-8", newline="") as handle:
        return handle.read()


def _write_once(path: Path, content: str) -> None:
    fd, temp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as handle:
            handle.write(content)
        if path.exists():
            shutil.copymode(path, temp_name)
        os.replace(temp_name, path)
    except BaseException:
        if os.path.exists(temp_name):
            os.unlink(temp_name)
        raise


def write_file_atomic(path: Union[str, Path], content: str, retries: int = 3, delay: float = 0.1) -> None:
    """Replaces ``path`` with ``content`` through a temporary file in the same directory.

    Transient "busy" errors are retried ``retries`` times, ``delay`` seconds apart.
    """
    path = Path(path)
    for attempt in range(retries + 1):
        try:
            _write_once(path, content)
            return
        except OSError as e:
            if e.errno not in BUSY_ERRNOS or attempt == retries:
                raise
            logger.debug(f"{path} is busy ({e.strerror}), retrying in {delay}s")
            time.sleep(delay)
