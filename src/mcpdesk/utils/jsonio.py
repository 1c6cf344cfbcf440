# ABOUTME: File primitives shared by the config store and settings
# ABOUTME: Atomic JSON writes and a per-path lock registry serializing writers
import json
import logging
import os
import tempfile
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator

from mcpdesk.errors import NotFoundError, StorageError

logger = logging.getLogger(__name__)

# ABOUTME: Generous fixed timeout for acquiring a path lock (seconds)
LOCK_TIMEOUT = 30.0

_locks: dict[str, threading.Lock] = {}
_registry_lock = threading.Lock()


def _lock_for(path: Path) -> threading.Lock:
    key = os.path.normcase(str(path.expanduser().resolve()))
    with _registry_lock:
        lock = _locks.get(key)
        if lock is None:
            lock = threading.Lock()
            _locks[key] = lock
        return lock


@contextmanager
def path_lock(path: Path, timeout: float | None = None) -> Iterator[None]:
    """Hold the process-wide lock for a file path.

    ABOUTME: All read-modify-write cycles on one path run under this lock
    ABOUTME: Raises StorageError if the lock can't be taken within timeout
    """
    if timeout is None:
        timeout = LOCK_TIMEOUT
    lock = _lock_for(path)
    if not lock.acquire(timeout=timeout):
        raise StorageError(f"Timed out waiting for exclusive access to {path}")
    try:
        yield
    finally:
        lock.release()


def read_text(path: Path) -> str:
    """Read a UTF-8 file with its line endings untouched.

    Raises:
        NotFoundError: If the file doesn't exist
        StorageError: If the file can't be read
    """
    try:
        with open(path, encoding="utf-8", newline="") as f:
            return f.read()
    except FileNotFoundError as e:
        raise NotFoundError(f"Config file not found: {path}") from e
    except (OSError, UnicodeDecodeError) as e:
        raise StorageError(f"Failed to read {path}: {e}") from e


def dump_json(data: Any) -> str:
    """Serialize a document the way it is written to disk.

    ABOUTME: 2-space indentation, key order preserved, trailing newline
    ABOUTME: Raises ValueError for NaN or infinite floats, which JSON cannot hold
    """
    return json.dumps(data, indent=2, ensure_ascii=False, allow_nan=False) + "\n"


def write_text_atomic(path: Path, content: str) -> None:
    """Write a file by replacing it with a fully written temp file.

    ABOUTME: Temp file lives in the target directory so os.replace is atomic
    ABOUTME: Creates parent directories if needed
    """
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{path.name}.", suffix=".tmp", dir=str(path.parent)
        )
    except OSError as e:
        raise StorageError(f"Failed to write {path}: {e}") from e

    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="\n") as f:
            f.write(content)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_name, path)
    except OSError as e:
        try:
            os.unlink(tmp_name)
        except OSError:
            logger.debug(f"Temp file already gone: {tmp_name}")
        raise StorageError(f"Failed to write {path}: {e}") from e

    logger.debug(f"Wrote {len(content)} chars to {path}")


def write_json_atomic(path: Path, data: Any) -> None:
    """Serialize data with dump_json and write it atomically."""
    write_text_atomic(path, dump_json(data))
