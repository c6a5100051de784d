"""File locking and private-permission write helpers."""

from __future__ import annotations

import os
from contextlib import contextmanager
from pathlib import Path
from typing import Generator

import portalocker

PRIVATE_DIR_MODE = 0o700
PRIVATE_FILE_MODE = 0o600


def ensure_private_dir(path: Path) -> None:
    """Create a directory (and parents) with mode 0700 if it is missing."""
    path.mkdir(mode=PRIVATE_DIR_MODE, parents=True, exist_ok=True)


def open_private(path: Path, flags: int) -> int:
    """Open a file descriptor, creating the file with mode 0600."""
    return os.open(path, flags, PRIVATE_FILE_MODE)


@contextmanager
def file_lock(path: Path, timeout: float = 10.0) -> Generator[None, None, None]:
    """Acquire an exclusive lock on a file.

    Creates a .lock file alongside the target file.

    Args:
        path: File to lock
        timeout: Seconds to wait for lock

    Raises:
        portalocker.LockException: If lock cannot be acquired
    """
    lock_path = path.with_name(path.name + ".lock")
    ensure_private_dir(lock_path.parent)

    if not lock_path.exists():
        os.close(open_private(lock_path, os.O_WRONLY | os.O_CREAT))

    with portalocker.Lock(str(lock_path), timeout=timeout):
        yield


@contextmanager
def atomic_write(path: Path, encoding: str = "utf-8") -> Generator:
    """Write a text file atomically with mode 0600.

    Writes to a temporary file then renames to target path.

    Args:
        path: Target file path
        encoding: Text encoding

    Yields:
        File handle for writing
    """
    tmp_path = path.with_name(path.name + ".tmp")
    ensure_private_dir(path.parent)

    try:
        fd = open_private(tmp_path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC)
        with open(fd, "w", encoding=encoding) as f:
            yield f

        # os.replace overwrites on Windows as well
        os.replace(tmp_path, path)

    except BaseException:
        if tmp_path.exists():
            tmp_path.unlink()
        raise
