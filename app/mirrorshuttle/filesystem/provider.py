"""Filesystem providers used by the mirror and move engines.

The engines only talk to the narrow :class:`FileSystem` interface, so the
same code runs against the real disk (:class:`OsFileSystem`) or against an
in-memory tree with injected faults
(:class:`~mirrorshuttle.filesystem.memory.MemoryFileSystem`).

All methods raise the builtin ``OSError`` subclasses (``FileNotFoundError``,
``FileExistsError``, ``PermissionError``, ...) on failure.
"""

import os
import shutil
import stat
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import IO

# Directories are created with full permissions, masked by the umask
DIR_BASE_PERM = 0o777


@dataclass(frozen=True, slots=True)
class FileInfo:
    """Minimal stat result.

    Attributes:
        path: Path that was examined.
        is_dir: Whether the entry is a directory.
        size: Size in bytes (0 for directories).
    """

    path: str
    is_dir: bool
    size: int = 0


class FileSystem(ABC):
    """Capabilities the engines need from a filesystem."""

    @abstractmethod
    def stat(self, path: str) -> FileInfo:
        """Return information about ``path``, following symlinks."""

    @abstractmethod
    def lstat(self, path: str) -> FileInfo:
        """Return information about ``path`` without following symlinks."""

    @abstractmethod
    def listdir(self, path: str) -> list[str]:
        """Return the entry names of a directory, sorted."""

    @abstractmethod
    def open_read(self, path: str) -> IO[bytes]:
        """Open a file for binary reading."""

    @abstractmethod
    def create(self, path: str) -> IO[bytes]:
        """Create or truncate a file and open it for binary writing."""

    @abstractmethod
    def sync(self, handle: IO[bytes]) -> None:
        """Flush a written handle to stable storage."""

    @abstractmethod
    def rename(self, src: str, dst: str) -> None:
        """Atomically rename ``src`` to ``dst``."""

    @abstractmethod
    def remove(self, path: str) -> None:
        """Remove a file or an empty directory."""

    @abstractmethod
    def mkdir(self, path: str) -> None:
        """Create a single directory; the parent must exist."""

    @abstractmethod
    def rmtree(self, path: str) -> None:
        """Remove a directory and everything below it."""

    def exists(self, path: str) -> bool:
        """Check if ``path`` exists.

        Raises:
            OSError: If existence cannot be determined (other than not found).
        """
        try:
            self.stat(path)
        except FileNotFoundError:
            return False
        return True


class OsFileSystem(FileSystem):
    """Filesystem backed by the operating system."""

    def stat(self, path: str) -> FileInfo:
        return _to_info(path, os.stat(path))

    def lstat(self, path: str) -> FileInfo:
        return _to_info(path, os.lstat(path))

    def listdir(self, path: str) -> list[str]:
        return sorted(os.listdir(path))

    def open_read(self, path: str) -> IO[bytes]:
        return open(path, "rb")

    def create(self, path: str) -> IO[bytes]:
        return open(path, "wb")

    def sync(self, handle: IO[bytes]) -> None:
        handle.flush()
        os.fsync(handle.fileno())

    def rename(self, src: str, dst: str) -> None:
        os.rename(src, dst)

    def remove(self, path: str) -> None:
        if stat.S_ISDIR(os.lstat(path).st_mode):
            os.rmdir(path)
        else:
            os.remove(path)

    def mkdir(self, path: str) -> None:
        os.mkdir(path, DIR_BASE_PERM)

    def rmtree(self, path: str) -> None:
        shutil.rmtree(path)


def _to_info(path: str, st: os.stat_result) -> FileInfo:
    is_dir = stat.S_ISDIR(st.st_mode)
    return FileInfo(path=path, is_dir=is_dir, size=0 if is_dir else st.st_size)
