"""In-memory filesystem.

Used by the test suite to exercise the engines without touching the disk,
and as a base class for fault injection (override a method and raise).
Paths are absolute POSIX paths; ``/`` always exists.
"""

import errno
import io
import os
import posixpath
from typing import IO

from mirrorshuttle.filesystem.provider import FileInfo, FileSystem


def _error(cls: type[OSError], code: int, path: str) -> OSError:
    return cls(code, os.strerror(code), path)


class _MemoryFile(io.BytesIO):
    """Writable handle storing its content back into the filesystem."""

    def __init__(self, fs: "MemoryFileSystem", path: str) -> None:
        super().__init__()
        self._fs = fs
        self._path = path

    def flush(self) -> None:
        super().flush()
        self._store()

    def close(self) -> None:
        if not self.closed:
            self._store()
        super().close()

    def _store(self) -> None:
        # The file may have been removed while the handle was open
        if not self.closed and self._path in self._fs.files:
            self._fs.files[self._path] = self.getvalue()


class MemoryFileSystem(FileSystem):
    """Filesystem kept entirely in memory.

    Attributes:
        files: Mapping of file path to content.
        dirs: Set of directory paths.
    """

    def __init__(self) -> None:
        self.files: dict[str, bytes] = {}
        self.dirs: set[str] = {"/"}

    # -- FileSystem interface ------------------------------------------------

    def stat(self, path: str) -> FileInfo:
        path = posixpath.normpath(path)
        if path in self.dirs:
            return FileInfo(path=path, is_dir=True)
        if path in self.files:
            return FileInfo(path=path, is_dir=False, size=len(self.files[path]))
        raise _error(FileNotFoundError, errno.ENOENT, path)

    def lstat(self, path: str) -> FileInfo:
        return self.stat(path)

    def listdir(self, path: str) -> list[str]:
        path = posixpath.normpath(path)
        if path in self.files:
            raise _error(NotADirectoryError, errno.ENOTDIR, path)
        if path not in self.dirs:
            raise _error(FileNotFoundError, errno.ENOENT, path)
        return sorted(
            posixpath.basename(p)
            for p in (*self.files, *self.dirs)
            if p != path and posixpath.dirname(p) == path
        )

    def open_read(self, path: str) -> IO[bytes]:
        path = posixpath.normpath(path)
        if path in self.dirs:
            raise _error(IsADirectoryError, errno.EISDIR, path)
        if path not in self.files:
            raise _error(FileNotFoundError, errno.ENOENT, path)
        return io.BytesIO(self.files[path])

    def create(self, path: str) -> IO[bytes]:
        path = posixpath.normpath(path)
        self._require_parent(path)
        if path in self.dirs:
            raise _error(IsADirectoryError, errno.EISDIR, path)
        self.files[path] = b""
        return _MemoryFile(self, path)

    def sync(self, handle: IO[bytes]) -> None:
        handle.flush()

    def rename(self, src: str, dst: str) -> None:
        src = posixpath.normpath(src)
        dst = posixpath.normpath(dst)
        self._require_parent(dst)

        if src in self.files:
            if dst in self.dirs:
                raise _error(IsADirectoryError, errno.EISDIR, dst)
            self.files[dst] = self.files.pop(src)
            return

        if src not in self.dirs:
            raise _error(FileNotFoundError, errno.ENOENT, src)
        if dst in self.files:
            raise _error(NotADirectoryError, errno.ENOTDIR, dst)
        if dst in self.dirs and self._children(dst):
            raise _error(OSError, errno.ENOTEMPTY, dst)
        if dst == src or dst.startswith(src + "/"):
            raise _error(OSError, errno.EINVAL, dst)

        prefix = src + "/"
        self.dirs = {
            dst + p[len(src) :] if p == src or p.startswith(prefix) else p for p in self.dirs
        }
        self.files = {
            (dst + p[len(src) :] if p.startswith(prefix) else p): content
            for p, content in self.files.items()
        }

    def remove(self, path: str) -> None:
        path = posixpath.normpath(path)
        if path in self.files:
            del self.files[path]
            return
        if path not in self.dirs:
            raise _error(FileNotFoundError, errno.ENOENT, path)
        if self._children(path):
            raise _error(OSError, errno.ENOTEMPTY, path)
        self.dirs.discard(path)

    def mkdir(self, path: str) -> None:
        path = posixpath.normpath(path)
        if path in self.dirs or path in self.files:
            raise _error(FileExistsError, errno.EEXIST, path)
        self._require_parent(path)
        self.dirs.add(path)

    def rmtree(self, path: str) -> None:
        path = posixpath.normpath(path)
        if path not in self.dirs:
            raise _error(FileNotFoundError, errno.ENOENT, path)
        prefix = path + "/"
        self.dirs = {p for p in self.dirs if p != path and not p.startswith(prefix)}
        self.files = {p: c for p, c in self.files.items() if not p.startswith(prefix)}

    # -- Test helpers --------------------------------------------------------

    def makedirs(self, path: str) -> None:
        """Create a directory and all missing parents."""
        path = posixpath.normpath(path)
        while path not in self.dirs:
            self.dirs.add(path)
            path = posixpath.dirname(path)

    def write_file(self, path: str, content: bytes | str) -> None:
        """Create a file, including missing parent directories."""
        path = posixpath.normpath(path)
        self.makedirs(posixpath.dirname(path))
        self.files[path] = content.encode() if isinstance(content, str) else content

    def read_file(self, path: str) -> bytes:
        """Return the content of a file."""
        with self.open_read(path) as f:
            return f.read()

    # -- Internals -----------------------------------------------------------

    def _children(self, path: str) -> bool:
        prefix = path.rstrip("/") + "/"
        return any(p.startswith(prefix) for p in (*self.files, *self.dirs) if p != path)

    def _require_parent(self, path: str) -> None:
        parent = posixpath.dirname(path)
        if parent in self.files:
            raise _error(NotADirectoryError, errno.ENOTDIR, parent)
        if parent not in self.dirs:
            raise _error(FileNotFoundError, errno.ENOENT, parent)
