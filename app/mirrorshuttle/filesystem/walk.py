"""Depth-first pre-order tree traversal over a FileSystem.

The consumer iterates over :class:`WalkEntry` items and may call
:meth:`TreeWalk.skip_dir` right after receiving a directory entry to prevent
descending into it. Aborting the walk is done by leaving the loop (usually by
raising). Entry names within a directory are visited in sorted order.

Errors are reported as entries rather than raised:

- a child that cannot be examined (e.g. removed concurrently) is yielded
  with ``info=None`` and the error
- a directory that cannot be listed is yielded a second time, with its info
  and the listing error
"""

import os
from collections.abc import Iterator
from dataclasses import dataclass

from mirrorshuttle.filesystem.provider import FileInfo, FileSystem


@dataclass(frozen=True, slots=True)
class WalkEntry:
    """A visited path.

    Attributes:
        path: Path of the entry.
        info: Stat information, None if the entry could not be examined.
        error: Error encountered for this entry, None on success.
    """

    path: str
    info: FileInfo | None
    error: OSError | None = None

    @property
    def is_dir(self) -> bool:
        """Whether the entry is a known directory."""
        return self.info is not None and self.info.is_dir


class TreeWalk:
    """Iterable pre-order walk with a skip-subtree control."""

    def __init__(self, fs: FileSystem, root: str) -> None:
        self._fs = fs
        self._root = root
        self._skip = False

    def skip_dir(self) -> None:
        """Do not descend into the directory that was just yielded."""
        self._skip = True

    def __iter__(self) -> Iterator[WalkEntry]:
        try:
            info = self._fs.lstat(self._root)
        except OSError as e:
            yield self._emit(WalkEntry(self._root, None, e))
            return
        yield from self._walk(self._root, info)

    def _emit(self, entry: WalkEntry) -> WalkEntry:
        self._skip = False
        return entry

    def _walk(self, path: str, info: FileInfo) -> Iterator[WalkEntry]:
        yield self._emit(WalkEntry(path, info))
        if not info.is_dir or self._skip:
            return

        try:
            names = self._fs.listdir(path)
        except OSError as e:
            yield self._emit(WalkEntry(path, info, e))
            return

        for name in names:
            child = os.path.join(path, name)
            try:
                child_info = self._fs.lstat(child)
            except OSError as e:
                yield self._emit(WalkEntry(child, None, e))
                continue
            yield from self._walk(child, child_info)
