"""Filesystem engines for mirrorshuttle.

This module provides the filesystem providers, the pre-order tree walk,
the exclusion matcher, the integrity-checked single-file transfer and the
two tree engines: the mirror builder (init mode) and the file mover
(move mode).
"""

from mirrorshuttle.filesystem.excludes import is_excluded
from mirrorshuttle.filesystem.memory import MemoryFileSystem
from mirrorshuttle.filesystem.mirror import MirrorBuilder, is_empty_structure
from mirrorshuttle.filesystem.models import (
    FileHashes,
    SkipReason,
    TransferMode,
    TransferOutcome,
    TransferResult,
)
from mirrorshuttle.filesystem.mover import FileMover
from mirrorshuttle.filesystem.provider import FileInfo, FileSystem, OsFileSystem
from mirrorshuttle.filesystem.transfer import TEMP_SUFFIX, FileTransfer
from mirrorshuttle.filesystem.walk import TreeWalk, WalkEntry

__all__ = [
    "TEMP_SUFFIX",
    "FileHashes",
    "FileInfo",
    "FileMover",
    "FileSystem",
    "FileTransfer",
    "MemoryFileSystem",
    "MirrorBuilder",
    "OsFileSystem",
    "SkipReason",
    "TransferMode",
    "TransferOutcome",
    "TransferResult",
    "TreeWalk",
    "WalkEntry",
    "is_empty_structure",
    "is_excluded",
]
