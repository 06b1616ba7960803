"""Filesystem domain models for mirror and move runs.

This module defines the data structures shared by the mirror and move
engines: skip reasons, transfer modes, digests and the run outcome.
"""

from dataclasses import dataclass
from enum import Enum

from mirrorshuttle.core.exit_codes import ExitCode


class SkipReason(str, Enum):
    """Reason tag attached to a "path skipped" event.

    Attributes:
        NO_LONGER_EXISTS: The entry disappeared during the walk.
        USER_EXCLUDED: The path matches a user exclusion.
        MIRROR_INTO_MIRROR: The destination would be the mirror root itself.
        MIRROR_ROOT: The mirror root was found inside the target (init mode).
        EXCEEDS_INIT_DEPTH: The directory is deeper than --init-depth.
        ERROR_OCCURRED: An error was skipped because of --skip-failed.
    """

    NO_LONGER_EXISTS = "no_longer_exists"
    USER_EXCLUDED = "is_user_excluded"
    MIRROR_INTO_MIRROR = "mirror_into_mirror"
    MIRROR_ROOT = "is_mirror_root"
    EXCEEDS_INIT_DEPTH = "exceeds_init_depth"
    ERROR_OCCURRED = "error_occurred"


class TransferMode(str, Enum):
    """How a file reached its destination.

    Attributes:
        DIRECT: Atomic rename of the source.
        COPY_REMOVE: Copy to a temporary file, verify, rename, remove source.
    """

    DIRECT = "direct"
    COPY_REMOVE = "c+r"


@dataclass(frozen=True, slots=True)
class FileHashes:
    """Hex SHA-256 digests computed during a copy-based transfer.

    Attributes:
        src_hash: Digest of the bytes read from the source.
        dst_hash: Digest of the bytes written to the temporary file.
        verify_hash: Digest of the re-read destination (empty unless verified).
    """

    src_hash: str = ""
    dst_hash: str = ""
    verify_hash: str = ""


@dataclass(frozen=True, slots=True)
class TransferResult:
    """Result of moving a single file.

    Attributes:
        mode: Transfer strategy that succeeded.
        hashes: Digests for copy-based transfers (empty for direct renames).
    """

    mode: TransferMode
    hashes: FileHashes


@dataclass(slots=True)
class TransferOutcome:
    """Counters and flags collected during one run.

    Attributes:
        created_dirs: Number of directories created.
        moved_files: Number of files moved.
        removed_dirs: Number of empty mirror directories removed.
        has_unmoved_files: A conflicting target file left a source in place.
        has_partial_failures: An error was skipped because of --skip-failed.
    """

    created_dirs: int = 0
    moved_files: int = 0
    removed_dirs: int = 0
    has_unmoved_files: bool = False
    has_partial_failures: bool = False

    @property
    def exit_code(self) -> ExitCode:
        """Exit code for a run that completed without a fatal error.

        Partial failures take precedence over unmoved files.
        """
        if self.has_partial_failures:
            return ExitCode.PARTIAL_FAILURE
        if self.has_unmoved_files:
            return ExitCode.UNMOVED_FILES
        return ExitCode.SUCCESS
