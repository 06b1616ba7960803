"""Exception hierarchy for mirrorshuttle.

All errors raised by the mirror and move engines derive from
:class:`ShuttleError`. Operating system errors are wrapped with the
affected path and chained to the original exception.
"""


class ShuttleError(Exception):
    """Base exception for all mirrorshuttle errors."""


class ConfigError(ShuttleError):
    """Base exception for configuration errors."""


class ConfigNotFoundError(ConfigError):
    """Raised when the configuration file does not exist."""


class ConfigParseError(ConfigError):
    """Raised when the configuration file is malformed or has unknown fields."""


class ConfigValidationError(ConfigError):
    """Raised when the effective options fail validation."""


class OperationCancelledError(ShuttleError):
    """Raised when a cancellation was requested.

    Never counted as a partial failure, regardless of --skip-failed.
    """


class PreconditionError(ShuttleError):
    """Raised when a mode cannot start because of the filesystem state."""


class MirrorNotExistError(PreconditionError):
    """Raised when the mirror root does not exist in move mode."""


class TargetNotExistError(PreconditionError):
    """Raised when the target root does not exist."""


class MirrorParentNotExistError(PreconditionError):
    """Raised when the mirror root's parent does not exist in init mode."""


class MirrorParentNotDirError(PreconditionError):
    """Raised when the mirror root's parent is not a directory in init mode."""


class MirrorNotEmptyError(ShuttleError):
    """Raised when the mirror contains files and cannot be recreated."""


class WalkError(ShuttleError):
    """Raised for failures while traversing or preparing directories."""


class TransferError(ShuttleError):
    """Raised when a single file cannot be moved."""


class MemoryHashMismatchError(TransferError):
    """Raised when read and write digests differ during the copy."""


class VerifyHashMismatchError(TransferError):
    """Raised when the re-read destination digest differs from the source.

    The destination is already committed and the source is kept.
    """


class RemoveAfterMoveError(TransferError):
    """Raised when the source cannot be removed after the destination was committed.

    The file exists in both places and needs operator attention.
    """


def wrap_os_error(message: str, error: OSError) -> WalkError:
    """Wrap an OSError into a WalkError carrying the path context.

    Args:
        message: Description of the failed operation including the path.
        error: The underlying operating system error.

    Returns:
        WalkError chained to the original error.
    """
    wrapped = WalkError(f"{message} ({error})")
    wrapped.__cause__ = error
    return wrapped
