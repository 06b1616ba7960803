"""Process exit codes returned by mirrorshuttle."""

from enum import IntEnum


class ExitCode(IntEnum):
    """Exit status of a mirrorshuttle run.

    Attributes:
        SUCCESS: The mode completed without any reportable condition.
        FAILURE: A fatal error aborted the run.
        PARTIAL_FAILURE: Errors were skipped because of --skip-failed.
        MIRROR_NOT_EMPTY: The mirror still contains files (init mode).
        UNMOVED_FILES: Conflicting target files left files unmoved (move mode).
        CONFIG_FAILURE: Invalid command-line arguments or configuration file.
    """

    SUCCESS = 0
    FAILURE = 1
    PARTIAL_FAILURE = 2
    MIRROR_NOT_EMPTY = 3
    UNMOVED_FILES = 4
    CONFIG_FAILURE = 5
