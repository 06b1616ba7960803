"""Mode orchestration.

Runs one of the two modes against a filesystem, translates its outcome or
fatal error into an exit code and logs the final summary.
"""

import logging
from dataclasses import dataclass
from enum import Enum

from mirrorshuttle.core.cancel import CancelToken
from mirrorshuttle.core.config import ShuttleOptions
from mirrorshuttle.core.errors import (
    MirrorNotEmptyError,
    OperationCancelledError,
    ShuttleError,
)
from mirrorshuttle.core.exit_codes import ExitCode
from mirrorshuttle.core.log import log_event
from mirrorshuttle.filesystem.mirror import MirrorBuilder
from mirrorshuttle.filesystem.models import TransferOutcome
from mirrorshuttle.filesystem.mover import FileMover
from mirrorshuttle.filesystem.provider import FileSystem, OsFileSystem

logger = logging.getLogger(__name__)


class Mode(str, Enum):
    """Mode of operation."""

    INIT = "init"
    MOVE = "move"


_START_MESSAGES: dict[Mode, str] = {
    Mode.INIT: "setting up the mirror structure...",
    Mode.MOVE: "moving files from mirror to target structure...",
}

_FAILURE_MESSAGES: dict[Mode, str] = {
    Mode.INIT: "failed creating mirror structure",
    Mode.MOVE: "failed moving to target structure",
}


@dataclass(frozen=True, slots=True)
class RunReport:
    """Result of one mode run.

    Attributes:
        mode: Mode that was run.
        exit_code: Process exit code for the run.
        outcome: Counters and flags collected until the run ended.
        error: Fatal error message, None if the run completed.
    """

    mode: Mode
    exit_code: ExitCode
    outcome: TransferOutcome
    error: str | None = None


def run_mode(
    mode: Mode,
    options: ShuttleOptions,
    fs: FileSystem | None = None,
    cancel: CancelToken | None = None,
) -> RunReport:
    """Run a mode to completion.

    Args:
        mode: Mode to run.
        options: Validated options.
        fs: Filesystem to operate on; the real disk if None.
        cancel: Cancellation token shared with the signal handler.

    Returns:
        RunReport with the exit code and outcome.
    """
    fs = fs if fs is not None else OsFileSystem()
    cancel = cancel if cancel is not None else CancelToken()

    engine: MirrorBuilder | FileMover
    if mode is Mode.INIT:
        engine = MirrorBuilder(fs, options, cancel)
    else:
        engine = FileMover(fs, options, cancel)

    if options.dry_run:
        log_event(
            logger, logging.WARNING, "running in dry mode - no changes will be made", op=mode.value
        )

    log_event(
        logger,
        logging.INFO,
        _START_MESSAGES[mode],
        op=mode.value,
        mirror=options.mirror,
        target=options.target,
    )

    try:
        outcome = engine.run()
    except OperationCancelledError as e:
        log_event(logger, logging.WARNING, "mode interrupted", op=mode.value, error=str(e))
        return RunReport(mode, ExitCode.FAILURE, engine.outcome, str(e))
    except ShuttleError as e:
        log_event(
            logger,
            logging.ERROR,
            _FAILURE_MESSAGES[mode],
            op=mode.value,
            error=str(e),
            error_type="fatal",
            dirs_created=engine.outcome.created_dirs,
            files_moved=engine.outcome.moved_files,
        )
        code = ExitCode.MIRROR_NOT_EMPTY if isinstance(e, MirrorNotEmptyError) else ExitCode.FAILURE
        return RunReport(mode, code, engine.outcome, str(e))

    code = outcome.exit_code
    if code is ExitCode.PARTIAL_FAILURE:
        level, message = logging.WARNING, "mode completed, but with partial failures; exiting..."
    elif code is ExitCode.UNMOVED_FILES:
        level, message = logging.WARNING, "mode completed, but with unmoved files; exiting..."
    else:
        level, message = logging.INFO, "mode completed; exiting..."

    log_event(
        logger,
        level,
        message,
        op=mode.value,
        dirs_created=outcome.created_dirs,
        files_moved=outcome.moved_files,
    )
    return RunReport(mode, code, outcome)
