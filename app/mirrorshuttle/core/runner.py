"""Signal-aware execution of a mode in a worker thread.

SIGINT and SIGTERM request a cooperative cancellation. The worker then has
a bounded amount of time to unwind (closing handles and removing temporary
files) before the run is reported as failed.
"""

import logging
import signal
import threading
from collections.abc import Callable
from types import FrameType
from typing import Any

from mirrorshuttle.core.cancel import CancelToken
from mirrorshuttle.core.exit_codes import ExitCode
from mirrorshuttle.core.log import log_event

logger = logging.getLogger(__name__)

# Grace period between a cancellation request and giving up on the worker
EXIT_TIMEOUT = 10.0

_POLL_INTERVAL = 0.1


def run_cancellable(
    operation: Callable[[], ExitCode],
    token: CancelToken,
    *,
    timeout: float = EXIT_TIMEOUT,
    op: str = "",
) -> ExitCode:
    """Run ``operation`` in a worker thread and honor termination signals.

    Signal handlers are only installed when called from the main thread and
    are restored afterwards.

    Args:
        operation: Callable performing the run and returning its exit code.
        token: Cancellation token observed by the operation.
        timeout: Seconds to wait for the worker after cancellation.
        op: Operation name attached to log events.

    Returns:
        The operation's exit code, or FAILURE if it raised or did not
        finish within ``timeout`` after cancellation.
    """
    result: list[ExitCode] = []
    done = threading.Event()

    def worker() -> None:
        try:
            result.append(operation())
        except Exception:
            logger.exception("internal error recovered")
        finally:
            done.set()

    previous = _install_handlers(token, op, timeout)
    try:
        thread = threading.Thread(target=worker, name="mirrorshuttle-worker", daemon=True)
        thread.start()

        while not done.wait(_POLL_INTERVAL):
            if token.cancelled:
                break

        if not done.is_set() and not done.wait(timeout):
            log_event(
                logger,
                logging.ERROR,
                "timed out while waiting for program exit; killing...",
                op=op,
                error_type="fatal",
            )
            return ExitCode.FAILURE
    finally:
        _restore_handlers(previous)

    return result[0] if result else ExitCode.FAILURE


def _install_handlers(token: CancelToken, op: str, timeout: float) -> dict[int, Any]:
    if threading.current_thread() is not threading.main_thread():
        return {}

    def handler(signum: int, frame: FrameType | None) -> None:
        if not token.cancelled:
            log_event(
                logger,
                logging.WARNING,
                "received interrupt signal; shutting down (waiting up to "
                f"{timeout:g}s)...",
                op=op,
                signal=signal.Signals(signum).name,
            )
        token.cancel()

    previous: dict[int, Any] = {}
    for signum in (signal.SIGINT, signal.SIGTERM):
        previous[signum] = signal.getsignal(signum)
        signal.signal(signum, handler)
    return previous


def _restore_handlers(previous: dict[int, Any]) -> None:
    for signum, handler in previous.items():
        signal.signal(signum, handler if handler is not None else signal.SIG_DFL)
