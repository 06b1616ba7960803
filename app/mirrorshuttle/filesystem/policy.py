"""Shared failure policy for tree walks."""

import logging

from mirrorshuttle.core.errors import OperationCancelledError, ShuttleError
from mirrorshuttle.core.log import log_event
from mirrorshuttle.filesystem.models import SkipReason, TransferOutcome
from mirrorshuttle.filesystem.walk import TreeWalk, WalkEntry

logger = logging.getLogger(__name__)


class FailurePolicy:
    """Decide whether a per-entry error aborts the walk.

    With ``skip_failed`` the error is logged, the partial failure flag is
    set and the walk continues (skipping the subtree of a directory).
    Otherwise the error is raised. Cancellation always propagates and never
    counts as a partial failure.
    """

    def __init__(self, op: str, skip_failed: bool, outcome: TransferOutcome) -> None:
        self._op = op
        self._skip_failed = skip_failed
        self._outcome = outcome

    def handle(self, error: ShuttleError, entry: WalkEntry, walk: TreeWalk) -> None:
        """Apply the policy to an error raised while processing ``entry``.

        Args:
            error: The error, already carrying path context.
            entry: Entry being processed.
            walk: Walk to skip the entry's subtree on.

        Raises:
            ShuttleError: The given error, unless it may be skipped.
        """
        if isinstance(error, OperationCancelledError) or not self._skip_failed:
            raise error

        self._outcome.has_partial_failures = True
        log_event(
            logger,
            logging.ERROR,
            "path skipped",
            op=self._op,
            path=entry.path,
            error=str(error),
            error_type="runtime",
            reason=SkipReason.ERROR_OCCURRED.value,
        )

        if entry.is_dir:
            walk.skip_dir()
