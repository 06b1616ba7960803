"""Init mode: recreate the target's directory structure as the mirror.

The mirror is a file-less copy of the target's directories. An existing
mirror is only ever replaced when it holds no files, so nothing that was
staged but not yet moved can be lost.
"""

import logging
import os
from collections.abc import Callable

from mirrorshuttle.core.cancel import CancelToken
from mirrorshuttle.core.config import ShuttleOptions
from mirrorshuttle.core.errors import (
    MirrorNotEmptyError,
    MirrorParentNotDirError,
    MirrorParentNotExistError,
    TargetNotExistError,
    WalkError,
    wrap_os_error,
)
from mirrorshuttle.core.log import log_event
from mirrorshuttle.filesystem.excludes import is_excluded
from mirrorshuttle.filesystem.models import SkipReason, TransferOutcome
from mirrorshuttle.filesystem.policy import FailurePolicy
from mirrorshuttle.filesystem.provider import FileSystem
from mirrorshuttle.filesystem.walk import TreeWalk, WalkEntry

logger = logging.getLogger(__name__)

OP = "init"

# Slow mode pauses after this many created directories
DIR_CREATION_BATCH = 50
DIR_CREATION_PAUSE = 1.0


def dir_depth(rel_path: str) -> int:
    """Return the depth of a relative directory path.

    The depth is the number of separators, so ``"."`` and ``"a"`` are at
    depth 0 and ``"a/b"`` is at depth 1.
    """
    rel_path = os.path.normpath(rel_path)
    if rel_path == os.curdir:
        return 0
    return rel_path.count(os.sep)


def is_empty_structure(
    fs: FileSystem,
    path: str,
    cancel: CancelToken | None = None,
    report: bool = False,
) -> bool:
    """Check whether a directory tree contains no files.

    Args:
        fs: Filesystem to inspect.
        path: Root of the tree.
        cancel: Cancellation token checked at every entry.
        report: Log every found file and keep walking instead of stopping
            at the first one.

    Returns:
        True if the tree holds directories only.

    Raises:
        WalkError: If any part of the tree cannot be examined.
        OperationCancelledError: If cancellation was signaled.
    """
    path = os.path.normpath(path.strip())
    empty = True

    for entry in TreeWalk(fs, path):
        if cancel is not None:
            cancel.raise_if_cancelled()

        if entry.error is not None:
            raise wrap_os_error(f"failed to walk: {entry.path!r}", entry.error)

        if entry.is_dir:
            continue

        empty = False
        if not report:
            break
        log_event(logger, logging.WARNING, "unmoved file found", op=OP, path=entry.path)

    return empty


class MirrorBuilder:
    """Build the mirror structure from the target structure.

    Attributes:
        outcome: Counters and flags of the current run.
    """

    def __init__(
        self,
        fs: FileSystem,
        options: ShuttleOptions,
        cancel: CancelToken | None = None,
        pause: Callable[[float], object] | None = None,
    ) -> None:
        """Initialize the MirrorBuilder.

        Args:
            fs: Filesystem to operate on.
            options: Validated options.
            cancel: Cancellation token; a fresh one if None.
            pause: Sleep function used by slow mode. Defaults to waiting on
                the cancellation token, so a pause ends early on cancel.
        """
        self._fs = fs
        self._options = options
        self._cancel = cancel if cancel is not None else CancelToken()
        self._pause = pause if pause is not None else self._cancel.wait
        self._mirror_root = options.mirror
        self._target_root = options.target
        self._batch = 0
        self.outcome = TransferOutcome()
        self._policy = FailurePolicy(OP, options.skip_failed, self.outcome)

    def run(self) -> TransferOutcome:
        """Recreate the mirror and copy the target's directories into it.

        Returns:
            The run outcome.

        Raises:
            TargetNotExistError: If the target root does not exist.
            MirrorParentNotExistError: If the mirror's parent does not exist.
            MirrorParentNotDirError: If the mirror's parent is not a directory.
            MirrorNotEmptyError: If an existing mirror still contains files.
            OperationCancelledError: If cancellation was signaled.
            ShuttleError: For the first error when --skip-failed is off.
        """
        self._cancel.raise_if_cancelled()
        self._check_preconditions()
        self._prepare_mirror_root()

        walk = TreeWalk(self._fs, self._target_root)
        for entry in walk:
            self._cancel.raise_if_cancelled()
            self._visit(entry, walk)

        return self.outcome

    def _check_preconditions(self) -> None:
        try:
            self._fs.stat(self._target_root)
        except FileNotFoundError as e:
            raise TargetNotExistError(
                f"target does not exist; have nowhere to mirror from: {self._target_root!r}"
            ) from e
        except OSError as e:
            raise WalkError(f"failed to stat: {self._target_root!r} ({e})") from e

        parent = os.path.dirname(self._mirror_root)
        try:
            info = self._fs.stat(parent)
        except FileNotFoundError as e:
            raise MirrorParentNotExistError(
                f"mirror parent does not exist: {parent!r} ({e})"
            ) from e
        except OSError as e:
            raise WalkError(f"failed to stat: {parent!r} ({e})") from e

        if not info.is_dir:
            raise MirrorParentNotDirError(f"mirror parent is not a directory: {parent!r}")

    def _prepare_mirror_root(self) -> None:
        dry_run = self._options.dry_run

        try:
            exists = self._fs.exists(self._mirror_root)
        except OSError as e:
            raise WalkError(f"failed to stat: {self._mirror_root!r} ({e})") from e

        if exists:
            log_event(
                logger, logging.INFO, "testing if the existing mirror structure is empty...", op=OP
            )
            try:
                empty = is_empty_structure(self._fs, self._mirror_root, self._cancel, report=True)
            except WalkError as e:
                raise WalkError(
                    f"failed checking for emptiness: {self._mirror_root!r} ({e})"
                ) from e
            if not empty:
                raise MirrorNotEmptyError(
                    "mirror contains files; run 'mirrorshuttle move' to relocate them, "
                    "or remove the files manually: "
                    f"{self._mirror_root!r}"
                )

            if not dry_run:
                try:
                    self._fs.rmtree(self._mirror_root)
                except OSError as e:
                    raise WalkError(f"failed to remove: {self._mirror_root!r} ({e})") from e
            log_event(
                logger,
                logging.INFO,
                "mirror directory removed",
                op=OP,
                path=self._mirror_root,
                dry_run=dry_run,
            )

        if not dry_run:
            try:
                self._fs.mkdir(self._mirror_root)
            except OSError as e:
                raise WalkError(f"failed to create: {self._mirror_root!r} ({e})") from e
            self.outcome.created_dirs += 1
        log_event(
            logger,
            logging.INFO,
            "mirror directory created",
            op=OP,
            path=self._mirror_root,
            dry_run=dry_run,
        )

    def _visit(self, entry: WalkEntry, walk: TreeWalk) -> None:
        if entry.error is not None:
            if isinstance(entry.error, FileNotFoundError):
                self._log_skip(entry.path, SkipReason.NO_LONGER_EXISTS)
                return
            self._policy.handle(
                wrap_os_error(f"failed to walk: {entry.path!r}", entry.error), entry, walk
            )
            return

        # Files are never mirrored
        if not entry.is_dir:
            return

        if entry.path == self._mirror_root:
            self._log_skip(entry.path, SkipReason.MIRROR_ROOT)
            walk.skip_dir()
            return

        if is_excluded(entry.path, self._options.exclude):
            self._log_skip(entry.path, SkipReason.USER_EXCLUDED)
            walk.skip_dir()
            return

        rel_path = os.path.relpath(entry.path, self._target_root)
        mirror_path = os.path.normpath(os.path.join(self._mirror_root, rel_path))

        if self._options.init_depth >= 0:
            depth = dir_depth(rel_path)
            if depth > self._options.init_depth:
                log_event(
                    logger,
                    logging.DEBUG,
                    "path skipped",
                    op=OP,
                    path=entry.path,
                    dir_depth=depth,
                    reason=SkipReason.EXCEEDS_INIT_DEPTH.value,
                )
                walk.skip_dir()
                return

        if mirror_path == self._mirror_root:
            return

        fields: dict[str, object] = {"slow_mode": self._options.slow_mode}
        if not self._options.dry_run:
            try:
                self._fs.mkdir(mirror_path)
            except OSError as e:
                self._policy.handle(
                    wrap_os_error(f"failed to create: {mirror_path!r}", e), entry, walk
                )
                return
            self.outcome.created_dirs += 1
            if self._options.slow_mode:
                self._throttle()
                fields["slow_batch"] = f"{self._batch}/{DIR_CREATION_BATCH}"

        log_event(
            logger,
            logging.INFO,
            "directory created",
            op=OP,
            path=mirror_path,
            **fields,
            dry_run=self._options.dry_run,
        )

    def _throttle(self) -> None:
        self._batch += 1
        if self._batch > DIR_CREATION_BATCH:
            self._pause(DIR_CREATION_PAUSE)
            self._batch = 0

    def _log_skip(self, path: str, reason: SkipReason) -> None:
        log_event(logger, logging.WARNING, "path skipped", op=OP, path=path, reason=reason.value)
