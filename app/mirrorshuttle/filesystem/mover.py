"""Move mode: promote files from the mirror into the target structure.

Walks the mirror tree depth-first and moves every file that does not yet
exist at the corresponding target location. Existing target files are never
overwritten; they leave the mirror file in place and mark the run as having
unmoved files.
"""

import logging
import os

from mirrorshuttle.core.cancel import CancelToken
from mirrorshuttle.core.config import ShuttleOptions
from mirrorshuttle.core.errors import (
    MirrorNotExistError,
    ShuttleError,
    TargetNotExistError,
    WalkError,
    wrap_os_error,
)
from mirrorshuttle.core.log import log_event
from mirrorshuttle.filesystem.excludes import is_excluded
from mirrorshuttle.filesystem.models import SkipReason, TransferOutcome
from mirrorshuttle.filesystem.policy import FailurePolicy
from mirrorshuttle.filesystem.provider import FileSystem
from mirrorshuttle.filesystem.transfer import FileTransfer
from mirrorshuttle.filesystem.walk import TreeWalk, WalkEntry

logger = logging.getLogger(__name__)

OP = "move"


class FileMover:
    """Tree transfer walker for move mode.

    Attributes:
        outcome: Counters and flags of the current run, readable after
            ``run()`` returned or raised.
    """

    def __init__(
        self,
        fs: FileSystem,
        options: ShuttleOptions,
        cancel: CancelToken | None = None,
    ) -> None:
        """Initialize the FileMover.

        Args:
            fs: Filesystem to operate on.
            options: Validated options (mirror, target, exclude, direct,
                verify, skip_empty, remove_empty, skip_failed, dry_run).
            cancel: Cancellation token; a fresh one if None.
        """
        self._fs = fs
        self._options = options
        self._cancel = cancel if cancel is not None else CancelToken()
        self._mirror_root = options.mirror
        self._target_root = options.target
        self._transfer = FileTransfer(
            fs,
            direct=options.direct,
            verify=options.verify,
            cancel=self._cancel,
            op=OP,
        )
        self._planned_dirs: set[str] = set()
        self.outcome = TransferOutcome()
        self._policy = FailurePolicy(OP, options.skip_failed, self.outcome)

    def run(self) -> TransferOutcome:
        """Move all eligible files from the mirror into the target.

        Returns:
            The run outcome.

        Raises:
            MirrorNotExistError: If the mirror root does not exist.
            TargetNotExistError: If the target root does not exist.
            OperationCancelledError: If cancellation was signaled.
            ShuttleError: For the first error when --skip-failed is off.
        """
        self._check_root(self._mirror_root, MirrorNotExistError, "have nowhere to move from")
        self._check_root(self._target_root, TargetNotExistError, "have nowhere to move to")

        walk = TreeWalk(self._fs, self._mirror_root)
        for entry in walk:
            self._cancel.raise_if_cancelled()
            self._visit(entry, walk)

        if self._options.skip_empty and self._options.remove_empty:
            self._remove_empty_dirs()

        return self.outcome

    def _check_root(self, root: str, missing: type[ShuttleError], detail: str) -> None:
        try:
            self._fs.stat(root)
        except FileNotFoundError as e:
            kind = "mirror" if missing is MirrorNotExistError else "target"
            raise missing(f"{kind} does not exist; {detail}: {root!r}") from e
        except OSError as e:
            raise WalkError(f"failed to stat: {root!r} ({e})") from e

    def _visit(self, entry: WalkEntry, walk: TreeWalk) -> None:
        if entry.error is not None:
            if isinstance(entry.error, FileNotFoundError):
                self._log_skip(entry.path, SkipReason.NO_LONGER_EXISTS)
                return
            self._policy.handle(
                wrap_os_error(f"failed to walk: {entry.path!r}", entry.error), entry, walk
            )
            return

        if is_excluded(entry.path, self._options.exclude):
            self._log_skip(entry.path, SkipReason.USER_EXCLUDED)
            if entry.is_dir:
                walk.skip_dir()
            return

        dst = self._target_path(entry.path)

        if dst == self._mirror_root:
            # The mirror is nested in the target; never move into itself
            self._log_skip(dst, SkipReason.MIRROR_INTO_MIRROR)
            if entry.is_dir:
                walk.skip_dir()
            return

        if is_excluded(dst, self._options.exclude):
            self._log_skip(dst, SkipReason.USER_EXCLUDED)
            if entry.is_dir:
                walk.skip_dir()
            return

        if entry.is_dir:
            if not self._options.skip_empty:
                self._ensure_directory(dst, entry, walk)
            return

        self._move_file(entry.path, dst, entry, walk)

    def _target_path(self, path: str) -> str:
        rel = os.path.relpath(path, self._mirror_root)
        return os.path.normpath(os.path.join(self._target_root, rel))

    def _ensure_directory(self, dst: str, entry: WalkEntry, walk: TreeWalk) -> bool:
        """Create ``dst`` if missing; return False if the failure was skipped."""
        try:
            exists = self._fs.exists(dst)
        except OSError as e:
            self._policy.handle(wrap_os_error(f"failed to stat: {dst!r}", e), entry, walk)
            return False

        if exists or dst in self._planned_dirs:
            return True

        if self._options.dry_run:
            self._planned_dirs.add(dst)
        else:
            try:
                self._fs.mkdir(dst)
            except OSError as e:
                self._policy.handle(wrap_os_error(f"failed to create: {dst!r}", e), entry, walk)
                return False
            self.outcome.created_dirs += 1

        log_event(
            logger,
            logging.INFO,
            "directory created",
            op=OP,
            path=dst,
            dry_run=self._options.dry_run,
        )
        return True

    def _ensure_parents(self, dst: str, entry: WalkEntry, walk: TreeWalk) -> bool:
        """Create missing target directories above ``dst`` (--skip-empty)."""
        missing: list[str] = []
        parent = os.path.dirname(dst)
        while parent != self._target_root and parent.startswith(self._target_root):
            missing.append(parent)
            parent = os.path.dirname(parent)

        return all(self._ensure_directory(path, entry, walk) for path in reversed(missing))

    def _move_file(self, src: str, dst: str, entry: WalkEntry, walk: TreeWalk) -> None:
        try:
            exists = self._fs.exists(dst)
        except OSError as e:
            self._policy.handle(wrap_os_error(f"failed to stat: {dst!r}", e), entry, walk)
            return

        if exists:
            self.outcome.has_unmoved_files = True
            log_event(
                logger,
                logging.WARNING,
                "target already exists",
                op=OP,
                src=src,
                dst=dst,
                action="skipped",
            )
            return

        if self._options.skip_empty and not self._ensure_parents(dst, entry, walk):
            return

        if self._options.dry_run:
            log_event(
                logger,
                logging.INFO,
                "file moved",
                op=OP,
                mode="",
                src=src,
                dst=dst,
                dry_run=True,
            )
            return

        try:
            result = self._transfer.move(src, dst)
        except ShuttleError as e:
            self._policy.handle(e, entry, walk)
            return

        self.outcome.moved_files += 1
        log_event(
            logger,
            logging.INFO,
            "file moved",
            op=OP,
            mode=result.mode.value,
            src=src,
            dst=dst,
            src_hash=result.hashes.src_hash,
            dst_hash=result.hashes.dst_hash,
            verify_hash=result.hashes.verify_hash,
            verify=self._options.verify,
            dry_run=False,
        )

    def _remove_empty_dirs(self) -> None:
        """Remove empty mirror directories whose target counterpart is gone.

        Directories are visited deepest first, so nested empty directories
        collapse in one pass. The mirror root itself is never removed.
        """
        candidates: list[tuple[str, WalkEntry]] = []
        walk = TreeWalk(self._fs, self._mirror_root)
        for entry in walk:
            self._cancel.raise_if_cancelled()
            if entry.error is not None or not entry.is_dir:
                continue
            if entry.path == self._mirror_root:
                continue
            dst = self._target_path(entry.path)
            if (
                is_excluded(entry.path, self._options.exclude)
                or dst == self._mirror_root
                or is_excluded(dst, self._options.exclude)
            ):
                walk.skip_dir()
                continue
            candidates.append((entry.path, entry))

        removed: set[str] = set()
        for path, entry in reversed(candidates):
            self._cancel.raise_if_cancelled()
            try:
                names = self._fs.listdir(path)
                if any(os.path.join(path, name) not in removed for name in names):
                    continue
                if self._fs.exists(self._target_path(path)):
                    continue
                if not self._options.dry_run:
                    self._fs.remove(path)
                    self.outcome.removed_dirs += 1
            except OSError as e:
                self._policy.handle(wrap_os_error(f"failed to remove: {path!r}", e), entry, walk)
                continue

            removed.add(path)
            log_event(
                logger,
                logging.INFO,
                "directory removed",
                op=OP,
                path=path,
                reason="empty_and_not_on_target",
                dry_run=self._options.dry_run,
            )

    def _log_skip(self, path: str, reason: SkipReason) -> None:
        log_event(logger, logging.WARNING, "path skipped", op=OP, path=path, reason=reason.value)
