"""Single-file transfer between two trees.

A file is moved either by a direct atomic rename (when enabled and possible)
or by the copy-and-remove sequence:

1. open the source
2. create ``<dst>.mirsht`` (a stale one from an interrupted run is truncated)
3. copy while hashing the read side and the write side independently
4. fsync and close both handles
5. compare the read and write digests
6. rename the temporary file onto ``<dst>`` (the commit point)
7. optionally re-read ``<dst>`` and compare against the source digest
8. remove the source

Before the commit, a failure removes the temporary file, but only if the
source still exists. After the commit nothing is rolled back: a failed
verification or source removal leaves the committed destination in place
for the operator to inspect.
"""

import logging
from contextlib import suppress
from typing import IO

from mirrorshuttle.core.cancel import CancelToken
from mirrorshuttle.core.errors import (
    MemoryHashMismatchError,
    RemoveAfterMoveError,
    TransferError,
    VerifyHashMismatchError,
)
from mirrorshuttle.core.log import log_event
from mirrorshuttle.filesystem.models import FileHashes, TransferMode, TransferResult
from mirrorshuttle.filesystem.provider import FileSystem
from mirrorshuttle.filesystem.streams import CHUNK_SIZE, copy_with_digests, digest_stream

logger = logging.getLogger(__name__)

# Suffix of the in-flight temporary file; stray ones are safe to overwrite
TEMP_SUFFIX = ".mirsht"


class FileTransfer:
    """Moves single files using rename or copy-verify-rename-remove.

    Attributes:
        _fs: Filesystem to operate on.
        _direct: Attempt an atomic rename first.
        _verify: Re-read the committed destination and compare digests.
        _cancel: Cancellation token checked before each chunk.
    """

    def __init__(
        self,
        fs: FileSystem,
        *,
        direct: bool = False,
        verify: bool = False,
        cancel: CancelToken | None = None,
        op: str = "move",
        chunk_size: int = CHUNK_SIZE,
    ) -> None:
        self._fs = fs
        self._direct = direct
        self._verify = verify
        self._cancel = cancel if cancel is not None else CancelToken()
        self._op = op
        self._chunk_size = chunk_size

    def move(self, src: str, dst: str) -> TransferResult:
        """Move ``src`` to ``dst``.

        The parent directory of ``dst`` must exist and ``dst`` itself must
        not exist.

        Args:
            src: Source file path.
            dst: Destination file path.

        Returns:
            TransferResult with the strategy used and the computed digests.

        Raises:
            TransferError: If the file could not be moved.
            OperationCancelledError: If cancellation was signaled mid-copy.
        """
        if self._direct:
            try:
                self._fs.rename(src, dst)
            except OSError as e:
                logger.debug("direct rename failed, falling back to copy: %s", e)
            else:
                return TransferResult(mode=TransferMode.DIRECT, hashes=FileHashes())

        return TransferResult(mode=TransferMode.COPY_REMOVE, hashes=self._copy_and_remove(src, dst))

    def _copy_and_remove(self, src: str, dst: str) -> FileHashes:
        working = dst + TEMP_SUFFIX

        try:
            source = self._fs.open_read(src)
        except OSError as e:
            raise TransferError(f"failed to open: {src!r} ({e})") from e

        try:
            src_hash, dst_hash = self._write_working_file(source, src, working)

            if src_hash != dst_hash:
                raise MemoryHashMismatchError(
                    "in-memory hash mismatch; possible corruption during in-memory I/O: "
                    f"{src_hash!r} (srcHash) != {dst_hash!r} (dstHash)"
                )

            try:
                self._fs.rename(working, dst)
            except OSError as e:
                raise TransferError(f"failed to rename: {working!r} -x-> {dst!r} ({e})") from e
        except BaseException:
            self._discard_working_file(src, working)
            raise

        # The destination is committed from here on
        hashes = FileHashes(src_hash=src_hash, dst_hash=dst_hash)

        if self._verify:
            verify_hash = self._digest_destination(dst)
            hashes = FileHashes(src_hash=src_hash, dst_hash=dst_hash, verify_hash=verify_hash)
            if verify_hash != src_hash:
                raise VerifyHashMismatchError(
                    "--verify pass hash mismatch; possible corruption during disk-write I/O: "
                    f"{src_hash!r} (srcHash) != {verify_hash!r} (verifyHash)"
                )

        try:
            self._fs.remove(src)
        except OSError as e:
            raise RemoveAfterMoveError(f"failed to remove (after move): {src!r} ({e})") from e

        return hashes

    def _write_working_file(self, source: IO[bytes], src: str, working: str) -> tuple[str, str]:
        """Copy the open source into the temporary file and close both handles."""
        try:
            target = self._fs.create(working)
        except OSError as e:
            _close_quietly(source)
            raise TransferError(f"failed to open: {working!r} ({e})") from e

        try:
            try:
                digests = copy_with_digests(source, target, self._cancel, self._chunk_size)
            except OSError as e:
                raise TransferError(f"failed during io: {e}") from e
            try:
                self._fs.sync(target)
            except OSError as e:
                raise TransferError(f"failed during sync: {e}") from e
        except BaseException:
            _close_quietly(source, target)
            raise

        try:
            source.close()
        except OSError as e:
            _close_quietly(target)
            raise TransferError(f"failed to close: {src!r} ({e})") from e
        try:
            target.close()
        except OSError as e:
            raise TransferError(f"failed to close: {working!r} ({e})") from e

        return digests

    def _digest_destination(self, dst: str) -> str:
        try:
            verifier = self._fs.open_read(dst)
        except OSError as e:
            raise TransferError(f"failed to re-open for --verify pass: {dst!r} ({e})") from e

        try:
            digest = digest_stream(verifier, self._cancel, self._chunk_size)
        except OSError as e:
            _close_quietly(verifier)
            raise TransferError(f"failed to re-read for --verify pass: {dst!r} ({e})") from e
        except BaseException:
            _close_quietly(verifier)
            raise

        try:
            verifier.close()
        except OSError as e:
            raise TransferError(f"failed to close after --verify pass: {dst!r} ({e})") from e

        return digest

    def _discard_working_file(self, src: str, working: str) -> None:
        """Remove the temporary file after a failure, if the source still exists."""
        op = f"{self._op}_cleanup"

        try:
            self._fs.stat(src)
        except FileNotFoundError:
            log_event(logger, logging.WARNING, "file not found", op=op, path=src)
            log_event(
                logger,
                logging.WARNING,
                "incomplete file not removed",
                op=op,
                path=working,
                reason="src_no_longer_exists",
            )
            return
        except OSError as e:
            log_event(
                logger,
                logging.ERROR,
                "failed to stat",
                op=op,
                path=src,
                error=str(e),
                error_type="runtime",
            )
            for path in (src, working):
                log_event(
                    logger,
                    logging.WARNING,
                    "incomplete file not removed",
                    op=op,
                    path=path,
                    reason="src_existence_unknown",
                )
            return

        try:
            self._fs.remove(working)
        except FileNotFoundError:
            return
        except OSError as e:
            log_event(
                logger,
                logging.ERROR,
                "incomplete file not removed",
                op=op,
                path=working,
                error=str(e),
                error_type="runtime",
                reason="error_occurred",
            )
            return

        log_event(logger, logging.INFO, "incomplete file removed", op=op, path=working)


def _close_quietly(*handles: IO[bytes]) -> None:
    """Close handles on an error path, where the original error wins."""
    for handle in handles:
        with suppress(OSError):
            handle.close()
