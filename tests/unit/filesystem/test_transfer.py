"""Unit tests for the single-file transfer.

Faults are injected by subclassing the in-memory filesystem.
"""

import errno
import hashlib
import io
import logging
from typing import IO
from unittest.mock import patch

import pytest
from mirrorshuttle.core.cancel import CancelToken
from mirrorshuttle.core.errors import (
    MemoryHashMismatchError,
    OperationCancelledError,
    RemoveAfterMoveError,
    TransferError,
    VerifyHashMismatchError,
)
from mirrorshuttle.filesystem.memory import MemoryFileSystem
from mirrorshuttle.filesystem.models import TransferMode
from mirrorshuttle.filesystem.provider import FileInfo
from mirrorshuttle.filesystem.transfer import TEMP_SUFFIX, FileTransfer

SRC = "/mirror/file.txt"
DST = "/real/file.txt"
WORKING = DST + TEMP_SUFFIX
CONTENT = b"content" * 100


def sha256(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


class CrossDeviceFileSystem(MemoryFileSystem):
    """Direct renames of the source fail as if across filesystems."""

    def rename(self, src: str, dst: str) -> None:
        if not src.endswith(TEMP_SUFFIX):
            raise OSError(errno.EXDEV, "Invalid cross-device link", src)
        super().rename(src, dst)


class FailingCommitFileSystem(MemoryFileSystem):
    """Renaming the temporary file onto the destination fails."""

    def rename(self, src: str, dst: str) -> None:
        if src.endswith(TEMP_SUFFIX):
            raise PermissionError(errno.EACCES, "Permission denied", dst)
        super().rename(src, dst)


class UnknownSourceFileSystem(FailingCommitFileSystem):
    """The commit fails and the source can no longer be inspected."""

    def stat(self, path: str) -> FileInfo:
        if path == SRC:
            raise PermissionError(errno.EACCES, "Permission denied", path)
        return super().stat(path)


class UnremovableSourceFileSystem(MemoryFileSystem):
    """The source cannot be removed after the commit."""

    def remove(self, path: str) -> None:
        if path == SRC:
            raise PermissionError(errno.EACCES, "Permission denied", path)
        super().remove(path)


class CorruptingReadFileSystem(MemoryFileSystem):
    """Reading back the committed destination returns different bytes."""

    def open_read(self, path: str) -> IO[bytes]:
        if path == DST:
            return io.BytesIO(b"corrupted")
        return super().open_read(path)


class CancellingStream(io.BytesIO):
    """Source stream cancelling the token after the first read."""

    def __init__(self, data: bytes, token: CancelToken) -> None:
        super().__init__(data)
        self._token = token

    def read(self, size: int | None = -1) -> bytes:
        self._token.cancel()
        return super().read(size)


class CancellingFileSystem(MemoryFileSystem):
    """Source reads trigger a cancellation mid-copy."""

    def __init__(self, token: CancelToken) -> None:
        super().__init__()
        self.token = token

    def open_read(self, path: str) -> IO[bytes]:
        if path == SRC:
            return CancellingStream(self.files[path], self.token)
        return super().open_read(path)


class VanishingStream(io.BytesIO):
    """Source stream whose file is deleted while it is read."""

    def __init__(self, fs: MemoryFileSystem, path: str) -> None:
        super().__init__(fs.files[path])
        self._fs = fs
        self._path = path

    def read(self, size: int | None = -1) -> bytes:
        del self._fs.files[self._path]
        raise OSError(errno.EIO, "Input/output error", self._path)


class VanishingSourceFileSystem(MemoryFileSystem):
    """The source disappears during the copy."""

    def open_read(self, path: str) -> IO[bytes]:
        if path == SRC:
            return VanishingStream(self, path)
        return super().open_read(path)


def prepare(fs: MemoryFileSystem, content: bytes = CONTENT) -> MemoryFileSystem:
    fs.write_file(SRC, content)
    fs.makedirs("/real")
    return fs


class TestCopyTransfer:
    """Tests for the copy-and-remove path."""

    def test_moves_file(self) -> None:
        """The file is copied, committed and the source removed."""
        fs = prepare(MemoryFileSystem())

        result = FileTransfer(fs, chunk_size=64).move(SRC, DST)

        assert result.mode == TransferMode.COPY_REMOVE
        assert fs.read_file(DST) == CONTENT
        assert fs.exists(SRC) is False
        assert fs.exists(WORKING) is False

    def test_digests_match_content(self) -> None:
        """Read and write digests equal the content digest; verify is empty."""
        fs = prepare(MemoryFileSystem())

        result = FileTransfer(fs).move(SRC, DST)

        assert result.hashes.src_hash == sha256(CONTENT)
        assert result.hashes.dst_hash == sha256(CONTENT)
        assert result.hashes.verify_hash == ""

    def test_verify_digest(self) -> None:
        """Verify mode re-reads the destination and reports its digest."""
        fs = prepare(MemoryFileSystem())

        result = FileTransfer(fs, verify=True).move(SRC, DST)

        assert result.hashes.verify_hash == sha256(CONTENT)
        assert fs.exists(SRC) is False

    def test_empty_file(self) -> None:
        """Empty files are transferred."""
        fs = prepare(MemoryFileSystem(), b"")

        FileTransfer(fs).move(SRC, DST)

        assert fs.read_file(DST) == b""

    def test_stale_temporary_file_is_overwritten(self) -> None:
        """A leftover temporary file from an interrupted run is truncated."""
        fs = prepare(MemoryFileSystem())
        fs.write_file(WORKING, b"stale partial data that is longer than nothing")

        FileTransfer(fs).move(SRC, DST)

        assert fs.read_file(DST) == CONTENT
        assert fs.exists(WORKING) is False

    def test_missing_source(self) -> None:
        """A missing source fails to open without creating anything."""
        fs = MemoryFileSystem()
        fs.makedirs("/real")

        with pytest.raises(TransferError, match="failed to open"):
            FileTransfer(fs).move(SRC, DST)

        assert fs.exists(WORKING) is False
        assert fs.exists(DST) is False

    def test_missing_destination_parent(self) -> None:
        """A missing destination directory fails and keeps the source."""
        fs = MemoryFileSystem()
        fs.write_file(SRC, CONTENT)

        with pytest.raises(TransferError):
            FileTransfer(fs).move(SRC, "/real/missing/file.txt")

        assert fs.read_file(SRC) == CONTENT


class TestDirectTransfer:
    """Tests for the direct rename path."""

    def test_direct_rename(self) -> None:
        """Direct mode renames without computing digests."""
        fs = prepare(MemoryFileSystem())

        result = FileTransfer(fs, direct=True).move(SRC, DST)

        assert result.mode == TransferMode.DIRECT
        assert result.hashes.src_hash == ""
        assert fs.read_file(DST) == CONTENT
        assert fs.exists(SRC) is False

    def test_direct_falls_back_to_copy(self) -> None:
        """A failed rename falls back to copy and remove."""
        fs = prepare(CrossDeviceFileSystem())

        result = FileTransfer(fs, direct=True).move(SRC, DST)

        assert result.mode == TransferMode.COPY_REMOVE
        assert result.hashes.src_hash == sha256(CONTENT)
        assert fs.read_file(DST) == CONTENT
        assert fs.exists(SRC) is False


class TestTransferFailures:
    """Tests for failure handling and cleanup."""

    def test_memory_hash_mismatch_cleans_up(self) -> None:
        """Diverging digests abort before the commit and remove the temp file."""
        fs = prepare(MemoryFileSystem())

        with (
            patch(
                "mirrorshuttle.filesystem.transfer.copy_with_digests",
                return_value=("aaaa", "bbbb"),
            ),
            pytest.raises(MemoryHashMismatchError, match="in-memory hash mismatch"),
        ):
            FileTransfer(fs).move(SRC, DST)

        assert fs.exists(WORKING) is False
        assert fs.exists(DST) is False
        assert fs.read_file(SRC) == CONTENT

    def test_commit_rename_failure_cleans_up(self, caplog: pytest.LogCaptureFixture) -> None:
        """A failed commit removes the temp file and keeps the source."""
        fs = prepare(FailingCommitFileSystem())

        with (
            caplog.at_level(logging.INFO, logger="mirrorshuttle"),
            pytest.raises(TransferError, match="failed to rename"),
        ):
            FileTransfer(fs).move(SRC, DST)

        assert fs.exists(WORKING) is False
        assert fs.exists(DST) is False
        assert fs.read_file(SRC) == CONTENT
        assert "incomplete file removed" in caplog.messages

    def test_cancellation_mid_copy_cleans_up(self) -> None:
        """Cancellation during the copy leaves no partial artifacts."""
        token = CancelToken()
        fs = prepare(CancellingFileSystem(token))

        with pytest.raises(OperationCancelledError):
            FileTransfer(fs, cancel=token, chunk_size=16).move(SRC, DST)

        assert fs.exists(WORKING) is False
        assert fs.exists(DST) is False
        assert fs.read_file(SRC) == CONTENT

    def test_vanished_source_keeps_temporary_file(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        """If the source disappeared, the temporary file is left in place."""
        fs = prepare(VanishingSourceFileSystem())

        with (
            caplog.at_level(logging.WARNING, logger="mirrorshuttle"),
            pytest.raises(TransferError, match="failed during io"),
        ):
            FileTransfer(fs).move(SRC, DST)

        assert fs.exists(WORKING) is True
        assert fs.exists(DST) is False
        assert "incomplete file not removed" in caplog.messages

    def test_unknown_source_keeps_temporary_file(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        """If the source cannot be inspected, nothing is cleaned up."""
        fs = prepare(UnknownSourceFileSystem())

        with (
            caplog.at_level(logging.WARNING, logger="mirrorshuttle"),
            pytest.raises(TransferError, match="failed to rename"),
        ):
            FileTransfer(fs).move(SRC, DST)

        assert fs.exists(WORKING) is True
        assert fs.exists(DST) is False
        assert fs.read_file(SRC) == CONTENT
        reasons = [
            r.fields["reason"]  # type: ignore[attr-defined]
            for r in caplog.records
            if r.getMessage() == "incomplete file not removed"
        ]
        assert reasons == ["src_existence_unknown", "src_existence_unknown"]

    def test_verify_mismatch_keeps_both(self) -> None:
        """A verify mismatch leaves the committed destination and the source."""
        fs = prepare(CorruptingReadFileSystem())

        with pytest.raises(VerifyHashMismatchError, match="--verify pass hash mismatch"):
            FileTransfer(fs, verify=True).move(SRC, DST)

        assert fs.files[DST] == CONTENT
        assert fs.read_file(SRC) == CONTENT

    def test_remove_after_move_failure(self) -> None:
        """A source that cannot be removed leaves the file in both places."""
        fs = prepare(UnremovableSourceFileSystem())

        with pytest.raises(RemoveAfterMoveError, match="after move"):
            FileTransfer(fs).move(SRC, DST)

        assert fs.read_file(DST) == CONTENT
        assert fs.read_file(SRC) == CONTENT

