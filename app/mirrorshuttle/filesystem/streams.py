"""Cancellable, hashing stream copies.

The copy path feeds every chunk read from the source into one digest and
every chunk written to the destination into a second, independent digest.
Comparing both detects corruption during the in-memory part of the copy
without reading the destination back from disk.
"""

import hashlib
from typing import IO, Protocol

from mirrorshuttle.core.cancel import CancelToken

# Bytes requested per read
CHUNK_SIZE = 1024 * 1024


class _Hasher(Protocol):
    def update(self, data: bytes, /) -> None: ...


class CancellableReader:
    """Reader checking a cancellation token before every read."""

    def __init__(self, stream: "IO[bytes] | HashingReader", token: CancelToken) -> None:
        self._stream = stream
        self._token = token

    def read(self, size: int = -1) -> bytes:
        """Read up to ``size`` bytes unless cancellation was signaled.

        Raises:
            OperationCancelledError: If the token is cancelled.
        """
        self._token.raise_if_cancelled()
        return self._stream.read(size)


class HashingReader:
    """Reader feeding every chunk it returns into a digest."""

    def __init__(self, stream: IO[bytes], hasher: _Hasher) -> None:
        self._stream = stream
        self._hasher = hasher

    def read(self, size: int = -1) -> bytes:
        data = self._stream.read(size)
        self._hasher.update(data)
        return data


class HashingWriter:
    """Writer feeding every chunk it writes into a digest."""

    def __init__(self, stream: IO[bytes], hasher: _Hasher) -> None:
        self._stream = stream
        self._hasher = hasher

    def write(self, data: bytes) -> int:
        written = self._stream.write(data)
        self._hasher.update(data)
        return written


def copy_stream(
    reader: CancellableReader | HashingReader,
    writer: HashingWriter | IO[bytes],
    chunk_size: int = CHUNK_SIZE,
) -> int:
    """Copy all bytes from ``reader`` to ``writer``.

    Returns:
        Number of bytes copied.
    """
    total = 0
    while True:
        chunk = reader.read(chunk_size)
        if not chunk:
            return total
        writer.write(chunk)
        total += len(chunk)


def copy_with_digests(
    source: IO[bytes],
    target: IO[bytes],
    token: CancelToken,
    chunk_size: int = CHUNK_SIZE,
) -> tuple[str, str]:
    """Copy ``source`` into ``target`` while hashing both sides.

    Args:
        source: Stream to read from.
        target: Stream to write to.
        token: Cancellation token checked before each chunk.
        chunk_size: Bytes per read.

    Returns:
        Tuple of (read-side digest, write-side digest) as hex strings.

    Raises:
        OperationCancelledError: If cancellation was signaled mid-copy.
        OSError: If reading or writing fails.
    """
    src_hasher = hashlib.sha256()
    dst_hasher = hashlib.sha256()

    reader = CancellableReader(HashingReader(source, src_hasher), token)
    copy_stream(reader, HashingWriter(target, dst_hasher), chunk_size)

    return src_hasher.hexdigest(), dst_hasher.hexdigest()


def digest_stream(stream: IO[bytes], token: CancelToken, chunk_size: int = CHUNK_SIZE) -> str:
    """Compute the hex SHA-256 digest of a stream's remaining content.

    Raises:
        OperationCancelledError: If cancellation was signaled mid-read.
        OSError: If reading fails.
    """
    hasher = hashlib.sha256()
    reader = CancellableReader(stream, token)
    while chunk := reader.read(chunk_size):
        hasher.update(chunk)
    return hasher.hexdigest()
