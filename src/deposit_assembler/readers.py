"""Provides :class:`.IterStream`, a readable stream over chunk iterators."""

import io
from typing import Callable, Iterator

DEFAULT_CHUNK_SIZE = 64 * 1024


class IterStream(io.RawIOBase):
    """Wraps an iterator of byte chunks to provide ``read()``.

    Chunks are pulled from the iterator only as the consumer reads, so a
    generator behind this stream does its work interleaved with reading.
    Closing the stream closes the generator, which runs its ``finally``
    blocks and releases whatever it holds open.

    If the iterator raises, the stream is failed: every later read raises
    the same exception rather than reporting a truncated end of stream.
    """

    def __init__(
        self,
        chunks: Iterator[bytes],
        on_close: Callable[[], None] | None = None,
    ) -> None:
        self._chunks = chunks
        self._on_close = on_close
        self._buff = b""
        self._pos = 0
        self._error: BaseException | None = None

    def readable(self) -> bool:
        return True

    def readinto(self, b) -> int:
        if self.closed:
            raise ValueError("I/O operation on closed stream")
        if self._error is not None:
            raise self._error

        # Empty chunks, e.g. from a compressor with nothing to flush yet,
        # are skipped.
        while self._pos >= len(self._buff):
            try:
                chunk = next(self._chunks)
            except StopIteration:
                return 0
            except Exception as e:
                self._error = e
                raise
            self._buff = chunk
            self._pos = 0

        n = min(len(b), len(self._buff) - self._pos)
        b[:n] = self._buff[self._pos:self._pos + n]
        self._pos += n
        return n

    def close(self) -> None:
        if not self.closed:
            try:
                close = getattr(self._chunks, "close", None)
                if close is not None:
                    close()
            finally:
                self._buff = b""
                if self._on_close is not None:
                    self._on_close()
        super().close()


def iter_stream(
    chunks: Iterator[bytes],
    on_close: Callable[[], None] | None = None,
    buffer_size: int = DEFAULT_CHUNK_SIZE,
) -> io.BufferedReader:
    """Wrap a chunk iterator in a buffered, readable binary stream.

    Args:
        chunks: Iterator producing the stream's bytes
        on_close: Called once when the stream is closed
        buffer_size: Read buffer size

    Returns:
        A BufferedReader; closing it closes the iterator
    """
    return io.BufferedReader(IterStream(chunks, on_close), buffer_size=buffer_size)


def iter_chunks(stream, chunk_size: int = DEFAULT_CHUNK_SIZE) -> Iterator[bytes]:
    """Yield successive chunks read from a binary stream until exhausted."""
    for chunk in iter(lambda: stream.read(chunk_size), b""):
        yield chunk
