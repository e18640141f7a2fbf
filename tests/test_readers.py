"""Tests for chunk-iterator streams."""

import io

import pytest

from deposit_assembler.readers import IterStream, iter_chunks, iter_stream


class TestIterStream:
    """Tests for IterStream and iter_stream."""

    def test_reads_all_chunks(self):
        """read() returns the concatenated chunks."""
        stream = iter_stream(iter([b"abc", b"def", b"g"]))

        assert stream.read() == b"abcdefg"

    def test_partial_reads(self):
        """Bounded reads return bytes across chunk boundaries."""
        stream = iter_stream(iter([b"abc", b"def"]), buffer_size=2)

        assert stream.read(4) == b"abcd"
        assert stream.read(4) == b"ef"
        assert stream.read(4) == b""

    def test_empty_chunks_skipped(self):
        """Empty chunks do not signal end of stream."""
        stream = iter_stream(iter([b"", b"a", b"", b"", b"b"]))

        assert stream.read() == b"ab"

    def test_chunks_pulled_lazily(self):
        """Nothing is pulled from the iterator before the first read."""
        pulled = []

        def chunks():
            for chunk in (b"one", b"two"):
                pulled.append(chunk)
                yield chunk

        stream = iter_stream(chunks(), buffer_size=3)
        assert pulled == []

        stream.read(3)
        assert pulled == [b"one"]

    def test_close_closes_generator(self):
        """Closing the stream runs the generator's finally block."""
        released = []

        def chunks():
            try:
                yield b"a"
                yield b"b"
            finally:
                released.append(True)

        stream = iter_stream(chunks(), buffer_size=1)
        stream.read(1)
        stream.close()

        assert released == [True]

    def test_on_close_called_once(self):
        """on_close is called once, even if close() is repeated."""
        calls = []
        stream = IterStream(iter([b"a"]), on_close=lambda: calls.append(1))

        stream.close()
        stream.close()

        assert calls == [1]

    def test_read_after_close(self):
        """Reading a closed stream raises ValueError."""
        stream = IterStream(iter([b"a"]))
        stream.close()

        with pytest.raises(ValueError):
            stream.readinto(bytearray(1))

    def test_errors_surface_on_read(self):
        """An exception in the generator is raised from read()."""

        def chunks():
            yield b"ok"
            raise RuntimeError("broken source")

        stream = iter_stream(chunks(), buffer_size=2)

        with pytest.raises(RuntimeError, match="broken source"):
            stream.read()

    def test_failed_stream_keeps_failing(self):
        """Reads after an iterator error raise it again instead of ending the stream."""

        def chunks():
            yield b"a"
            raise RuntimeError("broken source")

        stream = iter_stream(chunks())

        with pytest.raises(RuntimeError, match="broken source"):
            stream.read()
        with pytest.raises(RuntimeError, match="broken source"):
            stream.read()
        with pytest.raises(RuntimeError, match="broken source"):
            stream.read(1)

    def test_raw_stream_keeps_failing(self):
        """The unbuffered stream records the first error."""

        def chunks():
            raise OSError("disk gone")
            yield b""

        stream = IterStream(chunks())

        with pytest.raises(OSError, match="disk gone"):
            stream.readinto(bytearray(4))
        with pytest.raises(OSError, match="disk gone"):
            stream.readinto(bytearray(4))


class TestIterChunks:
    """Tests for iter_chunks."""

    def test_yields_fixed_size_chunks(self):
        """Chunks are at most chunk_size bytes."""
        chunks = list(iter_chunks(io.BytesIO(b"abcdefg"), chunk_size=3))

        assert chunks == [b"abc", b"def", b"g"]

    def test_empty_stream(self):
        """An empty stream yields nothing."""
        assert list(iter_chunks(io.BytesIO(b""))) == []
