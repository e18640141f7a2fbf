"""Byte sources for custodial files.

A byte source knows how to open a fresh binary stream over one file's bytes.
Each package build opens every source again, so the sources used for
repeated builds must be reopenable. ``SingleUseSource`` wraps a stream that
can only be read once; ``CachedSource`` makes any source reopenable by
spooling its first read to a temporary file.
"""

import io
import logging
import os
import shutil
import tempfile
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO

from deposit_assembler.clients import ClientError, RepositoryClient
from deposit_assembler.exceptions import ResourceUnavailableError
from deposit_assembler.readers import DEFAULT_CHUNK_SIZE
from schemas.submission import DepositFile

logger = logging.getLogger(__name__)


class ByteSource(ABC):
    """Abstract base class for custodial file byte sources."""

    reopenable: bool = True

    @property
    def size_bytes(self) -> int:
        """Size of the source in bytes, -1 if unknown before reading."""
        return -1

    @abstractmethod
    def open(self) -> BinaryIO:
        """Open a new binary stream over the source's bytes.

        Raises:
            ResourceUnavailableError: If the bytes cannot be opened
        """
        pass


class FileSource(ByteSource):
    """Bytes of a file on the local filesystem."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def __repr__(self) -> str:
        return f"FileSource('{self.path}')"

    @property
    def size_bytes(self) -> int:
        try:
            return self.path.stat().st_size
        except OSError:
            return -1

    def open(self) -> BinaryIO:
        try:
            return self.path.open("rb")
        except OSError as e:
            raise ResourceUnavailableError(f"Cannot open {self.path}: {e}") from e


class BytesSource(ByteSource):
    """Bytes held in memory."""

    def __init__(self, data: bytes):
        self.data = data

    @property
    def size_bytes(self) -> int:
        return len(self.data)

    def open(self) -> BinaryIO:
        return io.BytesIO(self.data)


class UrlSource(ByteSource):
    """Bytes streamed from the repository over HTTP.

    Every open issues a new request; the size is unknown until read.
    """

    def __init__(self, url: str, client: RepositoryClient, chunk_size: int = DEFAULT_CHUNK_SIZE):
        self.url = url
        self.client = client
        self.chunk_size = chunk_size

    def __repr__(self) -> str:
        return f"UrlSource('{self.url}')"

    def open(self) -> BinaryIO:
        try:
            return self.client.open_stream(self.url, chunk_size=self.chunk_size)
        except ClientError as e:
            raise ResourceUnavailableError(f"Cannot open {self.url}: {e.message}") from e


class SingleUseSource(ByteSource):
    """An already-open stream that can be handed out exactly once."""

    reopenable = False

    def __init__(self, stream: BinaryIO, size_bytes: int = -1):
        self._stream: BinaryIO | None = stream
        self._size_bytes = size_bytes

    @property
    def size_bytes(self) -> int:
        return self._size_bytes

    def open(self) -> BinaryIO:
        if self._stream is None:
            raise ResourceUnavailableError("Single-use source has already been opened")
        stream, self._stream = self._stream, None
        return stream


class CachedSource(ByteSource):
    """Makes another source reopenable by caching its bytes on disk.

    The first open copies the wrapped source into a temporary file; every
    open, including the first, reads from that file. Call ``close()`` (or
    use as a context manager) to delete the cache.
    """

    def __init__(self, source: ByteSource, chunk_size: int = DEFAULT_CHUNK_SIZE):
        self.source = source
        self.chunk_size = chunk_size
        self._path: Path | None = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    @property
    def size_bytes(self) -> int:
        if self._path is not None:
            return self._path.stat().st_size
        return self.source.size_bytes

    def open(self) -> BinaryIO:
        if self._path is None:
            self._path = self._fill_cache()
        return self._path.open("rb")

    def close(self) -> None:
        """Delete the cached copy, if any."""
        if self._path is not None:
            self._path.unlink(missing_ok=True)
            self._path = None

    def _fill_cache(self) -> Path:
        fd, name = tempfile.mkstemp(prefix="custodial-")
        path = Path(name)
        try:
            with os.fdopen(fd, "wb") as dest, self.source.open() as src:
                shutil.copyfileobj(src, dest, self.chunk_size)
        except BaseException:
            path.unlink(missing_ok=True)
            raise
        logger.debug(f"Cached {self.source!r} at {path}")
        return path


@dataclass(frozen=True)
class CustodialResource:
    """A custodial file paired with the source of its bytes."""

    file: DepositFile
    source: ByteSource

    @property
    def name(self) -> str:
        return self.file.name
