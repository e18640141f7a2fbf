"""Streaming archive and compression writers.

Every writer here is a generator of byte chunks. Entries are opened one at
a time, copied in bounded chunks, and closed before the next entry is
opened; closing a writer generator early closes the entry it is copying.

Tar entries are framed by hand (header, payload, block padding) rather than
through ``tarfile.TarFile.addfile``, which would copy a whole entry in one
call. The size in a tar header must be known before the payload is written,
so entries of unknown size are first spooled to a temporary file that stays
in memory up to ``spool_max_size`` bytes and spills to disk beyond that.
"""

import bz2
import logging
import tarfile
import tempfile
import time
import zipfile
import zlib
from contextlib import closing
from typing import BinaryIO, Generator, Iterable, Iterator

from deposit_assembler.exceptions import ResourceUnavailableError
from deposit_assembler.readers import DEFAULT_CHUNK_SIZE, iter_chunks
from schemas.package import Archive, Compression

from .entries import PackageEntry

logger = logging.getLogger(__name__)

DEFAULT_SPOOL_MAX_SIZE = 8 * 1024 * 1024
DEFAULT_COMPRESSION_LEVEL = 9

NUL = b"\0"
BLOCKSIZE = tarfile.BLOCKSIZE
RECORDSIZE = tarfile.RECORDSIZE


def archive_chunks(
    archive: Archive,
    entries: Iterable[PackageEntry],
    compression: Compression = Compression.NONE,
    mtime: float | None = None,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    spool_max_size: int = DEFAULT_SPOOL_MAX_SIZE,
) -> Generator[bytes, None, None]:
    """Write entries into the given archive format.

    Args:
        archive: Container format; TAR or ZIP
        entries: Entries to write, in order
        compression: Package compression; only ZIP affects a zip archive
        mtime: Modification time recorded for every entry (default: now)
        chunk_size: Size of payload reads
        spool_max_size: In-memory limit when spooling entries of unknown size

    Returns:
        Generator of archive bytes

    Raises:
        ValueError: If the archive format cannot hold multiple entries
    """
    if mtime is None:
        mtime = time.time()

    if archive is Archive.TAR:
        return tar_chunks(entries, mtime, chunk_size, spool_max_size)
    if archive is Archive.ZIP:
        return zip_chunks(entries, compression is Compression.ZIP, mtime, chunk_size)
    raise ValueError(f"Archive format {archive.value} cannot hold package entries")


def compress_chunks(
    compression: Compression,
    chunks: Generator[bytes, None, None],
    level: int = DEFAULT_COMPRESSION_LEVEL,
) -> Generator[bytes, None, None]:
    """Compress a stream of chunks incrementally.

    NONE and ZIP pass chunks through unchanged; zip archives compress
    their own entries.
    """
    if compression is Compression.GZIP:
        compressor = zlib.compressobj(level, zlib.DEFLATED, 16 + zlib.MAX_WBITS)
    elif compression is Compression.BZIP2:
        compressor = bz2.BZ2Compressor(level)
    elif compression in (Compression.NONE, Compression.ZIP):
        compressor = None
    else:
        raise ValueError(f"Unsupported compression: {compression}")

    with closing(chunks):
        for chunk in chunks:
            if compressor is not None:
                chunk = compressor.compress(chunk)
            if chunk:
                yield chunk

    if compressor is not None:
        tail = compressor.flush()
        if tail:
            yield tail


def tar_chunks(
    entries: Iterable[PackageEntry],
    mtime: float,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    spool_max_size: int = DEFAULT_SPOOL_MAX_SIZE,
) -> Generator[bytes, None, None]:
    """Write entries as a POSIX (pax) tar archive."""
    written = 0
    for entry in entries:
        entry_chunks = _tar_entry_chunks(entry, int(mtime), chunk_size, spool_max_size)
        with closing(entry_chunks):
            for chunk in entry_chunks:
                written += len(chunk)
                yield chunk

    # End of archive: two zero blocks, then pad to a full record.
    trailer = NUL * (BLOCKSIZE * 2)
    written += len(trailer)
    remainder = written % RECORDSIZE
    if remainder:
        trailer += NUL * (RECORDSIZE - remainder)
    yield trailer


def _tar_entry_chunks(
    entry: PackageEntry,
    mtime: int,
    chunk_size: int,
    spool_max_size: int,
) -> Iterator[bytes]:
    stream: BinaryIO = entry.open()
    try:
        size = entry.size_bytes
        if size < 0:
            stream, size = _spool(stream, chunk_size, spool_max_size)

        info = tarfile.TarInfo(entry.name)
        info.size = size
        info.mtime = mtime
        info.mode = 0o644
        info.type = tarfile.REGTYPE
        logger.debug(f"Writing tar entry {entry.name} ({size} bytes)")
        yield info.tobuf(tarfile.PAX_FORMAT, "utf-8", "surrogateescape")

        remaining = size
        while remaining > 0:
            chunk = stream.read(min(chunk_size, remaining))
            if not chunk:
                raise ResourceUnavailableError(
                    f"{entry.name} ended after {size - remaining} of {size} declared bytes",
                    resource_name=entry.name,
                )
            remaining -= len(chunk)
            yield chunk

        if stream.read(1):
            raise ResourceUnavailableError(
                f"{entry.name} is longer than its declared {size} bytes",
                resource_name=entry.name,
            )

        padding = size % BLOCKSIZE
        if padding:
            yield NUL * (BLOCKSIZE - padding)
    finally:
        stream.close()


def _spool(stream: BinaryIO, chunk_size: int, spool_max_size: int) -> tuple[BinaryIO, int]:
    """Copy a stream of unknown length into a spool file to measure it.

    The input stream is closed; the returned spool is positioned at 0.
    """
    spool = tempfile.SpooledTemporaryFile(max_size=spool_max_size)
    try:
        with closing(stream):
            for chunk in iter_chunks(stream, chunk_size):
                spool.write(chunk)
        size = spool.tell()
        spool.seek(0)
    except BaseException:
        spool.close()
        raise
    return spool, size


class _ChunkSink:
    """Write-only, non-seekable sink that collects what a ZipFile writes."""

    def __init__(self):
        self._chunks: list[bytes] = []

    def write(self, data) -> int:
        self._chunks.append(bytes(data))
        return len(data)

    def flush(self) -> None:
        pass

    def close(self) -> None:
        pass

    def drain(self) -> bytes:
        data = b"".join(self._chunks)
        self._chunks.clear()
        return data


def zip_chunks(
    entries: Iterable[PackageEntry],
    compress: bool,
    mtime: float,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> Generator[bytes, None, None]:
    """Write entries as a zip archive, deflating them when ``compress`` is set.

    The sink is not seekable, so zipfile writes each entry's sizes and CRC
    in a trailing data descriptor and entry sizes need not be known.
    """
    sink = _ChunkSink()
    method = zipfile.ZIP_DEFLATED if compress else zipfile.ZIP_STORED
    date_time = time.localtime(mtime)[:6]

    archive = zipfile.ZipFile(sink, mode="w", compression=method)
    try:
        for entry in entries:
            info = zipfile.ZipInfo(entry.name, date_time=date_time)
            info.compress_type = method
            info.external_attr = 0o644 << 16
            logger.debug(f"Writing zip entry {entry.name}")

            stream = entry.open()
            try:
                with archive.open(info, mode="w", force_zip64=True) as dest:
                    for chunk in iter_chunks(stream, chunk_size):
                        dest.write(chunk)
                        data = sink.drain()
                        if data:
                            yield data
            finally:
                stream.close()

            data = sink.drain()
            if data:
                yield data
    finally:
        archive.close()

    data = sink.drain()
    if data:
        yield data
