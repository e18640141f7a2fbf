"""Package streams.

A package stream is the streamable, serialized form of a submission
package. ``open()`` produces the whole archived (and optionally compressed)
package; ``open(name)`` produces a single entry; ``resources()`` describes
the entries.

Entry order is fixed: the metadata document, the manifest document, then the
custodial files in submission order. Readers of the package may rely on the
metadata being first.
"""

import logging
from abc import ABC, abstractmethod
from collections import Counter
from contextlib import closing
from typing import BinaryIO, Generator, Iterator

from deposit_assembler.exceptions import (
    ManifestMismatchError,
    MetadataError,
    ResourceNameCollisionError,
    ResourceNotFoundError,
    ResourceUnavailableError,
)
from deposit_assembler.readers import DEFAULT_CHUNK_SIZE, iter_stream
from deposit_assembler.resources import CustodialResource
from deposit_assembler.serializers import StreamingSerializer
from schemas.package import Archive, PackageMetadata, PackageResource
from schemas.submission import Submission

from .archive import DEFAULT_SPOOL_MAX_SIZE, archive_chunks, compress_chunks
from .entries import CustodialEntry, DocumentEntry, PackageEntry
from .resource_builder import ResourceBuilderFactory

logger = logging.getLogger(__name__)


class PackageStream(ABC):
    """A streamable serialized form of a submission package."""

    @property
    @abstractmethod
    def metadata(self) -> PackageMetadata:
        """Metadata describing the package."""
        pass

    @abstractmethod
    def open(self, resource_name: str | None = None) -> BinaryIO:
        """Open the package, or one named resource within it.

        Args:
            resource_name: Name of a single resource to open. If omitted,
                           the whole package is streamed as specified by
                           its archive and compression settings.

        Returns:
            A readable binary stream

        Raises:
            ResourceNotFoundError: If no resource has the given name
        """
        pass

    @abstractmethod
    def resources(self) -> Iterator[PackageResource]:
        """Iterate over descriptors of the resources in the package."""
        pass


class ArchivedPackageStream(PackageStream):
    """Package stream that archives its entries and compresses the archive.

    Nothing is read or rendered until a returned stream is read. Each call
    to ``open()`` starts a fresh pass over every source; custodial sources
    must therefore be reopenable for the package to be opened more than
    once (see ``CachedSource``). A second ``open()`` of a package with a
    single-use source raises ``ResourceUnavailableError`` immediately.

    Args:
        submission: The submission being packaged
        custodial_resources: Custodial files paired with their byte sources,
                             in submission order
        metadata: Package metadata; archive must be TAR or ZIP
        metadata_serializer: Renders the metadata document
        manifest_serializer: Renders the manifest document
        resource_builder_factory: Describes each entry
        chunk_size: Size of reads from each source
        spool_max_size: In-memory limit when spooling entries of unknown size
        mtime: Modification time recorded on archive entries (default: now)

    Raises:
        MetadataError: If the archive format cannot hold multiple entries
        ResourceNameCollisionError: If two entries share a name
        ManifestMismatchError: If the manifest does not list every custodial
                               file exactly once
    """

    def __init__(
        self,
        submission: Submission,
        custodial_resources: list[CustodialResource],
        metadata: PackageMetadata,
        metadata_serializer: StreamingSerializer,
        manifest_serializer: StreamingSerializer,
        resource_builder_factory: ResourceBuilderFactory | None = None,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        spool_max_size: int = DEFAULT_SPOOL_MAX_SIZE,
        mtime: float | None = None,
    ):
        if metadata.archive is Archive.NONE:
            raise MetadataError(
                "A package of multiple entries requires an archive format",
                errors=["archive"],
            )

        self.submission = submission
        self._metadata = metadata
        self._size_bytes = -1
        self._opened = False
        self.chunk_size = chunk_size
        self.spool_max_size = spool_max_size
        self.mtime = mtime

        rbf = resource_builder_factory or ResourceBuilderFactory()
        self._entries: list[PackageEntry] = [
            DocumentEntry(
                rbf.build_document(metadata_serializer.name, metadata_serializer.mime_type),
                metadata_serializer,
            ),
            DocumentEntry(
                rbf.build_document(manifest_serializer.name, manifest_serializer.mime_type),
                manifest_serializer,
            ),
        ]
        self._entries.extend(
            CustodialEntry(rbf.build(resource), resource.source)
            for resource in custodial_resources
        )

        self._check_names()
        self._check_manifest(custodial_resources)

    def __repr__(self) -> str:
        return f"ArchivedPackageStream({self._metadata.name!r})"

    @property
    def metadata(self) -> PackageMetadata:
        """Package metadata; ``size_bytes`` is known once a full read completes."""
        if self._size_bytes >= 0:
            return self._metadata.model_copy(update={"size_bytes": self._size_bytes})
        return self._metadata

    def open(self, resource_name: str | None = None) -> BinaryIO:
        if resource_name is not None:
            return self._entry(resource_name).open()

        if self._opened:
            for entry in self._entries:
                if not entry.reopenable:
                    raise ResourceUnavailableError(
                        f"{entry.name} comes from a single-use source that has already been opened",
                        resource_name=entry.name,
                    )
        self._opened = True

        logger.info(
            f"Opening package {self._metadata.name} with {len(self._entries)} entries"
        )
        return iter_stream(self._package_chunks(), buffer_size=self.chunk_size)

    def resources(self) -> Iterator[PackageResource]:
        for entry in self._entries:
            yield entry.resource

    def _entry(self, resource_name: str) -> PackageEntry:
        for entry in self._entries:
            if entry.name == resource_name:
                return entry
        raise ResourceNotFoundError(resource_name)

    def _package_chunks(self) -> Generator[bytes, None, None]:
        chunks = archive_chunks(
            self._metadata.archive,
            self._entries,
            compression=self._metadata.compression,
            mtime=self.mtime,
            chunk_size=self.chunk_size,
            spool_max_size=self.spool_max_size,
        )

        size = 0
        with closing(compress_chunks(self._metadata.compression, chunks)) as compressed:
            for chunk in compressed:
                size += len(chunk)
                yield chunk

        self._size_bytes = size
        logger.info(f"Streamed package {self._metadata.name} ({size} bytes)")

    def _check_names(self) -> None:
        counts = Counter(entry.name for entry in self._entries)
        for name, count in counts.items():
            if count > 1:
                raise ResourceNameCollisionError(name)

    def _check_manifest(self, custodial_resources: list[CustodialResource]) -> None:
        manifest_counts = Counter(f.name for f in self.submission.manifest.files)
        custodial_names = [resource.name for resource in custodial_resources]

        problems = sorted(
            name for name in set(custodial_names) | set(manifest_counts)
            if manifest_counts.get(name, 0) != 1 or name not in custodial_names
        )
        if problems:
            raise ManifestMismatchError(
                f"Manifest does not list each custodial file exactly once: {', '.join(problems)}",
                names=problems,
            )
