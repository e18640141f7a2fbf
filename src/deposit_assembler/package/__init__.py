"""Package metadata, resource descriptors and package streams."""

from .archive import archive_chunks, compress_chunks
from .entries import CustodialEntry, DocumentEntry, PackageEntry
from .metadata_builder import MetadataBuilder, MetadataBuilderFactory
from .resource_builder import ResourceBuilderFactory
from .stream import ArchivedPackageStream, PackageStream

__all__ = [
    "ArchivedPackageStream",
    "CustodialEntry",
    "DocumentEntry",
    "MetadataBuilder",
    "MetadataBuilderFactory",
    "PackageEntry",
    "PackageStream",
    "ResourceBuilderFactory",
    "archive_chunks",
    "compress_chunks",
]
