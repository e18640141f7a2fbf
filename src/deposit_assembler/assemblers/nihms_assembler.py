"""Assembler for the NIHMS native packaging format.

A NIHMS package is a gzipped tar archive containing ``bulk_meta.xml``,
``manifest.txt`` and the custodial files of the submission, named::

    nihms-native-2017-07_2017-07-24_13-05-52_1234.tar.gz
"""

import logging
import uuid
from datetime import datetime
from urllib.parse import urlparse

from deposit_assembler.package import (
    ArchivedPackageStream,
    MetadataBuilder,
    MetadataBuilderFactory,
    PackageStream,
    ResourceBuilderFactory,
)
from deposit_assembler.readers import DEFAULT_CHUNK_SIZE
from deposit_assembler.resources import CustodialResource, SourceResolver
from deposit_assembler.serializers import NihmsManifestSerializer, NihmsMetadataSerializer
from schemas.package import Archive, Compression
from schemas.submission import Submission

from .assembler import Assembler, sanitize_filename

logger = logging.getLogger(__name__)

SPEC_NIHMS_NATIVE_2017_07 = "nihms-native-2017-07"
APPLICATION_GZIP = "application/gzip"
APPLICATION_BZIP2 = "application/x-bzip2"
APPLICATION_TAR = "application/x-tar"
APPLICATION_ZIP = "application/zip"

PACKAGE_FILE_NAME = "{spec}_{timestamp}_{local_id}"
TIMESTAMP_FORMAT = "%Y-%m-%d_%H-%M-%S"

ARCHIVE_EXTENSIONS = {
    Archive.TAR: ".tar",
    Archive.ZIP: ".zip",
}

COMPRESSION_EXTENSIONS = {
    Compression.GZIP: ".gz",
    Compression.BZIP2: ".bz2",
}


def package_mime_type(archive: Archive, compression: Compression) -> str:
    """MIME type of a package stream with the given container settings."""
    if compression is Compression.GZIP:
        return APPLICATION_GZIP
    if compression is Compression.BZIP2:
        return APPLICATION_BZIP2
    if archive is Archive.ZIP:
        return APPLICATION_ZIP
    return APPLICATION_TAR


def _local_id(submission_id: str) -> str | None:
    """Last path segment of a submission id read as a URI reference, or None.

    Relative references such as ``submissions/1234`` are accepted. Ids that
    are not URI references at all (whitespace, unbalanced brackets) give None.
    """
    if not submission_id or any(c.isspace() for c in submission_id):
        return None
    try:
        parsed = urlparse(submission_id)
    except ValueError:
        return None
    segment = parsed.path.rstrip("/").rsplit("/", 1)[-1]
    return segment or None


def name_package(
    submission: Submission,
    builder: MetadataBuilder,
    now: datetime | None = None,
) -> MetadataBuilder:
    """Derive the package file name and record it on the builder.

    The name is ``{spec}_{timestamp}_{local_id}`` followed by the archive and
    compression extensions. The local id is the last path segment of the
    submission id; if the id is not a URI with a path, a random UUID is used
    instead so that naming never fails.

    Args:
        submission: The submission being packaged
        builder: Builder with spec, archive and compression already set
        now: Time to stamp into the name (default: current local time)

    Returns:
        A new builder carrying the package name

    Raises:
        MetadataError: If the builder's metadata is incomplete
    """
    metadata = builder.build()

    local_id = _local_id(submission.id)
    if local_id is None:
        local_id = str(uuid.uuid4())
        logger.warning(
            f"Submission id {submission.id!r} has no usable path segment; "
            f"naming package with random id {local_id}"
        )

    name = PACKAGE_FILE_NAME.format(
        spec=metadata.spec,
        timestamp=(now or datetime.now()).strftime(TIMESTAMP_FORMAT),
        local_id=local_id,
    )
    if metadata.archived:
        name += ARCHIVE_EXTENSIONS.get(metadata.archive, "")
    if metadata.compressed:
        name += COMPRESSION_EXTENSIONS.get(metadata.compression, "")

    name = sanitize_filename(name)
    logger.info(f"Named package for {submission.id}: {name}")
    return builder.name(name)


class NihmsAssembler(Assembler):
    """Assemble submissions into NIHMS native packages.

    Packages are tar archives compressed with gzip unless configured
    otherwise.

    Args:
        archive: Container format (TAR or ZIP)
        compression: Compression format; ZIP requires a ZIP archive
        metadata_builder_factory: Supplies a fresh builder for each package
        resource_builder_factory: Describes each package entry
        source_resolver: Resolves custodial file locations to byte sources
        chunk_size: Size of reads from each source
        clock: Callable returning the time stamped into package names
    """

    def __init__(
        self,
        archive: Archive = Archive.TAR,
        compression: Compression = Compression.GZIP,
        metadata_builder_factory: MetadataBuilderFactory | None = None,
        resource_builder_factory: ResourceBuilderFactory | None = None,
        source_resolver: SourceResolver | None = None,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        clock=datetime.now,
    ):
        super().__init__(metadata_builder_factory, resource_builder_factory, source_resolver)
        self.archive = Archive(archive)
        self.compression = Compression(compression)
        self.chunk_size = chunk_size
        self.clock = clock

    def create_package_stream(
        self,
        submission: Submission,
        custodial_resources: list[CustodialResource],
        builder: MetadataBuilder,
        resource_builder_factory: ResourceBuilderFactory,
    ) -> PackageStream:
        builder = (
            builder.spec(SPEC_NIHMS_NATIVE_2017_07)
            .archive(self.archive)
            .archived(self.archive is not Archive.NONE)
            .compression(self.compression)
            .compressed(self.compression is not Compression.NONE)
            .mime_type(package_mime_type(self.archive, self.compression))
        )
        builder = name_package(submission, builder, now=self.clock())

        return ArchivedPackageStream(
            submission,
            custodial_resources,
            builder.build(),
            metadata_serializer=NihmsMetadataSerializer(submission.metadata),
            manifest_serializer=NihmsManifestSerializer(submission.manifest),
            resource_builder_factory=resource_builder_factory,
            chunk_size=self.chunk_size,
        )
