"""Base class for package assemblers."""

import logging
import re
from abc import ABC, abstractmethod

from deposit_assembler.package import (
    MetadataBuilder,
    MetadataBuilderFactory,
    PackageStream,
    ResourceBuilderFactory,
)
from deposit_assembler.resources import CustodialResource, SourceResolver
from schemas.submission import Submission

logger = logging.getLogger(__name__)

_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9._-]")


def sanitize_filename(name: str) -> str:
    """Remove characters that are unsafe in a package file name.

    Args:
        name: Candidate file name

    Returns:
        The name with everything outside ``[A-Za-z0-9._-]`` removed
    """
    return _UNSAFE_FILENAME_CHARS.sub("", name)


class Assembler(ABC):
    """Abstract base class for package assemblers.

    An assembler turns a submission into a PackageStream. The stream is
    lazy: nothing is read from custodial sources and no document is
    rendered until the caller reads from it.

    Args:
        metadata_builder_factory: Supplies a fresh builder for each package
        resource_builder_factory: Describes each package entry
        source_resolver: Resolves custodial file locations to byte sources
                         when the caller does not supply them
    """

    def __init__(
        self,
        metadata_builder_factory: MetadataBuilderFactory | None = None,
        resource_builder_factory: ResourceBuilderFactory | None = None,
        source_resolver: SourceResolver | None = None,
    ):
        self.metadata_builder_factory = metadata_builder_factory or MetadataBuilderFactory()
        self.resource_builder_factory = resource_builder_factory or ResourceBuilderFactory()
        self.source_resolver = source_resolver or SourceResolver()

    def assemble(
        self,
        submission: Submission,
        custodial_resources: list[CustodialResource] | None = None,
    ) -> PackageStream:
        """Assemble a submission into a package stream.

        Args:
            submission: The submission to package
            custodial_resources: Custodial files paired with their byte
                                 sources. If omitted, each file's location
                                 is resolved by the source resolver.

        Returns:
            PackageStream for the submission

        Raises:
            MetadataError: If the package metadata is incomplete or inconsistent
            ResourceUnavailableError: If a custodial file location cannot be resolved
            ResourceNameCollisionError: If two package entries share a name
            ManifestMismatchError: If the manifest and custodial files disagree
        """
        if custodial_resources is None:
            custodial_resources = self.source_resolver.resolve_all(submission)

        logger.debug(
            f"Assembling {submission.id} with {len(custodial_resources)} custodial files"
        )
        return self.create_package_stream(
            submission,
            custodial_resources,
            self.metadata_builder_factory.new_builder(),
            self.resource_builder_factory,
        )

    @abstractmethod
    def create_package_stream(
        self,
        submission: Submission,
        custodial_resources: list[CustodialResource],
        builder: MetadataBuilder,
        resource_builder_factory: ResourceBuilderFactory,
    ) -> PackageStream:
        """Create the package stream for a submission.

        Args:
            submission: The submission to package
            custodial_resources: Custodial files paired with their byte sources
            builder: A fresh metadata builder
            resource_builder_factory: Describes each package entry

        Returns:
            PackageStream for the submission
        """
        pass
