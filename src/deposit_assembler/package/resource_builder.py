"""Builds package resource descriptors for package entries."""

import mimetypes

from deposit_assembler.resources import CustodialResource
from schemas.package import PackageResource

DEFAULT_MIME_TYPE = "application/octet-stream"


class ResourceBuilderFactory:
    """Classify package entries into ``PackageResource`` descriptors.

    The MIME type of a custodial file is taken from the file's own metadata
    when present, otherwise guessed from its name. The size comes from the
    file's metadata, falling back to the byte source, and is -1 when
    neither knows it.
    """

    def __init__(self, default_mime_type: str = DEFAULT_MIME_TYPE):
        self.default_mime_type = default_mime_type

    def build(self, resource: CustodialResource) -> PackageResource:
        """Describe a custodial resource.

        Args:
            resource: Custodial file paired with its byte source

        Returns:
            PackageResource with the file's name, MIME type and size
        """
        deposit_file = resource.file

        size_bytes = deposit_file.size_bytes
        if size_bytes is None:
            size_bytes = resource.source.size_bytes

        return PackageResource(
            name=deposit_file.name,
            mime_type=deposit_file.mime_type or self.guess_mime_type(deposit_file.name),
            size_bytes=size_bytes,
        )

    def build_document(self, name: str, mime_type: str) -> PackageResource:
        """Describe a generated document, whose size is unknown until rendered."""
        return PackageResource(name=name, mime_type=mime_type, size_bytes=-1)

    def guess_mime_type(self, name: str) -> str:
        """Guess a MIME type from a file name.

        Args:
            name: File name, including extension

        Returns:
            MIME type string
        """
        mime_type, _ = mimetypes.guess_type(name, strict=False)
        return mime_type or self.default_mime_type
