"""Builder for package metadata.

Each setter returns a new builder and leaves the receiver unchanged, so a
builder can be passed around and extended without affecting snapshots taken
earlier. ``build()`` checks that the required fields are present and
consistent before producing an immutable ``PackageMetadata``.
"""

import logging
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from deposit_assembler.exceptions import MetadataError
from schemas.package import Archive, Compression, PackageMetadata

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("spec", "archive", "compression")


class MetadataBuilder:
    """Accumulates package metadata through pure transformations.

    Example:
        md = (
            MetadataBuilder()
            .spec("nihms-native-2017-07")
            .archive(Archive.TAR)
            .archived(True)
            .compression(Compression.GZIP)
            .compressed(True)
            .mime_type("application/gzip")
            .build()
        )
    """

    def __init__(self, fields: dict[str, Any] | None = None):
        self._fields: dict[str, Any] = dict(fields or {})

    def __repr__(self) -> str:
        return f"MetadataBuilder({self._fields!r})"

    def _with(self, **updates: Any) -> "MetadataBuilder":
        return MetadataBuilder({**self._fields, **updates})

    def get(self, field: str, default: Any = None) -> Any:
        """Return the current value of a field, or ``default`` if unset."""
        return self._fields.get(field, default)

    def spec(self, spec: str) -> "MetadataBuilder":
        return self._with(spec=spec)

    def archive(self, archive: Archive) -> "MetadataBuilder":
        return self._with(archive=Archive(archive))

    def archived(self, archived: bool) -> "MetadataBuilder":
        return self._with(archived=archived)

    def compression(self, compression: Compression) -> "MetadataBuilder":
        return self._with(compression=Compression(compression))

    def compressed(self, compressed: bool) -> "MetadataBuilder":
        return self._with(compressed=compressed)

    def mime_type(self, mime_type: str) -> "MetadataBuilder":
        return self._with(mime_type=mime_type)

    def name(self, name: str) -> "MetadataBuilder":
        return self._with(name=name)

    def size_bytes(self, size_bytes: int) -> "MetadataBuilder":
        return self._with(size_bytes=size_bytes)

    def build(self) -> PackageMetadata:
        """Produce an immutable snapshot of the accumulated metadata.

        Returns:
            PackageMetadata reflecting the fields set so far

        Raises:
            MetadataError: If a required field is unset, or the archive and
                           compression settings contradict each other
        """
        missing = [field for field in REQUIRED_FIELDS if self._fields.get(field) is None]
        if missing:
            raise MetadataError(
                f"Package metadata is missing required fields: {', '.join(missing)}",
                errors=missing,
            )

        try:
            metadata = PackageMetadata.model_validate(self._fields)
        except PydanticValidationError as e:
            raise MetadataError(
                "Package metadata failed validation",
                errors=[str(err) for err in e.errors()],
            ) from e

        errors = _consistency_errors(metadata)
        if errors:
            raise MetadataError(f"Inconsistent package metadata: {'; '.join(errors)}", errors=errors)

        return metadata


class MetadataBuilderFactory:
    """Supplies new builders, optionally seeded with default fields."""

    def __init__(self, defaults: dict[str, Any] | None = None):
        self.defaults = dict(defaults or {})

    def new_builder(self) -> MetadataBuilder:
        return MetadataBuilder(self.defaults)


def _consistency_errors(metadata: PackageMetadata) -> list[str]:
    errors = []

    if metadata.archived != (metadata.archive is not Archive.NONE):
        errors.append(f"archived={metadata.archived} with archive {metadata.archive.value}")

    if metadata.compressed != (metadata.compression is not Compression.NONE):
        errors.append(
            f"compressed={metadata.compressed} with compression {metadata.compression.value}"
        )

    if metadata.compression is Compression.ZIP and metadata.archive is not Archive.ZIP:
        errors.append("zip compression requires a zip archive")

    if metadata.archive is Archive.ZIP and metadata.compression in (
        Compression.GZIP,
        Compression.BZIP2,
    ):
        errors.append(f"zip archives cannot be {metadata.compression.value}-compressed")

    return errors
