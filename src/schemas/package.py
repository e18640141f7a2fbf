"""Package schemas.

Describe a serialized package as a whole (its container format, name and
size) and the individual resources it contains.
"""

from enum import Enum

from pydantic import BaseModel


class Archive(str, Enum):
    """Container format used to sequence package entries."""

    NONE = "none"
    TAR = "tar"
    ZIP = "zip"


class Compression(str, Enum):
    """Byte-level compression applied to the archive."""

    NONE = "none"
    GZIP = "gzip"
    BZIP2 = "bzip2"
    ZIP = "zip"


class PackageMetadata(BaseModel):
    """Immutable description of a package.

    Attributes:
        spec: Packaging specification the package conforms to
        archive: Container format
        archived: Whether the package uses a container format
        compression: Compression format
        compressed: Whether the package is compressed
        mime_type: MIME type of the package stream
        name: Derived package file name
        size_bytes: Total package size, -1 if unknown
    """

    spec: str
    archive: Archive
    archived: bool = False
    compression: Compression
    compressed: bool = False
    mime_type: str | None = None
    name: str | None = None
    size_bytes: int = -1

    model_config = {"frozen": True}


class PackageResource(BaseModel):
    """A resource inside a package.

    Attributes:
        name: Name of the resource, unambiguous within the package
        mime_type: MIME type of the resource
        size_bytes: Uncompressed size of the resource, -1 if unknown
    """

    name: str
    mime_type: str = "application/octet-stream"
    size_bytes: int = -1

    model_config = {"frozen": True}
