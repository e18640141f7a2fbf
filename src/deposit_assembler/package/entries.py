"""Package entries: the things an archive is built from.

An entry is either a generated document (manifest or metadata) or a
custodial file. Both declare a name, MIME type and size, and open a fresh
stream of their bytes; the archive writers treat them alike.
"""

from abc import ABC, abstractmethod
from typing import BinaryIO

from deposit_assembler.resources import ByteSource
from deposit_assembler.serializers import StreamingSerializer
from schemas.package import PackageResource


class PackageEntry(ABC):
    """A named source of bytes written as one archive entry."""

    def __init__(self, resource: PackageResource):
        self.resource = resource

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"

    @property
    def name(self) -> str:
        return self.resource.name

    @property
    def mime_type(self) -> str:
        return self.resource.mime_type

    @property
    def size_bytes(self) -> int:
        """Declared size, -1 if unknown until the bytes are read."""
        return self.resource.size_bytes

    @property
    def reopenable(self) -> bool:
        """Whether ``open()`` can be called again after the first time."""
        return True

    @abstractmethod
    def open(self) -> BinaryIO:
        """Open a new stream over the entry's bytes."""
        pass


class DocumentEntry(PackageEntry):
    """A document rendered lazily by a serializer."""

    def __init__(self, resource: PackageResource, serializer: StreamingSerializer):
        super().__init__(resource)
        self.serializer = serializer

    def open(self) -> BinaryIO:
        return self.serializer.serialize()


class CustodialEntry(PackageEntry):
    """A custodial file read from its byte source."""

    def __init__(self, resource: PackageResource, source: ByteSource):
        super().__init__(resource)
        self.source = source

    @property
    def reopenable(self) -> bool:
        return self.source.reopenable

    def open(self) -> BinaryIO:
        return self.source.open()
