"""Serializers for the documents generated into a package."""

from .manifest_serializer import MANIFEST_NAME, NihmsManifestSerializer
from .metadata_serializer import METADATA_NAME, NihmsMetadataSerializer
from .serializer import StreamingSerializer

__all__ = [
    "MANIFEST_NAME",
    "METADATA_NAME",
    "NihmsManifestSerializer",
    "NihmsMetadataSerializer",
    "StreamingSerializer",
]
