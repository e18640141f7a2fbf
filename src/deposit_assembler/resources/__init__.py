"""Custodial file byte sources and their resolution."""

from .resolver import SourceResolver
from .sources import (
    ByteSource,
    BytesSource,
    CachedSource,
    CustodialResource,
    FileSource,
    SingleUseSource,
    UrlSource,
)

__all__ = [
    "ByteSource",
    "BytesSource",
    "CachedSource",
    "CustodialResource",
    "FileSource",
    "SingleUseSource",
    "SourceResolver",
    "UrlSource",
]
