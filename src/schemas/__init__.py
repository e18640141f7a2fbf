"""Schema definitions for the NIHMS assembler."""

from .package import Archive, Compression, PackageMetadata, PackageResource
from .submission import (
    Article,
    DepositFile,
    DepositFileType,
    DepositManifest,
    DepositMetadata,
    Grant,
    Journal,
    JournalIssn,
    Manuscript,
    Person,
    Submission,
)

__all__ = [
    "Archive",
    "Article",
    "Compression",
    "DepositFile",
    "DepositFileType",
    "DepositManifest",
    "DepositMetadata",
    "Grant",
    "Journal",
    "JournalIssn",
    "Manuscript",
    "PackageMetadata",
    "PackageResource",
    "Person",
    "Submission",
]
