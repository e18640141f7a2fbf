"""Submission schemas.

A submission is one deposit request: the custodial files supplied by the
depositor, the manifest listing those files, and the bibliographic metadata
rendered into the bulk submission document.

Example submission document::

    {
        "id": "http://example.org/submissions/1234",
        "files": [
            {"name": "manuscript.pdf", "type": "manuscript",
             "location": "file:///deposits/1234/manuscript.pdf"},
            {"name": "fig1.png", "type": "figure", "label": "Figure 1",
             "location": "https://repo.example.org/files/fig1.png"}
        ],
        "metadata": {
            "manuscript": {"title": "A Study of Things"},
            "journal": {"title": "Journal of Things", "nlmta": "J Things"}
        }
    }
"""

from datetime import date
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, Field, model_validator


class DepositFileType(str, Enum):
    """Semantic type of a custodial file."""

    MANUSCRIPT = "manuscript"
    FIGURE = "figure"
    TABLE = "table"
    SUPPLEMENT = "supplement"

    @property
    def requires_label(self) -> bool:
        """Whether files of this type must carry a human-readable label."""
        return self in (
            DepositFileType.FIGURE,
            DepositFileType.TABLE,
            DepositFileType.SUPPLEMENT,
        )


class DepositFile(BaseModel):
    """A custodial file belonging to a submission.

    The label is required for figures, tables and supplements, but that
    requirement is checked when the manifest is rendered rather than here.

    Attributes:
        name: File name, unique within the package
        type: Semantic file type
        label: Human-readable label (e.g., "Figure 1")
        location: URI or filesystem path of the file's bytes
        mime_type: MIME type, if known
        size_bytes: Size in bytes, if known
    """

    name: str
    type: DepositFileType
    label: str | None = None
    location: str | None = None
    mime_type: str | None = None
    size_bytes: int | None = None

    model_config = {"frozen": True}


class DepositManifest(BaseModel):
    """Ordered listing of the files in a submission."""

    files: list[DepositFile] = []

    model_config = {"frozen": True}


class JournalIssn(BaseModel):
    """An ISSN and the publication medium it identifies."""

    issn: str
    pub_type: Literal["ppub", "epub"] = "ppub"

    model_config = {"frozen": True}


class Journal(BaseModel):
    """Journal in which the manuscript is (or will be) published."""

    title: str | None = None
    nlmta: str | None = None
    issns: list[JournalIssn] = []

    model_config = {"frozen": True}


class Manuscript(BaseModel):
    """The author manuscript being deposited.

    Attributes:
        title: Manuscript title (required by the bulk submission format)
        doi: DOI of the manuscript
        url: URL of the manuscript
        publisher_pdf: Whether the supplied PDF is the publisher's version
        show_publisher_pdf: Whether the publisher PDF may be displayed
        embargo_end: End of the embargo period, if any
    """

    title: str | None = None
    doi: str | None = None
    url: str | None = None
    publisher_pdf: bool = False
    show_publisher_pdf: bool = False
    embargo_end: date | None = None

    model_config = {"frozen": True}


class Article(BaseModel):
    """The published article corresponding to the manuscript."""

    title: str | None = None
    doi: str | None = None
    pmid: str | None = None
    pmcid: str | None = None

    model_config = {"frozen": True}


class Person(BaseModel):
    """A person associated with the submission."""

    first_name: str | None = None
    middle_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    author: bool = False
    pi: bool = False
    copi: bool = False
    submitter: bool = False
    corresponding: bool = False

    model_config = {"frozen": True}

    @property
    def person_type(self) -> str:
        """The most significant role this person holds."""
        if self.pi:
            return "pi"
        if self.copi:
            return "copi"
        if self.submitter:
            return "submitter"
        return "author"


class Grant(BaseModel):
    """A grant that funded the work."""

    award_number: str
    funder: str
    pi: Person | None = None

    model_config = {"frozen": True}


class DepositMetadata(BaseModel):
    """Bibliographic and administrative metadata for a submission."""

    manuscript: Manuscript = Field(default_factory=Manuscript)
    journal: Journal = Field(default_factory=Journal)
    article: Article = Field(default_factory=Article)
    persons: list[Person] = []
    grants: list[Grant] = []

    model_config = {"frozen": True}


class Submission(BaseModel):
    """One deposit request.

    When no manifest is supplied, one is derived from ``files`` in order.

    Attributes:
        id: URI-shaped submission identifier
        files: Custodial files, in submission order
        manifest: Manifest listing the custodial files
        metadata: Bibliographic and administrative metadata
    """

    id: str
    files: list[DepositFile] = []
    manifest: DepositManifest
    metadata: DepositMetadata = Field(default_factory=DepositMetadata)

    model_config = {"frozen": True}

    @model_validator(mode="before")
    @classmethod
    def _derive_manifest(cls, data: Any) -> Any:
        if isinstance(data, dict) and data.get("manifest") is None:
            data = {**data, "manifest": {"files": data.get("files", [])}}
        return data
