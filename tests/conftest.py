"""Pytest fixtures for nihms-assembler tests."""

import json
from datetime import datetime

import pytest

from deposit_assembler.resources import BytesSource, CustodialResource
from schemas.submission import Submission

MANUSCRIPT_BYTES = b"%PDF-1.4 manuscript body\n" * 40
FIGURE_BYTES = b"\x89PNG\r\n\x1a\n figure pixels" * 25


@pytest.fixture
def sample_submission_data():
    """Sample submission document.

    This matches the JSON a repository returns for a submission with a
    manuscript and one labelled figure.
    """
    return {
        "id": "http://example.org/submissions/1234",
        "files": [
            {
                "name": "manuscript.pdf",
                "type": "manuscript",
                "location": "manuscript.pdf",
            },
            {
                "name": "fig1.png",
                "type": "figure",
                "label": "Figure 1",
                "location": "fig1.png",
            },
        ],
        "metadata": {
            "manuscript": {
                "title": "A Study of Things",
                "url": "http://example.org/manuscripts/1234",
                "publisher_pdf": False,
                "show_publisher_pdf": False,
                "embargo_end": "2027-01-01",
            },
            "journal": {
                "title": "Journal of Things",
                "nlmta": "J Things",
                "issns": [
                    {"issn": "1234-5678", "pub_type": "ppub"},
                    {"issn": "8765-4321", "pub_type": "epub"},
                ],
            },
            "article": {
                "doi": "10.1234/things.5678",
                "pmid": "29000000",
            },
            "persons": [
                {
                    "first_name": "Ada",
                    "last_name": "Lovelace",
                    "email": "ada@example.org",
                    "pi": True,
                    "corresponding": True,
                },
                {
                    "first_name": "Charles",
                    "middle_name": "B",
                    "last_name": "Babbage",
                    "author": True,
                },
            ],
            "grants": [
                {
                    "award_number": "R01 AB123456",
                    "funder": "nih",
                    "pi": {"first_name": "Ada", "last_name": "Lovelace"},
                },
            ],
        },
    }


@pytest.fixture
def sample_submission(sample_submission_data):
    """Validated sample submission."""
    return Submission.model_validate(sample_submission_data)


@pytest.fixture
def custodial_resources(sample_submission):
    """In-memory byte sources for the sample submission's files."""
    contents = {
        "manuscript.pdf": MANUSCRIPT_BYTES,
        "fig1.png": FIGURE_BYTES,
    }
    return [
        CustodialResource(file=f, source=BytesSource(contents[f.name]))
        for f in sample_submission.files
    ]


@pytest.fixture
def submission_dir(tmp_path, sample_submission_data):
    """A directory holding a submission JSON document and its files."""
    (tmp_path / "manuscript.pdf").write_bytes(MANUSCRIPT_BYTES)
    (tmp_path / "fig1.png").write_bytes(FIGURE_BYTES)
    (tmp_path / "submission.json").write_text(json.dumps(sample_submission_data))
    return tmp_path


@pytest.fixture
def fixed_now():
    """A fixed clock reading for package naming."""
    return datetime(2017, 7, 24, 13, 5, 52)
