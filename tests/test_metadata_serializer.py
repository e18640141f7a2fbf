"""Tests for NihmsMetadataSerializer."""

import pytest
from lxml import etree

from deposit_assembler.exceptions import SerializationError
from deposit_assembler.serializers import METADATA_NAME, NihmsMetadataSerializer
from schemas.submission import Article, DepositMetadata, Manuscript


def render_tree(metadata: DepositMetadata) -> etree._Element:
    with NihmsMetadataSerializer(metadata).serialize() as stream:
        return etree.fromstring(stream.read())


class TestMetadataDocument:
    """Tests for the bulk submission document."""

    def test_name_and_mime_type(self):
        """The metadata document is bulk_meta.xml."""
        serializer = NihmsMetadataSerializer(DepositMetadata())

        assert serializer.name == METADATA_NAME == "bulk_meta.xml"
        assert serializer.mime_type == "application/xml"

    def test_declaration_and_doctype(self, sample_submission):
        """The document declares UTF-8 and the bulk submission DTD."""
        content = NihmsMetadataSerializer(sample_submission.metadata).render()

        assert content.startswith(b"<?xml version='1.0' encoding='UTF-8'?>")
        assert b'<!DOCTYPE nihms-submit SYSTEM "bulksubmission.dtd">' in content

    def test_root_and_section_order(self, sample_submission):
        """Sections appear in the order the format defines."""
        root = render_tree(sample_submission.metadata)

        assert root.tag == "nihms-submit"
        assert [child.tag for child in root] == [
            "title", "journal-meta", "manuscript", "contacts", "grants",
        ]
        assert root.findtext("title") == "A Study of Things"

    def test_journal_meta(self, sample_submission):
        """journal-meta carries the NLM TA, ISSNs and title."""
        root = render_tree(sample_submission.metadata)

        journal_id = root.find("journal-meta/journal-id")
        assert journal_id.get("journal-id-type") == "nlm-ta"
        assert journal_id.text == "J Things"

        issns = root.findall("journal-meta/issn")
        assert [(i.get("pub-type"), i.text) for i in issns] == [
            ("ppub", "1234-5678"),
            ("epub", "8765-4321"),
        ]
        assert root.findtext("journal-meta/journal-title") == "Journal of Things"

    def test_manuscript(self, sample_submission):
        """manuscript carries flags, embargo and identifiers."""
        manuscript = render_tree(sample_submission.metadata).find("manuscript")

        assert manuscript.get("publisher_pdf") == "no"
        assert manuscript.get("show_publisher_pdf") == "no"
        assert manuscript.get("embargo") == "2027-01-01"
        assert manuscript.findtext("doi") == "10.1234/things.5678"
        assert manuscript.findtext("pmid") == "29000000"
        assert manuscript.find("pmcid") is None
        assert manuscript.findtext("url") == "http://example.org/manuscripts/1234"

    def test_manuscript_doi_used_without_article_doi(self):
        """The manuscript DOI is used when the article has none."""
        metadata = DepositMetadata(manuscript=Manuscript(title="T", doi="10.1/ms"))

        manuscript = render_tree(metadata).find("manuscript")

        assert manuscript.findtext("doi") == "10.1/ms"

    def test_contacts(self, sample_submission):
        """Each person becomes a contact with a person type."""
        persons = render_tree(sample_submission.metadata).findall("contacts/person")

        assert len(persons) == 2
        assert persons[0].get("fname") == "Ada"
        assert persons[0].get("lname") == "Lovelace"
        assert persons[0].get("email") == "ada@example.org"
        assert persons[0].get("person-type") == "pi"
        assert persons[0].get("corresponding") == "yes"
        assert persons[1].get("mname") == "B"
        assert persons[1].get("person-type") == "author"
        assert persons[1].get("corresponding") is None

    def test_grants(self, sample_submission):
        """Grants carry their id, funder and PI."""
        grant = render_tree(sample_submission.metadata).find("grants/grant")

        assert grant.get("id") == "R01 AB123456"
        assert grant.get("funder") == "nih"
        assert grant.find("PI").get("lname") == "Lovelace"
        assert grant.find("PI").get("person-type") is None

    def test_optional_sections_omitted(self):
        """Empty journal, contacts and grants are left out."""
        root = render_tree(DepositMetadata(manuscript=Manuscript(title="T")))

        assert [child.tag for child in root] == ["title", "manuscript"]

    def test_article_title_fallback(self):
        """The article title is used when the manuscript has none."""
        root = render_tree(DepositMetadata(article=Article(title="Published Title")))

        assert root.findtext("title") == "Published Title"

    def test_special_characters_escaped(self):
        """Markup characters in values are escaped."""
        root = render_tree(DepositMetadata(manuscript=Manuscript(title="Cats & <Dogs>")))

        assert root.findtext("title") == "Cats & <Dogs>"


class TestMetadataValidation:
    """Tests for metadata errors, which surface on read."""

    def test_missing_title_fails_on_read(self):
        """A missing title is reported when the stream is read."""
        stream = NihmsMetadataSerializer(DepositMetadata()).serialize()

        try:
            with pytest.raises(SerializationError, match="manuscript title"):
                stream.read()
        finally:
            stream.close()
