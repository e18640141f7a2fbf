"""NIHMS bulk submission metadata serializer.

Renders the submission metadata as ``bulk_meta.xml``, a ``nihms-submit``
document with the manuscript title, journal, manuscript identifiers,
contacts and grants.
"""

import logging

from lxml import etree

from deposit_assembler.exceptions import SerializationError
from schemas.submission import DepositMetadata, Grant, Person

from .serializer import StreamingSerializer

logger = logging.getLogger(__name__)

METADATA_NAME = "bulk_meta.xml"
METADATA_MIME_TYPE = "application/xml"

DOCTYPE = '<!DOCTYPE nihms-submit SYSTEM "bulksubmission.dtd">'


def _yes_no(value: bool) -> str:
    return "yes" if value else "no"


class NihmsMetadataSerializer(StreamingSerializer):
    """Serialize DepositMetadata into the NIHMS bulk submission format.

    The document has the following structure::

        <nihms-submit>
          <title>...</title>
          <journal-meta>
            <journal-id journal-id-type="nlm-ta">...</journal-id>
            <issn pub-type="ppub">...</issn>
            <journal-title>...</journal-title>
          </journal-meta>
          <manuscript publisher_pdf="no" show_publisher_pdf="no" embargo="...">
            <doi>...</doi>
            <pmid>...</pmid>
          </manuscript>
          <contacts>
            <person fname="..." lname="..." email="..." person-type="pi"/>
          </contacts>
          <grants>
            <grant id="..." funder="..."><PI fname="..." lname="..."/></grant>
          </grants>
        </nihms-submit>

    A manuscript title is required; its absence is reported when the
    document is read.
    """

    name = METADATA_NAME
    mime_type = METADATA_MIME_TYPE

    def __init__(self, metadata: DepositMetadata):
        self.metadata = metadata

    def render(self) -> bytes:
        root = self._build_document()
        return etree.tostring(
            root,
            xml_declaration=True,
            encoding="UTF-8",
            pretty_print=True,
            doctype=DOCTYPE,
        )

    def _build_document(self) -> etree._Element:
        """Build the nihms-submit root element with all sections."""
        metadata = self.metadata
        title = metadata.manuscript.title or metadata.article.title
        if not title:
            raise SerializationError("Metadata requires a manuscript title")

        root = etree.Element("nihms-submit")

        title_el = etree.SubElement(root, "title")
        title_el.text = title

        journal_meta = self._build_journal_meta()
        if journal_meta is not None:
            root.append(journal_meta)

        root.append(self._build_manuscript())

        if metadata.persons:
            contacts = etree.SubElement(root, "contacts")
            for person in metadata.persons:
                contacts.append(self._build_person("person", person))

        if metadata.grants:
            grants = etree.SubElement(root, "grants")
            for grant in metadata.grants:
                grants.append(self._build_grant(grant))

        return root

    def _build_journal_meta(self) -> etree._Element | None:
        """Build journal-meta, or None when nothing is known of the journal."""
        journal = self.metadata.journal
        if not (journal.title or journal.nlmta or journal.issns):
            return None

        journal_meta = etree.Element("journal-meta")

        if journal.nlmta:
            journal_id = etree.SubElement(journal_meta, "journal-id")
            journal_id.set("journal-id-type", "nlm-ta")
            journal_id.text = journal.nlmta

        for issn in journal.issns:
            issn_el = etree.SubElement(journal_meta, "issn")
            issn_el.set("pub-type", issn.pub_type)
            issn_el.text = issn.issn

        if journal.title:
            journal_title = etree.SubElement(journal_meta, "journal-title")
            journal_title.text = journal.title

        return journal_meta

    def _build_manuscript(self) -> etree._Element:
        """Build the manuscript element with its flags and identifiers."""
        manuscript = self.metadata.manuscript
        article = self.metadata.article

        manuscript_el = etree.Element("manuscript")
        manuscript_el.set("publisher_pdf", _yes_no(manuscript.publisher_pdf))
        manuscript_el.set("show_publisher_pdf", _yes_no(manuscript.show_publisher_pdf))
        if manuscript.embargo_end is not None:
            manuscript_el.set("embargo", manuscript.embargo_end.isoformat())

        # The published article's identifiers win over the manuscript's own.
        identifiers = (
            ("doi", article.doi or manuscript.doi),
            ("pmid", article.pmid),
            ("pmcid", article.pmcid),
            ("url", manuscript.url),
        )
        for tag, value in identifiers:
            if value:
                child = etree.SubElement(manuscript_el, tag)
                child.text = value

        return manuscript_el

    def _build_person(self, tag: str, person: Person) -> etree._Element:
        person_el = etree.Element(tag)
        for attr, value in (
            ("fname", person.first_name),
            ("mname", person.middle_name),
            ("lname", person.last_name),
            ("email", person.email),
        ):
            if value:
                person_el.set(attr, value)
        if tag == "person":
            person_el.set("person-type", person.person_type)
            if person.corresponding:
                person_el.set("corresponding", "yes")
        return person_el

    def _build_grant(self, grant: Grant) -> etree._Element:
        grant_el = etree.Element("grant")
        grant_el.set("id", grant.award_number)
        grant_el.set("funder", grant.funder)
        if grant.pi is not None:
            grant_el.append(self._build_person("PI", grant.pi))
        return grant_el
