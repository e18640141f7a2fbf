"""Tests for ResourceBuilderFactory."""

from deposit_assembler.package import ResourceBuilderFactory
from deposit_assembler.resources import BytesSource, CustodialResource, SingleUseSource
from schemas.submission import DepositFile


class TestResourceBuilderFactory:
    """Tests for describing custodial resources."""

    def test_mime_type_guessed_from_name(self):
        """The MIME type is guessed from the file extension."""
        resource = CustodialResource(
            file=DepositFile(name="manuscript.pdf", type="manuscript"),
            source=BytesSource(b"%PDF"),
        )

        descriptor = ResourceBuilderFactory().build(resource)

        assert descriptor.name == "manuscript.pdf"
        assert descriptor.mime_type == "application/pdf"

    def test_declared_mime_type_wins(self):
        """A MIME type declared on the file is used as given."""
        resource = CustodialResource(
            file=DepositFile(name="fig1.png", type="figure", label="Figure 1", mime_type="image/x-custom"),
            source=BytesSource(b"png"),
        )

        descriptor = ResourceBuilderFactory().build(resource)

        assert descriptor.mime_type == "image/x-custom"

    def test_unknown_extension_uses_default(self):
        """Unknown extensions fall back to the default MIME type."""
        resource = CustodialResource(
            file=DepositFile(name="data.unknownext", type="supplement", label="Data"),
            source=BytesSource(b""),
        )

        descriptor = ResourceBuilderFactory().build(resource)

        assert descriptor.mime_type == "application/octet-stream"

    def test_custom_default_mime_type(self):
        """The fallback MIME type is configurable."""
        factory = ResourceBuilderFactory(default_mime_type="application/x-unknown")

        assert factory.guess_mime_type("README") == "application/x-unknown"

    def test_size_from_source(self):
        """The size comes from the byte source when the file does not declare one."""
        resource = CustodialResource(
            file=DepositFile(name="manuscript.pdf", type="manuscript"),
            source=BytesSource(b"12345"),
        )

        assert ResourceBuilderFactory().build(resource).size_bytes == 5

    def test_declared_size_wins(self):
        """A size declared on the file is used as given."""
        resource = CustodialResource(
            file=DepositFile(name="manuscript.pdf", type="manuscript", size_bytes=3),
            source=BytesSource(b"12345"),
        )

        assert ResourceBuilderFactory().build(resource).size_bytes == 3

    def test_unknown_size(self, tmp_path):
        """The size is -1 when neither the file nor the source knows it."""
        stream = (tmp_path / "x.bin").open("wb+")
        resource = CustodialResource(
            file=DepositFile(name="x.bin", type="supplement", label="X"),
            source=SingleUseSource(stream),
        )

        try:
            assert ResourceBuilderFactory().build(resource).size_bytes == -1
        finally:
            stream.close()

    def test_build_document(self):
        """Generated documents have an unknown size."""
        descriptor = ResourceBuilderFactory().build_document("manifest.txt", "text/plain")

        assert descriptor.name == "manifest.txt"
        assert descriptor.mime_type == "text/plain"
        assert descriptor.size_bytes == -1
