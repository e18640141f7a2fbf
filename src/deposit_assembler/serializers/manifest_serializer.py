"""NIHMS manifest serializer.

Renders the submission manifest as ``manifest.txt``: one line per custodial
file, in manifest order, with tab-separated file type, label and name::

    manuscript		manuscript.pdf
    figure	Figure 1	fig1.png
"""

import logging
from pathlib import Path

from jinja2 import Environment, FileSystemLoader

from deposit_assembler.exceptions import SerializationError
from schemas.submission import DepositFile, DepositManifest

from .serializer import StreamingSerializer

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).parent / "templates"

MANIFEST_NAME = "manifest.txt"
MANIFEST_MIME_TYPE = "text/plain"

_FORBIDDEN_CHARS = ("\t", "\r", "\n")


class NihmsManifestSerializer(StreamingSerializer):
    """Serialize a DepositManifest into the NIHMS manifest format.

    Figures, tables and supplements must carry a label; a missing label
    is reported when the manifest is read, not when the serializer is made.
    """

    name = MANIFEST_NAME
    mime_type = MANIFEST_MIME_TYPE

    def __init__(
        self,
        manifest: DepositManifest,
        template_name: str = "manifest.txt.j2",
        templates_dir: Path | None = None,
    ):
        self.manifest = manifest
        self.template_name = template_name
        self._env = Environment(
            loader=FileSystemLoader(str(templates_dir or TEMPLATES_DIR)),
            autoescape=False,
            keep_trailing_newline=True,
        )

    def render(self) -> bytes:
        entries = [self._entry(deposit_file) for deposit_file in self.manifest.files]
        template = self._env.get_template(self.template_name)
        return template.render(entries=entries).encode("utf-8")

    def _entry(self, deposit_file: DepositFile) -> dict[str, str]:
        label = deposit_file.label or ""
        if deposit_file.type.requires_label and not label.strip():
            raise SerializationError(
                f"Manifest entry {deposit_file.name} of type "
                f"{deposit_file.type.value} requires a label"
            )

        for field, value in (("name", deposit_file.name), ("label", label)):
            if any(char in value for char in _FORBIDDEN_CHARS):
                raise SerializationError(
                    f"Manifest entry {deposit_file.name} has a {field} "
                    "containing a tab or line break"
                )

        return {
            "type": deposit_file.type.value,
            "label": label,
            "name": deposit_file.name,
        }
