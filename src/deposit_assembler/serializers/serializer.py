"""Base class for streaming document serializers."""

import logging
from abc import ABC, abstractmethod
from typing import BinaryIO, Iterator

from deposit_assembler.exceptions import SerializationError
from deposit_assembler.readers import iter_stream

logger = logging.getLogger(__name__)


class StreamingSerializer(ABC):
    """Abstract base class for documents generated into a package.

    Rendering is lazy: ``serialize()`` returns a stream immediately, and the
    document is rendered when that stream is first read. Any rendering
    failure is raised from ``read()`` as a SerializationError.

    Attributes:
        name: Name of the document within the package
        mime_type: MIME type of the rendered document
    """

    name: str
    mime_type: str

    def serialize(self) -> BinaryIO:
        """Return a single-pass stream over the rendered document."""
        return iter_stream(self._render_chunks())

    def _render_chunks(self) -> Iterator[bytes]:
        try:
            content = self.render()
        except SerializationError:
            raise
        except Exception as e:
            raise SerializationError(f"Failed to render {self.name}: {e}") from e
        logger.debug(f"Rendered {self.name} ({len(content)} bytes)")
        yield content

    @abstractmethod
    def render(self) -> bytes:
        """Render the document.

        Returns:
            The complete document bytes

        Raises:
            SerializationError: If the source entity cannot be rendered
        """
        pass
