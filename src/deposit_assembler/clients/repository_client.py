"""Repository client for fetching submissions and custodial file bytes."""

import io
import json
import logging

from pydantic import ValidationError as PydanticValidationError

from deposit_assembler.readers import DEFAULT_CHUNK_SIZE, iter_stream
from schemas.submission import Submission

from .client import Client
from .exceptions import ValidationError

logger = logging.getLogger(__name__)


class RepositoryClient(Client):
    """Client for the repository that holds submissions and their files.

    Submissions are fetched as JSON documents and validated against the
    Submission schema. Custodial file bytes are streamed, never buffered
    whole, so large files can be copied into a package with bounded memory.

    Example:
        config = {"base_url": "https://pass.example.org"}
        with RepositoryClient(config) as client:
            submission = client.fetch_submission("/submissions/1234")
            with client.open_stream("/files/manuscript.pdf") as stream:
                ...
    """

    def fetch(self, uri: str) -> bytes:
        """Fetch the full content at a repository URI.

        Args:
            uri: Path relative to base_url, or an absolute URL

        Returns:
            The response body
        """
        return self.get(uri).content

    def fetch_submission(self, uri: str) -> Submission:
        """Fetch and validate a submission document.

        Args:
            uri: Path relative to base_url, or an absolute URL

        Returns:
            The validated Submission

        Raises:
            ValidationError: If the document is not JSON or fails validation
            APIError: If the repository returns a non-2xx response
            ConnectionError: If the network connection fails
        """
        response = self.get(uri, headers={"Accept": "application/json"})

        try:
            data = response.json()
        except json.JSONDecodeError as e:
            raise ValidationError(f"Submission at {uri} is not valid JSON") from e

        try:
            submission = Submission.model_validate(data)
        except PydanticValidationError as e:
            raise ValidationError(
                f"Submission at {uri} failed validation",
                errors=[str(err) for err in e.errors()],
            ) from e

        logger.debug(f"Fetched submission {submission.id} with {len(submission.files)} files")
        return submission

    def open_stream(self, uri: str, chunk_size: int = DEFAULT_CHUNK_SIZE) -> io.BufferedReader:
        """Open a streaming read of the content at a repository URI.

        The HTTP response stays open until the returned stream is closed.

        Args:
            uri: Path relative to base_url, or an absolute URL
            chunk_size: Size of chunks pulled from the response

        Returns:
            A readable binary stream of the response body
        """
        response = self._request("GET", uri, stream=True)
        logger.debug(f"Opened stream to {response.url}")
        return iter_stream(
            response.iter_bytes(chunk_size),
            on_close=response.close,
            buffer_size=chunk_size,
        )
