"""Resolve custodial file locations to byte sources."""

import logging
from pathlib import Path
from urllib.parse import unquote, urlparse

from deposit_assembler.clients import RepositoryClient
from deposit_assembler.exceptions import ResourceUnavailableError
from schemas.submission import DepositFile, Submission

from .sources import ByteSource, CustodialResource, FileSource, UrlSource

logger = logging.getLogger(__name__)


class SourceResolver:
    """Map each custodial file's ``location`` to a byte source.

    Supported locations:
        - ``http://`` and ``https://`` URLs, streamed by a RepositoryClient
        - ``file://`` URIs
        - plain paths, absolute or relative to ``base_dir``

    Args:
        client: Client used for HTTP locations. If not provided, one is
                created on first use from the URL's scheme and host.
        base_dir: Directory that relative paths are resolved against
    """

    def __init__(self, client: RepositoryClient | None = None, base_dir: Path | None = None):
        self._client = client
        self._owns_client = client is None
        self.base_dir = base_dir or Path.cwd()

    def __enter__(self) -> "SourceResolver":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def close(self) -> None:
        """Close the HTTP client if we own it."""
        if self._owns_client and self._client is not None:
            self._client.close()
            self._client = None

    def resolve(self, deposit_file: DepositFile) -> ByteSource:
        """Return a byte source for one custodial file.

        Raises:
            ResourceUnavailableError: If the file has no location or the
                                      location scheme is unsupported
        """
        location = deposit_file.location
        if not location:
            raise ResourceUnavailableError(
                f"Custodial file {deposit_file.name} has no location",
                resource_name=deposit_file.name,
            )

        parsed = urlparse(location)
        if parsed.scheme in ("http", "https"):
            return UrlSource(location, self._get_client(f"{parsed.scheme}://{parsed.netloc}"))
        if parsed.scheme == "file":
            return FileSource(Path(unquote(parsed.path)))
        if parsed.scheme == "":
            path = Path(location)
            if not path.is_absolute():
                path = self.base_dir / path
            return FileSource(path)

        raise ResourceUnavailableError(
            f"Unsupported location scheme '{parsed.scheme}' for {deposit_file.name}",
            resource_name=deposit_file.name,
        )

    def resolve_all(self, submission: Submission) -> list[CustodialResource]:
        """Pair every custodial file of a submission with its byte source."""
        resources = [
            CustodialResource(file=deposit_file, source=self.resolve(deposit_file))
            for deposit_file in submission.files
        ]
        logger.debug(f"Resolved {len(resources)} custodial files for {submission.id}")
        return resources

    def _get_client(self, base_url: str) -> RepositoryClient:
        if self._client is None:
            self._client = RepositoryClient({"base_url": base_url})
        return self._client
