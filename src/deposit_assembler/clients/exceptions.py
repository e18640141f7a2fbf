"""Exceptions raised by repository clients.

``UrlSource`` translates these into ``ResourceUnavailableError`` when a
custodial file cannot be fetched, so package readers see a single error
type for unreadable files.
"""


class ClientError(Exception):
    """Base exception for repository client errors."""

    def __init__(self, message: str, *args, **kwargs):
        self.message = message
        super().__init__(message, *args, **kwargs)


class ConnectionError(ClientError):
    """Raised when the repository cannot be reached after all retries."""

    pass


class APIError(ClientError):
    """Raised when the repository answers with a non-2xx status."""

    def __init__(self, message: str, status_code: int, *args, **kwargs):
        self.status_code = status_code
        super().__init__(message, *args, **kwargs)


class RateLimitError(APIError):
    """Raised when the repository keeps answering 429.

    Attributes:
        retry_after: Seconds the repository asked us to wait, if it said
    """

    def __init__(self, message: str = "Rate limit exceeded", retry_after: float | None = None):
        self.retry_after = retry_after
        super().__init__(message, status_code=429)


class NotFoundError(APIError):
    """Raised when a submission or file is not in the repository."""

    def __init__(self, message: str = "Resource not found"):
        super().__init__(message, status_code=404)


class ValidationError(ClientError):
    """Raised when a fetched submission document is not a valid Submission."""

    def __init__(self, message: str, errors: list | None = None, *args, **kwargs):
        self.errors = errors or []
        super().__init__(message, *args, **kwargs)
