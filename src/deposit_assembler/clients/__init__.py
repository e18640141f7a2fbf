"""Network clients for the submission repository."""

from .client import Client
from .exceptions import (
    APIError,
    ClientError,
    ConnectionError,
    NotFoundError,
    RateLimitError,
    ValidationError,
)
from .repository_client import RepositoryClient

__all__ = [
    "Client",
    "RepositoryClient",
    "ClientError",
    "ConnectionError",
    "APIError",
    "RateLimitError",
    "NotFoundError",
    "ValidationError",
]
