"""Exceptions raised while assembling a package.

Failures during lazy production of a package (rendering a document, opening
a custodial file) surface from ``read()`` on the package stream, not from
the call that returned the stream.
"""


class AssemblyError(Exception):
    """Base exception for all assembly errors."""

    def __init__(self, message: str, *args, **kwargs):
        self.message = message
        super().__init__(message, *args, **kwargs)


class MetadataError(AssemblyError):
    """Raised when package metadata is incomplete or inconsistent."""

    def __init__(self, message: str, errors: list | None = None, *args, **kwargs):
        self.errors = errors or []
        super().__init__(message, *args, **kwargs)


class SerializationError(AssemblyError):
    """Raised when a manifest or metadata document cannot be rendered."""

    pass


class ResourceUnavailableError(AssemblyError):
    """Raised when the bytes of a custodial resource cannot be read."""

    def __init__(self, message: str, resource_name: str | None = None, *args, **kwargs):
        self.resource_name = resource_name
        super().__init__(message, *args, **kwargs)


class ResourceNotFoundError(AssemblyError, KeyError):
    """Raised when no package entry has the requested name."""

    def __init__(self, resource_name: str):
        self.resource_name = resource_name
        super().__init__(f"No resource named '{resource_name}' in package")

    def __str__(self) -> str:
        return self.message


class ResourceNameCollisionError(AssemblyError):
    """Raised when two package entries share a name."""

    def __init__(self, resource_name: str):
        self.resource_name = resource_name
        super().__init__(f"Duplicate resource name in package: '{resource_name}'")


class ManifestMismatchError(AssemblyError):
    """Raised when the manifest does not list each custodial file exactly once."""

    def __init__(self, message: str, names: list[str] | None = None, *args, **kwargs):
        self.names = names or []
        super().__init__(message, *args, **kwargs)
