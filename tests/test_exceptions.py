"""Tests for assembly and client exception classes."""

import pytest

from deposit_assembler.clients import (
    APIError,
    ClientError,
    ConnectionError,
    NotFoundError,
    RateLimitError,
    ValidationError,
)
from deposit_assembler.exceptions import (
    AssemblyError,
    ManifestMismatchError,
    MetadataError,
    ResourceNameCollisionError,
    ResourceNotFoundError,
    ResourceUnavailableError,
    SerializationError,
)


class TestAssemblyError:
    """Tests for the base AssemblyError exception."""

    def test_instantiation_with_message(self):
        """AssemblyError stores the error message."""
        error = AssemblyError("Package could not be assembled")

        assert error.message == "Package could not be assembled"
        assert str(error) == "Package could not be assembled"

    @pytest.mark.parametrize(
        "error",
        [
            MetadataError("missing spec"),
            SerializationError("bad manifest"),
            ResourceUnavailableError("cannot open"),
            ResourceNotFoundError("x.pdf"),
            ResourceNameCollisionError("x.pdf"),
            ManifestMismatchError("mismatch"),
        ],
    )
    def test_inheritance(self, error):
        """Every assembly error is an AssemblyError."""
        assert isinstance(error, AssemblyError)


class TestMetadataError:
    """Tests for MetadataError."""

    def test_errors_default_empty(self):
        """MetadataError has no error details by default."""
        assert MetadataError("bad").errors == []

    def test_errors_stored(self):
        """MetadataError stores the offending fields."""
        error = MetadataError("Package metadata is missing required fields", errors=["spec"])

        assert error.errors == ["spec"]


class TestResourceErrors:
    """Tests for resource-related errors."""

    def test_unavailable_resource_name(self):
        """ResourceUnavailableError records the resource name."""
        error = ResourceUnavailableError("fig1.png ended early", resource_name="fig1.png")

        assert error.resource_name == "fig1.png"
        assert error.message == "fig1.png ended early"

    def test_not_found_message(self):
        """ResourceNotFoundError names the missing resource."""
        error = ResourceNotFoundError("fig2.png")

        assert error.resource_name == "fig2.png"
        assert str(error) == "No resource named 'fig2.png' in package"

    def test_not_found_is_key_error(self):
        """ResourceNotFoundError is also a KeyError."""
        assert isinstance(ResourceNotFoundError("fig2.png"), KeyError)

    def test_collision_message(self):
        """ResourceNameCollisionError names the duplicate."""
        error = ResourceNameCollisionError("manifest.txt")

        assert error.resource_name == "manifest.txt"
        assert str(error) == "Duplicate resource name in package: 'manifest.txt'"

    def test_manifest_mismatch_names(self):
        """ManifestMismatchError lists the offending names."""
        error = ManifestMismatchError("mismatch", names=["fig1.png"])

        assert error.names == ["fig1.png"]
        assert ManifestMismatchError("mismatch").names == []


class TestClientErrors:
    """Tests for repository client exceptions."""

    def test_client_error_message(self):
        """ClientError stores the error message."""
        error = ClientError("Repository unreachable")

        assert error.message == "Repository unreachable"
        assert str(error) == "Repository unreachable"

    def test_connection_error_inheritance(self):
        """ConnectionError is a ClientError, not the builtin."""
        error = ConnectionError("Network unreachable")

        assert isinstance(error, ClientError)
        assert not isinstance(error, OSError)

    def test_api_error_status_code(self):
        """APIError stores the status code."""
        error = APIError("Server error", status_code=500)

        assert error.status_code == 500
        assert isinstance(error, ClientError)

    def test_rate_limit_defaults(self):
        """RateLimitError defaults to a 429 with a standard message."""
        error = RateLimitError()

        assert error.message == "Rate limit exceeded"
        assert error.status_code == 429
        assert isinstance(error, APIError)
        assert error.retry_after is None

    def test_rate_limit_retry_after(self):
        """RateLimitError carries the delay the repository asked for."""
        error = RateLimitError("slow down", retry_after=7.0)

        assert error.retry_after == 7.0
        assert error.message == "slow down"

    def test_not_found_defaults(self):
        """NotFoundError defaults to a 404 with a standard message."""
        error = NotFoundError()

        assert error.message == "Resource not found"
        assert error.status_code == 404
        assert isinstance(error, APIError)

    def test_validation_error_details(self):
        """ValidationError stores submission validation details."""
        errors = ["files.0.type: Input should be 'manuscript', 'figure', 'table' or 'supplement'"]
        error = ValidationError("Submission failed validation", errors=errors)

        assert error.errors == errors
        assert ValidationError("bad").errors == []
