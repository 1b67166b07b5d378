"""Unit tests for error types."""

from datetime import datetime

from communal.errors import (
    BaseCommunalError,
    ErrorCategory,
    ErrorContext,
    ErrorSeverity,
    RecordNotFoundError,
    StorageError,
    ValidationError,
)
from communal.repositories import RepositoryError


class TestErrorContext:
    """Test error context functionality."""

    def test_error_context_creation(self):
        context = ErrorContext(operation="merge", resource_type="Connection", resource_id="123")

        assert context.operation == "merge"
        assert context.metadata == {}
        assert isinstance(context.timestamp, datetime)

    def test_error_context_to_dict(self):
        context = ErrorContext(operation="merge", user_id="u1")

        data = context.to_dict()

        assert data["operation"] == "merge"
        assert data["user_id"] == "u1"
        assert "timestamp" in data


class TestErrorTypes:
    """Test classification of the error hierarchy."""

    def test_validation_error(self):
        error = ValidationError("Please enter at least one name", field="names", value="")

        assert error.category == ErrorCategory.VALIDATION
        assert error.severity == ErrorSeverity.LOW
        assert not error.retryable
        assert error.field == "names"
        assert str(error) == "Please enter at least one name"

    def test_storage_error_keeps_cause(self):
        cause = OSError("disk full")
        error = StorageError("write failed", cause=cause)

        data = error.to_dict()

        assert data["category"] == "storage"
        assert data["cause"] == "disk full"
        assert data["retryable"] is True

    def test_record_not_found(self):
        error = RecordNotFoundError("Connection", "abc")

        assert isinstance(error, StorageError)
        assert not error.retryable
        assert error.context.resource_id == "abc"
        assert error.message == "Connection not found: abc"

    def test_repository_error_is_communal_error(self):
        assert issubclass(RepositoryError, BaseCommunalError)
