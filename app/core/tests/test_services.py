"""
Tests for core service layer primitives.

Test Organization:
    - TestServiceResult: success/failure construction and rendering
    - TestBaseService: logger naming, transactions and required-field checks
"""

import pytest

from authentication.models import User
from core.services import BaseService, ServiceResult


class ExampleService(BaseService):
    """Concrete service used to exercise BaseService helpers."""


# =============================================================================
# TestServiceResult
# =============================================================================


class TestServiceResult:
    """
    Tests for ServiceResult.

    Verifies:
    - success() and failure() set the right fields
    - Truthiness follows success
    - to_response() renders the API error body
    """

    def test_success_carries_data(self):
        result = ServiceResult.success({"id": 1})

        assert result.success is True
        assert result.data == {"id": 1}
        assert result.error is None
        assert bool(result) is True

    def test_failure_carries_error_and_code(self):
        result = ServiceResult.failure("Group name is required", "NAME_REQUIRED")

        assert result.success is False
        assert result.data is None
        assert result.error == "Group name is required"
        assert result.error_code == "NAME_REQUIRED"
        assert bool(result) is False

    def test_to_response_renders_error_body(self):
        """
        A failure renders as {"error", "error_code"}.

        Why it matters: Views return this body unchanged with a 400.
        """
        result = ServiceResult.failure("Cannot chat with yourself", "SAME_USER")

        assert result.to_response() == {
            "error": "Cannot chat with yourself",
            "error_code": "SAME_USER",
        }

    def test_to_response_includes_field_errors(self):
        result = ServiceResult.failure(
            "Required fields missing",
            error_code="VALIDATION_ERROR",
            errors={"content": ["This field is required."]},
        )

        assert result.to_response()["errors"] == {"content": ["This field is required."]}

    def test_to_response_omits_missing_error_code(self):
        result = ServiceResult.failure("Something went wrong")

        assert result.to_response() == {"error": "Something went wrong"}


# =============================================================================
# TestBaseService
# =============================================================================


class TestBaseService:
    """
    Tests for BaseService.

    Verifies:
    - Logger is named after the service class
    - atomic() rolls back on error
    """

    def test_logger_named_after_service(self):
        logger = ExampleService.get_logger()

        assert logger.name == f"{__name__}.ExampleService"

    def test_atomic_rolls_back_on_exception(self, db):
        """
        Writes inside atomic() are undone when the block raises.

        Why it matters: A message must never exist without the chat's
        latest-message pointer being moved too.
        """
        with pytest.raises(RuntimeError):
            with ExampleService.atomic():
                User.objects.create_user(
                    email="rollback@example.com", password="Pass12345!", name="R"
                )
                raise RuntimeError("boom")

        assert not User.objects.filter(email="rollback@example.com").exists()

