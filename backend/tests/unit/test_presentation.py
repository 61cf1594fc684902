"""
Unit tests for badge mappings and the exception hierarchy.
"""

from enum import Enum

import pytest

from gradhelper.domain.messaging import MessageStatus, Priority
from gradhelper.domain.presentation import (
    _check_exhaustive,
    priority_badge,
    status_badge,
)
from gradhelper.infrastructure.exceptions import (
    ErrorKind,
    GradHelperError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)


class TestBadges:
    """Every status and priority has a badge color."""

    @pytest.mark.parametrize("status", list(MessageStatus))
    def test_every_status_has_badge(self, status):
        assert status_badge(status)

    @pytest.mark.parametrize("priority", list(Priority))
    def test_every_priority_has_badge(self, priority):
        assert priority_badge(priority)

    def test_urgent_is_red(self):
        assert priority_badge(Priority.URGENT) == "red"

    def test_missing_entry_fails_fast(self):
        class Color(str, Enum):
            RED = "red"
            GREEN = "green"

        with pytest.raises(RuntimeError, match="green"):
            _check_exhaustive(Color, {Color.RED: "x"})


class TestExceptions:
    """Exception payloads used by the API error handlers."""

    def test_validation_error_to_dict(self):
        err = ValidationError("Subject is required", field="subject")

        assert isinstance(err, GradHelperError)
        assert err.to_dict() == {
            "error": "ValidationError",
            "message": "Subject is required",
            "details": {"kind": "MissingRequiredField", "field": "subject"},
        }

    def test_not_found_carries_thread(self):
        err = NotFoundError("Thread t9 not found", thread_id="t9")

        assert err.kind == ErrorKind.THREAD_NOT_FOUND
        assert err.details == {"kind": "ThreadNotFound", "thread_id": "t9"}

    def test_persistence_error_details(self):
        cause = OSError("down")
        err = PersistenceError("Load failed", operation="Load messages", retry_count=3,
                               original_error=cause)

        assert err.details["retry_count"] == 3
        assert err.details["operation"] == "Load messages"
        assert err.original_error is cause
