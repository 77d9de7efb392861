"""
Logging Context Tests
=====================

Tests for the request-scoped logging context.
"""

import pytest

from reportflow.core.logging import (
    LogContext,
    add_context_variables,
    organization_id_context,
    request_id_context,
    user_id_context,
)


pytestmark = pytest.mark.unit


class TestLogContext:
    """Tests for LogContext."""

    def test_values_bound_inside_block(self):
        # Act
        with LogContext(request_id="req-1", user_id="user-1", organization_id="org-1"):
            event = add_context_variables(None, "info", {"event": "seeded"})

        # Assert
        assert event == {
            "event": "seeded",
            "request_id": "req-1",
            "user_id": "user-1",
            "organization_id": "org-1",
        }

    def test_values_restored_on_exit(self):
        # Arrange
        outer = request_id_context.set("outer")

        # Act
        with LogContext(request_id="inner"):
            inside = request_id_context.get()

        # Assert
        assert inside == "inner"
        assert request_id_context.get() == "outer"
        request_id_context.reset(outer)

    def test_restored_after_exception(self):
        before = user_id_context.get()

        with pytest.raises(RuntimeError):
            with LogContext(user_id="user-2"):
                raise RuntimeError("boom")

        assert user_id_context.get() == before

    def test_unset_values_left_alone(self):
        before = organization_id_context.get()

        with LogContext(request_id="req-3"):
            assert organization_id_context.get() == before
