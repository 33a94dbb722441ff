"""Error taxonomy to HTTP status mapping."""

from __future__ import annotations

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from wph.errors import (
    INTERNAL_ERROR_MESSAGE,
    AuthenticationRequired,
    Conflict,
    NotFound,
    PermissionDenied,
    UpstreamError,
    ValidationFailed,
    public_message,
    status_for,
)


class TestStatusFor:
    """Test status_for."""

    @pytest.mark.parametrize(
        ("exc", "status"),
        [
            (ValidationFailed(), 400),
            (AuthenticationRequired(), 401),
            (PermissionDenied(), 403),
            (NotFound(), 404),
            (Conflict(), 409),
            (UpstreamError(), 500),
            (IntegrityError("INSERT", {}, Exception("duplicate key")), 409),
            (OperationalError("SELECT", {}, Exception("connection lost")), 500),
            (ValueError("boom"), 500),
        ],
    )
    def test_mapping(self, exc, status):
        assert status_for(exc) == status

    def test_subclass_inherits_status(self):
        class SlugTaken(Conflict):
            pass

        assert status_for(SlugTaken()) == 409


class TestPublicMessage:
    """Test public_message."""

    def test_domain_message_passes_through(self):
        assert public_message(NotFound("Category not found")) == "Category not found"

    def test_default_message(self):
        assert public_message(AuthenticationRequired()) == "Authentication required"

    def test_duplicate_key_is_generic_conflict(self):
        exc = IntegrityError("INSERT", {}, Exception("duplicate key value violates unique constraint"))
        assert public_message(exc) == Conflict.default_message

    def test_store_errors_hide_details(self):
        exc = OperationalError("SELECT", {}, Exception("password authentication failed"))
        assert public_message(exc) == INTERNAL_ERROR_MESSAGE

    def test_upstream_error_hides_details(self):
        assert public_message(UpstreamError("db host 10.0.0.3 unreachable")) == INTERNAL_ERROR_MESSAGE
