"""Session management before the database is initialized."""

from __future__ import annotations

import pytest
from httpx import ASGITransport, AsyncClient

from wph.database import get_session_factory
from wph.errors import INTERNAL_ERROR_MESSAGE, UpstreamError
from wph.main import create_app


class TestUninitializedDatabase:
    """Without init_db() the store is reported as an upstream failure."""

    def test_session_factory_raises_upstream_error(self):
        with pytest.raises(UpstreamError, match="not initialized"):
            get_session_factory()

    async def test_request_gets_generic_500(self):
        transport = ASGITransport(app=create_app())
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            response = await ac.get("/api/categories")
        assert response.status_code == 500
        assert response.json() == {"detail": INTERNAL_ERROR_MESSAGE}
