"""Test fixtures — fake WoL client and FastAPI test client."""

from unittest.mock import AsyncMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from wolproxy.api.deps import get_wol_client
from wolproxy.main import create_app
from wolproxy.services.client import WolClient
from wolproxy.services.discovery import broadcast_binding


@pytest.fixture
def wol_client():
    """WoL client bound to the broadcast fallback, with sending mocked out."""
    client = WolClient((broadcast_binding(),))
    client.wake = AsyncMock()
    return client


@pytest_asyncio.fixture
async def client(wol_client):
    """Provide an async test client with the WoL client dependency overridden."""
    app = create_app()
    app.dependency_overrides[get_wol_client] = lambda: wol_client

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
