"""Pytest configuration for API tests."""

import pytest

from rummy.api.websocket import websocket_manager


@pytest.fixture
def anyio_backend():
    """Configure anyio to use asyncio backend."""
    return "asyncio"


@pytest.fixture(autouse=True)
def reset_websocket_manager():
    """Clear tables and connections between tests to avoid state pollution."""
    websocket_manager.tables.clear()
    websocket_manager.active_connections.clear()

    yield

    websocket_manager.tables.clear()
    websocket_manager.active_connections.clear()
