"""
Inventory REST Client Tests - Test Configuration.

Provides pytest fixtures and configuration for testing the client.
Environment overrides are applied before the package is imported so the
global settings instance picks them up.
"""

import os
from typing import Any, Dict
from unittest.mock import AsyncMock, MagicMock

import pytest

os.environ.setdefault("OPENMRS_URL", "http://test-openmrs:8080")
os.environ.setdefault("ENABLE_HTTP2", "false")
os.environ.setdefault("LOG_LEVEL", "DEBUG")


@pytest.fixture
def mock_item() -> Dict[str, Any]:
    """
    Sample inventory item as returned by the REST API.

    Returns:
        Dictionary with sample item fields
    """
    return {
        "uuid": "8ae8b5a7-3f1c-4b0e-9d1a-6c2f1e7a9b10",
        "name": "Paracetamol 500mg",
        "department": {"uuid": "d5b4e3c2-0000-4000-8000-000000000001"},
        "hasExpiration": True,
        "retired": False,
    }


@pytest.fixture
def mock_transport() -> MagicMock:
    """
    Transport double whose REST verbs are async mocks.

    Returns:
        MagicMock standing in for RestfulService
    """
    transport = MagicMock()
    transport.get_one = AsyncMock(return_value={"uuid": "u1"})
    transport.get_all = AsyncMock(return_value={"results": []})
    transport.save_or_update = AsyncMock(return_value={"uuid": "u1"})
    transport.remove = AsyncMock(return_value={})
    transport.post = AsyncMock(return_value={"ok": True})
    return transport

