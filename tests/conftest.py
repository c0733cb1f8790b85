"""Shared test fixtures for the Realty AI test suite."""

from __future__ import annotations

import os
from unittest.mock import MagicMock

import pytest
from langchain_core.messages import AIMessage


def pytest_configure(config):
    """Set test environment variables BEFORE collection starts.

    This runs before any imports, so config.py won't fail on module load.
    """
    os.environ.setdefault("ANTHROPIC_API_KEY", "test-anthropic-key-123")
    os.environ.setdefault("OPENAI_API_KEY", "test-openai-key-456")
    os.environ["METRICS_ENABLED"] = "false"
    os.environ.pop("STORAGE_API_URL", None)


def make_unit(unit_id: str, tenant_id: str = "agency-1", **fields):
    """Build a ``Unit`` with sensible defaults for the property tools."""
    from src.models import Unit

    data = {
        "id": unit_id,
        "tenant_id": tenant_id,
        "unit_number": unit_id.upper(),
        "price": 15000,
        "bedrooms": 2,
        "bathrooms": 1,
        "zone": "Aldea Zama",
        "listing_type": "rent",
        "property_type": "departamento",
        "status": "available",
    }
    data.update(fields)
    return Unit(**data)


@pytest.fixture
def store():
    """Two agencies; agency-2 owns one unit so isolation can be checked."""
    from src.services.storage import InMemoryTenantStore

    s = InMemoryTenantStore()
    s.add_tenant("agency-1", "Tulum Homes")
    s.add_tenant("agency-2", "Caribe Realty")
    s.add_unit(make_unit("u1", unit_number="A-101", price=18000, description="Departamento con alberca " * 20))
    s.add_unit(make_unit("u2", unit_number="B-202", price=12000, bedrooms=1, zone="La Veleta",
                         property_type="estudio"))
    s.add_unit(make_unit("u3", unit_number="PH-1", price=60000, bedrooms=3, status="rented"))
    s.add_unit(make_unit("u4", unit_number="C-303", price=None, zone="Region 15", listing_type="sale",
                         property_type="casa"))
    s.add_unit(make_unit("x1", tenant_id="agency-2", unit_number="A-101", price=16000))
    return s


@pytest.fixture
def mock_llm():
    """Factory for a chat-model mock that replies with the given messages in order.

    ``bind_tools`` returns the same mock, so every call is recorded on
    ``llm.invoke`` regardless of whether tools were bound.
    """

    def _make(*replies):
        llm = MagicMock()
        llm.bind_tools.return_value = llm
        llm.invoke.side_effect = [
            AIMessage(content=r) if isinstance(r, str) else r for r in replies
        ]
        return llm

    return _make
