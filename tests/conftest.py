"""Shared test fixtures and configuration."""
import os
from datetime import datetime, timezone
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

# Set test environment variables before importing app
os.environ.setdefault("BACKEND_URL", "https://backend.test")
os.environ.setdefault("BACKEND_API_KEY", "test-key")
os.environ.setdefault("MENU_SOURCE", "yaml")

from marketplace.main import app
from marketplace.core.dependencies import get_menu_repository
from marketplace.services.menu.base import MenuItem
from marketplace.services.menu.in_memory_menu import InMemoryMenuProvider
from marketplace.services.menu.repository import MenuRepository
from marketplace.services.pricing.models import PricingOption


@pytest.fixture
def now():
    """Fixed evaluation instant."""
    return datetime(2025, 6, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def make_pricing():
    """Factory for pricing options with sensible defaults."""
    def _make_pricing(**overrides):
        fields = {"id": "pricing-1", "menu_item_id": "item-1", "size": "Regular", "price": 1000.0}
        fields.update(overrides)
        return PricingOption(**fields)
    return _make_pricing


@pytest.fixture
def make_item():
    """Factory for menu items."""
    def _make_item(pricing_options=None, **overrides):
        fields = {"id": "item-1", "restaurant_id": "resto-1", "name": "Item", "price": 1000.0}
        fields.update(overrides)
        return MenuItem(pricing_options=pricing_options or [], **fields)
    return _make_item


@pytest.fixture
def test_menu_path():
    """Return path to test menu YAML file."""
    return Path(__file__).parent / "fixtures" / "test_menu.yaml"


@pytest.fixture
def test_menu_repository(test_menu_path):
    """Create menu repository with test data."""
    provider = InMemoryMenuProvider(menu_file=str(test_menu_path))
    return MenuRepository(provider)


@pytest.fixture
def override_get_menu_repository(test_menu_repository):
    """Override get_menu_repository dependency with test menu."""
    def _override_get_menu_repository():
        return test_menu_repository
    return _override_get_menu_repository


@pytest.fixture
def test_client(override_get_menu_repository):
    """Create FastAPI test client with overrides."""
    app.dependency_overrides[get_menu_repository] = override_get_menu_repository

    client = TestClient(app)

    yield client

    # Clear overrides
    app.dependency_overrides.clear()
