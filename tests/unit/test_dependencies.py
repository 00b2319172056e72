"""Unit tests for FastAPI dependency providers."""
from marketplace.core import dependencies
from marketplace.core.config import Settings
from marketplace.services.menu.in_memory_menu import InMemoryMenuProvider
from marketplace.services.menu.remote_menu import RemoteMenuProvider


class TestMenuProviderSelection:
    """Test provider selection from settings."""

    def test_yaml_source(self, monkeypatch, test_menu_path):
        settings = Settings(
            backend_url="https://backend.test", backend_api_key="key", menu_file=str(test_menu_path)
        )
        monkeypatch.setattr(dependencies, "settings", settings)

        provider = dependencies.get_menu_repository().provider
        assert isinstance(provider, InMemoryMenuProvider)
        assert provider.menu_file == test_menu_path

    def test_remote_source(self, monkeypatch):
        settings = Settings(
            backend_url="https://backend.test/", backend_api_key="key", menu_source="remote", request_timeout=3
        )
        monkeypatch.setattr(dependencies, "settings", settings)

        provider = dependencies.get_menu_provider()
        assert isinstance(provider, RemoteMenuProvider)
        assert provider.base_url == "https://backend.test"
        assert provider.timeout == 3
