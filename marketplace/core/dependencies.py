"""FastAPI dependencies."""
from marketplace.core.config import settings
from marketplace.services.menu.base import MenuProvider
from marketplace.services.menu.in_memory_menu import InMemoryMenuProvider
from marketplace.services.menu.remote_menu import RemoteMenuProvider
from marketplace.services.menu.repository import MenuRepository


def get_menu_provider() -> MenuProvider:
    """Menu provider selected by ``settings.menu_source``."""
    if settings.menu_source == "remote":
        return RemoteMenuProvider(
            base_url=settings.backend_url,
            api_key=settings.backend_api_key,
            timeout=settings.request_timeout,
        )
    return InMemoryMenuProvider(menu_file=settings.menu_file)


def get_menu_repository() -> MenuRepository:
    """Get menu repository instance."""
    return MenuRepository(provider=get_menu_provider())
