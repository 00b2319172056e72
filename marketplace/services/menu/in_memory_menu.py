"""In-memory menu provider."""
import logging
from pathlib import Path
from typing import List, Optional

import yaml

from marketplace.services.discounts.models import Discount
from marketplace.services.menu.base import Menu, MenuItem, MenuProvider
from marketplace.services.pricing.models import PricingOption
from marketplace.utils.parsing import safe_records, safe_str_list

logger = logging.getLogger(__name__)


class InMemoryMenuProvider(MenuProvider):
    """In-memory menu provider using YAML configuration.

    The file holds backend-shaped records under ``items`` and ``discounts``.
    """

    def __init__(self, menu_file: Optional[str] = None):
        """Initialize with optional menu file path."""
        if menu_file is None:
            menu_file = Path(__file__).parent / "data" / "menu.yaml"
        self.menu_file = Path(menu_file)
        self._menu: Optional[Menu] = None
        self._discounts: Optional[List[Discount]] = None

    def _load(self) -> None:
        """Load menu and discounts from the YAML file."""
        if self._menu is not None:
            return
        if not self.menu_file.exists():
            logger.warning(f"Menu file {self.menu_file} not found, using built-in sample menu")
            self._menu = _sample_menu()
            self._discounts = []
            return

        with open(self.menu_file, "r") as f:
            data = yaml.safe_load(f)
        if not isinstance(data, dict):
            data = {}
        items = [MenuItem.from_record(item) for item in safe_records(data.get("items"))]
        self._menu = Menu(
            items=items,
            categories=safe_str_list(data.get("categories")) or _categories_of(items),
        )
        self._discounts = [Discount.from_record(d) for d in safe_records(data.get("discounts"))]
        logger.info(
            f"Loaded {len(items)} menu items and {len(self._discounts)} discounts from {self.menu_file}"
        )

    def reload(self) -> None:
        """Drop cached data so the next read hits the file again."""
        self._menu = None
        self._discounts = None

    async def get_menu(self, restaurant_id: Optional[str] = None) -> Menu:
        """Get the full menu."""
        self._load()
        if restaurant_id is None:
            return self._menu
        items = [item for item in self._menu.items if item.restaurant_id == restaurant_id]
        return Menu(items=items, categories=_categories_of(items))

    async def get_item_by_id(self, item_id: str) -> Optional[MenuItem]:
        self._load()
        for item in self._menu.items:
            if item.id == item_id:
                return item
        return None

    async def get_item_by_name(self, item_name: str) -> Optional[MenuItem]:
        """Get a menu item by name."""
        self._load()
        item_name_lower = item_name.lower().strip()
        for item in self._menu.items:
            if item.name.lower() == item_name_lower:
                return item
        return None

    async def get_discounts(self, restaurant_id: Optional[str] = None) -> List[Discount]:
        self._load()
        if restaurant_id is None:
            return list(self._discounts)
        return [d for d in self._discounts if d.restaurant_id == restaurant_id]


def _categories_of(items: List[MenuItem]) -> List[str]:
    categories: List[str] = []
    for item in items:
        if item.category and item.category not in categories:
            categories.append(item.category)
    return categories


def _sample_menu() -> Menu:
    # Default menu if file doesn't exist
    return Menu(
        items=[
            MenuItem(
                id="sample-pizza",
                restaurant_id="sample",
                name="Pizza Margherita",
                category="pizza",
                price=800.0,
                pricing_options=[
                    PricingOption(id="sample-pizza-m", menu_item_id="sample-pizza", size="Medium", price=800.0, is_default=True),
                    PricingOption(id="sample-pizza-l", menu_item_id="sample-pizza", size="Large", price=1100.0),
                ],
            ),
            MenuItem(
                id="sample-soda",
                restaurant_id="sample",
                name="Soda",
                category="drinks",
                price=150.0,
                pricing_options=[
                    PricingOption(id="sample-soda-can", menu_item_id="sample-soda", size="Can", price=150.0, is_default=True),
                ],
            ),
        ],
        categories=["pizza", "drinks"],
    )
