"""Menu repository."""
import logging
from datetime import datetime
from typing import List, Optional

from marketplace.services.discounts.evaluator import AppliedDiscount, select_best_discount
from marketplace.services.discounts.models import Discount
from marketplace.services.menu.base import Menu, MenuItem, MenuProvider
from marketplace.services.pricing.models import PricingOption
from marketplace.services.pricing.offers import (
    OfferSummary,
    delivery_fee_discount,
    max_offers_across_items,
)

logger = logging.getLogger(__name__)


class MenuRepository:
    """Repository for menu and promotion lookups."""

    def __init__(self, provider: MenuProvider):
        self.provider = provider

    async def get_menu(self, restaurant_id: Optional[str] = None) -> Menu:
        """Get the full menu."""
        return await self.provider.get_menu(restaurant_id)

    async def get_item_by_id(self, item_id: str) -> Optional[MenuItem]:
        return await self.provider.get_item_by_id(item_id)

    async def get_item_by_name(self, item_name: str) -> Optional[MenuItem]:
        """Get item by name."""
        return await self.provider.get_item_by_name(item_name)

    async def validate_item(self, item_name: str) -> bool:
        """Check if an item exists."""
        return await self.get_item_by_name(item_name) is not None

    async def get_discounts(self, restaurant_id: Optional[str] = None) -> List[Discount]:
        return await self.provider.get_discounts(restaurant_id)

    async def get_offer_items(
        self, restaurant_id: Optional[str] = None, now: Optional[datetime] = None
    ) -> List[MenuItem]:
        """Available items with a running limited-time offer."""
        menu = await self.get_menu(restaurant_id)
        return [
            item
            for item in menu.items
            if item.is_offer_active(now) and item.effective_availability(now)
        ]

    async def get_offer_summary(
        self, restaurant_id: Optional[str] = None, now: Optional[datetime] = None
    ) -> OfferSummary:
        """Best offers across the menu, for "up to N% off" banners."""
        items = await self.get_offer_items(restaurant_id, now)
        return max_offers_across_items(items, now)

    async def get_delivery_discount(
        self, item_ids: List[str], delivery_fee: float, now: Optional[datetime] = None
    ) -> float:
        """Delivery fee reduction earned by the given cart items."""
        pricing: List[PricingOption] = []
        for item_id in item_ids:
            item = await self.get_item_by_id(item_id)
            if item is None:
                logger.debug(f"Delivery discount: unknown item {item_id}, skipped")
                continue
            pricing.extend(item.pricing_options)
        return delivery_fee_discount(pricing, delivery_fee, now)

    async def get_best_discount(
        self, restaurant_id: str, order_amount: float, now: Optional[datetime] = None
    ) -> Optional[AppliedDiscount]:
        discounts = await self.get_discounts(restaurant_id)
        return select_best_discount(discounts, order_amount, now)
