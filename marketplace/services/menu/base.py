"""Menu models and provider interface."""
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel

from marketplace.services.discounts.models import Discount
from marketplace.services.pricing.models import OfferType, PricingOption
from marketplace.services.pricing.offers import discount_percentage, is_offer_active
from marketplace.services.selection.ingredients import PackIngredientConfig
from marketplace.utils.parsing import safe_bool, safe_float, safe_records, safe_str, safe_str_list
from marketplace.utils.time import resolve_now


class MenuItemVariant(BaseModel):
    """Named variant of a menu item (flavour, filling, pack component)."""

    id: str
    menu_item_id: str = ""
    name: str
    description: Optional[str] = None
    is_default: bool = False

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "MenuItemVariant":
        return cls(
            id=safe_str(record.get("id")),
            menu_item_id=safe_str(record.get("menu_item_id")),
            name=safe_str(record.get("name"), "Default"),
            description=safe_str(record.get("description")) or None,
            is_default=safe_bool(record.get("is_default")),
        )


class MenuItemSupplement(BaseModel):
    """Paid add-on for a menu item."""

    id: str
    menu_item_id: str = ""
    name: str
    price: float = 0.0
    is_available: bool = True

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "MenuItemSupplement":
        return cls(
            id=safe_str(record.get("id")),
            menu_item_id=safe_str(record.get("menu_item_id")),
            name=safe_str(record.get("name")),
            price=max(safe_float(record.get("price"), 0.0), 0.0),
            is_available=safe_bool(record.get("is_available"), True),
        )


class MenuItem(BaseModel):
    """Menu item with its variants, pricing options and supplements."""

    id: str
    restaurant_id: str = ""
    name: str
    description: Optional[str] = None
    category: Optional[str] = None
    price: float = 0.0
    is_available: bool = True
    variants: List[MenuItemVariant] = []
    pricing_options: List[PricingOption] = []
    supplements: List[MenuItemSupplement] = []
    ingredients: List[str] = []
    pack_ingredients: Optional[PackIngredientConfig] = None

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "MenuItem":
        """Build from a backend row; pricing may sit under ``pricing_options`` or ``pricing``."""
        if not isinstance(record, dict):
            raise TypeError(f"menu item record must be a mapping, got {type(record).__name__}")
        pricing = record.get("pricing_options")
        if pricing is None:
            pricing = record.get("pricing")
        pack_ingredients = record.get("pack_ingredients")
        return cls(
            id=safe_str(record.get("id")),
            restaurant_id=safe_str(record.get("restaurant_id")),
            name=safe_str(record.get("name")),
            description=safe_str(record.get("description")) or None,
            category=safe_str(record.get("category")) or None,
            price=max(safe_float(record.get("price"), 0.0), 0.0),
            is_available=safe_bool(record.get("is_available"), True),
            variants=[MenuItemVariant.from_record(v) for v in safe_records(record.get("variants"))],
            pricing_options=[PricingOption.from_record(p) for p in safe_records(pricing)],
            supplements=[MenuItemSupplement.from_record(s) for s in safe_records(record.get("supplements"))],
            ingredients=safe_str_list(record.get("ingredients")),
            pack_ingredients=(
                PackIngredientConfig.from_record(pack_ingredients) if pack_ingredients else None
            ),
        )

    @property
    def default_pricing(self) -> Optional[PricingOption]:
        """Pricing flagged default, else the first one."""
        for pricing in self.pricing_options:
            if pricing.is_default:
                return pricing
        return self.pricing_options[0] if self.pricing_options else None

    @property
    def default_variant(self) -> Optional[MenuItemVariant]:
        for variant in self.variants:
            if variant.is_default:
                return variant
        return self.variants[0] if self.variants else None

    def pricing_for_variant(self, variant_id: Optional[str]) -> List[PricingOption]:
        """Pricing options of a variant, ordered for display. None selects base pricing."""
        options = [p for p in self.pricing_options if p.variant_id == variant_id]
        return sorted(options, key=lambda p: p.display_order)

    def active_offer_pricing(self, now: Optional[datetime] = None) -> Optional[PricingOption]:
        """First pricing option whose limited-time offer is running."""
        now = resolve_now(now)
        for pricing in self.pricing_options:
            if is_offer_active(pricing, now):
                return pricing
        return None

    def is_offer_active(self, now: Optional[datetime] = None) -> bool:
        return self.active_offer_pricing(now) is not None

    def has_offer_type(self, offer_type: OfferType, now: Optional[datetime] = None) -> bool:
        pricing = self.active_offer_pricing(now)
        return pricing is not None and pricing.has_offer_type(offer_type)

    def discount_percentage(self, now: Optional[datetime] = None) -> Optional[int]:
        pricing = self.active_offer_pricing(now)
        return discount_percentage(pricing) if pricing is not None else None

    def effective_price(self, now: Optional[datetime] = None) -> float:
        """Price shown on the item card.

        A running pack offer carries the full bundle price; any other offer
        keeps the item's base price (its size price is charged on top).
        """
        pricing = self.active_offer_pricing(now)
        if pricing is not None and pricing.is_pack:
            return pricing.price
        return self.price

    def has_expired_offer(self, now: Optional[datetime] = None) -> bool:
        now = resolve_now(now)
        return any(
            p.is_limited_offer and p.offer_end_at is not None and now >= p.offer_end_at
            for p in self.pricing_options
        )

    def effective_availability(self, now: Optional[datetime] = None) -> bool:
        """Items whose limited-time offers have all expired are withdrawn."""
        now = resolve_now(now)
        if self.has_expired_offer(now) and not self.is_offer_active(now):
            return False
        return self.is_available


class Menu(BaseModel):
    """Menu model."""

    items: List[MenuItem]
    categories: List[str] = []


class MenuProvider(ABC):
    """Abstract base class for menu providers."""

    @abstractmethod
    async def get_menu(self, restaurant_id: Optional[str] = None) -> Menu:
        """Get the menu, optionally for a single restaurant."""
        pass

    @abstractmethod
    async def get_item_by_id(self, item_id: str) -> Optional[MenuItem]:
        """Get a menu item by identifier."""
        pass

    @abstractmethod
    async def get_item_by_name(self, item_name: str) -> Optional[MenuItem]:
        """Get a menu item by name."""
        pass

    @abstractmethod
    async def get_discounts(self, restaurant_id: Optional[str] = None) -> List[Discount]:
        """Get restaurant discounts."""
        pass
