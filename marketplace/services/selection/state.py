"""Menu item customization state.

A ``MenuItemSelectionState`` lives for one "configure item" session. It is
frozen: every operation returns a new snapshot and leaves the receiver
untouched, so a view can keep the previous snapshot around for undo or
diffing.
"""
import logging
from datetime import datetime
from enum import Enum
from typing import Dict, FrozenSet, List, Optional, Set, Tuple

from pydantic import BaseModel, ConfigDict

from marketplace.services.menu.base import MenuItem, MenuItemSupplement
from marketplace.services.pricing.models import PricingOption
from marketplace.services.pricing.offers import free_drinks_offer, is_offer_active
from marketplace.services.selection.ingredients import (
    IngredientPreference,
    PackIngredientPreferences,
)
from marketplace.utils.time import resolve_now

logger = logging.getLogger(__name__)

# Key for the pricing of items that have no variants
BASE_VARIANT = ""


class SubResource(str, Enum):
    """Parts of the item view that load independently."""

    VARIANTS = "variants"
    SUPPLEMENTS = "supplements"
    DRINKS = "drinks"


class DrinkOption(BaseModel):
    """A restaurant drink that can accompany the item."""

    id: str
    name: str
    price: float = 0.0


class OrderLine(BaseModel):
    """Cart line produced from a finished selection."""

    menu_item_id: str
    name: str
    quantity: int
    unit_price: float
    total: float
    variants: Dict[str, int] = {}
    pricing_ids: Dict[str, str] = {}
    supplement_ids: List[str] = []
    free_drinks: Dict[str, int] = {}
    paid_drinks: Dict[str, int] = {}
    drink_sizes: Dict[str, str] = {}
    removed_ingredients: List[str] = []
    ingredient_preferences: Dict[str, Dict[str, Dict[str, str]]] = {}
    global_ingredient_preferences: Dict[str, str] = {}
    note: str = ""
    variant_notes: Dict[str, str] = {}


class MenuItemSelectionState(BaseModel):
    """In-progress customization of a single menu item."""

    model_config = ConfigDict(frozen=True)

    item: Optional[MenuItem] = None

    # Variants and pricing
    selected_variants: Tuple[str, ...] = ()
    selected_pricing_per_variant: Dict[str, PricingOption] = {}
    variant_quantities: Dict[str, int] = {}

    selected_supplements: Tuple[MenuItemSupplement, ...] = ()

    # Ingredients
    removed_ingredients: Tuple[str, ...] = ()
    ingredient_preferences: Dict[str, Dict[int, Dict[str, IngredientPreference]]] = {}
    global_ingredient_preferences: Dict[str, IngredientPreference] = {}

    # Drinks, keyed by drink id
    drinks: Dict[str, DrinkOption] = {}
    free_drinks: Dict[str, int] = {}
    paid_drinks: Dict[str, int] = {}
    drink_sizes: Dict[str, str] = {}

    quantity: int = 1
    note: str = ""
    variant_notes: Dict[str, str] = {}

    # Async sub-resources
    loading: FrozenSet[SubResource] = frozenset()
    errors: Dict[SubResource, str] = {}

    @classmethod
    def for_item(cls, item: MenuItem) -> "MenuItemSelectionState":
        """Fresh selection with the item's default variant and pricing chosen."""
        return cls().with_item(item)

    def with_item(self, item: MenuItem) -> "MenuItemSelectionState":
        """Replace the item and reset every selection made for the previous one.

        Loading flags survive, since in-flight requests still belong to this view.
        """
        variant = item.default_variant
        key = variant.name if variant is not None else BASE_VARIANT
        pricing = _default_pricing_for(item, variant.id if variant is not None else None)
        return MenuItemSelectionState(
            item=item,
            selected_variants=(key,) if variant is not None else (),
            selected_pricing_per_variant={key: pricing} if pricing is not None else {},
            variant_quantities={key: 1} if variant is not None else {},
            loading=self.loading,
            errors=dict(self.errors),
        )

    # Variants and pricing

    def toggle_variant(self, variant_name: str) -> "MenuItemSelectionState":
        pricing = dict(self.selected_pricing_per_variant)
        quantities = dict(self.variant_quantities)
        if variant_name in self.selected_variants:
            selected = tuple(v for v in self.selected_variants if v != variant_name)
            pricing.pop(variant_name, None)
            quantities.pop(variant_name, None)
        else:
            selected = self.selected_variants + (variant_name,)
            default = self._default_pricing_for_variant(variant_name)
            if default is not None:
                pricing[variant_name] = default
            quantities.setdefault(variant_name, 1)
        return self.model_copy(
            update={
                "selected_variants": selected,
                "selected_pricing_per_variant": pricing,
                "variant_quantities": quantities,
            }
        )

    def set_variant_pricing(self, variant_name: str, pricing: PricingOption) -> "MenuItemSelectionState":
        updated = dict(self.selected_pricing_per_variant)
        updated[variant_name] = pricing
        return self.model_copy(update={"selected_pricing_per_variant": updated})

    def set_variant_quantity(self, variant_name: str, quantity: int) -> "MenuItemSelectionState":
        """Set how many of a variant go into the item; zero or less removes it."""
        quantities = dict(self.variant_quantities)
        if quantity <= 0:
            quantities.pop(variant_name, None)
        else:
            quantities[variant_name] = quantity
        return self.model_copy(update={"variant_quantities": quantities})

    def set_quantity(self, quantity: int) -> "MenuItemSelectionState":
        return self.model_copy(update={"quantity": max(quantity, 1)})

    def set_note(self, note: str) -> "MenuItemSelectionState":
        return self.model_copy(update={"note": note.strip()})

    def set_variant_note(self, variant_name: str, note: str) -> "MenuItemSelectionState":
        notes = dict(self.variant_notes)
        if note.strip():
            notes[variant_name] = note.strip()
        else:
            notes.pop(variant_name, None)
        return self.model_copy(update={"variant_notes": notes})

    # Supplements

    def add_supplement(self, supplement: MenuItemSupplement) -> "MenuItemSelectionState":
        if not supplement.is_available:
            return self
        if any(s.id == supplement.id for s in self.selected_supplements):
            return self
        return self.model_copy(update={"selected_supplements": self.selected_supplements + (supplement,)})

    def remove_supplement(self, supplement_id: str) -> "MenuItemSelectionState":
        remaining = tuple(s for s in self.selected_supplements if s.id != supplement_id)
        return self.model_copy(update={"selected_supplements": remaining})

    # Ingredients

    def toggle_removed_ingredient(self, ingredient: str) -> "MenuItemSelectionState":
        if ingredient in self.removed_ingredients:
            removed = tuple(i for i in self.removed_ingredients if i != ingredient)
        else:
            removed = self.removed_ingredients + (ingredient,)
        return self.model_copy(update={"removed_ingredients": removed})

    def preferences_builder(self) -> PackIngredientPreferences:
        """Mutable copy of the ingredient preferences for batch edits."""
        return PackIngredientPreferences(self.ingredient_preferences, self.global_ingredient_preferences)

    def with_preferences(self, builder: PackIngredientPreferences) -> "MenuItemSelectionState":
        """Commit a builder's preferences into a new snapshot."""
        return self.model_copy(
            update={
                "ingredient_preferences": builder.snapshot(),
                "global_ingredient_preferences": builder.global_snapshot(),
            }
        )

    def set_ingredient_preference(
        self,
        variant_name: str,
        quantity_index: int,
        ingredient: str,
        preference: IngredientPreference,
    ) -> "MenuItemSelectionState":
        builder = self.preferences_builder()
        builder.set_variant_preference(variant_name, quantity_index, ingredient, preference)
        return self.with_preferences(builder)

    def clear_ingredient_preference(
        self, variant_name: str, quantity_index: int, ingredient: str
    ) -> "MenuItemSelectionState":
        return self.set_ingredient_preference(
            variant_name, quantity_index, ingredient, IngredientPreference.NEUTRAL
        )

    def set_global_ingredient_preference(
        self, ingredient: str, preference: IngredientPreference
    ) -> "MenuItemSelectionState":
        builder = self.preferences_builder()
        builder.set_global_preference(ingredient, preference)
        return self.with_preferences(builder)

    def ingredient_preference(
        self, variant_name: str, quantity_index: int, ingredient: str
    ) -> IngredientPreference:
        return (
            self.ingredient_preferences.get(variant_name, {})
            .get(quantity_index, {})
            .get(ingredient, IngredientPreference.NEUTRAL)
        )

    # Drinks

    def free_drink_allowance(self, now: Optional[datetime] = None) -> int:
        return self._free_drink_rules(now)[0]

    def _free_drink_rules(self, now: Optional[datetime]) -> Tuple[int, Optional[Set[str]]]:
        """Number of free drinks and the drink ids they may be chosen from.

        An empty id set from any source lifts the restriction (None).
        """
        now = resolve_now(now)
        allowance = 0
        allowed: Optional[Set[str]] = set()
        for pricing in self._selected_pricing():
            if pricing.free_drinks_included and pricing.free_drinks_quantity > 0:
                allowance += pricing.free_drinks_quantity
                allowed = _merge_allowed(allowed, pricing.free_drinks_list)
            if is_offer_active(pricing, now):
                offer = free_drinks_offer(pricing)
                if offer is not None:
                    allowance += offer.quantity
                    allowed = _merge_allowed(allowed, offer.drink_ids)
        return allowance, allowed

    def add_drink(
        self,
        drink: DrinkOption,
        size: Optional[str] = None,
        free: bool = False,
        now: Optional[datetime] = None,
    ) -> "MenuItemSelectionState":
        """Add one drink. Free drinks beyond the allowance are ignored."""
        if free:
            allowance, allowed = self._free_drink_rules(now)
            if sum(self.free_drinks.values()) >= allowance:
                logger.debug(f"Free drink allowance of {allowance} reached, ignoring {drink.id}")
                return self
            if allowed is not None and drink.id not in allowed:
                logger.debug(f"Drink {drink.id} is not part of the free drink offer")
                return self
        counts = dict(self.free_drinks if free else self.paid_drinks)
        counts[drink.id] = counts.get(drink.id, 0) + 1
        drinks = dict(self.drinks)
        drinks[drink.id] = drink
        sizes = dict(self.drink_sizes)
        if size:
            sizes[drink.id] = size
        return self.model_copy(
            update={
                "free_drinks" if free else "paid_drinks": counts,
                "drinks": drinks,
                "drink_sizes": sizes,
            }
        )

    def remove_drink(self, drink_id: str, free: bool = False) -> "MenuItemSelectionState":
        counts = dict(self.free_drinks if free else self.paid_drinks)
        if drink_id not in counts:
            return self
        counts[drink_id] -= 1
        if counts[drink_id] <= 0:
            del counts[drink_id]
        other = self.paid_drinks if free else self.free_drinks
        drinks = dict(self.drinks)
        sizes = dict(self.drink_sizes)
        if drink_id not in counts and drink_id not in other:
            drinks.pop(drink_id, None)
            sizes.pop(drink_id, None)
        return self.model_copy(
            update={
                "free_drinks" if free else "paid_drinks": counts,
                "drinks": drinks,
                "drink_sizes": sizes,
            }
        )

    # Loading

    def start_loading(self, resource: SubResource) -> "MenuItemSelectionState":
        errors = dict(self.errors)
        errors.pop(resource, None)
        return self.model_copy(update={"loading": self.loading | {resource}, "errors": errors})

    def finish_loading(self, resource: SubResource) -> "MenuItemSelectionState":
        return self.model_copy(update={"loading": self.loading - {resource}})

    def fail_loading(self, resource: SubResource, error: str) -> "MenuItemSelectionState":
        errors = dict(self.errors)
        errors[resource] = error
        return self.model_copy(update={"loading": self.loading - {resource}, "errors": errors})

    def is_ready(self, resource: SubResource) -> bool:
        return resource not in self.loading and resource not in self.errors

    @property
    def is_loading(self) -> bool:
        return bool(self.loading)

    # Totals

    def unit_price(self, now: Optional[datetime] = None) -> float:
        """Price of one item: selected pricing per variant plus supplements."""
        pricing = self._selected_pricing_with_keys()
        if pricing:
            base = sum(p.price * self._variant_quantity(key) for key, p in pricing)
        elif self.item is not None:
            base = self.item.effective_price(now)
        else:
            base = 0.0
        return base + sum(s.price for s in self.selected_supplements)

    def line_total(self, now: Optional[datetime] = None) -> float:
        """Unit price times quantity, plus paid drinks. Free drinks cost nothing."""
        drinks = sum(
            self.drinks[drink_id].price * count
            for drink_id, count in self.paid_drinks.items()
            if drink_id in self.drinks
        )
        return self.unit_price(now) * self.quantity + drinks

    def to_order_line(self, now: Optional[datetime] = None) -> OrderLine:
        if self.item is None:
            raise ValueError("Cannot build an order line without a menu item")
        builder = self.preferences_builder()
        record = builder.to_record()
        return OrderLine(
            menu_item_id=self.item.id,
            name=self.item.name,
            quantity=self.quantity,
            unit_price=self.unit_price(now),
            total=self.line_total(now),
            variants={v: self._variant_quantity(v) for v in self.selected_variants},
            pricing_ids={k: p.id for k, p in self.selected_pricing_per_variant.items()},
            supplement_ids=[s.id for s in self.selected_supplements],
            free_drinks=dict(self.free_drinks),
            paid_drinks=dict(self.paid_drinks),
            drink_sizes=dict(self.drink_sizes),
            removed_ingredients=list(self.removed_ingredients),
            ingredient_preferences=record["variant_preferences"],
            global_ingredient_preferences=record["global_preferences"],
            note=self.note,
            variant_notes=dict(self.variant_notes),
        )

    # Helpers

    def _variant_quantity(self, key: str) -> int:
        if key == BASE_VARIANT:
            return 1
        return self.variant_quantities.get(key, 1)

    def _selected_pricing_with_keys(self) -> List[Tuple[str, PricingOption]]:
        return [
            (key, pricing)
            for key, pricing in self.selected_pricing_per_variant.items()
            if key == BASE_VARIANT or key in self.selected_variants
        ]

    def _selected_pricing(self) -> List[PricingOption]:
        return [pricing for _, pricing in self._selected_pricing_with_keys()]

    def _default_pricing_for_variant(self, variant_name: str) -> Optional[PricingOption]:
        if self.item is None:
            return None
        for variant in self.item.variants:
            if variant.name == variant_name:
                return _default_pricing_for(self.item, variant.id)
        return None


def _default_pricing_for(item: MenuItem, variant_id: Optional[str]) -> Optional[PricingOption]:
    """Default pricing of a variant, falling back to the item's base pricing."""
    options = item.pricing_for_variant(variant_id)
    for pricing in options:
        if pricing.is_default:
            return pricing
    if options:
        return options[0]
    return item.default_pricing


def _merge_allowed(allowed: Optional[Set[str]], drink_ids: List[str]) -> Optional[Set[str]]:
    if allowed is None or not drink_ids:
        return None
    return allowed | set(drink_ids)
