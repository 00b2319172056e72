"""Ingredient configuration and preferences for menu items and packs."""
from copy import deepcopy
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel

from marketplace.utils.parsing import safe_bool, safe_int, safe_str_list


class IngredientPreference(str, Enum):
    """Customer stance on an ingredient. Neutral is never stored."""

    WANTED = "wanted"
    UNWANTED = "unwanted"
    NEUTRAL = "neutral"


def parse_preference(value: Any) -> IngredientPreference:
    try:
        return IngredientPreference(str(value).strip().lower())
    except ValueError:
        return IngredientPreference.NEUTRAL


class PackIngredientConfig(BaseModel):
    """Which ingredients each item of a pack exposes for customization.

    ``variant_ingredients`` maps a pack variant name (e.g. "Pizza") to its
    ingredients; ``global_ingredients`` apply to the whole pack.
    """

    variant_ingredients: Dict[str, List[str]] = {}
    global_ingredients: List[str] = []
    show_global_at_end: bool = True

    @classmethod
    def from_record(cls, record: Any) -> "PackIngredientConfig":
        if not isinstance(record, dict):
            return cls()
        variants = record.get("variant_ingredients")
        variant_ingredients = {}
        if isinstance(variants, dict):
            for name, ingredients in variants.items():
                if isinstance(ingredients, list):
                    variant_ingredients[str(name)] = safe_str_list(ingredients)
        return cls(
            variant_ingredients=variant_ingredients,
            global_ingredients=safe_str_list(record.get("global_ingredients")),
            show_global_at_end=safe_bool(record.get("show_global_at_end"), True),
        )

    def to_record(self) -> Dict[str, Any]:
        return {
            "variant_ingredients": {k: list(v) for k, v in self.variant_ingredients.items()},
            "global_ingredients": list(self.global_ingredients),
            "show_global_at_end": self.show_global_at_end,
        }

    def has_variant_ingredients(self, variant_name: str) -> bool:
        return bool(self.variant_ingredients.get(variant_name))

    def ingredients_for(self, variant_name: str) -> List[str]:
        return list(self.variant_ingredients.get(variant_name, []))

    @property
    def has_any_ingredients(self) -> bool:
        return bool(self.variant_ingredients) or bool(self.global_ingredients)


class PackIngredientPreferences:
    """Mutable builder for a pack's nested ingredient preferences.

    Layout is ``{variant: {quantity_index: {ingredient: preference}}}`` plus a
    flat map for pack-wide ingredients. Setting a preference to neutral
    removes the entry. Use :meth:`snapshot` to hand the result to an
    immutable selection state.
    """

    def __init__(
        self,
        variant_preferences: Optional[Dict[str, Dict[int, Dict[str, IngredientPreference]]]] = None,
        global_preferences: Optional[Dict[str, IngredientPreference]] = None,
    ):
        self._variant: Dict[str, Dict[int, Dict[str, IngredientPreference]]] = deepcopy(
            variant_preferences or {}
        )
        self._global: Dict[str, IngredientPreference] = dict(global_preferences or {})

    @classmethod
    def from_record(cls, record: Any) -> "PackIngredientPreferences":
        """Parse the stored JSON shape; quantity indexes arrive as strings."""
        prefs = cls()
        if not isinstance(record, dict):
            return prefs
        variants = record.get("variant_preferences")
        if isinstance(variants, dict):
            for variant_name, by_index in variants.items():
                if not isinstance(by_index, dict):
                    continue
                for index, ingredients in by_index.items():
                    quantity_index = safe_int(index)
                    if quantity_index is None or not isinstance(ingredients, dict):
                        continue
                    for ingredient, preference in ingredients.items():
                        prefs.set_variant_preference(
                            str(variant_name), quantity_index, str(ingredient), parse_preference(preference)
                        )
        global_prefs = record.get("global_preferences")
        if isinstance(global_prefs, dict):
            for ingredient, preference in global_prefs.items():
                prefs.set_global_preference(str(ingredient), parse_preference(preference))
        return prefs

    def to_record(self) -> Dict[str, Any]:
        return {
            "variant_preferences": {
                variant: {
                    str(index): {name: pref.value for name, pref in ingredients.items()}
                    for index, ingredients in by_index.items()
                }
                for variant, by_index in self._variant.items()
            },
            "global_preferences": {name: pref.value for name, pref in self._global.items()},
        }

    def get_variant_preference(
        self, variant_name: str, quantity_index: int, ingredient: str
    ) -> IngredientPreference:
        return (
            self._variant.get(variant_name, {})
            .get(quantity_index, {})
            .get(ingredient, IngredientPreference.NEUTRAL)
        )

    def set_variant_preference(
        self,
        variant_name: str,
        quantity_index: int,
        ingredient: str,
        preference: IngredientPreference,
    ) -> None:
        if preference is IngredientPreference.NEUTRAL:
            self.clear_variant_preference(variant_name, quantity_index, ingredient)
            return
        self._variant.setdefault(variant_name, {}).setdefault(quantity_index, {})[ingredient] = preference

    def clear_variant_preference(self, variant_name: str, quantity_index: int, ingredient: str) -> None:
        by_index = self._variant.get(variant_name)
        if by_index is None:
            return
        ingredients = by_index.get(quantity_index)
        if ingredients is None:
            return
        ingredients.pop(ingredient, None)
        # Prune empty levels so has_any_preferences stays truthful
        if not ingredients:
            del by_index[quantity_index]
        if not by_index:
            del self._variant[variant_name]

    def get_global_preference(self, ingredient: str) -> IngredientPreference:
        return self._global.get(ingredient, IngredientPreference.NEUTRAL)

    def set_global_preference(self, ingredient: str, preference: IngredientPreference) -> None:
        if preference is IngredientPreference.NEUTRAL:
            self._global.pop(ingredient, None)
        else:
            self._global[ingredient] = preference

    @property
    def has_any_preferences(self) -> bool:
        return bool(self._variant) or bool(self._global)

    def clear(self) -> None:
        self._variant.clear()
        self._global.clear()

    def snapshot(self) -> Dict[str, Dict[int, Dict[str, IngredientPreference]]]:
        """Detached copy of the variant preferences."""
        return deepcopy(self._variant)

    def global_snapshot(self) -> Dict[str, IngredientPreference]:
        return dict(self._global)
