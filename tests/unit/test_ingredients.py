"""Unit tests for pack ingredient configuration and preferences."""
from marketplace.services.selection.ingredients import (
    IngredientPreference,
    PackIngredientConfig,
    PackIngredientPreferences,
    parse_preference,
)


class TestPackIngredientConfig:
    """Test pack ingredient configuration parsing."""

    def test_from_record(self):
        config = PackIngredientConfig.from_record(
            {
                "variant_ingredients": {"Pizza": ["tomato", None, "olives"], "Broken": "nope"},
                "global_ingredients": ["ketchup"],
                "show_global_at_end": "false",
            }
        )
        assert config.ingredients_for("Pizza") == ["tomato", "olives"]
        assert config.has_variant_ingredients("Broken") is False
        assert config.global_ingredients == ["ketchup"]
        assert config.show_global_at_end is False
        assert config.has_any_ingredients is True

    def test_non_mapping_is_empty(self):
        config = PackIngredientConfig.from_record(None)
        assert config.has_any_ingredients is False
        assert config.show_global_at_end is True


class TestPackIngredientPreferences:
    """Test the preference builder."""

    def test_parse_preference(self):
        assert parse_preference("WANTED") is IngredientPreference.WANTED
        assert parse_preference("maybe") is IngredientPreference.NEUTRAL

    def test_neutral_is_not_stored(self):
        prefs = PackIngredientPreferences()
        prefs.set_variant_preference("Pizza", 0, "olives", IngredientPreference.NEUTRAL)
        prefs.set_global_preference("ketchup", IngredientPreference.NEUTRAL)
        assert prefs.has_any_preferences is False

    def test_clear_prunes_empty_levels(self):
        prefs = PackIngredientPreferences()
        prefs.set_variant_preference("Pizza", 0, "olives", IngredientPreference.UNWANTED)
        prefs.clear_variant_preference("Pizza", 0, "olives")
        assert prefs.snapshot() == {}
        assert prefs.has_any_preferences is False

    def test_record_round_trip_with_string_indexes(self):
        record = {
            "variant_preferences": {"Pizza": {"0": {"olives": "unwanted"}, "x": {"onion": "wanted"}}},
            "global_preferences": {"ketchup": "wanted", "mayo": "neutral"},
        }
        prefs = PackIngredientPreferences.from_record(record)
        assert prefs.get_variant_preference("Pizza", 0, "olives") is IngredientPreference.UNWANTED
        assert prefs.get_global_preference("ketchup") is IngredientPreference.WANTED
        assert prefs.to_record() == {
            "variant_preferences": {"Pizza": {"0": {"olives": "unwanted"}}},
            "global_preferences": {"ketchup": "wanted"},
        }

    def test_snapshot_is_detached(self):
        prefs = PackIngredientPreferences()
        prefs.set_variant_preference("Pizza", 0, "olives", IngredientPreference.UNWANTED)
        snapshot = prefs.snapshot()
        prefs.set_variant_preference("Pizza", 0, "tomato", IngredientPreference.WANTED)
        assert snapshot == {"Pizza": {0: {"olives": IngredientPreference.UNWANTED}}}

    def test_constructor_copies_input(self):
        source = {"Pizza": {0: {"olives": IngredientPreference.UNWANTED}}}
        prefs = PackIngredientPreferences(source)
        prefs.clear()
        assert source == {"Pizza": {0: {"olives": IngredientPreference.UNWANTED}}}
