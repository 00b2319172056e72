"""Unit tests for tolerant record parsing."""
from datetime import datetime, timezone

import pytest

from marketplace.services.discounts.models import Discount
from marketplace.services.menu.base import MenuItem
from marketplace.services.pricing.models import PricingOption
from marketplace.utils.parsing import safe_bool, safe_float, safe_int, safe_utc


class TestSafeCoercion:
    """Test field coercion helpers."""

    @pytest.mark.parametrize(
        "raw, expected",
        [("12.5", 12.5), (3, 3.0), ("abc", None), (None, None), (True, None), (float("nan"), None)],
    )
    def test_safe_float(self, raw, expected):
        assert safe_float(raw) == expected

    def test_safe_int(self):
        assert safe_int("4") == 4
        assert safe_int(2.9) == 2
        assert safe_int("x", 7) == 7

    def test_safe_bool(self):
        assert safe_bool("true") is True
        assert safe_bool("0") is False
        assert safe_bool(None, True) is True

    def test_safe_utc(self):
        assert safe_utc("2025-06-15T12:00:00Z") == datetime(2025, 6, 15, 12, tzinfo=timezone.utc)
        assert safe_utc("2025-06-15T12:00:00").tzinfo == timezone.utc
        assert safe_utc("yesterday") is None
        assert safe_utc("") is None


class TestPricingOptionRecord:
    """Test PricingOption.from_record."""

    def test_defaults_for_malformed_fields(self):
        pricing = PricingOption.from_record(
            {
                "id": "p1",
                "price": -50,
                "free_drinks_quantity": None,
                "offer_types": None,
                "offer_start_at": "garbage",
                "original_price": "n/a",
            }
        )
        assert pricing.price == 0.0
        assert pricing.free_drinks_quantity == 1
        assert pricing.offer_types == []
        assert pricing.offer_start_at is None
        assert pricing.original_price is None
        assert pricing.variant_id is None

    def test_to_record_uses_iso_timestamps(self):
        pricing = PricingOption.from_record({"id": "p1", "offer_end_at": "2025-06-15T12:00:00Z"})
        record = pricing.to_record()
        assert record["offer_end_at"] == "2025-06-15T12:00:00+00:00"
        assert PricingOption.from_record(record).offer_end_at == pricing.offer_end_at

    def test_rejects_non_mapping(self):
        with pytest.raises(TypeError):
            PricingOption.from_record("p1")

    def test_is_pack(self):
        assert PricingOption(id="p", size=" Pack ").is_pack is True
        assert PricingOption(id="p", size="Large").is_pack is False


class TestMenuItemRecord:
    """Test MenuItem.from_record."""

    def test_accepts_pricing_key(self):
        item = MenuItem.from_record(
            {
                "id": "m1",
                "name": "Tacos",
                "price": "700",
                "pricing": [{"id": "p1", "price": 700}, "junk"],
                "variants": None,
            }
        )
        assert item.price == 700.0
        assert [p.id for p in item.pricing_options] == ["p1"]
        assert item.variants == []
        assert item.default_pricing.id == "p1"

    def test_non_string_text_fields_are_coerced(self):
        item = MenuItem.from_record({"id": "i", "name": "x", "category": 7, "description": 5})
        assert item.category == "7"
        assert item.description == "5"
        assert MenuItem.from_record({"id": "i", "name": "x", "category": None}).category is None


class TestDiscountRecord:
    """Test Discount.from_record on malformed text fields."""

    def test_non_string_text_fields_are_coerced(self):
        discount = Discount.from_record({"id": "d", "description": 5, "image_url": 12})
        assert discount.description == "5"
        assert discount.image_url == "12"
        assert Discount.from_record({"id": "d", "description": ""}).description is None
