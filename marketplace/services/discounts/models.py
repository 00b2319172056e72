"""Restaurant-wide discount and promo code models."""
import logging
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, field_validator

from marketplace.utils.parsing import (
    iso_or_none,
    safe_bool,
    safe_dict,
    safe_float,
    safe_int,
    safe_str,
    safe_str_list,
    safe_utc,
)

logger = logging.getLogger(__name__)


class DiscountType(str, Enum):
    """How a discount reduces an order."""

    PERCENTAGE = "percentage"
    FIXED_AMOUNT = "fixedAmount"
    FREE_DELIVERY = "freeDelivery"
    BUY_ONE_GET_ONE = "buyOneGetOne"


class DiscountStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    EXPIRED = "expired"
    PAUSED = "paused"


# Keyed by the lowercased spelling with underscores removed, so both
# "fixedAmount" and "fixed_amount" resolve.
_TYPE_LOOKUP = {t.value.lower(): t for t in DiscountType}


def parse_discount_type(value: Any) -> Optional[DiscountType]:
    """Resolve a backend type string; unknown types resolve to None."""
    if value is None:
        return DiscountType.PERCENTAGE
    key = str(value).strip().lower().replace("_", "")
    discount_type = _TYPE_LOOKUP.get(key)
    if discount_type is None:
        logger.debug(f"Unknown discount type {value!r}")
    return discount_type


def parse_discount_status(value: Any) -> DiscountStatus:
    """Resolve a backend status; a missing status is active, an unknown one inactive."""
    if value is None:
        return DiscountStatus.ACTIVE
    try:
        return DiscountStatus(str(value).strip().lower())
    except ValueError:
        logger.debug(f"Unknown discount status {value!r}, treating as inactive")
        return DiscountStatus.INACTIVE


class Discount(BaseModel):
    """A restaurant-scoped promotional campaign."""

    id: str
    restaurant_id: Optional[str] = None
    name: str = ""
    description: Optional[str] = None
    type: Optional[DiscountType] = DiscountType.PERCENTAGE
    value: float = 0.0
    minimum_order_amount: float = 0.0
    maximum_discount_amount: Optional[float] = 0.0  # 0 or None: uncapped
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    status: DiscountStatus = DiscountStatus.ACTIVE
    usage_limit: Optional[int] = 0  # 0 or None: unlimited
    used_count: int = 0
    applicable_categories: List[str] = []
    applicable_menu_items: List[str] = []
    is_public: bool = True
    image_url: Optional[str] = None
    conditions: Dict[str, Any] = {}
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("start_date", "end_date", "created_at", "updated_at", mode="before")
    @classmethod
    def _coerce_utc(cls, value: Any) -> Optional[datetime]:
        return safe_utc(value)

    @classmethod
    def _fields_from_record(cls, record: Dict[str, Any]) -> Dict[str, Any]:
        if not isinstance(record, dict):
            raise TypeError(f"discount record must be a mapping, got {type(record).__name__}")
        max_amount = record.get("maximum_discount_amount")
        usage_limit = record.get("usage_limit")
        return {
            "id": safe_str(record.get("id")),
            "restaurant_id": safe_str(record.get("restaurant_id")) or None,
            "name": safe_str(record.get("name")),
            "description": safe_str(record.get("description")) or None,
            "type": parse_discount_type(record.get("type")),
            "value": safe_float(record.get("value"), 0.0),
            "minimum_order_amount": safe_float(record.get("minimum_order_amount"), 0.0),
            "maximum_discount_amount": None if max_amount is None else safe_float(max_amount, 0.0),
            "start_date": safe_utc(record.get("start_date")),
            "end_date": safe_utc(record.get("end_date")),
            "status": parse_discount_status(record.get("status")),
            "usage_limit": None if usage_limit is None else safe_int(usage_limit, 0),
            "used_count": safe_int(record.get("used_count"), 0),
            "applicable_categories": safe_str_list(record.get("applicable_categories")),
            "applicable_menu_items": safe_str_list(record.get("applicable_menu_items")),
            "is_public": safe_bool(record.get("is_public"), True),
            "image_url": safe_str(record.get("image_url")) or None,
            "conditions": safe_dict(record.get("conditions")),
            "created_at": safe_utc(record.get("created_at")),
            "updated_at": safe_utc(record.get("updated_at")),
        }

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "Discount":
        """Build from a backend row, defaulting every malformed field."""
        return cls(**cls._fields_from_record(record))

    def to_record(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "restaurant_id": self.restaurant_id,
            "name": self.name,
            "description": self.description,
            "type": self.type.value if self.type is not None else None,
            "value": self.value,
            "minimum_order_amount": self.minimum_order_amount,
            "maximum_discount_amount": self.maximum_discount_amount,
            "start_date": iso_or_none(self.start_date),
            "end_date": iso_or_none(self.end_date),
            "status": self.status.value,
            "usage_limit": self.usage_limit,
            "used_count": self.used_count,
            "applicable_categories": list(self.applicable_categories),
            "applicable_menu_items": list(self.applicable_menu_items),
            "is_public": self.is_public,
            "image_url": self.image_url,
            "conditions": dict(self.conditions),
            "created_at": iso_or_none(self.created_at),
            "updated_at": iso_or_none(self.updated_at),
        }

    @property
    def usage_exhausted(self) -> bool:
        return bool(self.usage_limit) and self.used_count >= self.usage_limit


class PromoCode(Discount):
    """A discount redeemed by entering a code at checkout.

    Platform-wide codes have no restaurant.
    """

    code: str = ""
    maximum_discount_amount: Optional[float] = None
    usage_limit: Optional[int] = None
    user_usage_limit: Optional[int] = 1

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "PromoCode":
        fields = cls._fields_from_record(record)
        fields["code"] = safe_str(record.get("code"))
        fields["user_usage_limit"] = safe_int(record.get("user_usage_limit"), 1)
        return cls(**fields)

    def to_record(self) -> Dict[str, Any]:
        record = super().to_record()
        record["code"] = self.code
        record["user_usage_limit"] = self.user_usage_limit
        return record

    def matches(self, code: str) -> bool:
        """Case-insensitive comparison ignoring surrounding whitespace."""
        return bool(code) and self.code.strip().lower() == code.strip().lower()
