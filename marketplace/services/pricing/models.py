"""Pricing option and limited-time offer models."""
import logging
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Literal, Optional, Union

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


class OfferType(str, Enum):
    """Effect tags a limited-time offer can carry."""

    SPECIAL_PRICE = "special_price"
    FREE_DRINKS = "free_drinks"
    SPECIAL_DELIVERY = "special_delivery"


class OfferStatus(str, Enum):
    """Time-derived lifecycle of an offer. Never stored."""

    NO_OFFER = "no_offer"
    SCHEDULED = "scheduled"
    ACTIVE = "active"
    EXPIRED = "expired"


class DeliveryType(str, Enum):
    FREE = "free"
    PERCENTAGE = "percentage"
    FIXED = "fixed"


class SpecialPriceOffer(BaseModel):
    """Reduced price against the pre-offer price."""

    kind: Literal["special_price"] = "special_price"
    price: float
    original_price: Optional[float] = None


class FreeDrinksOffer(BaseModel):
    """Drinks granted for free with the offer."""

    kind: Literal["free_drinks"] = "free_drinks"
    drink_ids: List[str] = []
    quantity: int = 0


class DeliveryOffer(BaseModel):
    """Delivery fee reduction. ``value`` is unused for free delivery."""

    kind: Literal["special_delivery"] = "special_delivery"
    delivery_type: DeliveryType
    value: Optional[float] = None


class UnknownOffer(BaseModel):
    """Offer tag this client does not understand, kept with its raw details."""

    kind: Literal["unknown"] = "unknown"
    offer_type: str
    raw: Dict[str, Any] = {}


OfferDetails = Union[SpecialPriceOffer, FreeDrinksOffer, DeliveryOffer, UnknownOffer]


class PricingOption(BaseModel):
    """One sellable size/variant configuration of a menu item."""

    id: str
    menu_item_id: str = ""
    variant_id: Optional[str] = None
    size: str = ""
    portion: str = ""
    price: float = 0.0
    is_default: bool = False
    display_order: int = 0

    # Packs and combos
    free_drinks_included: bool = False
    free_drinks_list: List[str] = []
    free_drinks_quantity: int = 1

    # Limited-time offer
    is_limited_offer: bool = False
    offer_types: List[str] = []
    offer_start_at: Optional[datetime] = None
    offer_end_at: Optional[datetime] = None
    original_price: Optional[float] = None
    offer_details: Dict[str, Any] = {}

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("offer_start_at", "offer_end_at", "created_at", "updated_at", mode="before")
    @classmethod
    def _coerce_utc(cls, value: Any) -> Optional[datetime]:
        return safe_utc(value)

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "PricingOption":
        """Build from a backend row, defaulting every malformed field."""
        if not isinstance(record, dict):
            raise TypeError(f"pricing record must be a mapping, got {type(record).__name__}")

        price = safe_float(record.get("price"), 0.0)
        if price < 0:
            logger.debug(f"Negative price {price} on pricing {record.get('id')!r}, clamping to 0")
            price = 0.0

        return cls(
            id=safe_str(record.get("id")),
            menu_item_id=safe_str(record.get("menu_item_id")),
            variant_id=safe_str(record.get("variant_id")) or None,
            size=safe_str(record.get("size")),
            portion=safe_str(record.get("portion")),
            price=price,
            is_default=safe_bool(record.get("is_default")),
            display_order=safe_int(record.get("display_order"), 0),
            free_drinks_included=safe_bool(record.get("free_drinks_included")),
            free_drinks_list=safe_str_list(record.get("free_drinks_list")),
            free_drinks_quantity=safe_int(record.get("free_drinks_quantity"), 1),
            is_limited_offer=safe_bool(record.get("is_limited_offer")),
            offer_types=safe_str_list(record.get("offer_types")),
            offer_start_at=safe_utc(record.get("offer_start_at")),
            offer_end_at=safe_utc(record.get("offer_end_at")),
            original_price=safe_float(record.get("original_price")),
            offer_details=safe_dict(record.get("offer_details")),
            created_at=safe_utc(record.get("created_at")),
            updated_at=safe_utc(record.get("updated_at")),
        )

    def to_record(self) -> Dict[str, Any]:
        """Serialize to the backend payload shape."""
        return {
            "id": self.id,
            "menu_item_id": self.menu_item_id,
            "variant_id": self.variant_id,
            "size": self.size,
            "portion": self.portion,
            "price": self.price,
            "is_default": self.is_default,
            "display_order": self.display_order,
            "free_drinks_included": self.free_drinks_included,
            "free_drinks_list": list(self.free_drinks_list),
            "free_drinks_quantity": self.free_drinks_quantity,
            "is_limited_offer": self.is_limited_offer,
            "offer_types": list(self.offer_types),
            "offer_start_at": iso_or_none(self.offer_start_at),
            "offer_end_at": iso_or_none(self.offer_end_at),
            "original_price": self.original_price,
            "offer_details": dict(self.offer_details),
            "created_at": iso_or_none(self.created_at),
            "updated_at": iso_or_none(self.updated_at),
        }

    def has_offer_type(self, offer_type: Union[OfferType, str]) -> bool:
        tag = offer_type.value if isinstance(offer_type, OfferType) else offer_type
        return tag in self.offer_types

    def details_for(self, offer_type: Union[OfferType, str]) -> Dict[str, Any]:
        """Details of one offer type.

        Details may be nested under the offer tag or written flat on the map;
        the nested form wins when present.
        """
        tag = offer_type.value if isinstance(offer_type, OfferType) else offer_type
        nested = self.offer_details.get(tag)
        if isinstance(nested, dict):
            return nested
        return self.offer_details

    @property
    def is_pack(self) -> bool:
        """Pack pricing carries the full bundle price."""
        return self.size.strip().lower() == "pack"

    def __str__(self) -> str:
        return f"PricingOption(id={self.id}, size={self.size}, portion={self.portion}, price={self.price})"


def parse_special_price(pricing: PricingOption) -> Optional[SpecialPriceOffer]:
    if not pricing.has_offer_type(OfferType.SPECIAL_PRICE):
        return None
    return SpecialPriceOffer(price=pricing.price, original_price=pricing.original_price)


def parse_free_drinks(pricing: PricingOption) -> Optional[FreeDrinksOffer]:
    if not pricing.has_offer_type(OfferType.FREE_DRINKS):
        return None
    details = pricing.details_for(OfferType.FREE_DRINKS)
    quantity = safe_int(details.get("free_drinks_quantity"), 0)
    if quantity <= 0:
        logger.debug(f"Pricing {pricing.id}: free_drinks offer without a usable quantity")
        return None
    return FreeDrinksOffer(
        drink_ids=safe_str_list(details.get("free_drinks_list")),
        quantity=quantity,
    )


def parse_delivery(pricing: PricingOption) -> Optional[DeliveryOffer]:
    if not pricing.has_offer_type(OfferType.SPECIAL_DELIVERY):
        return None
    details = pricing.details_for(OfferType.SPECIAL_DELIVERY)
    try:
        delivery_type = DeliveryType(details.get("delivery_type"))
    except ValueError:
        logger.debug(
            f"Pricing {pricing.id}: unknown delivery_type {details.get('delivery_type')!r}"
        )
        return None

    if delivery_type is DeliveryType.FREE:
        return DeliveryOffer(delivery_type=delivery_type)

    value = safe_float(details.get("delivery_value"))
    if (
        value is None
        or value <= 0
        or (delivery_type is DeliveryType.PERCENTAGE and value > 100)
    ):
        logger.debug(
            f"Pricing {pricing.id}: unusable delivery_value {details.get('delivery_value')!r}"
        )
        return None
    return DeliveryOffer(delivery_type=delivery_type, value=value)


def parse_offer_details(pricing: PricingOption) -> List[OfferDetails]:
    """Typed view of every offer tag on a pricing option.

    Malformed known offers are dropped; unknown tags are kept as ``UnknownOffer``.
    """
    parsers = {
        OfferType.SPECIAL_PRICE.value: parse_special_price,
        OfferType.FREE_DRINKS.value: parse_free_drinks,
        OfferType.SPECIAL_DELIVERY.value: parse_delivery,
    }
    offers: List[OfferDetails] = []
    for tag in pricing.offer_types:
        parser = parsers.get(tag)
        if parser is None:
            offers.append(UnknownOffer(offer_type=tag, raw=pricing.details_for(tag)))
            continue
        offer = parser(pricing)
        if offer is not None:
            offers.append(offer)
    return offers
