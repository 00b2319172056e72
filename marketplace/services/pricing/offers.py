"""Limited-time offer evaluation.

Every function here is a pure function of its inputs and the evaluation
instant. Nothing raises on bad data: a malformed offer simply evaluates to
"no offer".
"""
import logging
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import TYPE_CHECKING, Iterable, List, Optional

from pydantic import BaseModel

from marketplace.services.pricing.models import (
    DeliveryOffer,
    DeliveryType,
    FreeDrinksOffer,
    OfferStatus,
    OfferType,
    PricingOption,
    parse_delivery,
    parse_free_drinks,
)
from marketplace.utils.time import resolve_now

if TYPE_CHECKING:
    from marketplace.services.menu.base import MenuItem

logger = logging.getLogger(__name__)


class OfferSummary(BaseModel):
    """Best offers found across a collection of menu items.

    Delivery fields are mutually exclusive: free delivery hides the
    percentage and fixed values, a percentage hides the fixed amount.
    """

    max_discount_percent: Optional[int] = None
    has_free_delivery: bool = False
    max_delivery_percent: Optional[float] = None
    max_delivery_amount: Optional[float] = None

    @property
    def has_any_offer(self) -> bool:
        return (
            self.max_discount_percent is not None
            or self.has_free_delivery
            or self.max_delivery_percent is not None
            or self.max_delivery_amount is not None
        )


def _round_half_up(value: float) -> int:
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def offer_status(pricing: PricingOption, now: Optional[datetime] = None) -> OfferStatus:
    """Derive the offer lifecycle state at ``now``."""
    if not pricing.is_limited_offer:
        return OfferStatus.NO_OFFER
    now = resolve_now(now)
    if pricing.offer_start_at is not None and now < pricing.offer_start_at:
        return OfferStatus.SCHEDULED
    if pricing.offer_end_at is not None and now >= pricing.offer_end_at:
        return OfferStatus.EXPIRED
    return OfferStatus.ACTIVE


def is_offer_active(pricing: PricingOption, now: Optional[datetime] = None) -> bool:
    """Whether the pricing's limited-time offer applies at ``now``.

    Start is inclusive, end is exclusive; a missing bound is open.
    """
    return offer_status(pricing, now) is OfferStatus.ACTIVE


def discount_percentage(pricing: PricingOption) -> Optional[int]:
    """Whole-number percentage saved by a special-price offer.

    Returns None (not 0) when the option carries no special price or its
    original price is missing or not positive.
    """
    if not pricing.has_offer_type(OfferType.SPECIAL_PRICE):
        return None
    original = pricing.original_price
    if original is None or original <= 0:
        return None
    percent = _round_half_up(100 * (original - pricing.price) / original)
    if percent < 0:
        logger.debug(
            f"Pricing {pricing.id}: offer price {pricing.price} above original {original}"
        )
        return None
    return percent


def delivery_offer(pricing: PricingOption) -> Optional[DeliveryOffer]:
    """Typed special-delivery details, or None when absent or malformed."""
    return parse_delivery(pricing)


def free_drinks_offer(pricing: PricingOption) -> Optional[FreeDrinksOffer]:
    """Typed free-drinks details, or None when absent or malformed."""
    return parse_free_drinks(pricing)


def active_pricing_options(
    pricing_options: Iterable[PricingOption], now: Optional[datetime] = None
) -> List[PricingOption]:
    now = resolve_now(now)
    return [p for p in pricing_options if is_offer_active(p, now)]


def max_offers_across_items(
    items: Iterable["MenuItem"], now: Optional[datetime] = None
) -> OfferSummary:
    """Reduce the active offers of many items to their best values.

    Used for "up to N% off" style banners. One pass over every active
    pricing option; ties keep the first value seen.
    """
    now = resolve_now(now)
    max_percent: Optional[int] = None
    has_free_delivery = False
    max_delivery_percent: Optional[float] = None
    max_delivery_amount: Optional[float] = None

    for item in items:
        for pricing in item.pricing_options:
            if not is_offer_active(pricing, now):
                continue

            percent = discount_percentage(pricing)
            if percent is not None and (max_percent is None or percent > max_percent):
                max_percent = percent

            offer = delivery_offer(pricing)
            if offer is None:
                continue
            if offer.delivery_type is DeliveryType.FREE:
                has_free_delivery = True
            elif offer.delivery_type is DeliveryType.PERCENTAGE:
                if max_delivery_percent is None or offer.value > max_delivery_percent:
                    max_delivery_percent = offer.value
            elif offer.delivery_type is DeliveryType.FIXED:
                if max_delivery_amount is None or offer.value > max_delivery_amount:
                    max_delivery_amount = offer.value

    if has_free_delivery:
        max_delivery_percent = None
        max_delivery_amount = None
    elif max_delivery_percent is not None:
        max_delivery_amount = None

    summary = OfferSummary(
        max_discount_percent=max_percent,
        has_free_delivery=has_free_delivery,
        max_delivery_percent=max_delivery_percent,
        max_delivery_amount=max_delivery_amount,
    )
    logger.debug(f"Max offers: {summary.model_dump()}")
    return summary


def delivery_fee_discount(
    pricing_options: Iterable[PricingOption],
    delivery_fee: float,
    now: Optional[datetime] = None,
) -> float:
    """Largest delivery-fee reduction granted by any active option.

    Free delivery waives the whole fee, a percentage takes that share of the
    fee, a fixed value is taken as-is. The result lies in [0, delivery_fee].
    """
    if delivery_fee is None or delivery_fee <= 0:
        return 0.0
    now = resolve_now(now)

    best = 0.0
    for pricing in pricing_options:
        if not is_offer_active(pricing, now):
            continue
        offer = delivery_offer(pricing)
        if offer is None:
            continue
        if offer.delivery_type is DeliveryType.FREE:
            amount = delivery_fee
        elif offer.delivery_type is DeliveryType.PERCENTAGE:
            amount = delivery_fee * offer.value / 100
        else:
            amount = offer.value
        if amount > best:
            best = amount

    return min(best, delivery_fee)
