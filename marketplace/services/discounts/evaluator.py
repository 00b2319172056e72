"""Restaurant discount evaluation."""
import logging
from datetime import datetime
from typing import Iterable, Optional

from pydantic import BaseModel

from marketplace.services.discounts.models import Discount, DiscountStatus, DiscountType
from marketplace.utils.time import resolve_now

logger = logging.getLogger(__name__)


class AppliedDiscount(BaseModel):
    """The discount chosen for an order and the amount it takes off."""

    discount_id: str
    name: str
    type: Optional[DiscountType] = None
    amount: float


def is_discount_active(discount: Discount, now: Optional[datetime] = None) -> bool:
    """Active status, inside [start_date, end_date) and under its usage cap."""
    if discount.status is not DiscountStatus.ACTIVE:
        return False
    now = resolve_now(now)
    if discount.start_date is not None and now < discount.start_date:
        return False
    if discount.end_date is not None and now >= discount.end_date:
        return False
    return not discount.usage_exhausted


def is_discount_expired(discount: Discount, now: Optional[datetime] = None) -> bool:
    """Past its end date or out of uses. Derived, never written back."""
    now = resolve_now(now)
    if discount.end_date is not None and now >= discount.end_date:
        return True
    return discount.usage_exhausted


def calculate_discount(
    discount: Discount, order_amount: float, now: Optional[datetime] = None
) -> float:
    """
    Amount to deduct from an order total.

    Free delivery and buy-one-get-one discounts are applied to the delivery
    fee and the order lines respectively, so they deduct nothing here. No
    rounding is applied; callers round for display.

    Args:
        discount: The discount to apply
        order_amount: Candidate order total
        now: Evaluation instant, defaults to the current time

    Returns:
        Amount in [0, order_amount], and at most maximum_discount_amount
        when a cap is set. Percentages outside 0-100 deduct nothing.
    """
    if not is_discount_active(discount, now):
        return 0.0
    if order_amount is None or order_amount < discount.minimum_order_amount:
        return 0.0

    if discount.type is DiscountType.PERCENTAGE:
        if not 0 <= discount.value <= 100:
            logger.debug(f"Discount {discount.id}: percentage {discount.value} out of range")
            return 0.0
        amount = order_amount * (discount.value / 100)
    elif discount.type is DiscountType.FIXED_AMOUNT:
        amount = discount.value
    else:
        amount = 0.0

    cap = discount.maximum_discount_amount
    if cap is not None and cap > 0 and amount > cap:
        amount = cap

    return max(min(amount, order_amount), 0.0)


def applies_to(
    discount: Discount,
    menu_item_id: Optional[str] = None,
    category: Optional[str] = None,
) -> bool:
    """Whether the discount's scoping lists cover an item or category.

    Empty scoping lists mean the whole menu.
    """
    if not discount.applicable_menu_items and not discount.applicable_categories:
        return True
    if menu_item_id is not None and menu_item_id in discount.applicable_menu_items:
        return True
    if category is not None and category in discount.applicable_categories:
        return True
    return False


def grants_free_delivery(
    discount: Discount, order_amount: float, now: Optional[datetime] = None
) -> bool:
    if discount.type is not DiscountType.FREE_DELIVERY:
        return False
    if not is_discount_active(discount, now):
        return False
    return order_amount is not None and order_amount >= discount.minimum_order_amount


def select_best_discount(
    discounts: Iterable[Discount],
    order_amount: float,
    now: Optional[datetime] = None,
) -> Optional[AppliedDiscount]:
    """
    Pick the single order-level discount to apply.

    Order-level discounts never stack. The discount taking the most off the
    order wins; on equal amounts the earlier one in ``discounts`` is kept.

    Returns:
        The winning discount, or None when none deducts anything
    """
    now = resolve_now(now)
    best: Optional[AppliedDiscount] = None
    for discount in discounts:
        amount = calculate_discount(discount, order_amount, now)
        if amount <= 0:
            continue
        if best is None or amount > best.amount:
            best = AppliedDiscount(
                discount_id=discount.id,
                name=discount.name,
                type=discount.type,
                amount=amount,
            )
    if best is not None:
        logger.debug(f"Best discount for {order_amount}: {best.discount_id} ({best.amount})")
    return best
