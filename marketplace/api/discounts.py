"""Restaurant discount API endpoints."""
import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from marketplace.core.dependencies import get_menu_repository
from marketplace.services.discounts.evaluator import (
    AppliedDiscount,
    calculate_discount,
    is_discount_active,
)
from marketplace.services.discounts.models import Discount
from marketplace.services.menu.repository import MenuRepository
from marketplace.utils.time import utc_now

router = APIRouter()
logger = logging.getLogger(__name__)


class CalculateDiscountRequest(BaseModel):
    """A backend discount record and the order total to apply it to."""

    discount: Dict[str, Any]
    order_amount: float


class CalculateDiscountResponse(BaseModel):
    amount: float
    is_active: bool


class BestDiscountRequest(BaseModel):
    restaurant_id: str
    order_amount: float


@router.post("/api/discounts/calculate", response_model=CalculateDiscountResponse)
async def calculate(request: CalculateDiscountRequest):
    """Amount a single discount takes off an order."""
    discount = Discount.from_record(request.discount)
    now = utc_now()
    amount = calculate_discount(discount, request.order_amount, now)
    logger.info(
        f"[DISCOUNTS] Calculated - ID: {discount.id or 'unknown'}, order: {request.order_amount}, amount: {amount}"
    )
    return CalculateDiscountResponse(amount=amount, is_active=is_discount_active(discount, now))


@router.post("/api/discounts/best", response_model=Optional[AppliedDiscount])
async def best_discount(
    request: BestDiscountRequest,
    menu_repository: MenuRepository = Depends(get_menu_repository),
):
    """The single restaurant discount that takes the most off an order."""
    logger.info(
        f"[DISCOUNTS] Best discount requested - Restaurant: {request.restaurant_id}, order: {request.order_amount}"
    )
    try:
        applied = await menu_repository.get_best_discount(request.restaurant_id, request.order_amount)
    except Exception as e:
        logger.error(
            f"[DISCOUNTS] Error selecting discount - Error: {type(e).__name__}: {str(e)}",
            exc_info=True,
        )
        raise HTTPException(status_code=500, detail=f"Error selecting discount: {str(e)}")
    if applied is None:
        logger.debug("[DISCOUNTS] No discount applies")
    return applied
