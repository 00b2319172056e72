"""Limited-time offer API endpoints."""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from marketplace.core.config import settings
from marketplace.core.dependencies import get_menu_repository
from marketplace.services.menu.repository import MenuRepository
from marketplace.services.pricing.offers import OfferSummary

router = APIRouter()
logger = logging.getLogger(__name__)


class DeliveryDiscountRequest(BaseModel):
    """Cart items and the delivery fee to discount."""

    item_ids: List[str]
    delivery_fee: Optional[float] = Field(default=None, ge=0)


class DeliveryDiscountResponse(BaseModel):
    discount: float
    delivery_fee: float
    final_fee: float


@router.get("/api/offers/summary", response_model=OfferSummary)
async def get_offer_summary(
    restaurant_id: Optional[str] = None,
    menu_repository: MenuRepository = Depends(get_menu_repository),
):
    """Best running offers across a restaurant's menu."""
    logger.info(f"[OFFERS] Summary requested - Restaurant: {restaurant_id or 'all'}")
    try:
        summary = await menu_repository.get_offer_summary(restaurant_id)
    except Exception as e:
        logger.error(
            f"[OFFERS] Error building summary - Error: {type(e).__name__}: {str(e)}",
            exc_info=True,
        )
        raise HTTPException(status_code=500, detail=f"Error building offer summary: {str(e)}")
    logger.debug(f"[OFFERS] Summary - {summary.model_dump()}")
    return summary


@router.post("/api/offers/delivery-discount", response_model=DeliveryDiscountResponse)
async def get_delivery_discount(
    request: DeliveryDiscountRequest,
    menu_repository: MenuRepository = Depends(get_menu_repository),
):
    """Delivery fee reduction earned by the items in a cart."""
    delivery_fee = (
        request.delivery_fee if request.delivery_fee is not None else settings.default_delivery_fee
    )
    logger.info(
        f"[OFFERS] Delivery discount requested - {len(request.item_ids)} items, fee {delivery_fee} {settings.currency}"
    )
    try:
        discount = await menu_repository.get_delivery_discount(request.item_ids, delivery_fee)
    except Exception as e:
        logger.error(
            f"[OFFERS] Error computing delivery discount - Error: {type(e).__name__}: {str(e)}",
            exc_info=True,
        )
        raise HTTPException(status_code=500, detail=f"Error computing delivery discount: {str(e)}")
    return DeliveryDiscountResponse(
        discount=discount,
        delivery_fee=delivery_fee,
        final_fee=max(delivery_fee - discount, 0.0),
    )
