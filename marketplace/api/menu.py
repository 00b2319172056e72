"""Menu API endpoints."""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel

from marketplace.core.dependencies import get_menu_repository
from marketplace.services.menu.base import MenuItem
from marketplace.services.menu.repository import MenuRepository
from marketplace.services.pricing.offers import offer_status
from marketplace.utils.time import utc_now

router = APIRouter()
logger = logging.getLogger(__name__)


class MenuItemResponse(BaseModel):
    """Menu item response model."""

    id: str
    name: str
    description: Optional[str] = None
    price: float
    effective_price: float
    category: Optional[str] = None
    is_available: bool
    offer_active: bool
    discount_percentage: Optional[int] = None
    offer_types: List[str] = []


class MenuResponse(BaseModel):
    """Menu response model."""

    items: List[MenuItemResponse]
    categories: List[str] = []


class PricingOfferResponse(BaseModel):
    """Offer state of a single pricing option."""

    pricing_id: str
    size: str
    price: float
    original_price: Optional[float] = None
    status: str
    offer_types: List[str] = []


class ItemOfferResponse(BaseModel):
    """Offer state of a menu item and each of its pricing options."""

    item_id: str
    offer_active: bool
    discount_percentage: Optional[int] = None
    active_pricing_id: Optional[str] = None
    pricing: List[PricingOfferResponse] = []


def _item_response(item: MenuItem, now) -> MenuItemResponse:
    active = item.active_offer_pricing(now)
    return MenuItemResponse(
        id=item.id,
        name=item.name,
        description=item.description,
        price=item.price,
        effective_price=item.effective_price(now),
        category=item.category,
        is_available=item.effective_availability(now),
        offer_active=active is not None,
        discount_percentage=item.discount_percentage(now),
        offer_types=list(active.offer_types) if active is not None else [],
    )


@router.get("/api/menu", response_model=MenuResponse)
async def get_menu(
    request: Request,
    restaurant_id: Optional[str] = None,
    menu_repository: MenuRepository = Depends(get_menu_repository),
):
    """Get the menu with the current offer state of every item."""
    logger.info(
        f"[MENU] Request received - Client: {request.client.host if request.client else 'unknown'}"
    )

    try:
        menu = await menu_repository.get_menu(restaurant_id)
        logger.info(f"[MENU] Menu loaded - {len(menu.items)} items, {len(menu.categories)} categories")
        now = utc_now()
        return MenuResponse(
            items=[_item_response(item, now) for item in menu.items],
            categories=menu.categories,
        )
    except Exception as e:
        logger.error(
            f"[MENU] Error fetching menu - Error: {type(e).__name__}: {str(e)}",
            exc_info=True,
        )
        raise HTTPException(status_code=500, detail=f"Error fetching menu: {str(e)}")


@router.get("/api/menu/items/{item_id}/offer", response_model=ItemOfferResponse)
async def get_item_offer(
    item_id: str,
    menu_repository: MenuRepository = Depends(get_menu_repository),
):
    """Get the limited-time offer state of one menu item."""
    logger.debug(f"[MENU] Offer lookup for item {item_id}")

    try:
        item = await menu_repository.get_item_by_id(item_id)
    except Exception as e:
        logger.error(
            f"[MENU] Error fetching item {item_id} - Error: {type(e).__name__}: {str(e)}",
            exc_info=True,
        )
        raise HTTPException(status_code=500, detail=f"Error fetching item: {str(e)}")

    if item is None:
        logger.warning(f"[MENU] Item not found - ID: {item_id}")
        raise HTTPException(status_code=404, detail=f"Item '{item_id}' not found")

    now = utc_now()
    active = item.active_offer_pricing(now)
    return ItemOfferResponse(
        item_id=item.id,
        offer_active=active is not None,
        discount_percentage=item.discount_percentage(now),
        active_pricing_id=active.id if active is not None else None,
        pricing=[
            PricingOfferResponse(
                pricing_id=p.id,
                size=p.size,
                price=p.price,
                original_price=p.original_price,
                status=offer_status(p, now).value,
                offer_types=list(p.offer_types),
            )
            for p in item.pricing_options
        ],
    )
