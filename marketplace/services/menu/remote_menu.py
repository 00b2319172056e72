"""Menu provider backed by the backend-as-a-service REST API."""
import logging
from typing import Any, Dict, List, Optional

import httpx

from marketplace.services.discounts.models import Discount
from marketplace.services.menu.base import Menu, MenuItem, MenuProvider

logger = logging.getLogger(__name__)

MENU_ITEM_COLUMNS = (
    "id,restaurant_id,name,description,category,price,is_available,"
    "variants,pricing_options,supplements,ingredients,pack_ingredients"
)


class RemoteMenuProvider(MenuProvider):
    """Reads menu items and discounts from PostgREST-style tables.

    Only the ``menu_items`` and ``discounts`` tables are read; nothing is
    cached or written.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=f"{self.base_url}/rest/v1",
            headers={
                "apikey": self.api_key,
                "Authorization": f"Bearer {self.api_key}",
                "Accept": "application/json",
            },
            timeout=self.timeout,
            transport=self._transport,
        )

    async def _select(self, table: str, params: Dict[str, str]) -> List[Dict[str, Any]]:
        """Run a select and return its rows."""
        async with self._client() as client:
            try:
                response = await client.get(f"/{table}", params=params)
                response.raise_for_status()
            except httpx.HTTPError as e:
                logger.error(f"[BACKEND] Select on {table} failed - {type(e).__name__}: {e}")
                raise
        rows = response.json()
        if not isinstance(rows, list):
            logger.warning(f"[BACKEND] Unexpected payload from {table}: {type(rows).__name__}")
            return []
        return [row for row in rows if isinstance(row, dict)]

    async def get_menu(self, restaurant_id: Optional[str] = None) -> Menu:
        params = {"select": MENU_ITEM_COLUMNS, "order": "name.asc"}
        if restaurant_id is not None:
            params["restaurant_id"] = f"eq.{restaurant_id}"
        rows = await self._select("menu_items", params)
        items = [MenuItem.from_record(row) for row in rows]
        categories: List[str] = []
        for item in items:
            if item.category and item.category not in categories:
                categories.append(item.category)
        logger.debug(f"[BACKEND] Loaded {len(items)} menu items")
        return Menu(items=items, categories=categories)

    async def get_item_by_id(self, item_id: str) -> Optional[MenuItem]:
        rows = await self._select(
            "menu_items", {"select": MENU_ITEM_COLUMNS, "id": f"eq.{item_id}", "limit": "1"}
        )
        return MenuItem.from_record(rows[0]) if rows else None

    async def get_item_by_name(self, item_name: str) -> Optional[MenuItem]:
        rows = await self._select(
            "menu_items",
            {
                "select": MENU_ITEM_COLUMNS,
                "name": f"ilike.{_escape_like(item_name.strip())}",
                "limit": "1",
            },
        )
        return MenuItem.from_record(rows[0]) if rows else None

    async def get_discounts(self, restaurant_id: Optional[str] = None) -> List[Discount]:
        params = {"select": "*", "order": "created_at.asc"}
        if restaurant_id is not None:
            params["restaurant_id"] = f"eq.{restaurant_id}"
        rows = await self._select("discounts", params)
        return [Discount.from_record(row) for row in rows]


def _escape_like(value: str) -> str:
    """Escape LIKE wildcards (``*`` is PostgREST's alias for ``%``)."""
    for char in ("\\", "%", "_", "*"):
        value = value.replace(char, "\\" + char)
    return value
