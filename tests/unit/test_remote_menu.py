"""Unit tests for the backend-backed menu provider."""
import httpx
import pytest

from marketplace.services.discounts.models import DiscountType
from marketplace.services.menu.remote_menu import RemoteMenuProvider
from marketplace.services.menu.repository import MenuRepository

MENU_ROWS = [
    {
        "id": "burger",
        "restaurant_id": "resto-1",
        "name": "Burger",
        "price": "1000",
        "pricing_options": [
            {
                "id": "burger-lto",
                "price": 1000,
                "original_price": 2000,
                "is_limited_offer": True,
                "offer_types": ["special_price"],
                "offer_end_at": "2099-01-01T00:00:00Z",
            }
        ],
    }
]

DISCOUNT_ROWS = [
    {"id": "d1", "restaurant_id": "resto-1", "name": "Ten", "type": "percentage", "value": 10},
]


@pytest.fixture
def requests_seen():
    return []


@pytest.fixture
def provider(requests_seen):
    def handler(request: httpx.Request) -> httpx.Response:
        requests_seen.append(request)
        if request.url.path == "/rest/v1/menu_items":
            if request.url.params.get("id") == "eq.missing":
                return httpx.Response(200, json=[])
            return httpx.Response(200, json=MENU_ROWS)
        if request.url.path == "/rest/v1/discounts":
            return httpx.Response(200, json=DISCOUNT_ROWS)
        return httpx.Response(404, json={"message": "not found"})

    return RemoteMenuProvider(
        base_url="https://backend.test/",
        api_key="secret",
        transport=httpx.MockTransport(handler),
    )


class TestRemoteMenuProvider:
    """Test reads against the REST backend."""

    @pytest.mark.asyncio
    async def test_get_menu(self, provider, requests_seen):
        menu = await provider.get_menu("resto-1")

        assert [item.id for item in menu.items] == ["burger"]
        assert menu.items[0].price == 1000.0
        assert menu.items[0].discount_percentage() == 50

        request = requests_seen[0]
        assert request.headers["apikey"] == "secret"
        assert request.headers["Authorization"] == "Bearer secret"
        assert request.url.params["restaurant_id"] == "eq.resto-1"
        assert request.url.params["order"] == "name.asc"

    @pytest.mark.asyncio
    async def test_get_item_by_id(self, provider, requests_seen):
        item = await provider.get_item_by_id("burger")
        assert item.name == "Burger"
        assert requests_seen[0].url.params["limit"] == "1"
        assert await provider.get_item_by_id("missing") is None

    @pytest.mark.asyncio
    async def test_get_item_by_name_uses_ilike(self, provider, requests_seen):
        await provider.get_item_by_name(" burger ")
        assert requests_seen[0].url.params["name"] == "ilike.burger"

    @pytest.mark.asyncio
    async def test_get_item_by_name_escapes_wildcards(self, provider, requests_seen):
        await provider.get_item_by_name("50%_off*")
        assert requests_seen[0].url.params["name"] == "ilike.50\\%\\_off\\*"

    @pytest.mark.asyncio
    async def test_get_discounts(self, provider):
        discounts = await provider.get_discounts("resto-1")
        assert discounts[0].type is DiscountType.PERCENTAGE

    @pytest.mark.asyncio
    async def test_best_discount_through_repository(self, provider):
        best = await MenuRepository(provider).get_best_discount("resto-1", 1000)
        assert best.discount_id == "d1"
        assert best.amount == 100

    @pytest.mark.asyncio
    async def test_http_errors_propagate(self):
        provider = RemoteMenuProvider(
            base_url="https://backend.test",
            api_key="secret",
            transport=httpx.MockTransport(lambda request: httpx.Response(500, json={})),
        )
        with pytest.raises(httpx.HTTPStatusError):
            await provider.get_menu()

    @pytest.mark.asyncio
    async def test_unexpected_payload_is_empty(self):
        provider = RemoteMenuProvider(
            base_url="https://backend.test",
            api_key="secret",
            transport=httpx.MockTransport(lambda request: httpx.Response(200, json={"error": "x"})),
        )
        menu = await provider.get_menu()
        assert menu.items == []
