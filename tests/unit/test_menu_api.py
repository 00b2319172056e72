"""Unit tests for menu, offer and discount API endpoints."""


class TestHealthAPI:
    def test_health(self, test_client):
        response = test_client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


class TestMenuAPI:
    """Test menu API endpoints."""

    def test_get_menu_success(self, test_client):
        """Test GET /api/menu returns full menu."""
        response = test_client.get("/api/menu")

        assert response.status_code == 200
        data = response.json()
        assert [item["id"] for item in data["items"]] == ["burger", "combo", "wings", "tacos", "soda"]
        assert data["categories"] == ["mains", "packs", "drinks"]

    def test_menu_items_carry_offer_state(self, test_client):
        items = {item["id"]: item for item in test_client.get("/api/menu").json()["items"]}

        assert items["burger"]["offer_active"] is True
        assert items["burger"]["discount_percentage"] == 50
        assert items["combo"]["effective_price"] == 1500.0
        assert items["wings"]["offer_active"] is False
        assert items["wings"]["is_available"] is False
        assert items["soda"]["discount_percentage"] is None

    def test_get_menu_for_restaurant(self, test_client):
        response = test_client.get("/api/menu", params={"restaurant_id": "resto-2"})
        assert [item["id"] for item in response.json()["items"]] == ["tacos"]

    def test_get_item_offer(self, test_client):
        response = test_client.get("/api/menu/items/wings/offer")

        assert response.status_code == 200
        data = response.json()
        assert data["offer_active"] is False
        assert data["active_pricing_id"] is None
        assert data["pricing"][0]["status"] == "expired"

    def test_get_item_offer_scheduled(self, test_client):
        data = test_client.get("/api/menu/items/tacos/offer").json()
        assert data["pricing"][0]["status"] == "scheduled"

    def test_get_item_offer_not_found(self, test_client):
        response = test_client.get("/api/menu/items/missing/offer")
        assert response.status_code == 404


class TestOffersAPI:
    """Test offer API endpoints."""

    def test_offer_summary(self, test_client):
        response = test_client.get("/api/offers/summary", params={"restaurant_id": "resto-1"})

        assert response.status_code == 200
        data = response.json()
        assert data["max_discount_percent"] == 50
        assert data["has_free_delivery"] is False
        assert data["max_delivery_percent"] == 50

    def test_delivery_discount(self, test_client):
        response = test_client.post(
            "/api/offers/delivery-discount",
            json={"item_ids": ["combo", "soda"], "delivery_fee": 300},
        )

        assert response.status_code == 200
        assert response.json() == {"discount": 150.0, "delivery_fee": 300.0, "final_fee": 150.0}

    def test_delivery_discount_rejects_negative_fee(self, test_client):
        response = test_client.post(
            "/api/offers/delivery-discount", json={"item_ids": [], "delivery_fee": -1}
        )
        assert response.status_code == 422


class TestDiscountsAPI:
    """Test discount API endpoints."""

    def test_calculate(self, test_client):
        response = test_client.post(
            "/api/discounts/calculate",
            json={
                "discount": {
                    "id": "d1",
                    "type": "percentage",
                    "value": 10,
                    "minimum_order_amount": 500,
                    "maximum_discount_amount": 80,
                },
                "order_amount": 1000,
            },
        )

        assert response.status_code == 200
        assert response.json() == {"amount": 80.0, "is_active": True}

    def test_calculate_tolerates_non_string_fields(self, test_client):
        response = test_client.post(
            "/api/discounts/calculate",
            json={
                "discount": {"id": "d1", "type": "fixedAmount", "value": 100, "description": 5},
                "order_amount": 1000,
            },
        )
        assert response.status_code == 200
        assert response.json() == {"amount": 100.0, "is_active": True}

    def test_calculate_exhausted_discount(self, test_client):
        response = test_client.post(
            "/api/discounts/calculate",
            json={
                "discount": {"id": "d1", "type": "fixedAmount", "value": 100, "usage_limit": 5, "used_count": 5},
                "order_amount": 1000,
            },
        )
        assert response.json() == {"amount": 0.0, "is_active": False}

    def test_best_discount(self, test_client):
        response = test_client.post(
            "/api/discounts/best", json={"restaurant_id": "resto-1", "order_amount": 2500}
        )

        assert response.status_code == 200
        data = response.json()
        assert data["discount_id"] == "flat-100"
        assert data["amount"] == 100.0
        assert data["type"] == "fixedAmount"

    def test_best_discount_none(self, test_client):
        response = test_client.post(
            "/api/discounts/best", json={"restaurant_id": "resto-1", "order_amount": 10}
        )
        assert response.status_code == 200
        assert response.json() is None
