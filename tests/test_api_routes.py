"""Tests for API routes: auth gates, input validation and response shapes via HTTP.

The approach: instead of importing src.main (which validates secrets and
configures logging at import time), we build a minimal FastAPI app that mounts
the same routers with the database dependency overridden.
"""
import uuid
from decimal import Decimal
from unittest.mock import AsyncMock, patch

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from src.api.dependencies.auth import get_current_user
from src.api.dependencies.database import get_db
from src.api.routes import cart, coupons, customization, health, product_gifts, products
from src.core.exceptions import NotFoundError
from src.core.security import create_access_token
from src.mappers.cart import cart_item_to_dict
from tests.factories import make_cart_item, make_product, make_user


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def customer():
    return make_user(user_id=uuid.uuid4(), email="jane@example.com", display_name="Jane Doe")


@pytest.fixture
def app(mock_db):
    """Build a lightweight FastAPI app with the same routers as production."""
    _app = FastAPI()
    for module in (health, cart, products, customization, product_gifts, coupons):
        _app.include_router(module.router, prefix="/api")

    async def _override_db():
        yield mock_db

    _app.dependency_overrides[get_db] = _override_db

    yield _app
    _app.dependency_overrides.clear()


@pytest.fixture
async def anon_client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
async def auth_client(app, customer):
    app.dependency_overrides[get_current_user] = lambda: customer
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


def _item_payload(**kwargs):
    item = make_cart_item(**kwargs)
    return cart_item_to_dict(item, make_product())


# ============================================================================
# Auth
# ============================================================================

class TestAuthentication:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("method, path", [
        ("get", "/api/cart"),
        ("delete", "/api/cart"),
        ("delete", "/api/cart/items/1"),
    ])
    async def test_cart_requires_token(self, anon_client, method, path):
        resp = await getattr(anon_client, method)(path)
        assert resp.status_code == 401

    @pytest.mark.asyncio
    async def test_add_requires_token(self, anon_client):
        resp = await anon_client.post("/api/cart/items", json={"product_id": 7})
        assert resp.status_code == 401

    @pytest.mark.asyncio
    async def test_invalid_token(self, anon_client):
        resp = await anon_client.get("/api/cart", headers={"Authorization": "Bearer not-a-jwt"})
        assert resp.status_code == 401

    @pytest.mark.asyncio
    @patch("src.api.routes.cart.cart_service.get_cart", new_callable=AsyncMock)
    @patch("src.api.dependencies.auth.user_repo.get_by_id", new_callable=AsyncMock)
    async def test_valid_token_resolves_user(self, mock_user, mock_cart, anon_client, customer):
        mock_user.return_value = customer
        mock_cart.return_value = {
            "id": 1, "items": [], "subtotal": Decimal("0.00"), "item_count": 0, "coupon": None,
        }
        token = create_access_token(str(customer.id), customer.email, customer.role)

        resp = await anon_client.get("/api/cart", headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 200
        mock_user.assert_awaited_once()
        assert mock_cart.call_args.args[1] == customer.id

    @pytest.mark.asyncio
    @patch("src.api.dependencies.auth.user_repo.get_by_id", new_callable=AsyncMock)
    async def test_inactive_user_rejected(self, mock_user, anon_client):
        user = make_user(is_active=False)
        mock_user.return_value = user
        token = create_access_token(str(user.id), user.email, user.role)

        resp = await anon_client.get("/api/cart", headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 401


# ============================================================================
# Cart
# ============================================================================

class TestCartRoutes:
    @pytest.mark.asyncio
    @patch("src.api.routes.cart.cart_service.get_cart", new_callable=AsyncMock)
    async def test_get_cart_with_coupon(self, mock_cart, auth_client, customer):
        mock_cart.return_value = {
            "id": 1,
            "items": [_item_payload(quantity=2, unit_price="115.00")],
            "subtotal": Decimal("230.00"),
            "item_count": 1,
            "coupon": {
                "id": 1, "code": "SAVE10", "discount_type": "percentage",
                "discount_value": Decimal("10.00"), "discount_amount": Decimal("23.00"),
                "free_shipping": False,
            },
        }

        resp = await auth_client.get("/api/cart", params={"coupon_code": "SAVE10"})
        assert resp.status_code == 200
        data = resp.json()
        assert data["subtotal"] == "230.00"
        assert data["items"][0]["line_total"] == "230.00"
        assert data["coupon"]["discount_amount"] == "23.00"
        mock_cart.assert_awaited_once()
        assert mock_cart.call_args.args[2] == "SAVE10"

    @pytest.mark.asyncio
    @patch("src.api.routes.cart.cart_service.add_to_cart", new_callable=AsyncMock)
    async def test_add_item(self, mock_add, auth_client):
        mock_add.return_value = {
            "detail": "Item added to cart",
            "merged": False,
            "item": _item_payload(customization={"selected_color": "#000000"}),
            "gifts_added": [99],
            "coupon": None,
        }

        resp = await auth_client.post(
            "/api/cart/items",
            json={"product_id": 7, "quantity": 1, "selected_color": "#000000", "treatment_ids": "1,2"},
        )
        assert resp.status_code == 201
        data = resp.json()
        assert data["gifts_added"] == [99]
        assert data["item"]["customization"]["selected_color"] == "#000000"
        body = mock_add.call_args.args[2]
        assert body.treatment_ids == [1, 2]

    @pytest.mark.asyncio
    @patch("src.api.routes.cart.notify_admins_cart_event", new_callable=AsyncMock, return_value=1)
    @patch("src.api.routes.cart.cart_service.add_to_cart", new_callable=AsyncMock)
    async def test_merged_add_returns_200_and_notifies_admins(self, mock_add, mock_notify, auth_client):
        mock_add.return_value = {
            "detail": "Cart item updated", "merged": True, "item": _item_payload(),
            "gifts_added": [], "coupon": None,
        }

        resp = await auth_client.post("/api/cart/items", json={"product_id": 7})
        assert resp.status_code == 200
        assert resp.json()["merged"] is True
        assert mock_notify.call_args.kwargs["template_name"] == "cart_item_added.html"
        assert mock_notify.call_args.kwargs["context"]["customer_email"] == "jane@example.com"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("payload", [
        {},
        {"product_id": 7, "quantity": 0},
        {"product_id": 7, "quantity": 101},
        {"product_id": 7, "variant_type": "unknown"},
    ])
    async def test_add_item_validation(self, auth_client, payload):
        resp = await auth_client.post("/api/cart/items", json=payload)
        assert resp.status_code == 422

    @pytest.mark.asyncio
    @patch("src.api.routes.cart.cart_service.add_to_cart", new_callable=AsyncMock)
    async def test_add_unknown_product(self, mock_add, auth_client):
        mock_add.side_effect = NotFoundError("Product not found")
        resp = await auth_client.post("/api/cart/items", json={"product_id": 404})
        assert resp.status_code == 404
        assert resp.json()["detail"] == "Product not found"

    @pytest.mark.asyncio
    @patch("src.api.routes.cart.cart_service.update_cart_item", new_callable=AsyncMock)
    async def test_update_quantity(self, mock_update, auth_client):
        mock_update.return_value = _item_payload(quantity=3)
        resp = await auth_client.put("/api/cart/items/1", json={"quantity": 3})
        assert resp.status_code == 200
        assert resp.json()["quantity"] == 3

    @pytest.mark.asyncio
    @patch("src.api.routes.cart.cart_service.update_cart_item", new_callable=AsyncMock, return_value=None)
    async def test_update_to_zero_removes(self, mock_update, auth_client):
        resp = await auth_client.put("/api/cart/items/1", json={"quantity": 0})
        assert resp.status_code == 200
        assert resp.json() == {"detail": "Item removed from cart"}

    @pytest.mark.asyncio
    @patch("src.api.routes.cart.cart_service.remove_from_cart", new_callable=AsyncMock)
    async def test_remove(self, mock_remove, auth_client, customer):
        resp = await auth_client.delete("/api/cart/items/5")
        assert resp.status_code == 204
        mock_remove.assert_awaited_once()
        assert mock_remove.call_args.args[1:] == (customer.id, 5)

    @pytest.mark.asyncio
    @patch("src.api.routes.cart.cart_service.clear_cart", new_callable=AsyncMock, return_value=2)
    async def test_clear(self, mock_clear, auth_client):
        resp = await auth_client.delete("/api/cart")
        assert resp.status_code == 204


# ============================================================================
# Public catalog, customization, gifts, coupons
# ============================================================================

class TestPublicRoutes:
    @pytest.mark.asyncio
    async def test_health(self, anon_client):
        resp = await anon_client.get("/api/health")
        assert resp.status_code == 200
        assert resp.json()["status"] == "healthy"

    @pytest.mark.asyncio
    @patch("src.services.customization_service.product_repo.list_eye_hygiene_variants", new_callable=AsyncMock, return_value=[])
    @patch("src.services.customization_service.product_repo.list_size_volume_variants", new_callable=AsyncMock, return_value=[])
    @patch("src.services.customization_service.product_repo.get_by_id", new_callable=AsyncMock)
    async def test_variants(self, mock_get, mock_sizes, mock_hygiene, anon_client):
        mock_get.return_value = make_product(mm_calibers=[{"mm": "52"}])
        resp = await anon_client.get("/api/products/7/variants")
        assert resp.status_code == 200
        data = resp.json()
        assert data["product"]["id"] == 7
        assert data["variants"][0]["id"] == "caliber_52"

    @pytest.mark.asyncio
    @patch("src.services.customization_service.product_repo.get_by_id", new_callable=AsyncMock, return_value=None)
    async def test_variants_unknown_product(self, mock_get, anon_client):
        resp = await anon_client.get("/api/products/404/variants")
        assert resp.status_code == 404

    @pytest.mark.asyncio
    @patch("src.services.customization_service.product_repo.get_by_id", new_callable=AsyncMock)
    async def test_customization_quote(self, mock_get, anon_client):
        mock_get.return_value = make_product(price="100.00")
        resp = await anon_client.post(
            "/api/products/7/customization/calculate",
            json={"prescription_lens_type": "progressive", "quantity": 2},
        )
        assert resp.status_code == 200
        data = resp.json()
        assert data["subtotal"] == "160.00"
        assert data["total"] == "320.00"
        assert data["breakdown"][-1]["type"] == "prescription_lens"

    @pytest.mark.asyncio
    @patch(
        "src.services.customization_service.lens_repo.list_active_prescription_lens_types",
        new_callable=AsyncMock, return_value=[],
    )
    async def test_prescription_lens_types_fallback(self, mock_list, anon_client):
        resp = await anon_client.get("/api/customization/prescription-lens-types")
        assert resp.status_code == 200
        types = resp.json()["prescription_lens_types"]
        assert [t["id"] for t in types] == ["distance_vision", "near_vision", "progressive"]
        assert types[0]["base_price"] == "60.00"

    @pytest.mark.asyncio
    @patch("src.api.routes.product_gifts.gift_service.list_gifts_for_product", new_callable=AsyncMock, return_value=[])
    async def test_product_gifts(self, mock_list, anon_client):
        resp = await anon_client.get("/api/product-gifts/product/7")
        assert resp.status_code == 200
        assert resp.json() == {"gifts": []}

    @pytest.mark.asyncio
    @patch("src.api.routes.coupons.coupon_service.apply_coupon", new_callable=AsyncMock)
    async def test_apply_coupon_from_cart_lines(self, mock_apply, anon_client):
        mock_apply.return_value = {
            "id": 1, "code": "SAVE10", "discount_type": "percentage",
            "discount_value": Decimal("10.00"), "discount_amount": Decimal("3.00"),
            "free_shipping": False,
        }
        resp = await anon_client.post(
            "/api/coupons/apply",
            json={"code": "save10", "cart_items": [{"unit_price": "15.00", "quantity": 2}]},
        )
        assert resp.status_code == 200
        assert resp.json()["discount_amount"] == "3.00"
        assert mock_apply.call_args.args[1:] == ("save10", Decimal("30.00"))

    @pytest.mark.asyncio
    async def test_apply_coupon_requires_amount(self, anon_client):
        resp = await anon_client.post("/api/coupons/apply", json={"code": "SAVE10"})
        assert resp.status_code == 422
