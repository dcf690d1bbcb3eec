from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies.auth import get_current_user
from src.api.dependencies.database import get_db
from src.core.config import settings
from src.models.dto import DetailResponse
from src.models.dto.cart import (
    AddToCartResponse,
    CartItemAdd,
    CartItemResponse,
    CartItemUpdate,
    CartResponse,
)
from src.models.orm.user import User
from src.notifications.service import notify_admins_cart_event
from src.services import cart_service

router = APIRouter(prefix="/cart", tags=["cart"])


@router.get("", response_model=CartResponse)
async def get_cart(
    coupon_code: str | None = Query(None, max_length=50),
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return await cart_service.get_cart(db, user.id, coupon_code)


@router.post("/items", response_model=AddToCartResponse, status_code=201)
async def add_to_cart(
    body: CartItemAdd,
    response: Response,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    result = await cart_service.add_to_cart(db, user.id, body)
    if result["merged"]:
        response.status_code = 200
    item = result["item"]
    await notify_admins_cart_event(
        db,
        subject=f"Cart: {item['product_name']} added",
        template_name="cart_item_added.html",
        context={
            "customer_name": user.display_name,
            "customer_email": user.email,
            "quantity": body.quantity,
            "product_name": item["product_name"],
            "unit_price": item["unit_price"],
            "currency": settings.currency,
            "selected_color": item["customization"].selected_color,
            "lens_index": item["lens_index"],
            "gifts_added": result["gifts_added"],
            "frontend_url": settings.frontend_url,
        },
    )
    return result


@router.put("/items/{item_id}", response_model=CartItemResponse | DetailResponse)
async def update_cart_item(
    item_id: int,
    body: CartItemUpdate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    item = await cart_service.update_cart_item(db, user.id, item_id, body.quantity)
    if item is None:
        return {"detail": "Item removed from cart"}
    return item


@router.delete("/items/{item_id}", status_code=204)
async def remove_from_cart(
    item_id: int,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    await cart_service.remove_from_cart(db, user.id, item_id)
    return Response(status_code=204)


@router.delete("", status_code=204)
async def clear_cart(
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    await cart_service.clear_cart(db, user.id)
    return Response(status_code=204)
