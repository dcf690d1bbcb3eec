from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies.database import get_db
from src.models.dto.coupon import CouponApply, CouponResult
from src.services import coupon_service

router = APIRouter(prefix="/coupons", tags=["coupons"])


@router.post("/apply", response_model=CouponResult)
async def apply_coupon(body: CouponApply, db: AsyncSession = Depends(get_db)):
    if body.cart_items:
        subtotal = coupon_service.subtotal_from_lines(body.cart_items)
    else:
        subtotal = body.subtotal
    return await coupon_service.apply_coupon(db, body.code, subtotal)
