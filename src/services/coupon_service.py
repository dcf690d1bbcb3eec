import logging
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from src.core.exceptions import BadRequestError, NotFoundError
from src.core.money import ZERO, round_money, to_decimal
from src.models.orm.coupon import Coupon
from src.repositories import coupon_repo

logger = logging.getLogger(__name__)


def _aware(dt: datetime) -> datetime:
    return dt if dt.tzinfo else dt.replace(tzinfo=timezone.utc)


def coupon_rejection(coupon: Coupon, subtotal: Decimal, now: datetime) -> str | None:
    """Reason the coupon does not apply, or None if it does."""
    if not coupon.is_active:
        return "Coupon is not active"
    if coupon.starts_at and _aware(coupon.starts_at) > now:
        return "Coupon is not yet valid"
    if coupon.ends_at and _aware(coupon.ends_at) < now:
        return "Coupon has expired"
    min_amount = to_decimal(coupon.min_order_amount)
    if min_amount and subtotal < min_amount:
        return f"Minimum order amount of {min_amount} required"
    return None


def discount_for(coupon: Coupon, subtotal: Decimal) -> Decimal:
    value = to_decimal(coupon.discount_value) or ZERO
    if coupon.discount_type == "percentage":
        amount = subtotal * value / Decimal(100)
        cap = to_decimal(coupon.max_discount)
        if cap and amount > cap:
            amount = cap
    elif coupon.discount_type == "fixed_amount":
        amount = min(value, subtotal)
    else:
        # free_shipping is settled on the shipping line; bogo needs line-level rules
        amount = ZERO
    return round_money(amount)


def evaluate_coupon(coupon: Coupon, subtotal: Decimal, now: datetime | None = None) -> dict | None:
    """Discount result for a subtotal, or None when the coupon does not apply."""
    now = now or datetime.now(timezone.utc)
    if coupon_rejection(coupon, subtotal, now):
        return None
    return _result(coupon, subtotal)


def _result(coupon: Coupon, subtotal: Decimal) -> dict:
    return {
        "id": coupon.id,
        "code": coupon.code,
        "discount_type": coupon.discount_type,
        "discount_value": coupon.discount_value,
        "discount_amount": discount_for(coupon, subtotal),
        "free_shipping": coupon.discount_type == "free_shipping",
    }


async def apply_coupon(
    db: AsyncSession, code: str, subtotal: Decimal, now: datetime | None = None
) -> dict:
    """Validate a code against a subtotal, raising on the first reason it does not apply."""
    coupon = await coupon_repo.get_by_code(db, code)
    if not coupon:
        raise NotFoundError("Invalid coupon code")
    reason = coupon_rejection(coupon, subtotal, now or datetime.now(timezone.utc))
    if reason:
        raise BadRequestError(reason)
    return _result(coupon, subtotal)


async def try_apply_coupon(db: AsyncSession, code: str | None, subtotal: Decimal) -> dict | None:
    """Best-effort variant used on cart reads: any failure yields None."""
    if not code:
        return None
    try:
        async with db.begin_nested():
            coupon = await coupon_repo.get_by_code(db, code)
        if not coupon:
            return None
        return evaluate_coupon(coupon, subtotal)
    except Exception:
        logger.exception("Coupon %r could not be applied to cart", code)
        return None


def subtotal_from_lines(lines) -> Decimal:
    total = ZERO
    for line in lines:
        price = line.unit_price if line.unit_price is not None else line.price
        total += (to_decimal(price) or ZERO) * line.quantity
    return round_money(total)
