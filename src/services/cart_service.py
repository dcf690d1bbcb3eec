import logging
from decimal import Decimal
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from src.core.exceptions import BadRequestError, InsufficientStockError, NotFoundError
from src.core.money import ZERO, round_money
from src.mappers.cart import cart_item_to_dict
from src.models.dto.cart import CartItemAdd
from src.models.dto.customization import Customization, load_customization
from src.models.orm.cart import CartItem
from src.models.orm.product import Product
from src.repositories import cart_repo, product_repo
from src.services.coupon_service import try_apply_coupon
from src.services.gift_service import attach_gifts
from src.services.pricing_service import LensAddOns, accumulate_price
from src.services.variant_resolver import resolve_variant, selected_color_of

logger = logging.getLogger(__name__)


# ── Merge rule ───────────────────────────────────────────────────────────────


def normalize_color(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip().lower()
    return value or None


def is_merge_target(
    item: CartItem,
    product_id: int,
    lens_index: Decimal | None,
    selected_color: str | None,
) -> bool:
    """Whether an add-to-cart request increments ``item`` instead of creating a line.

    Same product, same lens index, and either neither side has a selected color
    or both have the same normalized one. Variant metadata other than the color
    is not compared. Free gift lines are never incremented.
    """
    if item.product_id != product_id or item.lens_index != lens_index:
        return False
    customization = load_customization(item.customization)
    if customization.is_gift:
        return False
    existing = normalize_color(customization.selected_color)
    requested = normalize_color(selected_color)
    if existing is None and requested is None:
        return True
    return existing is not None and existing == requested


def find_merge_target(
    items: list[CartItem],
    product_id: int,
    lens_index: Decimal | None,
    selected_color: str | None,
) -> CartItem | None:
    return next(
        (i for i in items if is_merge_target(i, product_id, lens_index, selected_color)),
        None,
    )


# ── Cart operations ──────────────────────────────────────────────────────────


def _subtotal(items: list[CartItem]) -> Decimal:
    total = ZERO
    for item in items:
        total += item.unit_price * item.quantity
    return round_money(total)


async def get_cart(db: AsyncSession, user_id: UUID, coupon_code: str | None = None) -> dict:
    cart = await cart_repo.get_or_create(db, user_id)
    rows = await cart_repo.list_items_with_products(db, cart.id)

    subtotal = _subtotal([item for item, _ in rows])
    return {
        "id": cart.id,
        "items": [cart_item_to_dict(item, product) for item, product in rows],
        "subtotal": subtotal,
        "item_count": len(rows),
        "coupon": await try_apply_coupon(db, coupon_code, subtotal),
    }


async def add_to_cart(db: AsyncSession, user_id: UUID, body: CartItemAdd) -> dict:
    if body.quantity <= 0:
        raise BadRequestError("Quantity must be greater than zero")

    cart = await cart_repo.get_or_create(db, user_id)

    product = await product_repo.get_by_id(db, body.product_id)
    if not product:
        raise NotFoundError("Product not found")
    if not product.is_active:
        raise BadRequestError("Product not available")
    if product.stock_quantity < body.quantity:
        raise InsufficientStockError()

    variant = await resolve_variant(
        db,
        product,
        selected_variant_id=body.selected_variant_id,
        variant_type=body.variant_type,
        selected_mm_caliber=body.selected_mm_caliber,
        selected_color=body.selected_color,
    )
    base_price = variant.price if variant else product.price
    unit_price = await accumulate_price(
        db,
        base_price,
        LensAddOns(
            progressive_variant_id=body.progressive_variant_id,
            lens_thickness_material_id=body.lens_thickness_material_id,
            treatment_ids=body.treatment_ids,
            photochromic_color_id=body.photochromic_color_id,
            prescription_sun_color_id=body.prescription_sun_color_id,
        ),
    )
    selected_color = selected_color_of(variant)

    candidates = await cart_repo.find_lines(db, cart.id, product.id, body.lens_index)
    item = find_merge_target(candidates, product.id, body.lens_index, selected_color)
    merged = item is not None

    if item:
        item.quantity = item.quantity + body.quantity
    else:
        customization = Customization(
            variant=variant,
            selected_color=selected_color,
            lens_index=body.lens_index,
            progressive_variant_id=body.progressive_variant_id,
            lens_thickness_material_id=body.lens_thickness_material_id,
            treatment_ids=body.treatment_ids,
            photochromic_color_id=body.photochromic_color_id,
            prescription_sun_color_id=body.prescription_sun_color_id,
        )
        item = CartItem(
            cart_id=cart.id,
            product_id=product.id,
            quantity=body.quantity,
            unit_price=unit_price,
            lens_index=body.lens_index,
            lens_coatings=[body.lens_coating] if body.lens_coating else [],
            prescription_id=body.prescription_id,
            customization=customization.to_json(),
        )
        db.add(item)
    await db.flush()

    gifts_added = await attach_gifts(db, cart.id, product.id, item.quantity)

    coupon = None
    if body.coupon_code:
        coupon = await try_apply_coupon(
            db, body.coupon_code, _subtotal(await cart_repo.list_items(db, cart.id))
        )

    return {
        "detail": "Cart item updated" if merged else "Item added to cart",
        "merged": merged,
        "item": cart_item_to_dict(item, product),
        "gifts_added": gifts_added,
        "coupon": coupon,
    }


async def _require_cart(db: AsyncSession, user_id: UUID):
    cart = await cart_repo.get_by_user(db, user_id)
    if not cart:
        raise NotFoundError("Cart not found")
    return cart


async def update_cart_item(
    db: AsyncSession, user_id: UUID, item_id: int, quantity: int
) -> dict | None:
    """Set a line's quantity. Returns None when the line was removed (quantity <= 0)."""
    cart = await _require_cart(db, user_id)
    item = await cart_repo.get_item(db, cart.id, item_id)
    if not item:
        raise NotFoundError("Cart item not found")

    if quantity <= 0:
        await db.delete(item)
        await db.flush()
        return None

    product = await db.get(Product, item.product_id)
    if quantity > item.quantity and product is not None:
        if product.stock_quantity < quantity - item.quantity:
            raise InsufficientStockError()

    item.quantity = quantity
    await db.flush()
    return cart_item_to_dict(item, product)


async def remove_from_cart(db: AsyncSession, user_id: UUID, item_id: int) -> None:
    cart = await _require_cart(db, user_id)
    item = await cart_repo.get_item(db, cart.id, item_id)
    if not item:
        raise NotFoundError("Cart item not found")
    await db.delete(item)
    await db.flush()


async def clear_cart(db: AsyncSession, user_id: UUID) -> int:
    cart = await _require_cart(db, user_id)
    count = await cart_repo.clear(db, cart.id)
    if count:
        logger.info("Cleared %d items from cart %s", count, cart.id)
    return count
