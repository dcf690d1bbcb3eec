from decimal import Decimal
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.models.orm.cart import Cart, CartItem
from src.models.orm.product import Product


async def get_by_user(db: AsyncSession, user_id: UUID) -> Cart | None:
    result = await db.execute(select(Cart).where(Cart.user_id == user_id))
    return result.scalar_one_or_none()


async def get_or_create(db: AsyncSession, user_id: UUID) -> Cart:
    cart = await get_by_user(db, user_id)
    if cart:
        return cart
    cart = Cart(user_id=user_id)
    db.add(cart)
    await db.flush()
    return cart


async def list_items_with_products(
    db: AsyncSession, cart_id: int
) -> list[tuple[CartItem, Product]]:
    result = await db.execute(
        select(CartItem, Product)
        .join(Product, CartItem.product_id == Product.id)
        .where(CartItem.cart_id == cart_id)
        .order_by(CartItem.added_at, CartItem.id)
    )
    return [(item, product) for item, product in result.all()]


async def list_items(db: AsyncSession, cart_id: int) -> list[CartItem]:
    result = await db.execute(select(CartItem).where(CartItem.cart_id == cart_id))
    return list(result.scalars().all())


async def find_lines(
    db: AsyncSession, cart_id: int, product_id: int, lens_index: Decimal | None
) -> list[CartItem]:
    """Lines of this product with the same lens index (NULL matches NULL)."""
    stmt = select(CartItem).where(
        CartItem.cart_id == cart_id,
        CartItem.product_id == product_id,
    )
    if lens_index is None:
        stmt = stmt.where(CartItem.lens_index.is_(None))
    else:
        stmt = stmt.where(CartItem.lens_index == lens_index)
    result = await db.execute(stmt.order_by(CartItem.id))
    return list(result.scalars().all())


async def get_item(db: AsyncSession, cart_id: int, item_id: int) -> CartItem | None:
    result = await db.execute(
        select(CartItem).where(CartItem.id == item_id, CartItem.cart_id == cart_id)
    )
    return result.scalar_one_or_none()


async def has_free_line(db: AsyncSession, cart_id: int, product_id: int) -> bool:
    result = await db.execute(
        select(CartItem.id).where(
            CartItem.cart_id == cart_id,
            CartItem.product_id == product_id,
            CartItem.unit_price == Decimal("0"),
        ).limit(1)
    )
    return result.scalar_one_or_none() is not None


async def clear(db: AsyncSession, cart_id: int) -> int:
    result = await db.execute(delete(CartItem).where(CartItem.cart_id == cart_id))
    return result.rowcount
