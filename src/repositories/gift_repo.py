from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.models.orm.gift import ProductGift
from src.models.orm.product import Product


async def list_for_product(db: AsyncSession, product_id: int) -> list[tuple[ProductGift, Product]]:
    result = await db.execute(
        select(ProductGift, Product)
        .join(Product, ProductGift.gift_product_id == Product.id)
        .where(ProductGift.product_id == product_id, ProductGift.is_active.is_(True))
        .order_by(ProductGift.created_at.desc())
    )
    return [(gift, product) for gift, product in result.all()]


async def list_matching_rules(
    db: AsyncSession, product_id: int, quantity: int
) -> list[tuple[ProductGift, Product]]:
    """Active rules whose quantity window contains ``quantity``."""
    result = await db.execute(
        select(ProductGift, Product)
        .join(Product, ProductGift.gift_product_id == Product.id)
        .where(
            ProductGift.product_id == product_id,
            ProductGift.is_active.is_(True),
            ProductGift.min_quantity <= quantity,
            or_(ProductGift.max_quantity.is_(None), ProductGift.max_quantity >= quantity),
        )
        .order_by(ProductGift.id)
    )
    return [(gift, product) for gift, product in result.all()]
