import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.core.money import ZERO
from src.models.dto.customization import Customization
from src.models.orm.cart import CartItem
from src.models.orm.product import Product
from src.repositories import cart_repo, gift_repo

logger = logging.getLogger(__name__)


def _gift_available(product: Product) -> bool:
    return product.is_active and product.stock_status == "in_stock"


async def attach_gifts(
    db: AsyncSession, cart_id: int, product_id: int, quantity: int
) -> list[int]:
    """Add free lines for every gift rule triggered by ``quantity`` of ``product_id``.

    A gift already in the cart at price 0 is not added again. Each rule runs in
    its own savepoint so a failure rolls back only that gift; errors are logged
    and never propagate. Returns the gift product ids that were added.
    """
    try:
        async with db.begin_nested():
            rules = await gift_repo.list_matching_rules(db, product_id, quantity)
    except Exception:
        logger.exception("Failed to load gift rules for product %s", product_id)
        return []

    added: list[int] = []
    for rule, gift_product in rules:
        try:
            if not _gift_available(gift_product):
                continue
            async with db.begin_nested():
                if await cart_repo.has_free_line(db, cart_id, gift_product.id):
                    continue
                db.add(CartItem(
                    cart_id=cart_id,
                    product_id=gift_product.id,
                    quantity=1,
                    unit_price=ZERO,
                    lens_coatings=[],
                    customization=Customization(
                        is_gift=True, gift_for_product_id=product_id,
                    ).to_json(),
                ))
                await db.flush()
            added.append(gift_product.id)
            logger.info(
                "Attached gift product %s for product %s (rule %s)",
                gift_product.id, product_id, rule.id,
            )
        except Exception:
            logger.exception("Failed to attach gift rule %s", rule.id)
    return added


async def list_gifts_for_product(db: AsyncSession, product_id: int) -> list[dict]:
    rows = await gift_repo.list_for_product(db, product_id)
    return [
        {
            "id": gift.id,
            "product_id": gift.product_id,
            "gift_product_id": gift.gift_product_id,
            "min_quantity": gift.min_quantity,
            "max_quantity": gift.max_quantity,
            "description": gift.description,
            "gift_product": {
                "id": product.id,
                "name": product.name,
                "slug": product.slug,
                "price": product.price,
                "image_url": product.primary_image,
                "stock_status": product.stock_status,
            },
        }
        for gift, product in rows
    ]
