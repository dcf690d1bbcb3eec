from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.models.orm.product import Product
from src.models.orm.variant import EyeHygieneVariant, SizeVolumeVariant


async def get_by_id(db: AsyncSession, product_id: int) -> Product | None:
    return await db.get(Product, product_id)


async def get_eye_hygiene_variant(
    db: AsyncSession, product_id: int, variant_id: int
) -> EyeHygieneVariant | None:
    result = await db.execute(
        select(EyeHygieneVariant).where(
            EyeHygieneVariant.id == variant_id,
            EyeHygieneVariant.product_id == product_id,
            EyeHygieneVariant.is_active.is_(True),
        )
    )
    return result.scalar_one_or_none()


async def get_size_volume_variant(
    db: AsyncSession, product_id: int, variant_id: int
) -> SizeVolumeVariant | None:
    result = await db.execute(
        select(SizeVolumeVariant).where(
            SizeVolumeVariant.id == variant_id,
            SizeVolumeVariant.product_id == product_id,
            SizeVolumeVariant.is_active.is_(True),
        )
    )
    return result.scalar_one_or_none()


async def list_eye_hygiene_variants(db: AsyncSession, product_id: int) -> list[EyeHygieneVariant]:
    result = await db.execute(
        select(EyeHygieneVariant)
        .where(EyeHygieneVariant.product_id == product_id, EyeHygieneVariant.is_active.is_(True))
        .order_by(EyeHygieneVariant.sort_order)
    )
    return list(result.scalars().all())


async def list_size_volume_variants(db: AsyncSession, product_id: int) -> list[SizeVolumeVariant]:
    result = await db.execute(
        select(SizeVolumeVariant)
        .where(SizeVolumeVariant.product_id == product_id, SizeVolumeVariant.is_active.is_(True))
        .order_by(SizeVolumeVariant.sort_order)
    )
    return list(result.scalars().all())
