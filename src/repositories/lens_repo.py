from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from src.models.orm.lens import (
    LensFinish,
    LensOption,
    LensTreatment,
    PrescriptionLensType,
)


async def get_option_with_colors(db: AsyncSession, option_id: int) -> LensOption | None:
    result = await db.execute(
        select(LensOption)
        .where(LensOption.id == option_id)
        .options(
            selectinload(LensOption.finishes).selectinload(LensFinish.colors),
            selectinload(LensOption.colors),
        )
    )
    return result.scalar_one_or_none()


async def list_active_options(db: AsyncSession) -> list[LensOption]:
    result = await db.execute(
        select(LensOption)
        .where(LensOption.is_active.is_(True))
        .options(
            selectinload(LensOption.finishes).selectinload(LensFinish.colors),
            selectinload(LensOption.colors),
        )
        .order_by(LensOption.sort_order)
    )
    return list(result.scalars().all())


async def list_active_treatments(
    db: AsyncSession, ids: list[int] | None = None
) -> list[LensTreatment]:
    stmt = select(LensTreatment).where(LensTreatment.is_active.is_(True))
    if ids is not None:
        stmt = stmt.where(LensTreatment.id.in_(ids))
    result = await db.execute(stmt.order_by(LensTreatment.sort_order, LensTreatment.id))
    return list(result.scalars().all())


async def get_prescription_lens_type(
    db: AsyncSession, type_id: int
) -> PrescriptionLensType | None:
    result = await db.execute(
        select(PrescriptionLensType)
        .where(PrescriptionLensType.id == type_id)
        .options(selectinload(PrescriptionLensType.colors))
    )
    return result.scalar_one_or_none()


async def list_active_prescription_lens_types(db: AsyncSession) -> list[PrescriptionLensType]:
    result = await db.execute(
        select(PrescriptionLensType)
        .where(PrescriptionLensType.is_active.is_(True))
        .options(selectinload(PrescriptionLensType.colors))
        .order_by(PrescriptionLensType.sort_order)
    )
    return list(result.scalars().all())
