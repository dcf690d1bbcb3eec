from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.models.orm.coupon import Coupon


def normalize_code(code: str) -> str:
    return code.strip().upper()


async def get_by_code(db: AsyncSession, code: str) -> Coupon | None:
    result = await db.execute(select(Coupon).where(Coupon.code == normalize_code(code)))
    return result.scalar_one_or_none()
