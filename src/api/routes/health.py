import time

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies.database import get_db
from src.core.config import settings

router = APIRouter(tags=["health"])


async def _check_database(db: AsyncSession) -> dict:
    try:
        start = time.monotonic()
        await db.execute(text("SELECT 1"))
        latency_ms = round((time.monotonic() - start) * 1000)
        return {"status": "up", "latency_ms": latency_ms}
    except Exception:
        return {"status": "down"}


def _check_smtp() -> dict:
    if not settings.smtp_host:
        return {"status": "not_configured"}
    return {"status": "configured"}


@router.get("/health")
async def health_check(db: AsyncSession = Depends(get_db)):
    checks = {
        "database": await _check_database(db),
        "smtp": _check_smtp(),
    }
    overall = "healthy" if checks["database"]["status"] == "up" else "unhealthy"
    return {"status": overall, "checks": checks}
