import asyncio
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.core.config import settings
from src.notifications.email import send_email
from src.repositories import user_repo

logger = logging.getLogger(__name__)


async def notify_admins_cart_event(
    db: AsyncSession,
    *,
    subject: str,
    template_name: str,
    context: dict,
) -> int:
    """Email every active admin. Never raises; returns the number of emails sent."""
    if not settings.smtp_host:
        return 0
    try:
        async with db.begin_nested():
            admins = await user_repo.get_active_admins(db)
        if not admins:
            return 0
        results = await asyncio.gather(
            *(send_email(a.email, subject, template_name, dict(context)) for a in admins)
        )
    except Exception:
        logger.exception("Admin cart notification failed: %s", subject)
        return 0
    return sum(1 for r in results if r is True)
