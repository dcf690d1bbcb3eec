from uuid import UUID

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies.database import get_db
from src.core.exceptions import UnauthorizedError
from src.core.security import verify_access_token
from src.models.orm.user import User
from src.repositories import user_repo

security = HTTPBearer(auto_error=False)


def _subject(payload: dict) -> UUID:
    try:
        return UUID(str(payload.get("sub")))
    except ValueError as e:
        raise UnauthorizedError("Invalid or expired token") from e


async def get_current_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Resolve the bearer token to an active user. Every cart route depends on this."""
    if not credentials:
        raise UnauthorizedError("Missing authentication token")

    payload = verify_access_token(credentials.credentials)
    if not payload:
        raise UnauthorizedError("Invalid or expired token")

    user = await user_repo.get_by_id(db, _subject(payload))
    if not user or not user.is_active:
        raise UnauthorizedError("User not found or inactive")

    request.state.user = user
    return user
