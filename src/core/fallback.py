import copy
import logging
from collections.abc import Awaitable, Callable
from typing import Generic, TypeVar

from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)

T = TypeVar("T")


class FallbackSource(Generic[T]):
    """Read rows from the primary store, or static defaults when it has none.

    The defaults are deep-copied on every fallback read so callers can mutate
    what they get back without leaking into later requests.
    """

    def __init__(
        self,
        name: str,
        loader: Callable[[AsyncSession], Awaitable[list[T]]],
        defaults: list[T],
    ):
        self.name = name
        self._loader = loader
        self._defaults = tuple(defaults)

    async def load(self, db: AsyncSession) -> tuple[list[T], bool]:
        """Return (rows, from_fallback)."""
        rows = await self._loader(db)
        if rows:
            return list(rows), False
        logger.info("No %s rows in database, serving defaults", self.name)
        return [copy.deepcopy(d) for d in self._defaults], True

    async def all(self, db: AsyncSession) -> list[T]:
        rows, _ = await self.load(db)
        return rows
