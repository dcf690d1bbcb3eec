"""Gift and coupon side effects against a real session: failures roll back to a savepoint."""
from decimal import Decimal
from unittest.mock import AsyncMock, patch

import pytest
import pytest_asyncio
from sqlalchemy import event, select
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from src.models.orm.cart import CartItem
from src.services.coupon_service import try_apply_coupon
from src.services.gift_service import attach_gifts
from tests.factories import make_gift, make_product

CART_ITEMS_DDL = """
CREATE TABLE cart_items (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    cart_id INTEGER NOT NULL,
    product_id INTEGER NOT NULL,
    quantity INTEGER NOT NULL,
    lens_index NUMERIC(3, 2),
    lens_coatings JSON,
    prescription_id INTEGER,
    customization JSON,
    unit_price NUMERIC(10, 2) NOT NULL,
    added_at DATETIME NOT NULL DEFAULT CURRENT_TIMESTAMP
)
"""

# Product 98 stands in for a gift whose insert the database refuses
REJECT_PRODUCT_98_DDL = """
CREATE TRIGGER reject_product_98 BEFORE INSERT ON cart_items
WHEN NEW.product_id = 98
BEGIN
    SELECT RAISE(ABORT, 'gift rejected');
END
"""


@pytest_asyncio.fixture
async def session():
    engine = create_async_engine("sqlite+aiosqlite://", poolclass=StaticPool)

    # pysqlite only emits SAVEPOINT correctly with explicit BEGIN handling
    @event.listens_for(engine.sync_engine, "connect")
    def _connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _begin(conn):
        conn.exec_driver_sql("BEGIN")

    async with engine.begin() as conn:
        await conn.exec_driver_sql(CART_ITEMS_DDL)
        await conn.exec_driver_sql(REJECT_PRODUCT_98_DDL)

    factory = async_sessionmaker(engine, expire_on_commit=False)
    async with factory() as db:
        yield db
    await engine.dispose()


async def _add_paid_line(db) -> None:
    db.add(CartItem(
        cart_id=1, product_id=7, quantity=2, unit_price=Decimal("100.00"),
        lens_coatings=[], customization={},
    ))
    await db.flush()


async def _committed_lines(db) -> list[tuple[int, Decimal]]:
    result = await db.execute(
        select(CartItem.product_id, CartItem.unit_price).order_by(CartItem.id)
    )
    return [(row.product_id, Decimal(str(row.unit_price))) for row in result.all()]


class TestGiftSavepoints:
    @pytest.mark.asyncio
    @patch("src.services.gift_service.gift_repo.list_matching_rules", new_callable=AsyncMock)
    async def test_rejected_gift_does_not_break_transaction(self, mock_rules, session):
        mock_rules.return_value = [
            (make_gift(gift_id=1, gift_product_id=98), make_product(product_id=98, price="9.00")),
            (make_gift(gift_id=2, gift_product_id=99), make_product(product_id=99, price="9.00")),
        ]
        await _add_paid_line(session)

        added = await attach_gifts(session, 1, 7, 2)
        await session.commit()

        assert added == [99]
        assert await _committed_lines(session) == [(7, Decimal("100")), (99, Decimal("0"))]

    @pytest.mark.asyncio
    @patch("src.services.gift_service.gift_repo.list_matching_rules", new_callable=AsyncMock)
    async def test_only_rejected_gift_keeps_paid_line(self, mock_rules, session):
        mock_rules.return_value = [
            (make_gift(gift_product_id=98), make_product(product_id=98, price="9.00")),
        ]
        await _add_paid_line(session)

        assert await attach_gifts(session, 1, 7, 2) == []
        await session.commit()

        assert await _committed_lines(session) == [(7, Decimal("100"))]


class TestCouponSavepoint:
    @pytest.mark.asyncio
    async def test_failed_lookup_keeps_cart_writes(self, session):
        await _add_paid_line(session)

        # No coupons table exists, so the lookup fails at the database
        assert await try_apply_coupon(session, "SAVE10", Decimal("200.00")) is None
        assert not session.in_nested_transaction()
        await session.commit()

        assert await _committed_lines(session) == [(7, Decimal("100"))]
