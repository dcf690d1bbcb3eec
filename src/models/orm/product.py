from datetime import datetime
from decimal import Decimal

from sqlalchemy import Boolean, CheckConstraint, DateTime, Integer, String, Text, func
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from src.models.orm.base import Base

PRODUCT_TYPES = ("frame", "sunglasses", "contact_lens", "eye_hygiene")
STOCK_STATUSES = ("in_stock", "out_of_stock", "backorder")


class Product(Base):
    __tablename__ = "products"
    __table_args__ = (
        CheckConstraint(f"product_type IN {PRODUCT_TYPES}", name="ck_products_product_type"),
        CheckConstraint(f"stock_status IN {STOCK_STATUSES}", name="ck_products_stock_status"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    sku: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    product_type: Mapped[str] = mapped_column(String(30), nullable=False, default="frame")
    price: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0.00"))
    stock_quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    stock_status: Mapped[str] = mapped_column(String(20), nullable=False, default="in_stock")
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    # [url, ...]
    images: Mapped[list | None] = mapped_column(JSONB, nullable=True)
    # [{"name", "hex_code", "price", "images": [url, ...]}, ...]
    color_images: Mapped[list | None] = mapped_column(JSONB, nullable=True)
    # [{"mm", "image_url", "price"}, ...]
    mm_calibers: Mapped[list | None] = mapped_column(JSONB, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    @property
    def primary_image(self) -> str | None:
        if self.images:
            return self.images[0]
        return None
