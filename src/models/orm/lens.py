from decimal import Decimal

from sqlalchemy import Boolean, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.models.orm.base import Base


class LensOption(Base):
    """Lens family offered on the product page (clear, photochromic, sun...)."""

    __tablename__ = "lens_options"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    type: Mapped[str] = mapped_column(String(50), nullable=False, default="classic")
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    base_price: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0.00"))
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    finishes: Mapped[list["LensFinish"]] = relationship(
        back_populates="lens_option", order_by="LensFinish.sort_order"
    )
    colors: Mapped[list["LensColor"]] = relationship(
        primaryjoin="LensOption.id == LensColor.lens_option_id",
        order_by="LensColor.sort_order",
        viewonly=True,
    )


class LensFinish(Base):
    __tablename__ = "lens_finishes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    lens_option_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("lens_options.id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    price_adjustment: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0.00"))
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    lens_option: Mapped[LensOption] = relationship(back_populates="finishes")
    colors: Mapped[list["LensColor"]] = relationship(
        primaryjoin="LensFinish.id == LensColor.lens_finish_id",
        order_by="LensColor.sort_order",
        viewonly=True,
    )


class LensColor(Base):
    """Tint attached to a lens option, one of its finishes, or a prescription lens type.

    Photochromic and prescription-sun colors are rows whose option has the
    matching ``type``.
    """

    __tablename__ = "lens_colors"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    lens_option_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("lens_options.id", ondelete="CASCADE"), nullable=True
    )
    lens_finish_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("lens_finishes.id", ondelete="CASCADE"), nullable=True
    )
    prescription_lens_type_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("prescription_lens_types.id", ondelete="CASCADE"), nullable=True
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    color_code: Mapped[str | None] = mapped_column(String(50), nullable=True)
    hex_code: Mapped[str | None] = mapped_column(String(7), nullable=True)
    image_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    price_adjustment: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0.00"))
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


class LensTreatment(Base):
    __tablename__ = "lens_treatments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    type: Mapped[str] = mapped_column(String(50), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    price: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0.00"))
    icon: Mapped[str | None] = mapped_column(String(255), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


class PrescriptionLensType(Base):
    __tablename__ = "prescription_lens_types"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    prescription_type: Mapped[str] = mapped_column(String(50), nullable=False)
    base_price: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("60.00"))
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    colors: Mapped[list[LensColor]] = relationship(
        primaryjoin="PrescriptionLensType.id == LensColor.prescription_lens_type_id",
        order_by="LensColor.sort_order",
        viewonly=True,
    )


class PrescriptionLensVariant(Base):
    """Sub-option of a prescription lens type, e.g. a progressive design tier."""

    __tablename__ = "prescription_lens_variants"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    prescription_lens_type_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("prescription_lens_types.id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    price: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0.00"))
    is_recommended: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


class LensThicknessMaterial(Base):
    __tablename__ = "lens_thickness_materials"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    price: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0.00"))
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
