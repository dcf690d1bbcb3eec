"""Initial schema: users, catalog, lens customization, carts, gifts and coupons

Revision ID: 001
Revises:
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID, JSONB

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _money(name: str, nullable: bool = False, default: str | None = "0.00") -> sa.Column:
    return sa.Column(
        name,
        sa.Numeric(10, 2),
        nullable=nullable,
        server_default=default if not nullable else None,
    )


def _flags() -> list[sa.Column]:
    return [
        sa.Column("is_active", sa.Boolean, nullable=False, server_default="true"),
        sa.Column("sort_order", sa.Integer, nullable=False, server_default="0"),
    ]


def upgrade() -> None:
    # --- Users ---
    op.create_table(
        "users",
        sa.Column("id", UUID(as_uuid=True), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("email", sa.String(255), unique=True, nullable=False),
        sa.Column("display_name", sa.String(255), nullable=False),
        sa.Column("role", sa.String(50), nullable=False, server_default="customer"),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default="true"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
    )
    op.create_index("idx_users_active", "users", ["is_active"])

    # --- Products ---
    op.create_table(
        "products",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("slug", sa.String(255), unique=True, nullable=False),
        sa.Column("sku", sa.String(100), unique=True, nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("product_type", sa.String(30), nullable=False, server_default="frame"),
        _money("price"),
        sa.Column("stock_quantity", sa.Integer, nullable=False, server_default="0"),
        sa.Column("stock_status", sa.String(20), nullable=False, server_default="in_stock"),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default="true"),
        sa.Column("images", JSONB, nullable=True),
        sa.Column("color_images", JSONB, nullable=True),
        sa.Column("mm_calibers", JSONB, nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.CheckConstraint(
            "product_type IN ('frame', 'sunglasses', 'contact_lens', 'eye_hygiene')",
            name="ck_products_product_type",
        ),
        sa.CheckConstraint(
            "stock_status IN ('in_stock', 'out_of_stock', 'backorder')",
            name="ck_products_stock_status",
        ),
    )
    op.create_index("idx_products_active", "products", ["is_active"])

    op.create_table(
        "eye_hygiene_variants",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("product_id", sa.Integer, sa.ForeignKey("products.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        _money("price", nullable=True),
        sa.Column("image_url", sa.String(500), nullable=True),
        sa.Column("stock_quantity", sa.Integer, nullable=True),
        *_flags(),
    )
    op.create_index("idx_eye_hygiene_variants_product", "eye_hygiene_variants", ["product_id"])

    op.create_table(
        "size_volume_variants",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("product_id", sa.Integer, sa.ForeignKey("products.id", ondelete="CASCADE"), nullable=False),
        sa.Column("size_volume", sa.String(50), nullable=False),
        sa.Column("pack_type", sa.String(50), nullable=True),
        sa.Column("sku", sa.String(100), nullable=True),
        _money("price", nullable=True),
        _money("compare_at_price", nullable=True),
        sa.Column("image_url", sa.String(500), nullable=True),
        sa.Column("stock_quantity", sa.Integer, nullable=False, server_default="0"),
        sa.Column("stock_status", sa.String(20), nullable=False, server_default="in_stock"),
        *_flags(),
    )
    op.create_index("idx_size_volume_variants_product", "size_volume_variants", ["product_id"])

    # --- Lens customization ---
    op.create_table(
        "lens_options",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("slug", sa.String(255), unique=True, nullable=False),
        sa.Column("type", sa.String(50), nullable=False, server_default="classic"),
        sa.Column("description", sa.Text, nullable=True),
        _money("base_price"),
        *_flags(),
    )
    op.create_table(
        "lens_finishes",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("lens_option_id", sa.Integer, sa.ForeignKey("lens_options.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("slug", sa.String(255), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        _money("price_adjustment"),
        *_flags(),
    )
    op.create_table(
        "prescription_lens_types",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("slug", sa.String(255), unique=True, nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("prescription_type", sa.String(50), nullable=False),
        _money("base_price", default="60.00"),
        *_flags(),
    )
    op.create_table(
        "prescription_lens_variants",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "prescription_lens_type_id", sa.Integer,
            sa.ForeignKey("prescription_lens_types.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("slug", sa.String(255), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        _money("price"),
        sa.Column("is_recommended", sa.Boolean, nullable=False, server_default="false"),
        *_flags(),
    )
    op.create_table(
        "lens_colors",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("lens_option_id", sa.Integer, sa.ForeignKey("lens_options.id", ondelete="CASCADE"), nullable=True),
        sa.Column("lens_finish_id", sa.Integer, sa.ForeignKey("lens_finishes.id", ondelete="CASCADE"), nullable=True),
        sa.Column(
            "prescription_lens_type_id", sa.Integer,
            sa.ForeignKey("prescription_lens_types.id", ondelete="CASCADE"), nullable=True,
        ),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("color_code", sa.String(50), nullable=True),
        sa.Column("hex_code", sa.String(7), nullable=True),
        sa.Column("image_url", sa.String(500), nullable=True),
        _money("price_adjustment"),
        *_flags(),
    )
    op.create_table(
        "lens_treatments",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("slug", sa.String(255), unique=True, nullable=False),
        sa.Column("type", sa.String(50), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        _money("price"),
        sa.Column("icon", sa.String(255), nullable=True),
        *_flags(),
    )
    op.create_table(
        "lens_thickness_materials",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("slug", sa.String(255), unique=True, nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        _money("price"),
        *_flags(),
    )

    # --- Carts ---
    op.create_table(
        "carts",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("user_id", UUID(as_uuid=True), sa.ForeignKey("users.id"), unique=True, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
    )
    op.create_table(
        "cart_items",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("cart_id", sa.Integer, sa.ForeignKey("carts.id", ondelete="CASCADE"), nullable=False),
        sa.Column("product_id", sa.Integer, sa.ForeignKey("products.id"), nullable=False),
        sa.Column("quantity", sa.Integer, nullable=False, server_default="1"),
        sa.Column("lens_index", sa.Numeric(3, 2), nullable=True),
        sa.Column("lens_coatings", JSONB, nullable=True),
        sa.Column("prescription_id", sa.Integer, nullable=True),
        sa.Column("customization", JSONB, nullable=True),
        sa.Column("unit_price", sa.Numeric(10, 2), nullable=False),
        sa.Column("added_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
    )
    op.create_index("idx_cart_items_cart", "cart_items", ["cart_id"])
    op.create_index("idx_cart_items_product", "cart_items", ["product_id"])

    # --- Gifts ---
    op.create_table(
        "product_gifts",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("product_id", sa.Integer, sa.ForeignKey("products.id", ondelete="CASCADE"), nullable=False),
        sa.Column("gift_product_id", sa.Integer, sa.ForeignKey("products.id", ondelete="CASCADE"), nullable=False),
        sa.Column("min_quantity", sa.Integer, nullable=False, server_default="1"),
        sa.Column("max_quantity", sa.Integer, nullable=True),
        sa.Column("description", sa.String(500), nullable=True),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default="true"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.UniqueConstraint("product_id", "gift_product_id", name="uq_product_gift_pair"),
    )
    op.create_index("idx_product_gifts_product", "product_gifts", ["product_id"])

    # --- Coupons ---
    op.create_table(
        "coupons",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("code", sa.String(50), unique=True, nullable=False),
        sa.Column("description", sa.String(500), nullable=True),
        sa.Column("discount_type", sa.String(20), nullable=False),
        _money("discount_value"),
        _money("max_discount", nullable=True),
        _money("min_order_amount", nullable=True),
        sa.Column("starts_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("ends_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("conditions", JSONB, nullable=True),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default="true"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.CheckConstraint(
            "discount_type IN ('percentage', 'fixed_amount', 'free_shipping', 'bogo')",
            name="ck_coupons_discount_type",
        ),
    )


def downgrade() -> None:
    for table in (
        "coupons",
        "product_gifts",
        "cart_items",
        "carts",
        "lens_thickness_materials",
        "lens_treatments",
        "lens_colors",
        "prescription_lens_variants",
        "prescription_lens_types",
        "lens_finishes",
        "lens_options",
        "size_volume_variants",
        "eye_hygiene_variants",
        "products",
        "users",
    ):
        op.drop_table(table)
