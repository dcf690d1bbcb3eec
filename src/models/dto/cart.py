from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, Field, field_validator

from src.models.dto.common import normalize_id_list
from src.models.dto.coupon import CouponResult
from src.models.dto.customization import Customization

VariantType = Literal["color", "mm_caliber", "eye_hygiene", "size_volume"]


class CartItemAdd(BaseModel):
    product_id: int = Field(gt=0)
    quantity: int = Field(default=1, ge=1, le=100)
    lens_index: Decimal | None = Field(default=None, ge=1, le=2, decimal_places=2)
    lens_coating: str | None = Field(default=None, max_length=100)
    prescription_id: int | None = None

    # Variant selection, new system
    selected_variant_id: int | str | None = None
    variant_type: VariantType | None = None
    # Variant selection, legacy
    selected_mm_caliber: str | None = Field(default=None, max_length=20)
    selected_color: str | None = Field(default=None, max_length=100)

    # Lens add-ons
    progressive_variant_id: int | None = None
    lens_thickness_material_id: int | None = None
    treatment_ids: list[int] = Field(default_factory=list)
    photochromic_color_id: int | None = None
    prescription_sun_color_id: int | None = None

    coupon_code: str | None = Field(default=None, max_length=50)

    @field_validator("treatment_ids", mode="before")
    @classmethod
    def coerce_treatment_ids(cls, v):
        return normalize_id_list(v)

    @field_validator("selected_mm_caliber", mode="before")
    @classmethod
    def caliber_as_string(cls, v):
        if v is None or v == "":
            return None
        return str(v)


class CartItemUpdate(BaseModel):
    # 0 removes the line
    quantity: int = Field(ge=0, le=100)


class CartItemResponse(BaseModel):
    id: int
    product_id: int
    product_name: str
    product_slug: str | None = None
    image_url: str | None = None
    quantity: int
    unit_price: Decimal
    line_total: Decimal
    lens_index: Decimal | None = None
    lens_coatings: list = []
    prescription_id: int | None = None
    customization: Customization
    is_gift: bool = False
    product_active: bool = True
    stock_status: str | None = None


class CartResponse(BaseModel):
    id: int
    items: list[CartItemResponse]
    subtotal: Decimal
    item_count: int
    coupon: CouponResult | None = None


class AddToCartResponse(BaseModel):
    detail: str
    merged: bool
    item: CartItemResponse
    gifts_added: list[int] = []
    coupon: CouponResult | None = None
