from decimal import Decimal

from pydantic import BaseModel, Field, field_validator

from src.models.dto.common import normalize_id_list


class VariantOption(BaseModel):
    id: str
    type: str
    name: str
    display_name: str
    price: Decimal
    compare_at_price: Decimal | None = None
    image_url: str | None = None
    stock_quantity: int | None = None
    stock_status: str | None = None
    sku: str | None = None
    sort_order: int = 0
    metadata: dict = {}


class ProductSummary(BaseModel):
    id: int
    name: str
    slug: str
    base_price: Decimal
    images: list[str] = []
    color_images: list[dict] = []


class ProductVariantsResponse(BaseModel):
    product: ProductSummary
    variants: list[VariantOption]


class LensColorOut(BaseModel):
    id: int
    name: str
    color_code: str | None = None
    hex_code: str | None = None
    image_url: str | None = None
    price_adjustment: Decimal


class LensFinishOut(BaseModel):
    id: int
    name: str
    slug: str
    description: str | None = None
    price_adjustment: Decimal
    colors: list[LensColorOut] = []


class LensOptionOut(BaseModel):
    id: int
    name: str
    slug: str
    type: str
    description: str | None = None
    base_price: Decimal
    finishes: list[LensFinishOut] = []
    colors: list[LensColorOut] = []


class LensTreatmentOut(BaseModel):
    id: int
    name: str
    slug: str
    type: str
    description: str | None = None
    price: Decimal
    icon: str | None = None


class PrescriptionLensTypeOut(BaseModel):
    # Built-in defaults use string ids
    id: int | str
    name: str
    slug: str
    description: str | None = None
    prescription_type: str
    base_price: Decimal
    colors: list[LensColorOut] = []


class PrescriptionLensTypeListResponse(BaseModel):
    prescription_lens_types: list[PrescriptionLensTypeOut]


class CustomizationOptionsResponse(BaseModel):
    product: ProductSummary
    lens_options: list[LensOptionOut]
    treatments: list[LensTreatmentOut]
    prescription_lens_types: list[PrescriptionLensTypeOut]


class CustomizationQuoteRequest(BaseModel):
    lens_option_id: int | None = None
    lens_finish_id: int | None = None
    lens_color_id: int | None = None
    treatment_ids: list[int] = Field(default_factory=list)
    prescription_lens_type: int | str | None = None
    prescription_lens_color_id: int | None = None
    prescription_data: dict | None = None
    quantity: int = Field(default=1, ge=1, le=100)

    @field_validator("treatment_ids", mode="before")
    @classmethod
    def coerce_treatment_ids(cls, v):
        return normalize_id_list(v)


class QuoteLine(BaseModel):
    name: str
    type: str
    price: Decimal
    quantity: int


class CustomizationQuoteResponse(BaseModel):
    breakdown: list[QuoteLine]
    subtotal: Decimal
    quantity: int
    total: Decimal
    currency: str
    prescription_lens_type: int | str | None = None
    prescription_data: dict | None = None
