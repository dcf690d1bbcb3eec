from decimal import Decimal

from pydantic import BaseModel


class GiftProductSummary(BaseModel):
    id: int
    name: str
    slug: str
    price: Decimal
    image_url: str | None = None
    stock_status: str


class ProductGiftResponse(BaseModel):
    id: int
    product_id: int
    gift_product_id: int
    min_quantity: int
    max_quantity: int | None = None
    description: str | None = None
    gift_product: GiftProductSummary


class ProductGiftListResponse(BaseModel):
    gifts: list[ProductGiftResponse]
