from decimal import Decimal

from pydantic import BaseModel, Field, model_validator


class CouponCartLine(BaseModel):
    unit_price: Decimal | None = None
    price: Decimal | None = None
    quantity: int = Field(default=1, ge=1)


class CouponApply(BaseModel):
    code: str = Field(min_length=1, max_length=50)
    subtotal: Decimal | None = Field(default=None, ge=0)
    cart_items: list[CouponCartLine] | None = None

    @model_validator(mode="after")
    def require_amount(self):
        if not self.subtotal and not self.cart_items:
            raise ValueError("Cart items or subtotal is required")
        return self


class CouponResult(BaseModel):
    id: int
    code: str
    discount_type: str
    discount_value: Decimal
    discount_amount: Decimal
    free_shipping: bool = False
