from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies.database import get_db
from src.models.dto.product import (
    CustomizationOptionsResponse,
    CustomizationQuoteRequest,
    CustomizationQuoteResponse,
    ProductVariantsResponse,
)
from src.services import customization_service, pricing_service

router = APIRouter(prefix="/products", tags=["products"])


@router.get("/{product_id}/variants", response_model=ProductVariantsResponse)
async def list_variants(product_id: int, db: AsyncSession = Depends(get_db)):
    product = await customization_service.get_product_or_404(db, product_id)
    return {
        "product": customization_service.product_summary(product),
        "variants": await customization_service.list_product_variants(db, product),
    }


@router.get("/{product_id}/customization", response_model=CustomizationOptionsResponse)
async def get_customization_options(product_id: int, db: AsyncSession = Depends(get_db)):
    product = await customization_service.get_product_or_404(db, product_id)
    return await customization_service.get_customization_options(db, product)


@router.post(
    "/{product_id}/customization/calculate",
    response_model=CustomizationQuoteResponse,
)
async def calculate_customization_price(
    product_id: int,
    body: CustomizationQuoteRequest,
    db: AsyncSession = Depends(get_db),
):
    product = await customization_service.get_product_or_404(db, product_id)
    return await pricing_service.calculate_quote(db, product, body)
