from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies.database import get_db
from src.models.dto.gift import ProductGiftListResponse
from src.services import gift_service

router = APIRouter(prefix="/product-gifts", tags=["product-gifts"])


@router.get("/product/{product_id}", response_model=ProductGiftListResponse)
async def list_product_gifts(product_id: int, db: AsyncSession = Depends(get_db)):
    return {"gifts": await gift_service.list_gifts_for_product(db, product_id)}
