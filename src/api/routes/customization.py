from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies.database import get_db
from src.models.dto.product import PrescriptionLensTypeListResponse
from src.services.customization_service import prescription_lens_types

router = APIRouter(prefix="/customization", tags=["customization"])


@router.get("/prescription-lens-types", response_model=PrescriptionLensTypeListResponse)
async def list_prescription_lens_types(db: AsyncSession = Depends(get_db)):
    return {"prescription_lens_types": await prescription_lens_types.all(db)}
