"""Typed shape of the ``cart_items.customization`` JSON column.

The column is only ever read through :func:`load_customization` and written
through :meth:`Customization.to_json`.
"""
import logging
from decimal import Decimal
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field, ValidationError

logger = logging.getLogger(__name__)


class ColorVariant(BaseModel):
    variant_type: Literal["color"] = "color"
    name: str
    hex_code: str | None = None
    price: Decimal
    image_url: str | None = None


class CaliberVariant(BaseModel):
    variant_type: Literal["mm_caliber"] = "mm_caliber"
    mm: str
    price: Decimal
    image_url: str | None = None


class EyeHygieneSelection(BaseModel):
    variant_type: Literal["eye_hygiene"] = "eye_hygiene"
    variant_id: int
    name: str
    price: Decimal
    image_url: str | None = None


class SizeVolumeSelection(BaseModel):
    variant_type: Literal["size_volume"] = "size_volume"
    variant_id: int
    size_volume: str
    pack_type: str | None = None
    sku: str | None = None
    price: Decimal
    image_url: str | None = None


ResolvedVariant = Annotated[
    Union[ColorVariant, CaliberVariant, EyeHygieneSelection, SizeVolumeSelection],
    Field(discriminator="variant_type"),
]


class Customization(BaseModel):
    variant: ResolvedVariant | None = None
    selected_color: str | None = None

    lens_index: Decimal | None = None
    progressive_variant_id: int | None = None
    lens_thickness_material_id: int | None = None
    treatment_ids: list[int] = Field(default_factory=list)
    photochromic_color_id: int | None = None
    prescription_sun_color_id: int | None = None

    is_gift: bool = False
    gift_for_product_id: int | None = None

    def to_json(self) -> dict:
        return self.model_dump(mode="json", exclude_none=True)

    @property
    def variant_image(self) -> str | None:
        return self.variant.image_url if self.variant else None


def load_customization(raw: dict | str | None) -> Customization:
    """Parse a stored blob. Unreadable blobs become an empty customization."""
    if not raw:
        return Customization()
    try:
        if isinstance(raw, str):
            return Customization.model_validate_json(raw)
        return Customization.model_validate(raw)
    except ValidationError:
        logger.warning("Discarding unreadable cart item customization")
        return Customization()
