import logging
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from src.core.config import settings
from src.core.exceptions import NotFoundError
from src.core.fallback import FallbackSource
from src.core.money import to_decimal
from src.models.orm.lens import LensColor, LensOption, LensTreatment, PrescriptionLensType
from src.models.orm.product import Product
from src.repositories import lens_repo, product_repo
from src.services.variant_resolver import caliber_variant_from_entry, color_variant_from_entry

logger = logging.getLogger(__name__)


def _default_prescription_lens_types() -> list[dict]:
    price = to_decimal(settings.default_prescription_lens_price)
    return [
        {
            "id": "distance_vision",
            "name": "Distance Vision",
            "slug": "distance-vision",
            "description": "For distance (Thin, anti-glare, blue-cut options)",
            "prescription_type": "single_vision",
            "base_price": price,
            "colors": [],
        },
        {
            "id": "near_vision",
            "name": "Near Vision",
            "slug": "near-vision",
            "description": "For near vision (Thin, anti-glare, blue-cut options)",
            "prescription_type": "single_vision",
            "base_price": price,
            "colors": [],
        },
        {
            "id": "progressive",
            "name": "Progressive",
            "slug": "progressive",
            "description": "Progressives (For two powers in same lenses)",
            "prescription_type": "progressive",
            "base_price": price,
            "colors": [],
        },
    ]


def lens_color_to_dict(color: LensColor) -> dict:
    return {
        "id": color.id,
        "name": color.name,
        "color_code": color.color_code,
        "hex_code": color.hex_code,
        "image_url": color.image_url,
        "price_adjustment": color.price_adjustment,
    }


def _active_colors(colors: list[LensColor]) -> list[dict]:
    return [lens_color_to_dict(c) for c in colors if c.is_active]


def prescription_lens_type_to_dict(lens_type: PrescriptionLensType) -> dict:
    return {
        "id": lens_type.id,
        "name": lens_type.name,
        "slug": lens_type.slug,
        "description": lens_type.description,
        "prescription_type": lens_type.prescription_type,
        "base_price": lens_type.base_price,
        "colors": _active_colors(lens_type.colors),
    }


def lens_option_to_dict(option: LensOption) -> dict:
    return {
        "id": option.id,
        "name": option.name,
        "slug": option.slug,
        "type": option.type,
        "description": option.description,
        "base_price": option.base_price,
        "finishes": [
            {
                "id": f.id,
                "name": f.name,
                "slug": f.slug,
                "description": f.description,
                "price_adjustment": f.price_adjustment,
                "colors": _active_colors(f.colors),
            }
            for f in option.finishes
            if f.is_active
        ],
        "colors": _active_colors([c for c in option.colors if c.lens_finish_id is None]),
    }


def treatment_to_dict(treatment: LensTreatment) -> dict:
    return {
        "id": treatment.id,
        "name": treatment.name,
        "slug": treatment.slug,
        "type": treatment.type,
        "description": treatment.description,
        "price": treatment.price,
        "icon": treatment.icon,
    }


async def _load_prescription_lens_types(db: AsyncSession) -> list[dict]:
    rows = await lens_repo.list_active_prescription_lens_types(db)
    return [prescription_lens_type_to_dict(t) for t in rows]


prescription_lens_types = FallbackSource(
    "prescription lens type",
    _load_prescription_lens_types,
    _default_prescription_lens_types(),
)


def product_summary(product: Product) -> dict:
    return {
        "id": product.id,
        "name": product.name,
        "slug": product.slug,
        "base_price": product.price,
        "images": product.images or [],
        "color_images": product.color_images or [],
    }


async def get_product_or_404(db: AsyncSession, product_id: int) -> Product:
    product = await product_repo.get_by_id(db, product_id)
    if not product or not product.is_active:
        raise NotFoundError("Product not found")
    return product


async def get_customization_options(db: AsyncSession, product: Product) -> dict:
    options = await lens_repo.list_active_options(db)
    treatments = await lens_repo.list_active_treatments(db)
    return {
        "product": product_summary(product),
        "lens_options": [lens_option_to_dict(o) for o in options],
        "treatments": [treatment_to_dict(t) for t in treatments],
        "prescription_lens_types": await prescription_lens_types.all(db),
    }


async def list_product_variants(db: AsyncSession, product: Product) -> list[dict]:
    """Every purchasable configuration of a product in one normalized list."""
    base: Decimal = product.price
    variants: list[dict] = []

    for index, entry in enumerate(product.mm_calibers or []):
        caliber = caliber_variant_from_entry(entry, base)
        variants.append({
            "id": f"caliber_{caliber.mm}",
            "type": "mm_caliber",
            "name": f"{caliber.mm}mm",
            "display_name": f"{caliber.mm}mm Caliber",
            "price": caliber.price,
            "image_url": caliber.image_url,
            "stock_quantity": product.stock_quantity,
            "stock_status": product.stock_status,
            "sort_order": index,
            "metadata": {"mm": caliber.mm},
        })

    offset = len(variants)
    for index, entry in enumerate(product.color_images or []):
        color = color_variant_from_entry(entry, base)
        variants.append({
            "id": f"color_{color.hex_code or color.name}",
            "type": "color",
            "name": color.name,
            "display_name": color.name,
            "price": color.price,
            "image_url": color.image_url,
            "stock_quantity": product.stock_quantity,
            "stock_status": product.stock_status,
            "sort_order": offset + index,
            "metadata": {"hex_code": color.hex_code},
        })

    for row in await product_repo.list_size_volume_variants(db, product.id):
        label = " ".join(p for p in (row.size_volume, row.pack_type) if p)
        variants.append({
            "id": f"size_volume_{row.id}",
            "type": "size_volume",
            "name": label,
            "display_name": label,
            "price": row.price if row.price is not None else base,
            "compare_at_price": row.compare_at_price,
            "image_url": row.image_url,
            "stock_quantity": row.stock_quantity,
            "stock_status": row.stock_status,
            "sku": row.sku,
            "sort_order": row.sort_order,
            "metadata": {
                "variant_id": row.id,
                "size_volume": row.size_volume,
                "pack_type": row.pack_type,
            },
        })

    for row in await product_repo.list_eye_hygiene_variants(db, product.id):
        variants.append({
            "id": f"eye_hygiene_{row.id}",
            "type": "eye_hygiene",
            "name": row.name,
            "display_name": row.name,
            "price": row.price if row.price is not None else base,
            "image_url": row.image_url,
            "stock_quantity": row.stock_quantity,
            "sort_order": row.sort_order,
            "metadata": {"variant_id": row.id, "description": row.description},
        })

    return variants
