"""Resolve a buyer's variant selection against a product.

Resolution order:

1. ``selected_variant_id`` + ``variant_type`` (variant tables and typed JSON entries)
2. ``selected_mm_caliber`` against ``Product.mm_calibers``
3. ``selected_color`` against ``Product.color_images``, by hex code when it looks
   like ``#RRGGBB``, otherwise by case-insensitive substring in either direction

A selection that matches nothing resolves to ``None`` and the caller falls back
to the base product.
"""
import logging
import re
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from src.core.money import to_decimal
from src.models.dto.customization import (
    CaliberVariant,
    ColorVariant,
    EyeHygieneSelection,
    SizeVolumeSelection,
)
from src.models.orm.product import Product
from src.repositories import product_repo

logger = logging.getLogger(__name__)

HEX_COLOR_RE = re.compile(r"^#[0-9A-Fa-f]{6}$")

_ID_PREFIXES = {
    "eye_hygiene": "eye_hygiene_",
    "size_volume": "size_volume_",
    "mm_caliber": "caliber_",
    "color": "color_",
}


def _strip_prefix(raw: int | str, variant_type: str) -> str:
    value = str(raw).strip()
    prefix = _ID_PREFIXES.get(variant_type)
    if prefix and value.startswith(prefix):
        value = value[len(prefix):]
    return value


def _table_id(raw: int | str, variant_type: str) -> int | None:
    value = _strip_prefix(raw, variant_type)
    try:
        n = int(value)
    except ValueError:
        return None
    return n if n > 0 else None


def _price_or_base(value, base: Decimal) -> Decimal:
    price = to_decimal(value)
    return price if price is not None else base


def _first_image(entry: dict) -> str | None:
    images = entry.get("images")
    if isinstance(images, list) and images:
        return images[0]
    return entry.get("image_url") or entry.get("image")


def is_hex_color(value: str) -> bool:
    return bool(HEX_COLOR_RE.match(value))


def match_color_entry(entries: list[dict], selected: str) -> dict | None:
    """Find the color entry a buyer picked. Returns the first match."""
    selected = selected.strip()
    if not selected:
        return None
    if is_hex_color(selected):
        wanted = selected.lower()
        for entry in entries:
            hex_code = entry.get("hex_code") or entry.get("hexCode")
            if hex_code and hex_code.lower() == wanted:
                return entry
        return None

    wanted = selected.lower()
    for entry in entries:
        name = (entry.get("name") or "").strip().lower()
        if not name:
            continue
        if wanted in name or name in wanted:
            return entry
    return None


def _caliber_key(value) -> str:
    return str(value).strip().lower().removesuffix("mm").strip()


def match_caliber_entry(entries: list[dict], mm: str) -> dict | None:
    wanted = _caliber_key(mm)
    for entry in entries:
        if _caliber_key(entry.get("mm", "")) == wanted:
            return entry
    return None


def color_variant_from_entry(entry: dict, base_price: Decimal) -> ColorVariant:
    return ColorVariant(
        name=entry.get("name") or "",
        hex_code=entry.get("hex_code") or entry.get("hexCode"),
        price=_price_or_base(entry.get("price"), base_price),
        image_url=_first_image(entry),
    )


def caliber_variant_from_entry(entry: dict, base_price: Decimal) -> CaliberVariant:
    return CaliberVariant(
        mm=str(entry.get("mm")),
        price=_price_or_base(entry.get("price"), base_price),
        image_url=entry.get("image_url"),
    )


async def _resolve_typed(
    db: AsyncSession, product: Product, selected_variant_id: int | str, variant_type: str
):
    base = product.price
    if variant_type == "eye_hygiene":
        variant_id = _table_id(selected_variant_id, variant_type)
        if variant_id is None:
            return None
        row = await product_repo.get_eye_hygiene_variant(db, product.id, variant_id)
        if not row:
            return None
        return EyeHygieneSelection(
            variant_id=row.id,
            name=row.name,
            price=_price_or_base(row.price, base),
            image_url=row.image_url,
        )

    if variant_type == "size_volume":
        variant_id = _table_id(selected_variant_id, variant_type)
        if variant_id is None:
            return None
        row = await product_repo.get_size_volume_variant(db, product.id, variant_id)
        if not row:
            return None
        return SizeVolumeSelection(
            variant_id=row.id,
            size_volume=row.size_volume,
            pack_type=row.pack_type,
            sku=row.sku,
            price=_price_or_base(row.price, base),
            image_url=row.image_url,
        )

    if variant_type == "mm_caliber":
        entry = match_caliber_entry(
            product.mm_calibers or [], _strip_prefix(selected_variant_id, variant_type)
        )
        return caliber_variant_from_entry(entry, base) if entry else None

    if variant_type == "color":
        entry = match_color_entry(
            product.color_images or [], _strip_prefix(selected_variant_id, variant_type)
        )
        return color_variant_from_entry(entry, base) if entry else None

    return None


async def resolve_variant(
    db: AsyncSession,
    product: Product,
    *,
    selected_variant_id: int | str | None = None,
    variant_type: str | None = None,
    selected_mm_caliber: str | None = None,
    selected_color: str | None = None,
) -> ColorVariant | CaliberVariant | EyeHygieneSelection | SizeVolumeSelection | None:
    if selected_variant_id not in (None, "") and variant_type:
        resolved = await _resolve_typed(db, product, selected_variant_id, variant_type)
        if resolved is None:
            logger.warning(
                "Variant %s/%s not found on product %s, using base product",
                variant_type, selected_variant_id, product.id,
            )
        return resolved

    if selected_mm_caliber:
        entry = match_caliber_entry(product.mm_calibers or [], selected_mm_caliber)
        if entry:
            return caliber_variant_from_entry(entry, product.price)
        logger.warning(
            "Caliber %s not found on product %s, using base product",
            selected_mm_caliber, product.id,
        )
        return None

    if selected_color:
        entry = match_color_entry(product.color_images or [], selected_color)
        if entry:
            return color_variant_from_entry(entry, product.price)
        logger.warning(
            "Color %r not found on product %s, using base product",
            selected_color, product.id,
        )
    return None


def selected_color_of(variant) -> str | None:
    """Normalized ``selected_color`` value stored on the line: hex code if known, else name."""
    if isinstance(variant, ColorVariant):
        return variant.hex_code or variant.name
    return None
