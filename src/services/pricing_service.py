import logging
from dataclasses import dataclass, field
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from src.core.config import settings
from src.core.money import ZERO, round_money, to_decimal
from src.models.dto.product import CustomizationQuoteRequest
from src.models.orm.lens import (
    LensColor,
    LensThicknessMaterial,
    PrescriptionLensVariant,
)
from src.models.orm.product import Product
from src.repositories import lens_repo

logger = logging.getLogger(__name__)


@dataclass
class LensAddOns:
    progressive_variant_id: int | None = None
    lens_thickness_material_id: int | None = None
    treatment_ids: list[int] = field(default_factory=list)
    photochromic_color_id: int | None = None
    prescription_sun_color_id: int | None = None


async def _active(db: AsyncSession, model, entity_id: int | None):
    if not entity_id:
        return None
    entity = await db.get(model, entity_id)
    if entity is None or not entity.is_active:
        logger.debug("Skipping unknown or inactive %s %s", model.__name__, entity_id)
        return None
    return entity


async def accumulate_price(db: AsyncSession, base_price: Decimal, addons: LensAddOns) -> Decimal:
    """Base price plus every add-on that exists and is active, rounded to cents.

    Each lookup is an independent read. Unknown ids contribute nothing.
    """
    total = to_decimal(base_price) or ZERO

    variant = await _active(db, PrescriptionLensVariant, addons.progressive_variant_id)
    if variant:
        total += to_decimal(variant.price) or ZERO

    material = await _active(db, LensThicknessMaterial, addons.lens_thickness_material_id)
    if material:
        total += to_decimal(material.price) or ZERO

    if addons.treatment_ids:
        for treatment in await lens_repo.list_active_treatments(db, addons.treatment_ids):
            total += to_decimal(treatment.price) or ZERO

    for color_id in (addons.photochromic_color_id, addons.prescription_sun_color_id):
        color = await _active(db, LensColor, color_id)
        if color:
            total += to_decimal(color.price_adjustment) or ZERO

    return round_money(total)


# ── Product page quote ───────────────────────────────────────────────────────


def _line(name: str, kind: str, price: Decimal, quantity: int) -> dict:
    return {"name": name, "type": kind, "price": price, "quantity": quantity}


def _find(items, item_id: int | None):
    if not item_id:
        return None
    return next((i for i in items if i.id == item_id and i.is_active), None)


async def calculate_quote(
    db: AsyncSession, product: Product, body: CustomizationQuoteRequest
) -> dict:
    """Itemized price for a product with lens option, finish, color, treatments and prescription lenses.

    Only add-ons with a positive price appear in the breakdown. The prescription
    lens line is always present when a prescription lens type was chosen; an
    unknown or non-numeric type is charged at the configured default.
    """
    qty = body.quantity
    base = to_decimal(product.price) or ZERO
    total = base
    breakdown = [_line(product.name, "base_product", base, qty)]

    def add(name: str, kind: str, amount) -> None:
        nonlocal total
        price = to_decimal(amount) or ZERO
        if price > 0:
            total += price
            breakdown.append(_line(name, kind, price, qty))

    if body.lens_option_id:
        option = await lens_repo.get_option_with_colors(db, body.lens_option_id)
        if option and option.is_active:
            add(option.name, "lens_option", option.base_price)
            if body.lens_finish_id:
                finish = _find(option.finishes, body.lens_finish_id)
                if finish:
                    add(f"{finish.name} (Finish)", "lens_finish", finish.price_adjustment)
                    color = _find(finish.colors, body.lens_color_id)
                    if color:
                        add(f"{color.name} (Color)", "lens_color", color.price_adjustment)
            elif body.lens_color_id:
                option_colors = [c for c in option.colors if c.lens_finish_id is None]
                color = _find(option_colors, body.lens_color_id)
                if color:
                    add(f"{color.name} (Color)", "lens_color", color.price_adjustment)

    if body.treatment_ids:
        for treatment in await lens_repo.list_active_treatments(db, body.treatment_ids):
            add(treatment.name, "treatment", treatment.price)

    if body.prescription_lens_type:
        lens_type = None
        type_id = body.prescription_lens_type
        if isinstance(type_id, str) and type_id.isdigit():
            type_id = int(type_id)
        if isinstance(type_id, int):
            lens_type = await lens_repo.get_prescription_lens_type(db, type_id)
            if lens_type and not lens_type.is_active:
                lens_type = None

        if lens_type:
            rx_price = to_decimal(lens_type.base_price) or ZERO
            rx_name = f"Prescription Lenses ({lens_type.name})"
        else:
            rx_price = to_decimal(settings.default_prescription_lens_price) or ZERO
            rx_name = f"Prescription Lenses ({body.prescription_lens_type})"
        total += rx_price
        breakdown.append(_line(rx_name, "prescription_lens", rx_price, qty))

        if lens_type and body.prescription_lens_color_id:
            color = _find(lens_type.colors, body.prescription_lens_color_id)
            if color:
                add(
                    f"{color.name} (Prescription Lens Color)",
                    "prescription_lens_color",
                    color.price_adjustment,
                )

    return {
        "breakdown": breakdown,
        "subtotal": round_money(total),
        "quantity": qty,
        "total": round_money(total * qty),
        "currency": settings.currency,
        "prescription_lens_type": body.prescription_lens_type,
        "prescription_data": body.prescription_data,
    }
