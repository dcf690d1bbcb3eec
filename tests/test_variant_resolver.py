"""Tests for variant resolution: typed selections, legacy caliber/color matching."""
from decimal import Decimal
from unittest.mock import AsyncMock, patch

import pytest

from src.models.dto.customization import (
    CaliberVariant,
    ColorVariant,
    EyeHygieneSelection,
    SizeVolumeSelection,
)
from src.services.variant_resolver import (
    match_caliber_entry,
    match_color_entry,
    resolve_variant,
    selected_color_of,
)
from tests.factories import (
    FRAME_CALIBERS,
    FRAME_COLORS,
    make_eye_hygiene_variant,
    make_product,
    make_size_volume_variant,
)


class TestMatchColorEntry:
    def test_hex_match_is_case_insensitive(self):
        assert match_color_entry(FRAME_COLORS, "#8b4513")["name"] == "Tortoise Brown"

    def test_hex_without_match_returns_none(self):
        assert match_color_entry(FRAME_COLORS, "#FFFFFF") is None

    def test_name_substring_either_direction(self):
        assert match_color_entry(FRAME_COLORS, "black")["hex_code"] == "#000000"
        assert match_color_entry(FRAME_COLORS, "Matte Black Edition")["hex_code"] == "#000000"

    def test_first_match_wins(self):
        entries = [{"name": "Blue"}, {"name": "Light Blue"}]
        assert match_color_entry(entries, "blue")["name"] == "Blue"

    def test_blank_selection(self):
        assert match_color_entry(FRAME_COLORS, "  ") is None


class TestMatchCaliberEntry:
    def test_matches_with_mm_suffix(self):
        assert match_caliber_entry(FRAME_CALIBERS, "54mm")["mm"] == "54"

    def test_numeric_entry_matches_string(self):
        assert match_caliber_entry([{"mm": 52}], "52") == {"mm": 52}

    def test_space_before_mm_suffix(self):
        assert match_caliber_entry([{"mm": 52}], "52 mm") == {"mm": 52}
        assert match_caliber_entry([{"mm": "52 MM"}], "52") == {"mm": "52 MM"}

    def test_unknown(self):
        assert match_caliber_entry(FRAME_CALIBERS, "60") is None


class TestResolveVariant:
    @pytest.mark.asyncio
    async def test_color_by_hex_uses_entry_price_and_image(self, mock_db):
        product = make_product(color_images=FRAME_COLORS)
        variant = await resolve_variant(mock_db, product, selected_color="#000000")
        assert isinstance(variant, ColorVariant)
        assert variant.price == Decimal("120.00")
        assert variant.image_url == "/img/black-1.jpg"
        assert selected_color_of(variant) == "#000000"

    @pytest.mark.asyncio
    async def test_color_without_price_uses_base(self, mock_db):
        product = make_product(price="100.00", color_images=FRAME_COLORS)
        variant = await resolve_variant(mock_db, product, selected_color="tortoise")
        assert variant.price == Decimal("100.00")

    @pytest.mark.asyncio
    async def test_unmatched_color_resolves_to_none(self, mock_db):
        product = make_product(color_images=FRAME_COLORS)
        assert await resolve_variant(mock_db, product, selected_color="Neon Pink") is None

    @pytest.mark.asyncio
    async def test_caliber_takes_precedence_over_color(self, mock_db):
        product = make_product(color_images=FRAME_COLORS, mm_calibers=FRAME_CALIBERS)
        variant = await resolve_variant(
            mock_db, product, selected_mm_caliber="50", selected_color="#000000",
        )
        assert isinstance(variant, CaliberVariant)
        assert variant.price == Decimal("95.00")
        assert selected_color_of(variant) is None

    @pytest.mark.asyncio
    @patch("src.services.variant_resolver.product_repo.get_eye_hygiene_variant", new_callable=AsyncMock)
    async def test_eye_hygiene_prefixed_id(self, mock_get, mock_db):
        product = make_product(product_type="eye_hygiene")
        mock_get.return_value = make_eye_hygiene_variant(variant_id=3)

        variant = await resolve_variant(
            mock_db, product, selected_variant_id="eye_hygiene_3", variant_type="eye_hygiene",
        )
        mock_get.assert_awaited_once_with(mock_db, product.id, 3)
        assert isinstance(variant, EyeHygieneSelection)
        assert variant.price == Decimal("12.50")

    @pytest.mark.asyncio
    @patch("src.services.variant_resolver.product_repo.get_eye_hygiene_variant", new_callable=AsyncMock)
    async def test_eye_hygiene_without_price_uses_base(self, mock_get, mock_db):
        product = make_product(price="9.90")
        mock_get.return_value = make_eye_hygiene_variant(price=None)

        variant = await resolve_variant(
            mock_db, product, selected_variant_id=3, variant_type="eye_hygiene",
        )
        assert variant.price == Decimal("9.90")

    @pytest.mark.asyncio
    @patch("src.services.variant_resolver.product_repo.get_size_volume_variant", new_callable=AsyncMock)
    async def test_size_volume(self, mock_get, mock_db):
        product = make_product()
        mock_get.return_value = make_size_volume_variant(variant_id=5)

        variant = await resolve_variant(
            mock_db, product, selected_variant_id="5", variant_type="size_volume",
        )
        assert isinstance(variant, SizeVolumeSelection)
        assert variant.variant_id == 5
        assert variant.price == Decimal("18.00")

    @pytest.mark.asyncio
    @patch("src.services.variant_resolver.product_repo.get_size_volume_variant", new_callable=AsyncMock)
    async def test_missing_typed_variant_does_not_fall_back_to_color(self, mock_get, mock_db):
        product = make_product(color_images=FRAME_COLORS)
        mock_get.return_value = None

        variant = await resolve_variant(
            mock_db, product,
            selected_variant_id=42, variant_type="size_volume", selected_color="#000000",
        )
        assert variant is None

    @pytest.mark.asyncio
    async def test_invalid_table_id_skips_lookup(self, mock_db):
        product = make_product()
        variant = await resolve_variant(
            mock_db, product, selected_variant_id="abc", variant_type="eye_hygiene",
        )
        assert variant is None
        mock_db.execute.assert_not_called()

    @pytest.mark.asyncio
    async def test_typed_color_uses_product_entries(self, mock_db):
        product = make_product(color_images=FRAME_COLORS)
        variant = await resolve_variant(
            mock_db, product, selected_variant_id="color_#8B4513", variant_type="color",
        )
        assert variant.name == "Tortoise Brown"

    @pytest.mark.asyncio
    async def test_nothing_selected(self, mock_db):
        assert await resolve_variant(mock_db, make_product()) is None
