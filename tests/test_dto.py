"""Tests for request model coercion of id lists."""
import pytest

from src.models.dto.cart import CartItemAdd
from src.models.dto.common import normalize_id_list


class TestNormalizeIdList:
    @pytest.mark.parametrize("value,expected", [
        ([1, 2, 2], [1, 2]),
        ("[3, 1]", [3, 1]),
        ("1, 2,x", [1, 2]),
        (4, [4]),
        (5.0, [5]),
        (None, []),
        ("", []),
        ([0, -1, "a"], []),
    ])
    def test_accepted_forms(self, value, expected):
        assert normalize_id_list(value) == expected

    @pytest.mark.parametrize("value", [1.9, "1.9", "[1.9]", [2.5], float("inf"), float("nan")])
    def test_fractional_ids_are_dropped(self, value):
        assert normalize_id_list(value) == []

    def test_fractional_id_mixed_with_valid(self):
        assert normalize_id_list("[1.9, 2]") == [2]

    def test_cart_item_add_drops_fractional_treatment(self):
        body = CartItemAdd(product_id=7, treatment_ids="1.9,3")
        assert body.treatment_ids == [3]
