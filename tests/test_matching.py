"""Unit tests for the product matching policy."""
import pytest

from starbucks_mcp.matching import (
    CATEGORY_URLS,
    category_url,
    classify_category,
    find_product,
    strip_diacritics,
)
from starbucks_mcp.models import Drink, Food


class TestClassifyCategory:

    @pytest.mark.parametrize("name", ["Iced Caffè Latte", "Cold Brew", "Caramel Frappuccino® Blended Beverage"])
    def test_cold_drinks(self, name):
        assert classify_category(Drink(name=name, size="grande")) == "cold-coffee"

    def test_hot_drink(self):
        assert classify_category(Drink(name="Pike Place Roast", size="grande")) == "hot-coffee"

    def test_food_always_uses_breakfast(self):
        assert classify_category(Food(name="Iced Lemon Loaf")) == "breakfast"

    def test_category_url(self):
        assert category_url(Drink(name="Iced Cold Brew", size="tall")) == CATEGORY_URLS["cold-coffee"]


class TestFindProduct:

    def test_strip_diacritics(self):
        assert strip_diacritics("Caffè Crème Brûlée") == "Caffe Creme Brulee"

    def test_diacritics_ignored_on_both_sides(self):
        assert find_product(["Pike Place® Roast", "Caffè Latte"], "Caffe Latte") == 1
        assert find_product(["Caffe Latte"], "Caffè Latte") == 0

    def test_case_insensitive_substring(self):
        assert find_product(["Starbucks® Cold Brew Coffee"], "cold brew") == 0

    def test_excluded_variants_are_skipped(self):
        candidates = ["Pike Place® Roast Traveler", "Pike Place® Roast"]
        assert find_product(candidates, "Pike Place") == 1

    def test_first_match_wins(self):
        candidates = ["Iced Cold Brew", "Vanilla Sweet Cream Cold Brew"]
        assert find_product(candidates, "Cold Brew") == 0

    def test_no_match(self):
        assert find_product(["Pike Place® Roast"], "Unicorn Frappuccino") is None

    def test_empty_candidates_and_query(self):
        assert find_product([None, ""], "Latte") is None
        assert find_product(["Caffè Latte"], "   ") is None
