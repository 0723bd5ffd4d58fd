"""Product lookup policy, kept free of any browser dependency."""
import unicodedata
from typing import Iterable, Optional, Sequence

from starbucks_mcp.config import BASE_URL
from starbucks_mcp.models import Drink, Food

COLD_KEYWORDS = ("iced", "cold brew", "frappuccino")

# Bundles and multi-serve variants that share a drink's name
EXCLUDED_KEYWORDS = ("traveler",)

CATEGORY_URLS = {
    "cold-coffee": f"{BASE_URL}/menu/drinks/cold-coffee",
    "hot-coffee": f"{BASE_URL}/menu/drinks/hot-coffee",
    "breakfast": f"{BASE_URL}/menu/food/breakfast",
}


def strip_diacritics(text: str) -> str:
    """Drop combining marks, e.g. 'Crème Brûlée' -> 'Creme Brulee'."""
    decomposed = unicodedata.normalize("NFD", text)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def normalize(text: str) -> str:
    return strip_diacritics(text).lower()


def classify_category(item) -> str:
    """Return the menu category slug an item is listed under."""
    if isinstance(item, Food):
        return "breakfast"
    name = item.name.lower()
    if any(k in name for k in COLD_KEYWORDS):
        return "cold-coffee"
    return "hot-coffee"


def category_url(item) -> str:
    return CATEGORY_URLS[classify_category(item)]


def find_product(
    candidates: Sequence[Optional[str]],
    query: str,
    excluded: Iterable[str] = EXCLUDED_KEYWORDS,
) -> Optional[int]:
    """Index of the first candidate whose text contains ``query``.

    Matching is case-insensitive and ignores diacritics on both sides.
    Candidates mentioning an excluded keyword are skipped. Document order
    decides between several matches.
    """
    wanted = normalize(query).strip()
    if not wanted:
        return None
    excluded = [normalize(k) for k in excluded]
    for i, text in enumerate(candidates):
        if not text:
            continue
        have = normalize(text)
        if any(k in have for k in excluded):
            continue
        if wanted in have:
            return i
    return None


def size_label(item: Drink) -> str:
    return item.size.capitalize()
