"""Saved favorite orders, persisted as a JSON file."""
import json
import logging
from typing import List, Optional

from pydantic import ValidationError

from starbucks_mcp.models import Drink, FavoriteOrder, Food

logger = logging.getLogger(__name__)


def default_favorites() -> List[FavoriteOrder]:
    return [
        FavoriteOrder(
            name="Morning Coffee Run",
            items=[
                Drink(name="Iced Cold Brew", size="tall"),
                Drink(name="Pike Place Roast", size="grande"),
            ],
        ),
        FavoriteOrder(name="Decaf Grande", items=[Drink(name="Decaf Pike Place", size="grande")]),
        FavoriteOrder(name="Venti Black", items=[Drink(name="Pike Place Roast", size="venti")]),
        FavoriteOrder(
            name="Breakfast",
            items=[
                Drink(name="Pike Place Roast", size="grande"),
                Food(name="Bacon Gouda Artisan Breakfast Sandwich"),
            ],
        ),
    ]


class FavoritesStore:
    def __init__(self, path: str):
        self.path = path
        self._favorites: List[FavoriteOrder] = []

    def load(self) -> None:
        """Read favorites from disk, seeding the defaults when the file is missing."""
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                raw = json.load(f)
            self._favorites = [FavoriteOrder.model_validate(entry) for entry in raw]
            return
        except FileNotFoundError:
            logger.info(f"No favorites at {self.path}, seeding defaults")
        except (OSError, ValueError, TypeError, ValidationError) as e:
            logger.warning(f"Unreadable favorites file {self.path}, reseeding defaults: {e}")
        self._favorites = default_favorites()
        self.save()

    def save(self) -> None:
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump([fav.model_dump(mode="json") for fav in self._favorites], f, indent=2)

    def list(self) -> List[FavoriteOrder]:
        return list(self._favorites)

    def get(self, name: str) -> Optional[FavoriteOrder]:
        return next((fav for fav in self._favorites if fav.name == name), None)

    def add(self, favorite: FavoriteOrder) -> None:
        """Add a favorite; an existing favorite with the same name is replaced."""
        for i, fav in enumerate(self._favorites):
            if fav.name == favorite.name:
                self._favorites[i] = favorite
                break
        else:
            self._favorites.append(favorite)
        self.save()
