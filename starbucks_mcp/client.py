"""Facade tying sessions, favorites and the order workflow together."""
import asyncio
import logging
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from starbucks_mcp.config import Settings
from starbucks_mcp.errors import FavoriteNotFound, InvalidItems
from starbucks_mcp.favorites import FavoritesStore
from starbucks_mcp.models import FavoriteOrder, parse_items
from starbucks_mcp.orders import OrderStateMachine
from starbucks_mcp.session import SessionManager

logger = logging.getLogger(__name__)


def _validate_items(raw: List[Dict[str, Any]]):
    try:
        return parse_items(raw)
    except ValidationError as e:
        raise InvalidItems(f"Invalid order items: {e}") from e


class StarbucksClient:
    """Every public coroutine returns a JSON-serializable result object."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        session: Optional[SessionManager] = None,
        favorites: Optional[FavoritesStore] = None,
        orders: Optional[OrderStateMachine] = None,
    ):
        self.settings = settings or Settings.from_env()
        self.session = session or SessionManager(self.settings)
        self.favorites = favorites or FavoritesStore(self.settings.favorites_path)
        self.orders = orders or OrderStateMachine(self.session)
        # One browser page and one pending order: operations run one at a time
        self.lock = asyncio.Lock()

    def initialize(self) -> None:
        self.favorites.load()

    async def close(self) -> None:
        await self.session.teardown()

    # -------------------------
    # Authentication
    # -------------------------

    async def login(self) -> Dict[str, Any]:
        return await self.session.begin_interactive_login()

    async def complete_login(self) -> Dict[str, Any]:
        return await self.session.await_login_completion()

    async def check_auth(self) -> Dict[str, Any]:
        return self.session.check_authenticated()

    # -------------------------
    # Favorites
    # -------------------------

    async def list_favorites(self) -> List[Dict[str, Any]]:
        return [fav.model_dump(mode="json") for fav in self.favorites.list()]

    async def add_favorite(self, name: str, items: List[Dict[str, Any]]) -> Dict[str, Any]:
        if not name or not items:
            raise InvalidItems("name and items are required")
        favorite = FavoriteOrder(name=name, items=_validate_items(items))
        self.favorites.add(favorite)
        logger.info(f"Saved favorite {name!r} with {len(favorite.items)} item(s)")
        return {"success": True, "message": f"Added favorite: {name}"}

    # -------------------------
    # Ordering
    # -------------------------

    async def order_favorite(self, favorite_name: str, location: Optional[str] = None) -> Dict[str, Any]:
        if not favorite_name:
            raise InvalidItems("favorite_name is required")
        favorite = self.favorites.get(favorite_name)
        if favorite is None:
            raise FavoriteNotFound(favorite_name)
        return await self.orders.place_order(favorite.items, location or self.settings.default_location)

    async def custom_order(
        self,
        drinks: Optional[List[Dict[str, Any]]] = None,
        food: Optional[List[str]] = None,
        location: Optional[str] = None,
    ) -> Dict[str, Any]:
        raw = [{**drink, "type": "drink"} for drink in drinks or []]
        raw += [{"type": "food", "name": name} for name in food or []]
        if not raw:
            raise InvalidItems("Provide at least one drink or food item.")
        items = _validate_items(raw)
        return await self.orders.place_order(items, location or self.settings.default_location)

    async def confirm_order(self) -> Dict[str, Any]:
        return await self.orders.confirm_order()

    async def cancel_order(self) -> Dict[str, Any]:
        return await self.orders.cancel_order()

    # -------------------------
    # Browser
    # -------------------------

    async def stop_browser(self) -> Dict[str, Any]:
        await self.session.teardown()
        return {"success": True, "message": "Browser stopped. Saved session cookies are kept."}

    async def toggle_debug(self, enabled: bool = True) -> Dict[str, Any]:
        self.session.set_debug(enabled)
        current = self.session.settings
        return {"success": True, "debug": current.debug, "debug_dir": current.debug_dir}
