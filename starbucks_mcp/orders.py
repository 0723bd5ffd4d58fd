"""Order lifecycle: build the cart, hold it for review, then confirm or cancel."""
import logging
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from playwright.async_api import Error as PlaywrightError

from starbucks_mcp.cart import CartBuilder
from starbucks_mcp.errors import BrowserNotActive, NoPendingOrder, StarbucksError
from starbucks_mcp.models import Drink, Food, PendingOrder
from starbucks_mcp.scraper import OrderScraper
from starbucks_mcp.stores import StoreResolver

logger = logging.getLogger(__name__)


class OrderState(str, Enum):
    """Where the single order of a session currently is."""

    IDLE = "idle"
    BUILDING = "building"  # Items are being added to the remote cart
    PENDING_REVIEW = "pending_review"  # Waiting for confirm or cancel
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"

    def __str__(self) -> str:
        return self.value


class OrderStateMachine:
    """Holds at most one pending order and gates the irreversible purchase.

    Placing a new order while one is pending replaces it. The remote cart is
    emptied best-effort first, but items the site refuses to remove remain.
    """

    def __init__(self, session, stores=None, cart=None, scraper=None):
        self.session = session
        self.stores = stores or StoreResolver()
        self.cart = cart or CartBuilder()
        self.scraper = scraper or OrderScraper(session)
        self.state = OrderState.IDLE
        self._pending: Optional[PendingOrder] = None

    @property
    def pending(self) -> Optional[PendingOrder]:
        return self._pending

    def _transition(self, state: OrderState) -> None:
        logger.info(f"Order state: {self.state} -> {state}")
        self.state = state

    async def place_order(self, items: List[Union[Drink, Food]], location: str) -> Dict[str, Any]:
        if not items:
            raise StarbucksError("An order needs at least one item.")

        replaced = self._pending is not None
        if replaced:
            logger.warning("Replacing pending order; its items are cleared from the cart first")
        self._pending = None
        self._transition(OrderState.BUILDING)

        try:
            page = await self.session.ensure_signed_in()
            await self.cart.clear(page)
            await self.stores.bind_store(page, location)
            for item in items:
                await self.cart.add_item(page, item)
            summary = await self.scraper.scrape_summary(page, items, location)
        except StarbucksError:
            self._transition(OrderState.IDLE)
            raise
        except PlaywrightError as e:
            self._transition(OrderState.IDLE)
            raise StarbucksError(f"Failed to place order: {e}") from e

        self._pending = PendingOrder(items=list(items), location=location)
        self._transition(OrderState.PENDING_REVIEW)

        result: Dict[str, Any] = {
            "success": True,
            "message": "🛒 Order ready for review",
            **summary.model_dump(exclude_none=True),
            "note": "Review your order above. Use confirm_starbucks_order to place it, "
                    "or cancel_starbucks_order to cancel.",
            "requires_approval": True,
        }
        if replaced:
            result["replaced_pending_order"] = True
            result["caveat"] = (
                "A previous pending order was replaced. Its items were removed from the cart "
                "where possible; check the cart if anything looks off."
            )
        return result

    async def confirm_order(self) -> Dict[str, Any]:
        if self.state is not OrderState.PENDING_REVIEW or self._pending is None:
            raise NoPendingOrder("No pending order to confirm. Place an order first.")
        page = self.session.page
        if page is None or page.is_closed():
            raise BrowserNotActive("Browser session not active.")

        try:
            await self.cart.submit_order(page)
        except PlaywrightError as e:
            raise StarbucksError(f"Failed to confirm order: {e}") from e

        order = self._pending
        self._pending = None
        self._transition(OrderState.CONFIRMED)
        self._transition(OrderState.IDLE)
        return {
            "success": True,
            "message": "✓ Order placed successfully!",
            "items": order.descriptions(),
            "location": order.location,
            "note": "Order confirmation should appear in browser and you'll receive a notification.",
        }

    async def cancel_order(self) -> Dict[str, Any]:
        if self.state is not OrderState.PENDING_REVIEW or self._pending is None:
            raise NoPendingOrder("No pending order to cancel.")

        self._pending = None
        self._transition(OrderState.CANCELLED)
        self._transition(OrderState.IDLE)
        await self.session.navigate_home()
        return {
            "success": True,
            "message": "Order cancelled. Cart may still contain items - you can clear it manually if needed.",
        }
