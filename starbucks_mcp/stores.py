"""Pickup store lookup and binding."""
import logging

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page

from starbucks_mcp.config import NAVIGATION_TIMEOUT, ORDER_HERE_TIMEOUT, STORE_INPUT_TIMEOUT, STORE_LOCATOR_URL
from starbucks_mcp.errors import StoreNotFound, StoreUnavailable

logger = logging.getLogger(__name__)

DEFAULT_ADDRESS = "2165 Polk St, San Francisco, CA 94109, USA"

# Keys are lower case; lookups are case-insensitive
LOCATIONS = {
    "polk street": DEFAULT_ADDRESS,
    "polk": DEFAULT_ADDRESS,
    "polk st": DEFAULT_ADDRESS,
}

STORE_SEARCH_INPUT = 'input[name="place"]'
ORDER_HERE_BUTTON = 'button:has-text("Order Here"), button.sb-button--positive'


def resolve_address(location: str) -> str:
    """Map a location name to a street address, falling back to the default store."""
    key = (location or "").strip().lower()
    address = LOCATIONS.get(key)
    if address is None:
        logger.info(f"Unknown location {location!r}, using default address")
        return DEFAULT_ADDRESS
    return address


class StoreResolver:
    """Binds the browser session to a pickup store via the store locator."""

    async def bind_store(self, page: Page, location: str) -> str:
        address = resolve_address(location)
        logger.info(f"Selecting store near {address}")
        await page.goto(STORE_LOCATOR_URL, wait_until="networkidle", timeout=NAVIGATION_TIMEOUT)
        await page.wait_for_timeout(2000)

        store_input = page.locator(STORE_SEARCH_INPUT).first
        try:
            await store_input.wait_for(state="visible", timeout=STORE_INPUT_TIMEOUT)
        except PlaywrightError as e:
            raise StoreNotFound() from e

        await store_input.fill(address)
        await store_input.press("Enter")
        await page.wait_for_timeout(3000)

        try:
            await page.locator(ORDER_HERE_BUTTON).first.click(timeout=ORDER_HERE_TIMEOUT)
        except PlaywrightError as e:
            raise StoreUnavailable() from e
        await page.wait_for_timeout(2000)
        return address
