"""Cart population and the final checkout clicks."""
import logging
from typing import Union

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page

from starbucks_mcp.browser import click_each
from starbucks_mcp.config import (
    ADD_TO_ORDER_TIMEOUT,
    CART_URL,
    CHECKOUT_TIMEOUT,
    NAVIGATION_TIMEOUT,
    REMOVE_CLICK_TIMEOUT,
    SIZE_SELECTOR_TIMEOUT,
)
from starbucks_mcp.errors import AddToCartFailed, ItemNotFound, SizeUnavailable, StarbucksError
from starbucks_mcp.matching import category_url, find_product, size_label
from starbucks_mcp.models import Drink, Food

logger = logging.getLogger(__name__)

PRODUCT_LINKS = 'a[href*="/menu/product/"]'
ADD_TO_ORDER_BUTTON = 'button:has-text("Add to Order")'
REMOVE_BUTTONS = 'button[aria-label*="Remove"], button:has-text("Remove")'
CHECKOUT_BUTTON = 'a:has-text("Checkout"), button:has-text("Checkout")'
PLACE_ORDER_BUTTON = 'button:has-text("Place order"), button:has-text("Place Order"), button:has-text("Confirm")'


def size_selector(label: str) -> str:
    return f'label:has-text("{label}")'


class CartBuilder:
    """Adds items to the remote cart one at a time."""

    async def clear(self, page: Page) -> int:
        """Click every visible remove control. Individual failures are ignored."""
        try:
            await page.goto(CART_URL, wait_until="networkidle", timeout=NAVIGATION_TIMEOUT)
            await page.wait_for_timeout(1000)
        except PlaywrightError as e:
            logger.warning(f"Could not open cart to clear it: {e}")
            return 0
        removed = await click_each(page, REMOVE_BUTTONS, timeout=REMOVE_CLICK_TIMEOUT)
        if removed:
            logger.info(f"Removed {removed} leftover cart item(s)")
        return removed

    async def add_item(self, page: Page, item: Union[Drink, Food]) -> None:
        try:
            await page.goto(category_url(item))
            await page.wait_for_timeout(1000)

            links = page.locator(PRODUCT_LINKS)
            index = find_product(await links.all_text_contents(), item.name)
            if index is None:
                raise ItemNotFound(item.name)
            await links.nth(index).click()
            await page.wait_for_timeout(1000)

            if isinstance(item, Drink):
                label = page.locator(size_selector(size_label(item))).first
                try:
                    await label.wait_for(state="visible", timeout=SIZE_SELECTOR_TIMEOUT)
                except PlaywrightError as e:
                    raise SizeUnavailable(item.name, size_label(item)) from e
                await label.click()
                await page.wait_for_timeout(500)

            try:
                await page.locator(ADD_TO_ORDER_BUTTON).first.click(timeout=ADD_TO_ORDER_TIMEOUT)
            except PlaywrightError as e:
                raise AddToCartFailed(f"Could not find 'Add to Order' button for {item.name}") from e
            await page.wait_for_timeout(800)
        except StarbucksError:
            raise
        except PlaywrightError as e:
            raise AddToCartFailed(f"Failed to add {item.name} to cart: {e}") from e
        logger.info(f"Added {item.describe()} to cart")

    async def submit_order(self, page: Page) -> bool:
        """Checkout from the cart page, then press the final place-order control.

        Returns False when no place-order control showed up; the site may have
        placed the order on checkout already.
        """
        checkout = page.locator(CHECKOUT_BUTTON).first
        await checkout.wait_for(state="visible", timeout=CHECKOUT_TIMEOUT)
        await checkout.click()
        await page.wait_for_timeout(3000)

        try:
            await page.locator(PLACE_ORDER_BUTTON).first.click(timeout=CHECKOUT_TIMEOUT)
        except PlaywrightError as e:
            logger.info(f"No place-order button after checkout, assuming order placed: {e}")
            return False
        await page.wait_for_timeout(3000)
        return True
