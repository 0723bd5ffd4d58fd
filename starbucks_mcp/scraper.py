"""Reads the order review back out of the rendered cart and checkout pages."""
import logging
import re
from typing import List, Optional, Union

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page

from starbucks_mcp.browser import body_text, is_visible
from starbucks_mcp.config import CART_URL, CHECKOUT_TIMEOUT, NAVIGATION_TIMEOUT, SIGNIN_CHECK_TIMEOUT
from starbucks_mcp.errors import CartEmpty
from starbucks_mcp.models import Drink, Food, OrderSummary

logger = logging.getLogger(__name__)

CART_READY = 'a:has-text("Checkout"), button:has-text("Checkout"), [class*="price"]'
CONTINUE_BUTTON = 'button:has-text("Continue"), a:has-text("Continue")'
SIGN_IN_CHOICE = 'button:has-text("Sign in"), a:has-text("Sign in")'

CART_COUNT = re.compile(r"Review order \((\d+)\)", re.IGNORECASE)
TOTAL_AFTER = re.compile(r"\bTotal\s*\$?\s*(\d+\.\d{2})", re.IGNORECASE)
TOTAL_BEFORE = re.compile(r"\$\s*(\d+\.\d{2})\s*total", re.IGNORECASE)
PRICE = re.compile(r"\$\s*(\d+\.\d{2})")


def extract_total(text: str) -> Optional[str]:
    """Find the order total in page text, e.g. ``"$7.45"``.

    Tries "Total $X.XX", then "$X.XX total", then the first price after
    "subtotal". Returns None when none of them match.
    """
    if not text:
        return None
    match = TOTAL_AFTER.search(text) or TOTAL_BEFORE.search(text)
    if match is None:
        idx = text.lower().find("subtotal")
        if idx > -1:
            match = PRICE.search(text, idx)
    return f"${match.group(1)}" if match else None


def check_cart_count(text: str) -> Optional[int]:
    """Return the "Review order (N)" count, raising CartEmpty when N is 0."""
    match = CART_COUNT.search(text or "")
    if match is None:
        return None
    count = int(match.group(1))
    if count == 0:
        raise CartEmpty()
    return count


class OrderScraper:
    """Builds an OrderSummary from the caller's items and the checkout preview.

    ``session`` is optional; with it the scraper can sign in again when the
    checkout redirects to a login form and save debug screenshots.
    """

    def __init__(self, session=None):
        self.session = session

    async def open_cart(self, page: Page) -> None:
        await page.goto(CART_URL, wait_until="networkidle", timeout=NAVIGATION_TIMEOUT)
        await page.wait_for_load_state("domcontentloaded")
        try:
            await page.wait_for_selector(CART_READY, timeout=CHECKOUT_TIMEOUT)
        except PlaywrightError:
            logger.debug("Cart contents did not render, continuing")
        # Total is calculated after the items render
        await page.wait_for_timeout(3000)

    async def scrape_summary(self, page: Page, items: List[Union[Drink, Food]], location: str) -> OrderSummary:
        summary = OrderSummary(items=[item.describe() for item in items], location=location)
        await self.open_cart(page)
        try:
            check_cart_count(await body_text(page))
            summary.total = await self._checkout_total(page)
        except CartEmpty:
            raise
        except PlaywrightError as e:
            logger.warning(f"Could not read order total: {e}")
        finally:
            await self._return_to_cart(page)
        return summary

    async def _return_to_cart(self, page: Page) -> None:
        """Confirm starts from the cart page; leave the page there."""
        try:
            await page.goto(CART_URL, wait_until="networkidle", timeout=NAVIGATION_TIMEOUT)
        except PlaywrightError as e:
            logger.warning(f"Could not return to cart: {e}")

    async def _checkout_total(self, page: Page) -> Optional[str]:
        # The cart page shows no prices; the checkout preview does
        proceed = page.locator(CONTINUE_BUTTON).first
        await proceed.wait_for(state="visible", timeout=CHECKOUT_TIMEOUT)
        await proceed.click()
        await page.wait_for_timeout(2000)

        # "How do you want to complete your purchase?"
        sign_in = page.locator(SIGN_IN_CHOICE).first
        if await is_visible(sign_in, SIGNIN_CHECK_TIMEOUT):
            await sign_in.click()
            await page.wait_for_timeout(2000)

        if self.session is not None:
            try:
                await self.session.sign_in_on_page(page)
            except OSError as e:
                logger.warning(f"Could not save session after checkout sign-in: {e}")
            await self.session.screenshot("checkout_preview")

        total = extract_total(await body_text(page))
        if total is None:
            logger.info("No order total found on checkout page")
        return total
