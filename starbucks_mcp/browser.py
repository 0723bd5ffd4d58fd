"""Small Playwright helpers shared by the workflow steps."""
import logging
from typing import List

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Locator, Page
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

logger = logging.getLogger(__name__)


async def is_visible(locator: Locator, timeout: int) -> bool:
    """Wait up to ``timeout`` ms for the locator to show; never raises."""
    try:
        await locator.wait_for(state="visible", timeout=timeout)
        return True
    except PlaywrightTimeoutError:
        return False
    except PlaywrightError as e:
        logger.debug(f"Visibility check failed: {e}")
        return False


async def body_text(page: Page) -> str:
    return (await page.locator("body").text_content()) or ""


async def click_each(page: Page, selector: str, timeout: int, pause: int = 500) -> int:
    """Click every element matching ``selector``; failed clicks are skipped.

    Returns the number of successful clicks.
    """
    clicked = 0
    buttons: List[Locator] = await page.locator(selector).all()
    for button in buttons:
        try:
            await button.click(timeout=timeout)
            await page.wait_for_timeout(pause)
            clicked += 1
        except PlaywrightError as e:
            logger.debug(f"Skipping unclickable element {selector!r}: {e}")
            continue
    return clicked
