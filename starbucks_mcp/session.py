"""Browser lifecycle and authentication state."""
import json
import logging
import os
import re
from dataclasses import replace
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from playwright.async_api import Browser, BrowserContext, Page, Playwright, async_playwright
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from starbucks_mcp.browser import is_visible
from starbucks_mcp.config import (
    AUTHENTICATED_URL_PATTERN,
    AUTO_LOGIN_TIMEOUT,
    BASE_URL,
    INTERACTIVE_LOGIN_TIMEOUT,
    MENU_URL,
    NAVIGATION_TIMEOUT,
    SIGNIN_CHECK_TIMEOUT,
    SIGNIN_URL,
    Settings,
)
from starbucks_mcp.errors import (
    AutoLoginFailed,
    BrowserNotActive,
    LoginTimeout,
    NotAuthenticated,
    StarbucksError,
)

logger = logging.getLogger(__name__)

SIGN_IN_CONTROL = 'button:has-text("Sign in"), a:has-text("Sign in")'
EMAIL_INPUT = 'input[type="email"], input[name="username"]'
PASSWORD_INPUT = 'input[type="password"], input[name="password"]'
SUBMIT_BUTTON = 'button[type="submit"], button:has-text("Sign in")'

NO_SESSION_MESSAGE = "No session found. Run login_starbucks to authenticate."


def _safe_label(label: str) -> str:
    return re.sub(r"[^a-zA-Z0-9_-]+", "_", label)[:60]


class SessionManager:
    """Owns the one browser/page pair of the process and its cookie jar.

    "Authenticated" only ever means "cookies are stored"; an expired session
    is discovered when the menu page still shows a sign-in control.
    """

    def __init__(self, settings: Settings):
        self.settings = settings
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._context: Optional[BrowserContext] = None
        self.page: Optional[Page] = None

    # -------------------------
    # Browser lifecycle
    # -------------------------

    async def ensure_session(self, interactive: bool = False) -> Page:
        """Return the live page, launching a browser first if needed."""
        if self._browser is not None and not self._browser.is_connected():
            logger.info("Browser disconnected, recreating it")
            await self.teardown()
        if self.page is not None and not self.page.is_closed():
            return self.page
        headless = self.settings.headless and not interactive
        if self._playwright is None:
            self._playwright = await async_playwright().start()
        if self._browser is None:
            logger.info(f"Launching Chromium (headless={headless})")
            self._browser = await self._playwright.chromium.launch(headless=headless)
        if self._context is None:
            # No permissions granted, geolocation included
            self._context = await self._browser.new_context(permissions=[])
            await self._context.grant_permissions([], origin=BASE_URL)
            cookies = self.load_cookies()
            if cookies:
                try:
                    await self._context.add_cookies(cookies)
                    logger.info(f"Restored {len(cookies)} cookies from {self.settings.session_path}")
                except PlaywrightError as e:
                    logger.warning(f"Saved cookies rejected, starting without a session: {e}")
        self.page = await self._context.new_page()
        return self.page

    async def teardown(self) -> None:
        """Close the browser; the next ensure_session starts from scratch."""
        try:
            for resource in (self._context, self._browser):
                if resource is None:
                    continue
                try:
                    await resource.close()
                except PlaywrightError as e:
                    logger.debug(f"Ignoring close failure: {e}")
            if self._playwright:
                await self._playwright.stop()
        finally:
            self._playwright = self._browser = self._context = self.page = None

    # -------------------------
    # Cookie jar
    # -------------------------

    def load_cookies(self) -> List[Dict[str, Any]]:
        path = self.settings.session_path
        if not os.path.exists(path):
            return []
        try:
            with open(path, "r", encoding="utf-8") as f:
                cookies = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable session file {path}: {e}")
            return []
        return cookies if isinstance(cookies, list) else []

    async def save_session(self) -> None:
        if self._context is None:
            return
        cookies = await self._context.cookies()
        with open(self.settings.session_path, "w", encoding="utf-8") as f:
            json.dump(cookies, f, indent=2)
        logger.info(f"Saved {len(cookies)} cookies to {self.settings.session_path}")

    def check_authenticated(self) -> Dict[str, Any]:
        """Report whether any cookies are persisted. Not checked against the site."""
        cookies = self.load_cookies()
        if cookies:
            return {"authenticated": True, "message": "✓ Starbucks session found"}
        return {"authenticated": False, "message": NO_SESSION_MESSAGE}

    # -------------------------
    # Login flows
    # -------------------------

    async def begin_interactive_login(self) -> Dict[str, Any]:
        await self.teardown()
        page = await self.ensure_session(interactive=True)
        try:
            await page.goto(SIGNIN_URL)
        except PlaywrightError as e:
            raise StarbucksError(f"Failed to open login page: {e}") from e
        return {
            "success": True,
            "message": "Browser opened to Starbucks login page. Please log in manually.",
            "instructions": [
                "1. Log in with your Starbucks account",
                "2. Complete any 2FA if prompted",
                "3. Once logged in and you see your account page, I'll save the session",
                "4. Wait for confirmation message",
            ],
            "note": "Leave the browser open, then call complete_starbucks_login to save the session.",
        }

    async def await_login_completion(self, timeout: int = INTERACTIVE_LOGIN_TIMEOUT) -> Dict[str, Any]:
        if self.page is None or self.page.is_closed():
            raise BrowserNotActive("No browser session active. Call login_starbucks first.")
        try:
            await self.page.wait_for_url(re.compile(AUTHENTICATED_URL_PATTERN), timeout=timeout)
        except PlaywrightError as e:
            raise LoginTimeout(f"Login timeout or failed: {e}") from e
        await self.save_session()
        return {
            "success": True,
            "message": "✓ Login successful! Session saved. You can now place orders without logging in again.",
        }

    async def auto_login(self, credentials: Optional[Tuple[str, str]]) -> Dict[str, Any]:
        """Sign in headlessly with an email/password pair."""
        if not credentials:
            raise AutoLoginFailed("STARBUCKS_EMAIL and STARBUCKS_PASSWORD environment variables not set")
        email, password = credentials
        await self.teardown()
        page = await self.ensure_session()
        try:
            await page.goto(SIGNIN_URL, wait_until="networkidle")
            await page.wait_for_timeout(2000)
            await page.locator(EMAIL_INPUT).first.fill(email)
            await page.wait_for_timeout(500)
            await page.locator(PASSWORD_INPUT).first.fill(password)
            await page.wait_for_timeout(500)
            await page.locator(SUBMIT_BUTTON).first.click()
            await page.wait_for_timeout(3000)
            await page.wait_for_url(re.compile(AUTHENTICATED_URL_PATTERN), timeout=AUTO_LOGIN_TIMEOUT)
            await self.save_session()
        except PlaywrightError as e:
            raise AutoLoginFailed(f"Auto-login failed: {e}") from e
        return {"success": True, "message": "✓ Auto-login successful! Session saved."}

    async def ensure_signed_in(self) -> Page:
        """Open the menu and sign in again if the site asks for it."""
        page = await self.ensure_session()
        await page.goto(MENU_URL, wait_until="networkidle", timeout=NAVIGATION_TIMEOUT)
        await page.wait_for_timeout(1000)
        if not await is_visible(page.locator(SIGN_IN_CONTROL).first, SIGNIN_CHECK_TIMEOUT):
            return page
        credentials = self.settings.credentials
        if credentials is None:
            raise NotAuthenticated()
        logger.info("Sign-in control on menu page, logging in with configured credentials")
        await self.auto_login(credentials)
        page = await self.ensure_session()
        await page.goto(MENU_URL, wait_until="networkidle", timeout=NAVIGATION_TIMEOUT)
        await page.wait_for_timeout(1000)
        return page

    async def sign_in_on_page(self, page: Page) -> bool:
        """Fill a login form that appeared mid-flow. True if credentials were submitted."""
        if not await is_visible(page.locator(EMAIL_INPUT).first, 2000):
            return False
        credentials = self.settings.credentials
        if credentials is None:
            logger.warning("Redirected to sign-in during checkout but no credentials are configured")
            return False
        email, password = credentials
        await page.locator(EMAIL_INPUT).first.fill(email)
        await page.locator(PASSWORD_INPUT).first.fill(password)
        await page.locator(SUBMIT_BUTTON).first.click()
        await page.wait_for_timeout(3000)
        await self.save_session()
        return True

    async def navigate_home(self) -> None:
        """Best-effort: move the page off the cart."""
        if self.page is None:
            return
        try:
            await self.page.goto(f"{BASE_URL}/")
        except PlaywrightError as e:
            logger.warning(f"Could not navigate home: {e}")

    # -------------------------
    # Debug
    # -------------------------

    async def screenshot(self, label: str) -> Optional[str]:
        if not self.settings.debug or self.page is None:
            return None
        os.makedirs(self.settings.debug_dir, exist_ok=True)
        ts = datetime.now().strftime("%Y%m%d_%H%M%S_%f")
        path = os.path.join(self.settings.debug_dir, f"{ts}_{_safe_label(label)}.png")
        try:
            await self.page.screenshot(path=path, full_page=True)
            return path
        except PlaywrightError as e:
            logger.debug(f"Screenshot {label!r} failed: {e}")
            return None

    def set_debug(self, enabled: bool) -> None:
        self.settings = replace(self.settings, debug=bool(enabled))
