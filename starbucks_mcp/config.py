import os
from dataclasses import dataclass
from typing import Optional, Tuple

from dotenv import load_dotenv

load_dotenv()


# -------------------------
# Site
BASE_URL = "https://www.starbucks.com"
SIGNIN_URL = f"{BASE_URL}/account/signin"
MENU_URL = f"{BASE_URL}/menu"
CART_URL = f"{BASE_URL}/menu/cart"
STORE_LOCATOR_URL = f"{BASE_URL}/menu/store-locator"

# URL reached once sign-in succeeded: account area other than the sign-in
# page itself, menu, or the site root
AUTHENTICATED_URL_PATTERN = r"starbucks\.com/(account(?!/signin)|menu|$)"

# -------------------------
# Timeouts (milliseconds)
# -------------------------

NAVIGATION_TIMEOUT = 15000
INTERACTIVE_LOGIN_TIMEOUT = 120000
AUTO_LOGIN_TIMEOUT = 30000
STORE_INPUT_TIMEOUT = 10000
ORDER_HERE_TIMEOUT = 10000
SIZE_SELECTOR_TIMEOUT = 3000
ADD_TO_ORDER_TIMEOUT = 5000
CHECKOUT_TIMEOUT = 5000
SIGNIN_CHECK_TIMEOUT = 3000
REMOVE_CLICK_TIMEOUT = 2000


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    email: Optional[str] = None
    password: Optional[str] = None
    session_path: str = "starbucks-session.json"
    favorites_path: str = "starbucks-favorites.json"
    default_location: str = "Polk Street"
    headless: bool = True
    debug: bool = False
    debug_dir: str = "debug"
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        cwd = os.getcwd()
        return cls(
            email=os.getenv("STARBUCKS_EMAIL") or None,
            password=os.getenv("STARBUCKS_PASSWORD") or None,
            session_path=os.getenv("STARBUCKS_SESSION_PATH", os.path.join(cwd, "starbucks-session.json")),
            favorites_path=os.getenv("STARBUCKS_FAVORITES_PATH", os.path.join(cwd, "starbucks-favorites.json")),
            default_location=os.getenv("STARBUCKS_DEFAULT_LOCATION", "Polk Street"),
            headless=_env_flag("STARBUCKS_HEADLESS", True),
            debug=_env_flag("STARBUCKS_DEBUG", False),
            debug_dir=os.getenv("STARBUCKS_DEBUG_DIR", os.path.join(cwd, "debug")),
            log_level=os.getenv("STARBUCKS_LOG_LEVEL", "INFO").upper(),
        )

    @property
    def credentials(self) -> Optional[Tuple[str, str]]:
        """(email, password) when both are configured, else None."""
        if self.email and self.password:
            return self.email, self.password
        return None
