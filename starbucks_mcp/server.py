import json
import logging
import sys
from contextlib import asynccontextmanager
from typing import Any, Dict, List, Optional

from mcp.server.fastmcp import FastMCP

from starbucks_mcp.client import StarbucksClient
from starbucks_mcp.errors import UnknownOperation
from starbucks_mcp.models import Drink, OrderItem

client = StarbucksClient()

logger = logging.getLogger("starbucks-mcp")
logging.basicConfig(
    level=client.settings.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

# StarbucksClient coroutines reachable through dispatch
OPERATIONS = frozenset({
    "login",
    "complete_login",
    "check_auth",
    "list_favorites",
    "add_favorite",
    "order_favorite",
    "custom_order",
    "confirm_order",
    "cancel_order",
    "stop_browser",
    "toggle_debug",
})


async def dispatch(
    operation: str,
    arguments: Optional[Dict[str, Any]] = None,
    target: Optional[StarbucksClient] = None,
) -> str:
    """Run ``operation`` on the client and return its result as JSON text."""
    if operation not in OPERATIONS:
        raise UnknownOperation(operation)
    target = target or client
    async with target.lock:
        logger.info(f"Running {operation}")
        try:
            result = await getattr(target, operation)(**(arguments or {}))
        except Exception as e:
            logger.warning(f"{operation} failed: {e}")
            raise
    return json.dumps(result, indent=2, ensure_ascii=False)


@asynccontextmanager
async def lifespan(server: FastMCP):
    try:
        yield {}
    finally:
        await client.close()


mcp = FastMCP("Starbucks", lifespan=lifespan)


@mcp.tool()
async def login_starbucks() -> str:
    """Open browser for Starbucks login (first-time setup or to refresh expired session)."""
    return await dispatch("login")


@mcp.tool()
async def complete_starbucks_login() -> str:
    """Complete Starbucks login after user has logged in manually in the browser."""
    return await dispatch("complete_login")


@mcp.tool()
async def check_starbucks_auth() -> str:
    """Check if a Starbucks session is saved (cookie presence, not verified against the site)."""
    return await dispatch("check_auth")


@mcp.tool()
async def list_starbucks_favorites() -> str:
    """List all saved Starbucks favorite orders."""
    return await dispatch("list_favorites")


@mcp.tool()
async def add_starbucks_favorite(name: str, items: List[OrderItem]) -> str:
    """Save a new Starbucks favorite order. Drinks need a size (tall, grande, venti)."""
    return await dispatch("add_favorite", {"name": name, "items": [item.model_dump() for item in items]})


@mcp.tool()
async def order_starbucks_favorite(favorite_name: str, location: Optional[str] = None) -> str:
    """Order a saved Starbucks favorite (e.g., 'Morning Coffee Run', 'Breakfast').

    location: store location name (default: Polk Street)
    """
    return await dispatch("order_favorite", {"favorite_name": favorite_name, "location": location})


@mcp.tool()
async def order_starbucks_custom(
    drinks: Optional[List[Drink]] = None,
    food: Optional[List[str]] = None,
    location: Optional[str] = None,
) -> str:
    """Place a custom Starbucks order with specific drinks and food.

    drinks: e.g. [{"name": "Iced Cold Brew", "size": "grande"}]
    food: e.g. ["Bacon Gouda Artisan Breakfast Sandwich"]
    The order is held for review until confirm_starbucks_order is called.
    """
    return await dispatch(
        "custom_order",
        {
            "drinks": [drink.model_dump() for drink in drinks or []],
            "food": list(food or []),
            "location": location,
        },
    )


@mcp.tool()
async def confirm_starbucks_order() -> str:
    """Confirm and place a pending Starbucks order after review."""
    return await dispatch("confirm_order")


@mcp.tool()
async def cancel_starbucks_order() -> str:
    """Cancel a pending Starbucks order."""
    return await dispatch("cancel_order")


@mcp.tool()
async def stop_browser() -> str:
    """Stop and clean up the browser session; saved cookies are kept."""
    return await dispatch("stop_browser")


@mcp.tool()
async def toggle_debug(enabled: bool = True) -> str:
    """Enable or disable debug screenshots of the checkout steps."""
    return await dispatch("toggle_debug", {"enabled": enabled})


def main() -> None:
    try:
        client.initialize()
    except Exception as e:
        logger.error(f"Fatal error during start-up: {e}")
        sys.exit(1)
    logger.info("Starting Starbucks MCP server on stdio")
    mcp.run()


if __name__ == "__main__":
    main()
