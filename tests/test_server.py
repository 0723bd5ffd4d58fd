"""Tests for the tool-invocation layer."""
import asyncio
import json

import pytest

from starbucks_mcp.client import StarbucksClient
from starbucks_mcp.errors import FavoriteNotFound, InvalidItems, NoPendingOrder, UnknownOperation
from starbucks_mcp.orders import OrderState, OrderStateMachine
from starbucks_mcp.server import OPERATIONS, dispatch, mcp
from tests.conftest import RecordingCart, RecordingScraper, RecordingStores
from tests.fakes import FakeSession


class SlowCart(RecordingCart):
    async def add_item(self, page, item):
        await asyncio.sleep(0)
        await super().add_item(page, item)


@pytest.fixture
def events():
    return []


@pytest.fixture
def client(settings, events):
    session = FakeSession()
    orders = OrderStateMachine(
        session,
        stores=RecordingStores(),
        cart=SlowCart(missing={"Unicorn Frappuccino"}, events=events),
        scraper=RecordingScraper(),
    )
    client = StarbucksClient(settings=settings, session=session, orders=orders)
    client.initialize()
    return client


class TestDispatch:

    @pytest.mark.asyncio
    async def test_unknown_operation(self, client):
        with pytest.raises(UnknownOperation, match="Unknown tool: brew_coffee"):
            await dispatch("brew_coffee", target=client)

    @pytest.mark.asyncio
    async def test_result_is_json_text(self, client):
        text = await dispatch("check_auth", target=client)
        assert json.loads(text) == {
            "authenticated": False,
            "message": "No session found. Run login_starbucks to authenticate.",
        }

    @pytest.mark.asyncio
    async def test_add_then_list_favorites(self, client):
        await dispatch(
            "add_favorite",
            {"name": "Afternoon Pick-Me-Up", "items": [{"type": "drink", "name": "Cold Brew", "size": "venti"}]},
            target=client,
        )

        favorites = json.loads(await dispatch("list_favorites", target=client))

        assert favorites[-1] == {
            "name": "Afternoon Pick-Me-Up",
            "items": [{"type": "drink", "name": "Cold Brew", "size": "venti"}],
        }

    @pytest.mark.asyncio
    async def test_invalid_favorite_items(self, client):
        with pytest.raises(InvalidItems):
            await dispatch("add_favorite", {"name": "Bad", "items": [{"type": "drink", "name": "Latte"}]}, target=client)

    @pytest.mark.asyncio
    async def test_order_unknown_favorite(self, client):
        with pytest.raises(FavoriteNotFound):
            await dispatch("order_favorite", {"favorite_name": "Second Breakfast"}, target=client)

    @pytest.mark.asyncio
    async def test_order_favorite_uses_default_location(self, client):
        result = json.loads(await dispatch("order_favorite", {"favorite_name": "Breakfast"}, target=client))

        assert result["location"] == "Polk Street"
        assert result["items"] == ["Grande Pike Place Roast", "Bacon Gouda Artisan Breakfast Sandwich"]

    @pytest.mark.asyncio
    async def test_custom_order_puts_drinks_before_food(self, client):
        result = json.loads(await dispatch(
            "custom_order",
            {
                "drinks": [{"name": "Iced Cold Brew", "size": "tall"}],
                "food": ["Butter Croissant"],
                "location": "Unknown District",
            },
            target=client,
        ))

        assert result["items"] == ["Tall Iced Cold Brew", "Butter Croissant"]
        assert result["location"] == "Unknown District"

    @pytest.mark.asyncio
    async def test_custom_order_needs_items(self, client):
        with pytest.raises(InvalidItems):
            await dispatch("custom_order", {"drinks": [], "food": []}, target=client)

    @pytest.mark.asyncio
    async def test_cancel_then_confirm(self, client):
        await dispatch("order_favorite", {"favorite_name": "Venti Black"}, target=client)
        await dispatch("cancel_order", target=client)

        assert client.orders.state is OrderState.IDLE
        with pytest.raises(NoPendingOrder):
            await dispatch("confirm_order", target=client)

    @pytest.mark.asyncio
    async def test_concurrent_orders_do_not_interleave(self, client, events):
        first = {"drinks": [{"name": "Pike Place Roast", "size": "tall"}, {"name": "Cold Brew", "size": "venti"}]}
        second = {"food": ["Butter Croissant", "Bagel"]}

        await asyncio.gather(
            dispatch("custom_order", first, target=client),
            dispatch("custom_order", second, target=client),
        )

        assert events == ["clear", "Pike Place Roast", "Cold Brew", "clear", "Butter Croissant", "Bagel"]
        assert client.orders.pending.descriptions() == ["Butter Croissant", "Bagel"]


class TestDebugToggle:

    @pytest.mark.asyncio
    async def test_reports_the_session_setting(self, settings):
        client = StarbucksClient(settings=settings)

        result = json.loads(await dispatch("toggle_debug", {"enabled": True}, target=client))

        assert result == {"success": True, "debug": True, "debug_dir": settings.debug_dir}
        assert client.session.settings.debug is True

    @pytest.mark.asyncio
    async def test_turning_off(self, settings):
        client = StarbucksClient(settings=settings)
        await client.toggle_debug(True)
        assert (await client.toggle_debug(False))["debug"] is False


class TestToolRegistry:

    @pytest.mark.asyncio
    async def test_tools_registered(self):
        names = {tool.name for tool in await mcp.list_tools()}
        assert names == {
            "login_starbucks",
            "complete_starbucks_login",
            "check_starbucks_auth",
            "list_starbucks_favorites",
            "add_starbucks_favorite",
            "order_starbucks_favorite",
            "order_starbucks_custom",
            "confirm_starbucks_order",
            "cancel_starbucks_order",
            "stop_browser",
            "toggle_debug",
        }

    def test_every_operation_is_a_client_coroutine(self):
        for operation in OPERATIONS:
            assert asyncio.iscoroutinefunction(getattr(StarbucksClient, operation))
