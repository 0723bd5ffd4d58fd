"""Tests for store resolution and binding."""
import pytest

from starbucks_mcp.config import STORE_LOCATOR_URL
from starbucks_mcp.errors import StoreNotFound, StoreUnavailable
from starbucks_mcp.stores import (
    DEFAULT_ADDRESS,
    ORDER_HERE_BUTTON,
    STORE_SEARCH_INPUT,
    StoreResolver,
    resolve_address,
)
from tests.fakes import FakeElement, FakePage


class TestResolveAddress:

    @pytest.mark.parametrize("location", ["Polk Street", "polk", "POLK STREET", "  Polk  "])
    def test_known_names_case_insensitive(self, location):
        assert resolve_address(location) == DEFAULT_ADDRESS

    @pytest.mark.parametrize("location", ["Unknown District", "", None])
    def test_unknown_names_fall_back(self, location):
        assert resolve_address(location) == DEFAULT_ADDRESS


class TestBindStore:

    @pytest.mark.asyncio
    async def test_fills_address_and_orders_here(self):
        page = FakePage({
            STORE_SEARCH_INPUT: [FakeElement()],
            ORDER_HERE_BUTTON: [FakeElement("Order Here"), FakeElement("Order Here")],
        })

        address = await StoreResolver().bind_store(page, "polk")

        assert address == DEFAULT_ADDRESS
        assert page.visited == [STORE_LOCATOR_URL]
        assert page.fills == [(STORE_SEARCH_INPUT, DEFAULT_ADDRESS)]
        assert page.presses == [(STORE_SEARCH_INPUT, "Enter")]
        assert page.clicks == ["Order Here"]

    @pytest.mark.asyncio
    async def test_missing_search_input(self):
        page = FakePage({ORDER_HERE_BUTTON: [FakeElement("Order Here")]})
        with pytest.raises(StoreNotFound):
            await StoreResolver().bind_store(page, "Polk Street")

    @pytest.mark.asyncio
    async def test_no_order_here_button(self):
        page = FakePage({
            STORE_SEARCH_INPUT: [FakeElement()],
            ORDER_HERE_BUTTON: [FakeElement("Order Here", visible=False)],
        })
        with pytest.raises(StoreUnavailable):
            await StoreResolver().bind_store(page, "Polk Street")
