"""Shared test fixtures."""
import pytest

from starbucks_mcp.config import Settings
from starbucks_mcp.errors import ItemNotFound
from starbucks_mcp.models import OrderSummary
from starbucks_mcp.orders import OrderStateMachine
from tests.fakes import FakeSession


@pytest.fixture
def settings(tmp_path):
    """Settings pointing every file at a temporary directory, no credentials."""
    return Settings(
        session_path=str(tmp_path / "starbucks-session.json"),
        favorites_path=str(tmp_path / "starbucks-favorites.json"),
        debug_dir=str(tmp_path / "debug"),
    )


@pytest.fixture
def settings_with_credentials(settings):
    return Settings(
        email="coffee@example.com",
        password="hunter2",
        session_path=settings.session_path,
        favorites_path=settings.favorites_path,
        debug_dir=settings.debug_dir,
    )


class RecordingStores:
    def __init__(self):
        self.bound = []

    async def bind_store(self, page, location):
        self.bound.append(location)
        return location


class RecordingCart:
    """Cart stand-in; names in ``missing`` raise ItemNotFound."""

    def __init__(self, missing=(), events=None):
        self.missing = set(missing)
        self.added = []
        self.cleared = 0
        self.submitted = 0
        self.events = events if events is not None else []

    async def clear(self, page):
        self.cleared += 1
        self.events.append("clear")
        return 0

    async def add_item(self, page, item):
        if item.name in self.missing:
            raise ItemNotFound(item.name)
        self.added.append(item)
        self.events.append(item.name)

    async def submit_order(self, page):
        self.submitted += 1
        return True


class RecordingScraper:
    def __init__(self, total="$7.45", error=None):
        self.total = total
        self.error = error

    async def scrape_summary(self, page, items, location):
        if self.error is not None:
            raise self.error
        return OrderSummary(items=[item.describe() for item in items], location=location, total=self.total)


@pytest.fixture
def fake_session():
    return FakeSession()


@pytest.fixture
def stores():
    return RecordingStores()


@pytest.fixture
def cart():
    return RecordingCart(missing={"Unicorn Frappuccino"})


@pytest.fixture
def scraper():
    return RecordingScraper()


@pytest.fixture
def machine(fake_session, stores, cart, scraper):
    return OrderStateMachine(fake_session, stores=stores, cart=cart, scraper=scraper)
