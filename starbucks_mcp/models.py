"""Order data models."""
from datetime import datetime
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

DrinkSize = Literal["tall", "grande", "venti"]


class Drink(BaseModel):
    """A drink with a required size."""

    model_config = ConfigDict(frozen=True)

    type: Literal["drink"] = "drink"
    name: str = Field(min_length=1)
    size: DrinkSize

    def describe(self) -> str:
        return f"{self.size.capitalize()} {self.name}"


class Food(BaseModel):
    """A food item. Any size sent along with it is ignored."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    type: Literal["food"] = "food"
    name: str = Field(min_length=1)

    def describe(self) -> str:
        return self.name


OrderItem = Annotated[Union[Drink, Food], Field(discriminator="type")]

order_items_adapter = TypeAdapter(List[OrderItem])


def parse_items(raw: list) -> List[Union[Drink, Food]]:
    """Validate a list of ``{"type", "name", "size"?}`` mappings."""
    return order_items_adapter.validate_python(raw)


class FavoriteOrder(BaseModel):
    """A named bundle of items."""

    name: str = Field(min_length=1)
    items: List[OrderItem]


class PendingOrder(BaseModel):
    """Items in the remote cart, waiting for confirm or cancel."""

    items: List[OrderItem]
    location: str
    created_at: datetime = Field(default_factory=datetime.now)

    def descriptions(self) -> List[str]:
        return [item.describe() for item in self.items]


class OrderSummary(BaseModel):
    """Human-readable review of an order. ``total`` is advisory."""

    items: List[str]
    location: str
    total: Optional[str] = None
