"""Shared fixtures for the domainkit test suite."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Literal

import pytest
from pydantic import BaseModel, Field

from domainkit.aggregates import aggregate
from domainkit.core.clock import SimClock
from domainkit.core.config import reset_settings
from domainkit.entities import entity
from domainkit.events.bus import EventBus
from domainkit.repositories import InMemoryAdapter

ORDER_ITEMS_RULE = "Order must have at least one item when placed"


class OrderItem(BaseModel):
    sku: str
    quantity: int = Field(gt=0)
    price: float = Field(ge=0)


class OrderSchema(BaseModel):
    id: str
    customer_id: str
    status: Literal["DRAFT", "PLACED", "CANCELLED"] = "DRAFT"
    items: list[OrderItem] = Field(default_factory=list)
    total: float = 0.0


class UserSchema(BaseModel):
    id: str
    name: str
    email: str
    tags: list[str] = Field(default_factory=list)


def order_methods(factory):
    def add_item(self, sku, quantity, price):
        items = [*self.to_dict()["items"], {"sku": sku, "quantity": quantity, "price": price}]
        total = sum(i["quantity"] * i["price"] for i in items)
        return factory.update(self, {"items": items, "total": total}).emit_event(
            "ItemAdded", {"order_id": self.id, "sku": sku}
        )

    def place_order(self):
        return factory.update(self, {"status": "PLACED"}).emit_event(
            "OrderPlaced", {"order_id": self.id, "total": self.total}
        )

    def cancel(self, reason="customer request"):
        return factory.update(self, {"status": "CANCELLED"}).emit_event(
            "OrderCancelled", {"order_id": self.id, "reason": reason}
        )

    return {"add_item": add_item, "place_order": place_order, "cancel": cancel}


@pytest.fixture(autouse=True)
def _fresh_settings():
    """Every test starts from default settings."""
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def sim_clock() -> SimClock:
    return SimClock(start=datetime(2024, 1, 1, tzinfo=timezone.utc))


@pytest.fixture
def order_schema() -> type[OrderSchema]:
    return OrderSchema


@pytest.fixture
def order_factory(sim_clock):
    return aggregate(
        name="Order",
        schema=OrderSchema,
        identity="id",
        methods_factory=order_methods,
        invariants=[
            {
                "name": ORDER_ITEMS_RULE,
                "check": lambda o: o.status != "PLACED" or len(o.items) > 0,
            },
        ],
        clock=sim_clock,
    )


@pytest.fixture
def draft_order(order_factory):
    return order_factory.create({"id": "order-1", "customer_id": "cust-1"})


@pytest.fixture
def user_factory(sim_clock):
    return entity(
        name="User",
        schema=UserSchema,
        identity="id",
        historize=True,
        clock=sim_clock,
    )


@pytest.fixture
def bus() -> EventBus:
    return EventBus()


@pytest.fixture
def order_adapter() -> InMemoryAdapter:
    return InMemoryAdapter(identity="id")
