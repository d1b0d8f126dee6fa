# state.py
from __future__ import annotations
from collections import deque
from datetime import datetime, timezone
from typing import Any, Callable, Deque, Dict, List, Literal

from pydantic import BaseModel, ConfigDict, Field

OrderStatus = Literal["pending", "completed", "cancelled"]
Clock = Callable[[], str]


def utc_now_iso() -> str:
    # e.g. 2026-10-19T08:15:30.123Z
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class CheckoutPayload(BaseModel):
    # line items and any other client fields ride along untouched
    model_config = ConfigDict(extra="allow")

    total: float = Field(ge=0, strict=True, allow_inf_nan=False)
    items: List[Any] = Field(default_factory=list)


class Order(BaseModel):
    model_config = ConfigDict(extra="allow")

    orderNumber: int
    items: List[Any] = Field(default_factory=list)
    total: float = Field(ge=0)
    timestamp: str
    status: OrderStatus = "pending"


def orders_to_json(orders: List[Order]) -> List[Dict[str, Any]]:
    return [o.model_dump(mode="json") for o in orders]


class OrderStore:
    """Bounded, newest-first list of recent orders plus the order counter.

    Lives on ``app.state``; never persisted itself.
    """

    def __init__(self, capacity: int = 50, base: int = 1001) -> None:
        if capacity < 1:
            raise ValueError("capacity must be >= 1")
        self.capacity = capacity
        self.base = base
        self._orders: Deque[Order] = deque()
        self._next = base

    def append(self, order: Order) -> None:
        self._orders.appendleft(order)
        while len(self._orders) > self.capacity:
            self._orders.pop()

    def list(self) -> List[Order]:
        return list(self._orders)

    def next_order_number(self) -> int:
        n = self._next
        self._next += 1
        return n

    def peek_next(self) -> int:
        return self._next

    def reset(self) -> None:
        self._orders.clear()
        self._next = self.base

    def __len__(self) -> int:
        return len(self._orders)

