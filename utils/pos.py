# utils/pos.py
from __future__ import annotations
from typing import Any

from langsmith import traceable

from app.logging_hooks import order_logger
from state import Clock, Order, OrderStore, utc_now_iso
from utils.kitchen import KitchenHub
from utils.validation import validate_checkout


class CheckoutService:
    """
    Turns a client payload into an accepted order:
    validate -> number -> stamp -> store -> notify kitchen.
    Persistence is scheduled by the caller so the response never waits on disk.
    """

    def __init__(self, store: OrderStore, hub: KitchenHub, clock: Clock = utc_now_iso) -> None:
        self.store = store
        self.hub = hub
        self.clock = clock

    def accept(self, raw: Any) -> Order:
        # raises CheckoutError before anything is touched
        payload = validate_checkout(raw)
        data = payload.model_dump()
        # the counter is the only source of numbers; a client-sent one is overwritten
        data["orderNumber"] = self.store.next_order_number()
        data["timestamp"] = self.clock()
        data["status"] = "pending"
        order = Order.model_validate(data)
        self.store.append(order)
        return order

    @traceable(name="checkout", tags=["checkout"])
    async def checkout(self, raw: Any) -> Order:
        order = self.accept(raw)
        # no await between append and publish, so the subscriber set is the one at acceptance
        await self.hub.publish(order)
        order_logger(order.orderNumber, order.total, len(order.items))
        return order
