# utils/kitchen.py
from __future__ import annotations
import asyncio, logging
from typing import Any, Callable, Dict, List, Set

from fastapi import WebSocket

from state import Order, orders_to_json

log = logging.getLogger("pos.kitchen")


class KitchenHub:
    """
    Live kitchen displays.
      - on connect: register, then send `current-orders` with the store snapshot
      - on publish: send `new-order` to every socket registered at that moment
    A display that does not take a frame within `send_timeout` seconds is
    dropped.
    Register + snapshot and append + publish each run without an await in
    between, so an order is either in a client's snapshot or in its
    new-order stream, never both and never neither.
    """

    def __init__(self, snapshot: Callable[[], List[Order]], send_timeout: float = 2.0) -> None:
        self._snapshot = snapshot
        self.send_timeout = send_timeout
        self._subscribers: Set[WebSocket] = set()

    def __len__(self) -> int:
        return len(self._subscribers)

    async def connect(self, ws: WebSocket) -> None:
        await ws.accept()
        self._subscribers.add(ws)
        orders = orders_to_json(self._snapshot())
        await ws.send_json({"type": "current-orders", "orders": orders})
        log.info("[Kitchen] display connected (%d live)", len(self._subscribers))

    def disconnect(self, ws: WebSocket) -> None:
        if ws in self._subscribers:
            self._subscribers.discard(ws)
            log.info("[Kitchen] display disconnected (%d live)", len(self._subscribers))

    async def publish(self, order: Order) -> int:
        """Push one new order to all current displays; returns how many got it."""
        targets = list(self._subscribers)
        msg: Dict[str, Any] = {"type": "new-order", "order": order.model_dump(mode="json")}
        sent = 0
        for ws in targets:
            try:
                await asyncio.wait_for(ws.send_json(msg), timeout=self.send_timeout)
                sent += 1
            except Exception as e:  # closed, broken or stalled socket: drop it, keep going
                log.warning("[Kitchen] dropping display after send failure: %s", e)
                self.disconnect(ws)
        return sent

    async def close_all(self) -> None:
        for ws in list(self._subscribers):
            try:
                await ws.close()
            except RuntimeError:
                pass  # already closed
            self.disconnect(ws)
