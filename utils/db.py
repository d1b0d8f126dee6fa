# utils/db.py
from __future__ import annotations
import asyncio, json, logging, os, re
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, List, Optional

from state import Order

log = logging.getLogger("pos.db")

DATE_KEY_RE = re.compile(r"\d{4}-\d{2}-\d{2}")


def _date_key(order: Order) -> str:
    # timestamp is ISO-8601, so the first 10 chars are YYYY-MM-DD
    return order.timestamp[:10]


def _write_json(path: str, data: Any) -> None:
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, ensure_ascii=False)


def _read_json_list(path: str) -> List[Dict[str, Any]]:
    if not os.path.exists(path):
        return []
    with open(path, "r", encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            log.warning("[DB] unreadable aggregate %s (%s); starting fresh", path, e)
            return []
    return data if isinstance(data, list) else []


class OrderWriter:
    """
    Writes every accepted order twice:
      - <dir>/order_<n>.json        (authoritative, one writer per order number)
      - <dir>/daily_<YYYY-MM-DD>.json (JSON array, rebuilt from order files on demand)
    The daily file is read-merge-written; writers for the same date are
    serialized through a per-date asyncio.Lock so no append is lost; a lock is
    dropped again once nobody holds or waits on it.
    """

    def __init__(self, orders_dir: str) -> None:
        self.orders_dir = orders_dir
        # date key -> [lock, holders + waiters]
        self._locks: Dict[str, list] = {}

    def order_path(self, order_number: int) -> str:
        return os.path.join(self.orders_dir, f"order_{order_number}.json")

    def daily_path(self, date_key: str) -> str:
        return os.path.join(self.orders_dir, f"daily_{date_key}.json")

    @asynccontextmanager
    async def _date_lock(self, date_key: str) -> AsyncIterator[None]:
        entry = self._locks.get(date_key)
        if entry is None:
            entry = self._locks[date_key] = [asyncio.Lock(), 0]
        entry[1] += 1
        try:
            async with entry[0]:
                yield
        finally:
            entry[1] -= 1
            if entry[1] == 0 and self._locks.get(date_key) is entry:
                del self._locks[date_key]

    async def persist(self, order: Order) -> None:
        """Best effort: I/O errors are logged, never raised."""
        data = order.model_dump(mode="json")
        key = _date_key(order)
        try:
            await asyncio.to_thread(os.makedirs, self.orders_dir, exist_ok=True)
            await asyncio.to_thread(_write_json, self.order_path(order.orderNumber), data)
            async with self._date_lock(key):
                path = self.daily_path(key)
                daily = await asyncio.to_thread(_read_json_list, path)
                daily.append(data)
                await asyncio.to_thread(_write_json, path, daily)
        except (OSError, ValueError, TypeError) as e:
            log.error("[Persist Error] order #%s: %s", order.orderNumber, e)

    # ---- read side ------------------------------------------------------
    def read_order(self, order_number: int) -> Optional[Order]:
        path = self.order_path(order_number)
        if not os.path.exists(path):
            return None
        with open(path, "r", encoding="utf-8") as f:
            return Order.model_validate(json.load(f))

    def read_daily(self, date_key: str) -> List[Dict[str, Any]]:
        return _read_json_list(self.daily_path(date_key))

    async def rebuild_daily(self, date_key: str) -> List[Dict[str, Any]]:
        """
        Maintenance helper behind POST /api/orders/rebuild-daily: regenerate a
        day's aggregate from the per-order files. A day with no order files
        gets an empty array, so a stale aggregate never survives. OSError propagates.
        """
        if not DATE_KEY_RE.fullmatch(date_key):
            raise ValueError(f"bad date key: {date_key!r}")
        async with self._date_lock(date_key):
            orders = await asyncio.to_thread(self._collect_day, date_key)
            await asyncio.to_thread(os.makedirs, self.orders_dir, exist_ok=True)
            await asyncio.to_thread(_write_json, self.daily_path(date_key), orders)
            return orders

    def _collect_day(self, date_key: str) -> List[Dict[str, Any]]:
        if not os.path.isdir(self.orders_dir):
            return []
        found: List[Dict[str, Any]] = []
        for name in os.listdir(self.orders_dir):
            if not (name.startswith("order_") and name.endswith(".json")):
                continue
            with open(os.path.join(self.orders_dir, name), "r", encoding="utf-8") as f:
                try:
                    rec = json.load(f)
                except json.JSONDecodeError as e:
                    log.warning("[DB] skipping unreadable %s (%s)", name, e)
                    continue
            if isinstance(rec, dict) and str(rec.get("timestamp", ""))[:10] == date_key:
                found.append(rec)
        found.sort(key=lambda r: int(r.get("orderNumber", 0)))
        return found
