# utils/reports.py
from __future__ import annotations
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, List, Optional, Union

from state import Order, orders_to_json

_CENTS = Decimal("0.01")


def _money(d: Decimal) -> str:
    return str(d.quantize(_CENTS, rounding=ROUND_HALF_UP))


def daily_report(orders: List[Order], as_of: str) -> Dict[str, Any]:
    """
    Same-day sales summary over the in-memory orders.
    `as_of` is a YYYY-MM-DD key compared with the date part of each timestamp;
    partial keys like "2026-10" match nothing and yield an empty report.
    """
    day = [o for o in orders if o.timestamp[:10] == as_of] if as_of else []
    count = len(day)
    revenue = sum((Decimal(str(o.total)) for o in day), Decimal("0")).quantize(_CENTS, rounding=ROUND_HALF_UP)
    average: Union[str, int] = _money(revenue / count) if count else 0
    return {
        "date": as_of,
        "totalOrders": count,
        "totalRevenue": _money(revenue),
        "averageOrder": average,
        "orders": orders_to_json(day),
    }


def today_key(now_iso: str) -> str:
    return now_iso[:10]


def report_for(orders: List[Order], now_iso: str, date: Optional[str] = None) -> Dict[str, Any]:
    return daily_report(orders, date if date is not None else today_key(now_iso))
