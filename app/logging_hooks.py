import logging

from langsmith import traceable

log = logging.getLogger("pos.checkout")


@traceable(name="Order.log", tags=["checkout", "log"])
def order_logger(order_number: int, total: float, items: int):
    log.info("[Checkout] Order #%s received: $%.2f (%d items)", order_number, total, items)
    return {"orderNumber": order_number, "total": total, "items": items}


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
