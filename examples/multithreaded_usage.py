"""examples/multithreaded_usage.py - stdlib logging bridge across threads.

Existing code that logs through ``logging.getLogger`` gains contextual
prefixes by attaching one PrefixLogHandler. Two request threads share the
same PrefixLogger; each line names the method that logged it, and a callback
scope entered on one thread never marks the other thread's lines.

Run:
    python examples/multithreaded_usage.py
"""

import logging
import sys
import threading
import time

import prefixlog
from prefixlog import PrefixLogHandler, callback_scope

# ---------------------------------------------------------------------------
# Setup: one handler on the service logger, picked up by all threads
# ---------------------------------------------------------------------------
log = prefixlog.init_logger("orders")
log.state.enable("debug")

logger = logging.getLogger("order_service")
logger.setLevel(logging.DEBUG)
logger.propagate = False
logger.addHandler(PrefixLogHandler(log))


# ---------------------------------------------------------------------------
# Business logic
# ---------------------------------------------------------------------------


class OrderService:
    STOCK = {1: 10, 2: 0, 3: 5}

    def fetch_inventory(self, product_id: int) -> int:
        logger.debug("fetching inventory: product_id=%d", product_id)
        time.sleep(0.01)
        return self.STOCK.get(product_id, 0)

    def place_order(self, order_id: int, product_id: int, qty: int) -> dict:
        logger.info("order received: order_id=%d, product_id=%d, qty=%d", order_id, product_id, qty)
        stock = self.fetch_inventory(product_id)
        if stock < qty:
            logger.error("insufficient stock: product_id=%d, requested=%d, available=%d", product_id, qty, stock)
            raise RuntimeError(f"OutOfStock: product_id={product_id}")
        logger.info("order placed: order_id=%d", order_id)
        return {"order_id": order_id, "status": "confirmed"}

    def notify(self, order_id: int) -> None:
        logger.info("notification sent for order_id=%d", order_id)


def worker(service: OrderService, order_id: int, product_id: int, qty: int, as_event: bool) -> None:
    """One request handler; ``as_event`` runs the notification as a callback."""
    try:
        service.place_order(order_id, product_id, qty)
    except RuntimeError as exc:
        print(f"[{threading.current_thread().name}] ERROR: {exc}", file=sys.stdout)
        return
    if as_event:
        with callback_scope():
            service.notify(order_id)
    else:
        service.notify(order_id)


if __name__ == "__main__":
    service = OrderService()
    threads = [
        threading.Thread(target=worker, args=(service, 1001, 1, 3, True), name="Thread-A"),
        threading.Thread(target=worker, args=(service, 1002, 2, 1, False), name="Thread-B"),
        threading.Thread(target=worker, args=(service, 1003, 3, 2, False), name="Thread-C"),
    ]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    print()
    print("History shared by all threads:")
    print(log.exporter.render(namespace="orders", strip_timestamp=True))
    prefixlog.shutdown_logger()
