"""examples/basic_usage.py - prefixlog integration demo.

Demonstrates three things:
    Part A: prefixes recovered from the call stack (direct calls and callbacks)
    Part B: runtime control through the debug registry
    Part C: exporting the recent history

Run:
    PREFIXLOG_DEBUG=shop:info python examples/basic_usage.py
"""

import prefixlog
from prefixlog import as_callback, display_name

# ---------------------------------------------------------------------------
# prefixlog setup: one call at start-up
# ---------------------------------------------------------------------------
log = prefixlog.init_logger("shop", host_identity="examples")


# ===========================================================================
# Part A: prefixes from the call stack
# ===========================================================================


@display_name("PaymentService")
class _PaymentServiceImpl:
    """Obfuscated or generated class names still log under a stable name."""

    def get_balance(self, user_id: int) -> int:
        prefixlog.debug(self, f"querying balance for user_id={user_id}")
        return 3_000

    def pay(self, user_id: int, amount: int) -> None:
        prefixlog.info(self, f"payment attempt: user_id={user_id}, amount={amount}")
        balance = self.get_balance(user_id)
        if balance < amount:
            prefixlog.error(self, f"insufficient funds (balance={balance}, requested={amount})")
            raise ValueError("InsufficientFunds")
        prefixlog.info(self, "payment successful")

    def on_refund(self, amount: int) -> None:
        prefixlog.info(self, f"refund of {amount} received")


def load_catalog() -> None:
    # Component and method given explicitly: no stack inspection needed.
    prefixlog.info("Catalog", "load", "120 products loaded")


# ---------------------------------------------------------------------------
# Run the demo
# ---------------------------------------------------------------------------
if __name__ == "__main__":
    registry = prefixlog.get_debug_registry()
    service = _PaymentServiceImpl()

    print("=" * 60)
    print("Part A: direct calls and callbacks")
    print("=" * 60)
    registry.enable("shop", "debug")
    load_catalog()
    try:
        service.pay(user_id=101, amount=5_000)
    except ValueError:
        pass
    as_callback(service.on_refund)(250)

    print()
    print("=" * 60)
    print("Part B: runtime control")
    print("=" * 60)
    print(registry.set_level("shop", "warn"))
    service.pay(user_id=202, amount=100)  # info lines are now hidden
    print(registry.disable("shop"))
    print("level while disabled:", registry.get_level("shop"))
    print(registry.enable("nowhere"))

    print()
    print("=" * 60)
    print("Part C: export recent history")
    print("=" * 60)
    log_text = log.exporter.render(count=5, strip_timestamp=True)
    print(log_text)
    print(registry.copy_logs("shop", count=5, format="message-only"))
    print(registry.clear_logs("shop"))

    prefixlog.shutdown_logger()
