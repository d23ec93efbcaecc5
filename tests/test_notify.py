import asyncio
import logging
from datetime import datetime, timezone
from decimal import Decimal

from storefront.notify import LoggingNotifier, NotificationDispatcher
from storefront.orders import Order, OrderStatus


def order() -> Order:
    now = datetime.now(timezone.utc)
    return Order(
        id="order-1",
        email="steve@example.com",
        items=(),
        original_amount=Decimal("9.99"),
        discount_amount=Decimal("0.00"),
        total_amount=Decimal("9.99"),
        status=OrderStatus.PENDING,
        created_at=now,
        updated_at=now,
    )


class SlowNotifier:
    def __init__(self) -> None:
        self.seen: list[str] = []

    async def order_created(self, order) -> None:
        await asyncio.sleep(0.01)
        self.seen.append(f"created:{order.id}")

    async def status_changed(self, order, status) -> None:
        self.seen.append(f"{status.value}:{order.id}")


class FailingNotifier:
    async def order_created(self, order) -> None:
        raise ConnectionError("smtp unreachable")

    async def status_changed(self, order, status) -> None:
        raise ConnectionError("smtp unreachable")


class TestDispatcher:
    async def test_does_not_block_caller(self):
        notifier = SlowNotifier()
        dispatcher = NotificationDispatcher(notifier)

        dispatcher.order_created(order())
        assert notifier.seen == []
        assert dispatcher.pending == 1

        await dispatcher.drain()
        assert notifier.seen == ["created:order-1"]
        assert dispatcher.pending == 0

    async def test_failures_are_logged(self, caplog):
        dispatcher = NotificationDispatcher(FailingNotifier())

        dispatcher.order_created(order())
        dispatcher.status_changed(order(), OrderStatus.CANCELLED)
        await dispatcher.drain()

        failures = [r for r in caplog.records if r.levelno == logging.ERROR]
        assert len(failures) == 2
        assert all(r.exc_info is not None for r in failures)

    async def test_logging_notifier(self, caplog):
        caplog.set_level(logging.INFO, logger="storefront.notify")
        dispatcher = NotificationDispatcher(LoggingNotifier())

        dispatcher.status_changed(order(), OrderStatus.COMPLETED)
        await dispatcher.drain()

        assert "order-1" in caplog.text
        assert "completed" in caplog.text
