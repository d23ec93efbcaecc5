import asyncio
from decimal import Decimal

import pytest
from kungfu import Ok

from storefront._types import Decision
from storefront.admin import Capabilities, MemoryAdminStore, Requester
from storefront.errors import (
    AccessDeniedError,
    AlreadyDecidedError,
    InvalidConfirmationError,
    InvalidTransitionError,
    NotFoundError,
)
from storefront.notify import NotificationDispatcher
from storefront.orders import (
    MemoryOrderStore,
    OrderDraft,
    OrderLifecycle,
    OrderLineItem,
    OrderStatus,
    SQLAlchemyOrderStore,
)
from storefront.payments import (
    MAX_REFERENCE_LENGTH,
    MemoryConfirmationStore,
    PaymentReview,
    SQLAlchemyConfirmationStore,
)

PLAYER = Requester(email="steve@example.com", session_id="sess-1")
STRANGER = Requester(session_id="sess-2")
ADMIN = Requester(email="owner@example.com")


class SilentNotifier:
    async def order_created(self, order) -> None:
        pass

    async def status_changed(self, order, status) -> None:
        pass


def draft() -> OrderDraft:
    price = Decimal("9.99")
    return OrderDraft(
        email="steve@example.com",
        items=(OrderLineItem("vip-rank", "VIP Rank", 1, price, price),),
        original_amount=price,
        discount_amount=Decimal("0.00"),
        total_amount=price,
        session_id="sess-1",
    )


@pytest.fixture(params=["memory", "sqlalchemy"])
def stores(request, session_factory):
    if request.param == "memory":
        return MemoryOrderStore(), MemoryConfirmationStore()
    return SQLAlchemyOrderStore(session_factory), SQLAlchemyConfirmationStore(session_factory)


@pytest.fixture
def orders(stores):
    return stores[0]


@pytest.fixture
def review(stores) -> PaymentReview:
    orders, confirmations = stores
    capabilities = Capabilities(MemoryAdminStore(), bootstrap={"owner@example.com"})
    lifecycle = OrderLifecycle(orders, capabilities, NotificationDispatcher(SilentNotifier()))
    return PaymentReview(confirmations, orders, lifecycle, capabilities)


async def status_of(orders, order_id: str) -> OrderStatus:
    return (await orders.get(order_id)).unwrap().status


class TestSubmit:
    async def test_moves_order_to_payment_pending(self, review, orders):
        order = (await orders.create(draft())).unwrap()

        proof = (await review.submit(order.id, PLAYER, " uploads/tx-1.png ")).unwrap()

        assert proof.status is Decision.PENDING
        assert proof.screenshot_ref == "uploads/tx-1.png"
        assert await status_of(orders, order.id) is OrderStatus.PAYMENT_PENDING

    async def test_second_proof_while_waiting(self, review, orders):
        order = (await orders.create(draft())).unwrap()
        await review.submit(order.id, PLAYER, "uploads/a.png")

        again = await review.submit(order.id, PLAYER, "uploads/b.png")

        assert isinstance(again, Ok)
        assert len((await review.for_order(order.id, PLAYER)).unwrap()) == 2

    async def test_rejects_empty_or_huge_reference(self, review, orders):
        order = (await orders.create(draft())).unwrap()
        for ref in ("", "   ", "x" * (MAX_REFERENCE_LENGTH + 1)):
            result = await review.submit(order.id, PLAYER, ref)
            assert isinstance(result.unwrap_err(), InvalidConfirmationError)
        assert await status_of(orders, order.id) is OrderStatus.PENDING

    async def test_only_owner(self, review, orders):
        order = (await orders.create(draft())).unwrap()
        result = await review.submit(order.id, STRANGER, "uploads/a.png")
        assert isinstance(result.unwrap_err(), AccessDeniedError)

    async def test_closed_orders_refuse_proof(self, review, orders):
        order = (await orders.create(draft())).unwrap()
        await orders.update_status(order.id, OrderStatus.CANCELLED)

        result = await review.submit(order.id, PLAYER, "uploads/a.png")
        assert isinstance(result.unwrap_err(), InvalidTransitionError)

    async def test_missing_order(self, review):
        result = await review.submit("nope", PLAYER, "uploads/a.png")
        assert isinstance(result.unwrap_err(), NotFoundError)

    async def test_concurrent_submits_start_payment_once(self, review, orders):
        order = (await orders.create(draft())).unwrap()

        results = await asyncio.gather(
            *(review.submit(order.id, PLAYER, f"uploads/{n}.png") for n in range(3))
        )

        assert all(isinstance(r, Ok) for r in results)
        assert await status_of(orders, order.id) is OrderStatus.PAYMENT_PENDING


class TestVerdicts:
    async def test_approve_completes_order(self, review, orders):
        order = (await orders.create(draft())).unwrap()
        proof = (await review.submit(order.id, PLAYER, "uploads/a.png")).unwrap()

        approved = (await review.approve(ADMIN, proof.id, "tx-77")).unwrap()

        assert approved.status is Decision.APPROVED
        assert approved.reviewed_by == "owner@example.com"
        assert approved.reviewed_at is not None
        stored = (await orders.get(order.id)).unwrap()
        assert stored.status is OrderStatus.COMPLETED
        assert stored.transaction_id == "tx-77"

    async def test_reject_cancels_order(self, review, orders):
        order = (await orders.create(draft())).unwrap()
        proof = (await review.submit(order.id, PLAYER, "uploads/a.png")).unwrap()

        blank = await review.reject(ADMIN, proof.id, " ")
        assert isinstance(blank.unwrap_err(), InvalidConfirmationError)

        rejected = (await review.reject(ADMIN, proof.id, "Wrong amount")).unwrap()
        assert rejected.status is Decision.REJECTED
        assert rejected.rejection_reason == "Wrong amount"
        assert await status_of(orders, order.id) is OrderStatus.CANCELLED

    async def test_decided_once(self, review, orders):
        order = (await orders.create(draft())).unwrap()
        proof = (await review.submit(order.id, PLAYER, "uploads/a.png")).unwrap()
        await review.approve(ADMIN, proof.id)

        again = await review.reject(ADMIN, proof.id, "changed my mind")
        assert isinstance(again.unwrap_err(), AlreadyDecidedError)
        assert await status_of(orders, order.id) is OrderStatus.COMPLETED

    async def test_racing_verdicts_keep_one(self, review, orders):
        order = (await orders.create(draft())).unwrap()
        proof = (await review.submit(order.id, PLAYER, "uploads/a.png")).unwrap()

        approved, rejected = await asyncio.gather(
            review.approve(ADMIN, proof.id), review.reject(ADMIN, proof.id, "fake")
        )

        assert isinstance(approved, Ok) != isinstance(rejected, Ok)
        final = await status_of(orders, order.id)
        if isinstance(approved, Ok):
            assert final is OrderStatus.COMPLETED
        else:
            assert final is OrderStatus.CANCELLED

    async def test_players_cannot_decide(self, review, orders):
        order = (await orders.create(draft())).unwrap()
        proof = (await review.submit(order.id, PLAYER, "uploads/a.png")).unwrap()

        assert isinstance((await review.approve(PLAYER, proof.id)).unwrap_err(), AccessDeniedError)
        assert isinstance((await review.list(PLAYER)).unwrap_err(), AccessDeniedError)
        assert await status_of(orders, order.id) is OrderStatus.PAYMENT_PENDING

    async def test_unknown_confirmation(self, review):
        result = await review.approve(ADMIN, "nope")
        assert isinstance(result.unwrap_err(), NotFoundError)


class TestListing:
    async def test_pending_only(self, review, orders):
        first = (await orders.create(draft())).unwrap()
        second = (await orders.create(draft())).unwrap()
        done = (await review.submit(first.id, PLAYER, "uploads/a.png")).unwrap()
        waiting = (await review.submit(second.id, PLAYER, "uploads/b.png")).unwrap()
        await review.approve(ADMIN, done.id)

        assert len((await review.list(ADMIN)).unwrap()) == 2
        assert [c.id for c in (await review.list(ADMIN, pending_only=True)).unwrap()] == [waiting.id]

    async def test_for_order_owner_or_admin(self, review, orders):
        order = (await orders.create(draft())).unwrap()
        await review.submit(order.id, PLAYER, "uploads/a.png")

        assert len((await review.for_order(order.id, ADMIN)).unwrap()) == 1
        denied = await review.for_order(order.id, STRANGER)
        assert isinstance(denied.unwrap_err(), AccessDeniedError)
