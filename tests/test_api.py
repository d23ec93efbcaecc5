import json
from collections.abc import Iterator

import httpx
import pytest
from fastapi.testclient import TestClient

from storefront.api import create_app
from storefront.api._errors import storefront_error_handler
from storefront.admin import MemoryAdminStore
from storefront.cart import MemoryCartStore
from storefront.catalog import MemoryCatalog, SEED_PRODUCTS
from storefront.config import Settings
from storefront.coupons import MemoryCouponStore
from storefront.errors import NotFoundError, StorageError
from storefront.idempotency import MemoryIdempotencyStore
from storefront.orders import MemoryOrderStore
from storefront.wiring import assemble

SESSION = {"X-Session-Id": "sess-1"}
OWNER = {"X-Actor-Email": "owner@example.com"}


@pytest.fixture
def client(save20) -> Iterator[TestClient]:
    container = assemble(
        Settings(admin_emails=frozenset({"owner@example.com"}), log_level="WARNING"),
        catalog=MemoryCatalog(list(SEED_PRODUCTS)),
        cart=MemoryCartStore(),
        coupons=MemoryCouponStore([save20]),
        orders=MemoryOrderStore(),
        admins=MemoryAdminStore(),
        idempotency=MemoryIdempotencyStore(),
    )
    with TestClient(create_app(container=container)) as client:
        yield client


def fill_cart(client: TestClient, product_id: str = "vip-rank", quantity: int = 2) -> None:
    response = client.post("/cart", json={"productId": product_id, "quantity": quantity}, headers=SESSION)
    assert response.status_code == 200


def place_order(client: TestClient, key: str | None = None, **body) -> httpx.Response:
    headers = dict(SESSION)
    if key:
        headers["Idempotency-Key"] = key
    payload = {"email": "steve@example.com", "playerName": "Steve", **body}
    return client.post("/orders", json=payload, headers=headers)


class TestCatalog:
    def test_list_and_filter(self, client):
        assert len(client.get("/products").json()) == len(SEED_PRODUCTS)
        coins = client.get("/products", params={"category": "coins"}).json()
        assert [p["id"] for p in coins] == ["coins-1000"]

    def test_product_camel_case(self, client):
        body = client.get("/products/vip-rank").json()
        assert body["price"] == "9.99"
        assert "imageUrl" in body

    def test_missing_product(self, client):
        response = client.get("/products/nope")
        assert response.status_code == 404
        assert response.json()["error"] == "NOT_FOUND"


class TestCart:
    def test_add_merge_and_view(self, client):
        fill_cart(client, quantity=1)
        fill_cart(client, quantity=2)

        lines = client.get("/cart", headers=SESSION).json()
        assert len(lines) == 1
        assert lines[0]["quantity"] == 3
        assert lines[0]["product"]["name"] == "VIP Rank"

    def test_invalid_quantity(self, client):
        response = client.post("/cart", json={"productId": "vip-rank", "quantity": 0}, headers=SESSION)
        assert response.status_code == 400
        assert response.json()["error"] == "INVALID_QUANTITY"

    def test_other_session_cannot_touch_line(self, client):
        fill_cart(client)
        line_id = client.get("/cart", headers=SESSION).json()[0]["id"]

        response = client.delete(f"/cart/{line_id}", headers={"X-Session-Id": "sess-2"})
        assert response.status_code == 404

    def test_update_remove_clear(self, client):
        fill_cart(client)
        line_id = client.get("/cart", headers=SESSION).json()[0]["id"]

        assert client.put(f"/cart/{line_id}", json={"quantity": 5}, headers=SESSION).json()["quantity"] == 5
        assert client.delete(f"/cart/{line_id}", headers=SESSION).json() == {"deleted": True}

        fill_cart(client)
        client.delete("/cart", headers=SESSION)
        assert client.get("/cart", headers=SESSION).json() == []


class TestValidateCoupon:
    def test_valid(self, client):
        body = client.post("/coupons/validate", json={"code": "save20", "orderAmount": "50.00"}).json()
        assert body["valid"] is True
        assert body["discountAmount"] == "10.00"
        assert body["finalAmount"] == "40.00"

    def test_unknown_is_404(self, client):
        response = client.post("/coupons/validate", json={"code": "NOPE", "orderAmount": "50.00"})
        assert response.status_code == 404
        assert response.json()["error"] == "COUPON_NOT_FOUND"

    def test_minimum_not_met_is_400(self, client):
        response = client.post("/coupons/validate", json={"code": "SAVE20", "orderAmount": "10.00"})
        assert response.status_code == 400
        assert response.json()["error"] == "COUPON_MINIMUM_NOT_MET"


class TestOrders:
    def test_place_and_lookup(self, client):
        fill_cart(client)
        response = place_order(client, couponCode="SAVE20")
        assert response.status_code == 201

        order = response.json()
        assert order["originalAmount"] == "19.98"
        assert order["discountAmount"] == "4.00"
        assert order["totalAmount"] == "15.98"
        assert order["status"] == "pending"
        assert order["items"][0]["productName"] == "VIP Rank"

        found = client.get(f"/orders/{order['id']}", params={"email": "STEVE@example.com"})
        assert found.status_code == 200
        hidden = client.get(f"/orders/{order['id']}", params={"email": "alex@example.com"})
        assert hidden.status_code == 404

        mine = client.get("/orders", headers=SESSION).json()
        assert [o["id"] for o in mine] == [order["id"]]

    def test_listing_is_scoped_to_requester(self, client):
        fill_cart(client)
        order_id = place_order(client).json()["id"]

        stranger = {"X-Session-Id": "sess-2"}
        assert client.get("/orders", headers=stranger).json() == []
        # the email of another customer does not widen the listing
        leaked = client.get("/orders", params={"email": "steve@example.com"}, headers=stranger)
        assert leaked.json() == []
        assert client.get("/orders").json() == []

        signed_in = {"X-Session-Id": "sess-3", "X-User-Id": "u-9"}
        assert client.get("/orders", headers=signed_in).json() == []
        assert [o["id"] for o in client.get("/orders", headers=SESSION).json()] == [order_id]

    def test_empty_cart(self, client):
        response = place_order(client)
        assert response.status_code == 400
        assert response.json()["error"] == "EMPTY_CART"

    def test_idempotent_retry(self, client):
        fill_cart(client)
        first = place_order(client, key="retry-1").json()
        second = place_order(client, key="retry-1")

        assert second.status_code == 201
        assert second.json()["id"] == first["id"]

        other = place_order(client, key="retry-1", email="alex@example.com")
        assert other.status_code == 422
        assert other.json()["error"] == "IDEMPOTENCY_MISMATCH"

    def test_cancel_flow(self, client):
        fill_cart(client)
        order_id = place_order(client).json()["id"]

        stranger = client.put(f"/orders/{order_id}/cancel", json={"email": "alex@example.com"})
        assert stranger.status_code == 403

        ok = client.put(f"/orders/{order_id}/cancel", json={"email": "steve@example.com"})
        assert ok.status_code == 200
        assert ok.json()["status"] == "cancelled"

        again = client.put(f"/orders/{order_id}/cancel", json={"email": "steve@example.com"})
        assert again.status_code == 400
        assert again.json()["error"] == "INVALID_TRANSITION"

        assert client.put("/orders/nope/cancel", json={"email": "steve@example.com"}).status_code == 404


class TestAdmin:
    def test_status_change(self, client):
        fill_cart(client)
        order_id = place_order(client).json()["id"]
        url = f"/admin/orders/{order_id}/status"

        assert client.put(url, json={"status": "completed"}).status_code == 403
        assert client.put(url, json={"status": "shipped"}, headers=OWNER).status_code == 400

        done = client.put(url, json={"status": "completed"}, headers=OWNER)
        assert done.status_code == 200
        assert done.json()["status"] == "completed"

        stats = client.get("/admin/stats", headers=OWNER).json()
        assert stats == {"totalOrders": 1, "completedOrders": 1, "totalRevenue": "19.98"}
        assert len(client.get("/admin/orders", headers=OWNER).json()) == 1

    def test_admin_routes_refuse_players(self, client):
        player = {"X-Actor-Email": "steve@example.com"}
        assert client.get("/admin/orders", headers=player).status_code == 403
        assert client.get("/admin/stats", headers=player).status_code == 403
        assert client.get("/admin/whitelist", headers=player).status_code == 403
        assert client.get("/admin/coupons").status_code == 403

    def test_whitelist(self, client):
        added = client.post("/admin/whitelist", json={"email": "Mod@Example.com"}, headers=OWNER)
        assert added.status_code == 201
        assert added.json()["email"] == "mod@example.com"

        mod = {"X-Actor-Email": "mod@example.com"}
        assert client.get("/admin/whitelist", headers=mod).status_code == 200

        client.delete("/admin/whitelist/mod@example.com", headers=OWNER)
        assert client.get("/admin/whitelist", headers=mod).status_code == 403

    def test_coupon_admin(self, client):
        payload = {
            "code": "summer",
            "discountType": "fixed",
            "discountValue": "5.00",
            "validFrom": "2020-01-01T00:00:00Z",
            "validUntil": "2999-01-01T00:00:00Z",
            "maxUsages": 10,
        }
        created = client.post("/admin/coupons", json=payload, headers=OWNER)
        assert created.status_code == 201
        coupon = created.json()
        assert coupon["code"] == "SUMMER"

        duplicate = client.post("/admin/coupons", json=payload, headers=OWNER)
        assert duplicate.status_code == 409

        toggled = client.patch(f"/admin/coupons/{coupon['id']}/toggle", headers=OWNER)
        assert toggled.json()["isActive"] is False
        inactive = client.post("/coupons/validate", json={"code": "SUMMER", "orderAmount": "20"})
        assert inactive.json()["error"] == "COUPON_INACTIVE"

        assert client.delete(f"/admin/coupons/{coupon['id']}", headers=OWNER).status_code == 200
        assert client.delete(f"/admin/coupons/{coupon['id']}", headers=OWNER).status_code == 404
        codes = [c["code"] for c in client.get("/admin/coupons", headers=OWNER).json()]
        assert codes == ["SAVE20"]


class TestPaymentConfirmations:
    def submit(self, client: TestClient, order_id: str, **headers) -> httpx.Response:
        return client.post(
            f"/orders/{order_id}/payment-confirmations",
            json={"screenshotRef": "uploads/tx-1.png"},
            headers=headers or SESSION,
        )

    def test_approve_completes_order(self, client):
        fill_cart(client)
        order_id = place_order(client).json()["id"]

        submitted = self.submit(client, order_id)
        assert submitted.status_code == 201
        confirmation = submitted.json()
        assert confirmation["status"] == "pending"

        found = client.get(f"/orders/{order_id}", params={"email": "steve@example.com"})
        assert found.json()["status"] == "payment_pending"

        waiting = client.get("/admin/payment-confirmations", params={"pending": True}, headers=OWNER)
        assert [c["id"] for c in waiting.json()] == [confirmation["id"]]

        url = f"/admin/payment-confirmations/{confirmation['id']}/approve"
        assert client.post(url, json={}).status_code == 403
        approved = client.post(url, json={"transactionId": "tx-1"}, headers=OWNER)
        assert approved.status_code == 200
        assert approved.json()["status"] == "approved"
        assert approved.json()["reviewedBy"] == "owner@example.com"

        order = client.get(f"/orders/{order_id}", params={"email": "steve@example.com"}).json()
        assert order["status"] == "completed"
        assert order["transactionId"] == "tx-1"

        again = client.post(url, json={}, headers=OWNER)
        assert again.status_code == 409
        assert again.json()["error"] == "ALREADY_DECIDED"

    def test_reject_cancels_order(self, client):
        fill_cart(client)
        order_id = place_order(client).json()["id"]
        confirmation_id = self.submit(client, order_id).json()["id"]

        url = f"/admin/payment-confirmations/{confirmation_id}/reject"
        blank = client.post(url, json={"reason": "  "}, headers=OWNER)
        assert blank.status_code == 400

        rejected = client.post(url, json={"reason": "Amount does not match"}, headers=OWNER)
        assert rejected.status_code == 200
        assert rejected.json()["rejectionReason"] == "Amount does not match"

        order = client.get(f"/orders/{order_id}", params={"email": "steve@example.com"}).json()
        assert order["status"] == "cancelled"

    def test_only_owner_submits_and_reads(self, client):
        fill_cart(client)
        order_id = place_order(client).json()["id"]

        assert self.submit(client, order_id, **{"X-Session-Id": "sess-2"}).status_code == 403
        assert self.submit(client, "nope").status_code == 404

        self.submit(client, order_id)
        mine = client.get(f"/orders/{order_id}/payment-confirmations", headers=SESSION)
        assert len(mine.json()) == 1
        other = client.get(
            f"/orders/{order_id}/payment-confirmations", headers={"X-Session-Id": "sess-2"}
        )
        assert other.status_code == 403
        admin = client.get(f"/orders/{order_id}/payment-confirmations", headers=OWNER)
        assert len(admin.json()) == 1


class TestAdminCancel:
    def test_payment_pending_needs_admin_route(self, client):
        fill_cart(client)
        order_id = place_order(client).json()["id"]
        client.post(
            f"/orders/{order_id}/payment-confirmations",
            json={"screenshotRef": "uploads/tx-2.png"},
            headers=SESSION,
        )

        owner_cancel = client.put(f"/orders/{order_id}/cancel", json={"email": "steve@example.com"})
        assert owner_cancel.status_code == 400
        assert owner_cancel.json()["error"] == "INVALID_TRANSITION"

        url = f"/admin/orders/{order_id}/cancel"
        assert client.put(url, json={}, headers={"X-Actor-Email": "steve@example.com"}).status_code == 403

        cancelled = client.put(url, json={"reason": "No payment received"}, headers=OWNER)
        assert cancelled.status_code == 200
        assert cancelled.json()["status"] == "cancelled"

        assert client.put(url, json={}, headers=OWNER).status_code == 400


class TestReviews:
    USER = {"X-User-Id": "u-1"}

    def test_post_list_and_rate(self, client):
        payload = {"rating": 4, "comment": "Great perks"}
        assert client.post("/products/vip-rank/reviews", json=payload).status_code == 403

        posted = client.post("/products/vip-rank/reviews", json=payload, headers=self.USER)
        assert posted.status_code == 201
        client.post(
            "/products/vip-rank/reviews",
            json={"rating": 5, "comment": "Love it"},
            headers={"X-User-Id": "u-2"},
        )

        assert len(client.get("/products/vip-rank/reviews").json()) == 2
        assert client.get("/products/vip-rank/rating").json() == {"count": 2, "average": "4.5"}
        assert client.get("/products/mvp-rank/rating").json() == {"count": 0, "average": None}
        assert [r["id"] for r in client.get("/user/reviews", headers=self.USER).json()] == [
            posted.json()["id"]
        ]

    def test_rejects_bad_reviews(self, client):
        bad = client.post(
            "/products/vip-rank/reviews", json={"rating": 6, "comment": "x"}, headers=self.USER
        )
        assert bad.status_code == 400
        assert bad.json()["error"] == "INVALID_REVIEW"

        missing = client.post(
            "/products/nope/reviews", json={"rating": 3, "comment": "ok"}, headers=self.USER
        )
        assert missing.status_code == 404

    def test_delete_by_author_or_admin(self, client):
        review_id = client.post(
            "/products/vip-rank/reviews", json={"rating": 2, "comment": "meh"}, headers=self.USER
        ).json()["id"]

        assert client.delete(f"/reviews/{review_id}", headers={"X-User-Id": "u-2"}).status_code == 403
        assert client.delete(f"/reviews/{review_id}", headers=OWNER).json() == {"deleted": True}
        assert client.delete(f"/reviews/{review_id}", headers=self.USER).status_code == 404


class TestWhitelistRequests:
    def test_submit_and_approve(self, client):
        submitted = client.post(
            "/whitelist-requests", json={"minecraftUsername": "Steve_01", "discordUsername": "steve"}
        )
        assert submitted.status_code == 201
        request = submitted.json()
        assert request["status"] == "pending"

        duplicate = client.post("/whitelist-requests", json={"minecraftUsername": "steve_01"})
        assert duplicate.status_code == 409
        assert duplicate.json()["error"] == "DUPLICATE_WHITELIST_REQUEST"

        invalid = client.post("/whitelist-requests", json={"minecraftUsername": "no spaces!"})
        assert invalid.status_code == 400

        assert client.get("/admin/whitelist-requests").status_code == 403
        pending = client.get("/admin/whitelist-requests", params={"status": "pending"}, headers=OWNER)
        assert [r["id"] for r in pending.json()] == [request["id"]]
        bogus = client.get("/admin/whitelist-requests", params={"status": "maybe"}, headers=OWNER)
        assert bogus.status_code == 400

        url = f"/admin/whitelist-requests/{request['id']}/approve"
        approved = client.post(url, json={}, headers=OWNER)
        assert approved.status_code == 200
        assert approved.json()["processedBy"] == "owner@example.com"

        assert client.post(url, json={}, headers=OWNER).status_code == 409
        reject = f"/admin/whitelist-requests/{request['id']}/reject"
        assert client.post(reject, json={"reason": "late"}, headers=OWNER).status_code == 409

        # a decided request no longer blocks a new one
        again = client.post("/whitelist-requests", json={"minecraftUsername": "Steve_01"})
        assert again.status_code == 201

    def test_reject_unknown(self, client):
        url = "/admin/whitelist-requests/nope/reject"
        assert client.post(url, json={"reason": "spam"}, headers=OWNER).status_code == 404


class TestErrorHandler:
    async def test_renders_storefront_errors(self):
        response = await storefront_error_handler(None, NotFoundError("Order", "o-1"))
        assert response.status_code == 404
        assert json.loads(response.body) == {"error": "NOT_FOUND", "message": "Order o-1 not found"}

    async def test_hides_storage_details(self):
        response = await storefront_error_handler(None, StorageError("db down", RuntimeError("x")))
        assert response.status_code == 500
        assert json.loads(response.body)["message"] == "Internal server error"


class TestSQLAlchemyApp:
    def test_lifespan_builds_and_seeds(self, tmp_path):
        settings = Settings(
            database_url=f"sqlite+aiosqlite:///{tmp_path / 'app.db'}",
            admin_emails=frozenset({"owner@example.com"}),
            log_level="WARNING",
        )
        with TestClient(create_app(settings=settings)) as client:
            assert len(client.get("/products").json()) == len(SEED_PRODUCTS)

            fill_cart(client, "mvp-rank", 1)
            order = place_order(client, key="sql-1").json()
            assert order["totalAmount"] == "24.99"
            assert place_order(client, key="sql-1").json()["id"] == order["id"]

        # Seeding runs only against an empty catalog
        with TestClient(create_app(settings=settings)) as client:
            assert len(client.get("/products").json()) == len(SEED_PRODUCTS)
