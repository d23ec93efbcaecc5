import uuid
from decimal import Decimal

from kungfu import Ok, Error

from storefront.cart import CartLine
from storefront.coupons import DiscountType, MemoryCouponStore
from storefront.errors import (
    CouponMinimumNotMetError,
    CouponNotFoundError,
    CouponUsageExceededError,
    EmptyCartError,
    StorageError,
)
from storefront.pricing import PricingEngine, PricingMode


def line(product_id: str, quantity: int = 1, session_id: str = "sess-1") -> CartLine:
    return CartLine(id=uuid.uuid4().hex, session_id=session_id, product_id=product_id, quantity=quantity)


class TestNoCoupon:
    async def test_final_equals_original(self, engine):
        quote = (await engine.price_cart([line("vip-rank", 2), line("coins-1000")])).unwrap()
        assert quote.original_amount == Decimal("24.97")
        assert quote.discount_amount == Decimal("0.00")
        assert quote.final_amount == quote.original_amount
        assert quote.applied_coupon_code is None

    async def test_blank_code_is_no_coupon(self, engine):
        quote = (await engine.price_cart([line("vip-rank")], "   ")).unwrap()
        assert quote.applied_coupon_code is None
        assert quote.final_amount == Decimal("9.99")

    async def test_line_totals_snapshot_unit_price(self, engine):
        quote = (await engine.price_cart([line("mvp-rank", 3)])).unwrap()
        (priced,) = quote.lines
        assert priced.unit_price == Decimal("24.99")
        assert priced.total_price == Decimal("74.97")


class TestScenarios:
    async def test_scenario_a_percentage(self, engine):
        quote = (await engine.price_cart([line("bundle-50")], "save20")).unwrap()
        assert quote.discount_amount == Decimal("10.00")
        assert quote.final_amount == Decimal("40.00")
        assert quote.applied_coupon_code == "SAVE20"

    async def test_scenario_b_strict_rejects(self, engine):
        match await engine.price_cart([line("bundle-10")], "SAVE20", PricingMode.STRICT):
            case Error(e):
                assert isinstance(e, CouponMinimumNotMetError)
            case Ok(quote):
                raise AssertionError(f"expected rejection, got {quote}")

    async def test_scenario_b_lenient_full_price(self, engine):
        quote = (await engine.price_cart([line("bundle-10")], "SAVE20", PricingMode.LENIENT)).unwrap()
        assert quote.original_amount == Decimal("10.00")
        assert quote.final_amount == Decimal("10.00")
        assert quote.applied_coupon_code is None
        assert isinstance(quote.rejection, CouponMinimumNotMetError)

    async def test_scenario_c_usage_exceeded(self, catalog, make_coupon):
        coupons = MemoryCouponStore([make_coupon("FULL", max_usages=50, current_usages=50)])
        engine = PricingEngine(catalog, coupons)
        result = await engine.price_cart([line("bundle-50")], "FULL")
        assert isinstance(result.unwrap_err(), CouponUsageExceededError)

    async def test_unknown_code_strict(self, engine):
        result = await engine.price_cart([line("vip-rank")], "NOPE")
        assert isinstance(result.unwrap_err(), CouponNotFoundError)

    async def test_unknown_code_lenient(self, engine):
        quote = (await engine.price_cart([line("vip-rank")], "NOPE", PricingMode.LENIENT)).unwrap()
        assert quote.final_amount == Decimal("9.99")
        assert isinstance(quote.rejection, CouponNotFoundError)


class TestFixedCoupon:
    async def test_fixed_discount_capped(self, catalog, make_coupon):
        coupons = MemoryCouponStore(
            [make_coupon("BIG", discount_type=DiscountType.FIXED, discount_value=Decimal("30.00"))]
        )
        engine = PricingEngine(catalog, coupons)
        quote = (await engine.price_cart([line("vip-rank", 2)], "BIG")).unwrap()
        assert quote.discount_amount == Decimal("19.98")
        assert quote.final_amount == Decimal("0.00")


class TestCartEdges:
    async def test_empty_cart(self, engine):
        assert isinstance((await engine.price_cart([])).unwrap_err(), EmptyCartError)

    async def test_stale_lines_skipped(self, engine):
        quote = (await engine.price_cart([line("gone"), line("vip-rank")])).unwrap()
        assert [l.product.id for l in quote.lines] == ["vip-rank"]
        assert quote.original_amount == Decimal("9.99")

    async def test_only_stale_lines_is_empty(self, engine):
        result = await engine.price_cart([line("gone")])
        assert isinstance(result.unwrap_err(), EmptyCartError)

    async def test_catalog_failure_is_storage_error(self, coupons):
        class BrokenCatalog:
            async def get(self, product_id):
                return Error(StorageError("catalog offline"))

        engine = PricingEngine(BrokenCatalog(), coupons)
        result = await engine.price_cart([line("vip-rank")])
        assert isinstance(result.unwrap_err(), StorageError)


class TestPurity:
    async def test_pricing_does_not_touch_usage(self, engine, coupons):
        lines = [line("bundle-50")]
        first = (await engine.price_cart(lines, "SAVE20")).unwrap()
        second = (await engine.price_cart(lines, "SAVE20")).unwrap()
        assert first == second
        assert (await coupons.get_by_code("SAVE20")).unwrap().current_usages == 0

    async def test_validate_coupon_is_pure(self, engine, coupons):
        for _ in range(3):
            quote = (await engine.validate_coupon("save20", Decimal("50.00"))).unwrap()
            assert quote.final_amount == Decimal("40.00")
        assert (await coupons.get_by_code("SAVE20")).unwrap().current_usages == 0


class TestValidateAndRedeem:
    async def test_validate_unknown(self, engine):
        result = await engine.validate_coupon("missing", Decimal("10.00"))
        assert isinstance(result.unwrap_err(), CouponNotFoundError)

    async def test_redeem_increments(self, engine, coupons):
        redeemed = (await engine.redeem_coupon(" save20 ")).unwrap()
        assert redeemed is not None
        assert redeemed.current_usages == 1

    async def test_redeem_exhausted_returns_none(self, catalog, make_coupon):
        coupons = MemoryCouponStore([make_coupon("ONCE", max_usages=1, current_usages=1)])
        engine = PricingEngine(catalog, coupons)
        assert (await engine.redeem_coupon("ONCE")).unwrap() is None
        assert (await coupons.get_by_code("ONCE")).unwrap().current_usages == 1
