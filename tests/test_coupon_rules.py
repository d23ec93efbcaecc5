from datetime import timedelta
from decimal import Decimal

from kungfu import Ok, Error

from storefront.coupons import (
    CouponDraft,
    DiscountType,
    apply_coupon,
    check_coupon,
    check_draft,
    compute_discount,
    normalize_code,
)
from storefront.errors import (
    CouponExpiredError,
    CouponInactiveError,
    CouponMinimumNotMetError,
    CouponUsageExceededError,
    InvalidCouponError,
)


class TestNormalize:
    def test_trims_and_uppercases(self):
        assert normalize_code("  save20 ") == "SAVE20"

    def test_blank_stays_blank(self):
        assert normalize_code("   ") == ""


class TestCheckOrder:
    def test_inactive_reported_before_everything(self, make_coupon, now):
        coupon = make_coupon(
            is_active=False,
            valid_until=now - timedelta(days=1),
            minimum_order_amount=Decimal("100"),
            max_usages=1,
            current_usages=1,
        )
        match check_coupon(coupon, Decimal("5.00"), now):
            case Error(e):
                assert isinstance(e, CouponInactiveError)
            case Ok(_):
                raise AssertionError("inactive coupon accepted")

    def test_expiry_reported_before_minimum(self, make_coupon, now):
        coupon = make_coupon(
            valid_until=now - timedelta(seconds=1),
            minimum_order_amount=Decimal("100"),
        )
        result = check_coupon(coupon, Decimal("5.00"), now)
        assert isinstance(result.unwrap_err(), CouponExpiredError)
        assert not result.unwrap_err().not_yet_valid

    def test_not_yet_valid(self, make_coupon, now):
        coupon = make_coupon(valid_from=now + timedelta(hours=1))
        error = check_coupon(coupon, Decimal("50.00"), now).unwrap_err()
        assert isinstance(error, CouponExpiredError)
        assert error.not_yet_valid
        assert "not valid yet" in error.message

    def test_minimum_reported_before_usage(self, make_coupon, now):
        coupon = make_coupon(
            minimum_order_amount=Decimal("15.00"), max_usages=5, current_usages=5
        )
        error = check_coupon(coupon, Decimal("10.00"), now).unwrap_err()
        assert isinstance(error, CouponMinimumNotMetError)
        assert error.minimum == Decimal("15.00")

    def test_minimum_is_inclusive(self, make_coupon, now):
        coupon = make_coupon(minimum_order_amount=Decimal("15.00"))
        assert isinstance(check_coupon(coupon, Decimal("15.00"), now), Ok)

    def test_usage_exceeded(self, make_coupon, now):
        coupon = make_coupon(max_usages=50, current_usages=50)
        error = check_coupon(coupon, Decimal("50.00"), now).unwrap_err()
        assert isinstance(error, CouponUsageExceededError)
        assert error.code == "COUPON_USAGE_EXCEEDED"

    def test_unlimited_coupon_never_exhausted(self, make_coupon, now):
        coupon = make_coupon(max_usages=None, current_usages=10_000)
        assert isinstance(check_coupon(coupon, Decimal("50.00"), now), Ok)


class TestDiscount:
    def test_percentage_rounds_half_up(self, make_coupon):
        coupon = make_coupon(discount_value=Decimal("15"))
        # 33.33 * 15% = 4.9995
        assert compute_discount(coupon, Decimal("33.33")) == Decimal("5.00")

    def test_percentage_of_odd_amount(self, make_coupon):
        coupon = make_coupon(discount_value=Decimal("10"))
        assert compute_discount(coupon, Decimal("9.99")) == Decimal("1.00")

    def test_fixed_capped_at_amount(self, make_coupon):
        coupon = make_coupon(discount_type=DiscountType.FIXED, discount_value=Decimal("25.00"))
        assert compute_discount(coupon, Decimal("9.99")) == Decimal("9.99")

    def test_fixed_below_amount(self, make_coupon):
        coupon = make_coupon(discount_type=DiscountType.FIXED, discount_value=Decimal("5.00"))
        assert compute_discount(coupon, Decimal("24.99")) == Decimal("5.00")

    def test_apply_never_goes_negative(self, make_coupon, now):
        coupon = make_coupon(discount_type=DiscountType.FIXED, discount_value=Decimal("100.00"))
        quote = apply_coupon(coupon, Decimal("4.99"), now).unwrap()
        assert quote.discount_amount == Decimal("4.99")
        assert quote.final_amount == Decimal("0.00")

    def test_apply_scenario_a(self, save20, now):
        quote = apply_coupon(save20, Decimal("50.00"), now).unwrap()
        assert quote.original_amount == Decimal("50.00")
        assert quote.discount_amount == Decimal("10.00")
        assert quote.final_amount == Decimal("40.00")


class TestDraft:
    def _draft(self, now, **overrides):
        fields = dict(
            code=" summer ",
            discount_type=DiscountType.PERCENTAGE,
            discount_value=Decimal("10"),
            valid_from=now,
            valid_until=now + timedelta(days=7),
        )
        fields.update(overrides)
        return CouponDraft(**fields)

    def test_normalizes_code_and_amounts(self, now):
        draft = check_draft(
            self._draft(now, minimum_order_amount=Decimal("5"))
        ).unwrap()
        assert draft.code == "SUMMER"
        assert draft.discount_value == Decimal("10.00")
        assert draft.minimum_order_amount == Decimal("5.00")

    def test_rejects_empty_code(self, now):
        assert isinstance(check_draft(self._draft(now, code="  ")).unwrap_err(), InvalidCouponError)

    def test_rejects_non_positive_value(self, now):
        error = check_draft(self._draft(now, discount_value=Decimal("0"))).unwrap_err()
        assert isinstance(error, InvalidCouponError)

    def test_rejects_percentage_over_hundred(self, now):
        error = check_draft(self._draft(now, discount_value=Decimal("120"))).unwrap_err()
        assert isinstance(error, InvalidCouponError)

    def test_fixed_may_exceed_hundred(self, now):
        draft = self._draft(now, discount_type=DiscountType.FIXED, discount_value=Decimal("150"))
        assert isinstance(check_draft(draft), Ok)

    def test_rejects_inverted_window(self, now):
        draft = self._draft(now, valid_until=now - timedelta(days=1))
        assert isinstance(check_draft(draft).unwrap_err(), InvalidCouponError)

    def test_rejects_zero_max_usages(self, now):
        assert isinstance(check_draft(self._draft(now, max_usages=0)).unwrap_err(), InvalidCouponError)
