"""
Error taxonomy.

Every failure the storefront reports is one of these. Services and stores
return them inside ``Error(...)``; graph nodes raise them and the facade
around the graph turns them back into results.

    match await engine.price_cart(lines, "SAVE20"):
        case Ok(quote): ...
        case Error(CouponExpiredError() as e): print(e.code, e.message)
"""

from __future__ import annotations

from decimal import Decimal


# ═══════════════════════════════════════════════════════════════════════════════
# Base
# ═══════════════════════════════════════════════════════════════════════════════


class StorefrontError(Exception):
    """Base for all domain errors. ``code`` is stable, ``message`` is for humans."""

    code = "STOREFRONT_ERROR"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r})"


# ═══════════════════════════════════════════════════════════════════════════════
# Storage
# ═══════════════════════════════════════════════════════════════════════════════


class StorageError(StorefrontError):
    """Backend fault (I/O, constraint, driver). Never a validation outcome."""

    code = "STORAGE_ERROR"

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        super().__init__(message)
        self.cause = cause


class NotFoundError(StorefrontError):
    code = "NOT_FOUND"

    def __init__(self, entity: str, id: str) -> None:
        super().__init__(f"{entity} {id} not found")
        self.entity = entity
        self.id = id


# ═══════════════════════════════════════════════════════════════════════════════
# Cart / Pricing
# ═══════════════════════════════════════════════════════════════════════════════


class EmptyCartError(StorefrontError):
    code = "EMPTY_CART"

    def __init__(self, message: str = "Cart is empty") -> None:
        super().__init__(message)


class InvalidQuantityError(StorefrontError):
    code = "INVALID_QUANTITY"

    def __init__(self, quantity: object) -> None:
        super().__init__(f"Quantity must be a positive integer, got {quantity!r}")
        self.quantity = quantity


# ═══════════════════════════════════════════════════════════════════════════════
# Coupons
# ═══════════════════════════════════════════════════════════════════════════════


class CouponError(StorefrontError):
    """A coupon could not be applied to an order."""

    code = "COUPON_ERROR"

    def __init__(self, coupon_code: str, message: str) -> None:
        super().__init__(message)
        self.coupon_code = coupon_code


class CouponNotFoundError(CouponError):
    code = "COUPON_NOT_FOUND"

    def __init__(self, coupon_code: str) -> None:
        super().__init__(coupon_code, f"Coupon {coupon_code} does not exist")


class CouponInactiveError(CouponError):
    code = "COUPON_INACTIVE"

    def __init__(self, coupon_code: str) -> None:
        super().__init__(coupon_code, f"Coupon {coupon_code} is not active")


class CouponExpiredError(CouponError):
    code = "COUPON_EXPIRED"

    def __init__(self, coupon_code: str, not_yet_valid: bool = False) -> None:
        reason = "is not valid yet" if not_yet_valid else "has expired"
        super().__init__(coupon_code, f"Coupon {coupon_code} {reason}")
        self.not_yet_valid = not_yet_valid


class CouponMinimumNotMetError(CouponError):
    code = "COUPON_MINIMUM_NOT_MET"

    def __init__(self, coupon_code: str, minimum: Decimal) -> None:
        super().__init__(
            coupon_code, f"Coupon {coupon_code} requires an order of at least {minimum}"
        )
        self.minimum = minimum


class CouponUsageExceededError(CouponError):
    code = "COUPON_USAGE_EXCEEDED"

    def __init__(self, coupon_code: str) -> None:
        super().__init__(coupon_code, f"Coupon {coupon_code} has reached its usage limit")


class InvalidCouponError(StorefrontError):
    """Admin supplied a coupon definition that breaks coupon invariants."""

    code = "INVALID_COUPON"


class DuplicateCouponError(StorefrontError):
    code = "DUPLICATE_COUPON"

    def __init__(self, coupon_code: str) -> None:
        super().__init__(f"Coupon code {coupon_code} already exists")
        self.coupon_code = coupon_code


# ═══════════════════════════════════════════════════════════════════════════════
# Orders
# ═══════════════════════════════════════════════════════════════════════════════


class InvalidTransitionError(StorefrontError):
    code = "INVALID_TRANSITION"

    def __init__(self, order_id: str, current: str, target: str) -> None:
        super().__init__(f"Order {order_id} cannot move from {current} to {target}")
        self.order_id = order_id
        self.current = current
        self.target = target


class InvalidStatusError(StorefrontError):
    code = "INVALID_STATUS"

    def __init__(self, status: str) -> None:
        super().__init__(f"Unknown order status: {status!r}")
        self.status = status


class AccessDeniedError(StorefrontError):
    code = "ACCESS_DENIED"

    def __init__(self, message: str = "Access denied") -> None:
        super().__init__(message)


# ═══════════════════════════════════════════════════════════════════════════════
# Idempotency
# ═══════════════════════════════════════════════════════════════════════════════


class IdempotencyConflictError(StorefrontError):
    """Another request with the same key is still running."""

    code = "IDEMPOTENCY_CONFLICT"

    def __init__(self, key: str) -> None:
        super().__init__(f"Request with idempotency key {key} is already in progress")
        self.key = key


class IdempotencyMismatchError(StorefrontError):
    """Key reused for a different request."""

    code = "IDEMPOTENCY_MISMATCH"

    def __init__(self, key: str) -> None:
        super().__init__(f"Idempotency key {key} was used for a different request")
        self.key = key


# ═══════════════════════════════════════════════════════════════════════════════
# Payment confirmations / Product reviews / Whitelist requests
# ═══════════════════════════════════════════════════════════════════════════════


class InvalidConfirmationError(StorefrontError):
    code = "INVALID_CONFIRMATION"


class InvalidReviewError(StorefrontError):
    code = "INVALID_REVIEW"


class InvalidWhitelistRequestError(StorefrontError):
    code = "INVALID_WHITELIST_REQUEST"


class DuplicateWhitelistRequestError(StorefrontError):
    code = "DUPLICATE_WHITELIST_REQUEST"

    def __init__(self, username: str) -> None:
        super().__init__(f"A whitelist request for {username} is already waiting for review")
        self.username = username


class AlreadyDecidedError(StorefrontError):
    """An admin decision was already recorded for this submission."""

    code = "ALREADY_DECIDED"

    def __init__(self, entity: str, id: str, decision: str) -> None:
        super().__init__(f"{entity} {id} was already {decision}")
        self.entity = entity
        self.id = id
        self.decision = decision


# ═══════════════════════════════════════════════════════════════════════════════
# Aliases
# ═══════════════════════════════════════════════════════════════════════════════

type PricingError = EmptyCartError | CouponError | StorageError
type CheckoutError = PricingError | IdempotencyConflictError | IdempotencyMismatchError


__all__ = (
    "StorefrontError",
    "StorageError",
    "NotFoundError",
    "EmptyCartError",
    "InvalidQuantityError",
    "CouponError",
    "CouponNotFoundError",
    "CouponInactiveError",
    "CouponExpiredError",
    "CouponMinimumNotMetError",
    "CouponUsageExceededError",
    "InvalidCouponError",
    "DuplicateCouponError",
    "InvalidTransitionError",
    "InvalidStatusError",
    "AccessDeniedError",
    "IdempotencyConflictError",
    "IdempotencyMismatchError",
    "InvalidConfirmationError",
    "InvalidReviewError",
    "InvalidWhitelistRequestError",
    "DuplicateWhitelistRequestError",
    "AlreadyDecidedError",
    "PricingError",
    "CheckoutError",
)
