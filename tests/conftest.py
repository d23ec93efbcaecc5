"""Shared fixtures: seeded catalog, coupon factory, stores, SQLite databases."""

import uuid
from collections.abc import AsyncIterator, Callable
from datetime import datetime, timedelta
from decimal import Decimal

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from storefront._types import utcnow
from storefront.db import create_database
from storefront.catalog import MemoryCatalog, Product, SEED_PRODUCTS
from storefront.coupons import Coupon, DiscountType, MemoryCouponStore
from storefront.pricing import PricingEngine


FIFTY = Product(id="bundle-50", name="Bundle", price=Decimal("50.00"), category="bundles")
TEN = Product(id="bundle-10", name="Small Bundle", price=Decimal("10.00"), category="bundles")


@pytest.fixture
def now() -> datetime:
    return utcnow()


@pytest.fixture
def make_coupon(now: datetime) -> Callable[..., Coupon]:
    """Coupon valid from yesterday for thirty days; override any field."""

    def make(code: str = "SAVE20", **overrides: object) -> Coupon:
        fields: dict[str, object] = dict(
            id=uuid.uuid4().hex,
            code=code,
            discount_type=DiscountType.PERCENTAGE,
            discount_value=Decimal("20"),
            valid_from=now - timedelta(days=1),
            valid_until=now + timedelta(days=30),
            created_at=now,
            updated_at=now,
        )
        fields.update(overrides)
        return Coupon(**fields)  # type: ignore[arg-type]

    return make


@pytest.fixture
def catalog() -> MemoryCatalog:
    return MemoryCatalog([*SEED_PRODUCTS, FIFTY, TEN])


@pytest.fixture
def save20(make_coupon: Callable[..., Coupon]) -> Coupon:
    return make_coupon(
        "SAVE20",
        minimum_order_amount=Decimal("15.00"),
        max_usages=100,
        current_usages=0,
    )


@pytest.fixture
def coupons(save20: Coupon) -> MemoryCouponStore:
    return MemoryCouponStore([save20])


@pytest.fixture
def engine(catalog: MemoryCatalog, coupons: MemoryCouponStore) -> PricingEngine:
    return PricingEngine(catalog, coupons)


@pytest.fixture
async def session_factory(tmp_path) -> AsyncIterator[async_sessionmaker[AsyncSession]]:
    factory, db_engine = await create_database(f"sqlite+aiosqlite:///{tmp_path / 'store.db'}")
    yield factory
    await db_engine.dispose()
