from decimal import Decimal

import pytest
from kungfu import Ok

from storefront.admin import Capabilities, MemoryAdminStore, Requester
from storefront.errors import AccessDeniedError, InvalidReviewError, NotFoundError
from storefront.reviews import (
    MAX_COMMENT_LENGTH,
    MemoryReviewStore,
    ProductReviews,
    Review,
    ReviewDraft,
    SQLAlchemyReviewStore,
    rating_summary,
    validate_review,
)

PLAYER = Requester(user_id="u-1")
OTHER = Requester(user_id="u-2")
ADMIN = Requester(email="owner@example.com")


@pytest.fixture(params=["memory", "sqlalchemy"])
def review_store(request, session_factory):
    if request.param == "memory":
        return MemoryReviewStore()
    return SQLAlchemyReviewStore(session_factory)


@pytest.fixture
def reviews(review_store, catalog) -> ProductReviews:
    capabilities = Capabilities(MemoryAdminStore(), bootstrap={"owner@example.com"})
    return ProductReviews(review_store, catalog, capabilities)


class TestValidation:
    def test_trims_comment(self):
        clean = validate_review(ReviewDraft("vip-rank", "u-1", 5, "  great  ")).unwrap()
        assert clean.comment == "great"

    @pytest.mark.parametrize("rating", [0, 6, -1, True, 4.5])
    def test_rating_bounds(self, rating):
        result = validate_review(ReviewDraft("vip-rank", "u-1", rating, "ok"))
        assert isinstance(result.unwrap_err(), InvalidReviewError)

    def test_comment_bounds(self):
        for comment in ("", "   ", "x" * (MAX_COMMENT_LENGTH + 1)):
            result = validate_review(ReviewDraft("vip-rank", "u-1", 3, comment))
            assert isinstance(result.unwrap_err(), InvalidReviewError)
        assert isinstance(validate_review(ReviewDraft("vip-rank", "u-1", 3, "x" * MAX_COMMENT_LENGTH)), Ok)


class TestSummary:
    def test_empty(self):
        summary = rating_summary([])
        assert summary.count == 0
        assert summary.average is None

    def test_rounds_half_up(self, now):
        ratings = [5, 4, 4, 4]  # 4.25
        items = [Review(str(n), "vip-rank", f"u-{n}", r, "ok", now) for n, r in enumerate(ratings)]
        assert rating_summary(items).average == Decimal("4.3")


class TestProductReviews:
    async def test_post_and_read(self, reviews):
        posted = (await reviews.post(PLAYER, "vip-rank", 5, " Worth it ")).unwrap()
        await reviews.post(OTHER, "vip-rank", 2, "Too pricey")
        await reviews.post(PLAYER, "mvp-rank", 4, "Nice")

        assert posted.comment == "Worth it"
        assert len((await reviews.for_product("vip-rank")).unwrap()) == 2
        assert {r.product_id for r in (await reviews.for_user(PLAYER)).unwrap()} == {
            "vip-rank",
            "mvp-rank",
        }

        summary = (await reviews.summary("vip-rank")).unwrap()
        assert summary.count == 2
        assert summary.average == Decimal("3.5")

    async def test_needs_account(self, reviews):
        guest = Requester(session_id="sess-1")
        assert isinstance((await reviews.post(guest, "vip-rank", 5, "hi")).unwrap_err(), AccessDeniedError)
        assert isinstance((await reviews.for_user(guest)).unwrap_err(), AccessDeniedError)

    async def test_unknown_product(self, reviews):
        result = await reviews.post(PLAYER, "nope", 5, "hi")
        assert isinstance(result.unwrap_err(), NotFoundError)

    async def test_invalid_review_not_stored(self, reviews):
        result = await reviews.post(PLAYER, "vip-rank", 9, "hi")
        assert isinstance(result.unwrap_err(), InvalidReviewError)
        assert (await reviews.for_product("vip-rank")).unwrap() == []

    async def test_delete_author_or_admin(self, reviews):
        mine = (await reviews.post(PLAYER, "vip-rank", 5, "mine")).unwrap()
        theirs = (await reviews.post(OTHER, "vip-rank", 1, "theirs")).unwrap()

        denied = await reviews.delete(PLAYER, theirs.id)
        assert isinstance(denied.unwrap_err(), AccessDeniedError)

        assert (await reviews.delete(PLAYER, mine.id)).unwrap() is True
        assert (await reviews.delete(ADMIN, theirs.id)).unwrap() is True
        missing = await reviews.delete(ADMIN, theirs.id)
        assert isinstance(missing.unwrap_err(), NotFoundError)
