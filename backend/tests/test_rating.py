"""评分聚合器与反馈服务测试。"""
import pytest
from unittest.mock import AsyncMock, patch

from app.core.exceptions import ValidationError
from app.models.feedback import Feedback
from app.models.product import Product
from app.services import catalog
from app.services.rating import mean_rating, recompute_average_rating, refresh_ratings


class TestMeanRating:
    def test_empty(self):
        assert mean_rating([]) == 0.0

    def test_mean(self):
        assert mean_rating([3, 4, 5]) == 4.0
        assert mean_rating([3, 4]) == 3.5


class TestValidateRating:
    @pytest.mark.parametrize("rating", [1, 3, 5])
    def test_valid(self, rating):
        assert catalog.validate_rating(rating) == rating

    @pytest.mark.parametrize("rating", [0, 6, 2.5, True, "4"])
    def test_invalid(self, rating):
        with pytest.raises(ValidationError):
            catalog.validate_rating(rating)


class TestRecompute:
    async def test_recompute_writes_cache(self, store, db_session, product, regular_user):
        db_session.add_all([
            Feedback(user_id=regular_user.id, product_id=product.id, rating=2),
            Feedback(user_id=regular_user.id, product_id=product.id, rating=5),
        ])
        await db_session.commit()
        assert await recompute_average_rating(store, product.id) == 3.5
        assert product.average_rating == 3.5

    async def test_recompute_missing_product(self, store):
        assert await recompute_average_rating(store, 404) is None

    async def test_failure_leaves_cache_stale(self, store, product, caplog):
        with patch("app.services.rating.recompute_average_rating", new=AsyncMock(side_effect=RuntimeError("db gone"))):
            await refresh_ratings(store, [product.id])
        assert "Failed to recompute average rating" in caplog.text


class TestFeedbackLifecycle:
    async def test_add_then_delete_updates_average(self, store, effects, db_session, product,
                                                   regular_user, other_user):
        """3、4 两条反馈之后再加 5 → 4.0；删除 5 → 3.5。"""
        for rating in (3, 4):
            db_session.add(Feedback(user_id=regular_user.id, product_id=product.id, rating=rating))
        await db_session.commit()

        added = await catalog.add_feedback(store, effects, other_user, product.id, 5)
        assert (await store.find_by_id(Product, product.id)).average_rating == 4.0

        await catalog.delete_feedback(store, effects, other_user, added.id)
        assert (await store.find_by_id(Product, product.id)).average_rating == 3.5

        assert await effects.dispatch() == 2

    async def test_recompute_failure_does_not_undo_feedback(self, store, effects, product, regular_user):
        with patch("app.services.rating.recompute_average_rating", new=AsyncMock(side_effect=RuntimeError("boom"))):
            feedback = await catalog.add_feedback(store, effects, regular_user, product.id, 4)
        assert feedback.rating == 4
        assert await store.count(Feedback, product_id=product.id) == 1
        # 缓存保持旧值
        assert (await store.find_by_id(Product, product.id)).average_rating == 0.0
        assert await effects.dispatch() == 1
