"""
月度清理任务 (Monthly Cleanup Sweep)

全量扫描所有商品：反馈数量大于 3 且每条评分都 ≤ 1 的商品，先删除其全部反馈，再删除商品本身，
每删除一个商品记录一条操作者为空的审计日志。不满足两个条件的商品保持不变。

Full scan over all products: a product with more than 3 feedback rows whose
ratings are all <= 1 loses its feedback and then is deleted itself, with one
audit entry (null actor) per deleted product. Others are left untouched.

删除采用"存在才删除"语义，重复执行是安全的；调度器保证同一时间只运行一个实例。
Deletes are delete-if-exists, so a double run is harmless; the scheduler runs one instance at a time.
"""
import logging
from typing import Optional

from sqlalchemy.ext.asyncio import async_sessionmaker

from app.core.store import DocumentStore
from app.models.feedback import Feedback
from app.models.product import Product
from app.services.effects import SideEffects

logger = logging.getLogger(__name__)

MIN_FEEDBACK_COUNT = 3  # 反馈数必须严格大于该值 (feedback count must exceed this)
MAX_LOW_RATING = 1  # 每条评分都不超过该值 (every rating at most this)


def should_remove(ratings: list[int]) -> bool:
    """清理策略 (Deletion policy)"""
    return len(ratings) > MIN_FEEDBACK_COUNT and all(r <= MAX_LOW_RATING for r in ratings)


async def sweep_low_rated_products(
    session_factory: async_sessionmaker,
    effects: Optional[SideEffects] = None,
) -> list[int]:
    """
    执行一次清理 (Run one sweep)

    Args:
        session_factory: 会话工厂
        effects: 副作用分发器；为空时内部创建并在结束时执行
                 (dispatcher; when omitted one is created and dispatched at the end)

    Returns:
        list[int]: 被删除的商品 ID (ids of deleted products)
    """
    own_effects = effects is None
    if own_effects:
        effects = SideEffects(session_factory)

    deleted: list[int] = []
    async with session_factory() as session:
        store = DocumentStore(session)
        product_ids = [p.id for p in await store.find(Product)]
        logger.info("Monthly cleanup: scanning %d products", len(product_ids))

        for product_id in product_ids:
            try:
                feedbacks = await store.find(Feedback, product_id=product_id)
                if not should_remove([f.rating for f in feedbacks]):
                    continue
                removed = await store.delete_many(Feedback, product_id=product_id)
                await store.delete_by_id(Product, product_id)
                await store.commit()
            except Exception:
                logger.exception("Monthly cleanup failed for product %s", product_id)
                await store.rollback()
                continue

            deleted.append(product_id)
            effects.audit(None, "monthlyCleanup", f"Deleted product {product_id} with all feedback <=1 ({removed} feedback)")
            logger.info("Monthly cleanup: deleted product %s", product_id)

    if own_effects:
        await effects.dispatch()
    logger.info("Monthly cleanup finished: %d products deleted", len(deleted))
    return deleted
