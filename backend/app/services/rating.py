"""
评分聚合器 (Rating Aggregator)

根据商品的全部反馈重新计算缓存的平均评分并写回 Product.average_rating。
这是该缓存字段唯一的写入者，在任何新增、修改、删除反馈的操作之后同步调用。

Recomputes a product's cached average rating from all of its feedback rows and
writes it back to Product.average_rating. It is the only writer of the cached
field and runs synchronously after any create, update or delete of feedback.

一致性说明 (Consistency):
    触发写入先提交，重新计算是单独的一步。两个针对同一商品的并发写入会在
    读取-计算-写回上竞争，最后完成的计算生效；在重新计算完成之前缓存值可能过期。
    重新计算失败时触发写入保持有效，缓存暂时过期，不回滚。

    The triggering write commits first and recomputation is a separate step.
    Two concurrent writes for the same product race on the read-compute-write and
    the last recomputation to finish wins; until it finishes the cache can be stale.
    If recomputation fails the triggering write stands and the cache stays stale.
"""
import logging
from typing import Iterable, Optional

from app.core.store import DocumentStore
from app.models.feedback import Feedback
from app.models.product import Product

logger = logging.getLogger(__name__)


def mean_rating(ratings: list[int]) -> float:
    """算术平均，无评分时为 0 (Arithmetic mean, 0 when empty)"""
    if not ratings:
        return 0.0
    return sum(ratings) / len(ratings)


async def recompute_average_rating(store: DocumentStore, product_id: int) -> Optional[float]:
    """
    重新计算并持久化商品平均评分 (Recompute and persist a product's average rating)

    Returns:
        新的平均值；商品已不存在时返回 None (the new average, None when the product is gone)
    """
    feedbacks = await store.find(Feedback, product_id=product_id)
    average = mean_rating([f.rating for f in feedbacks])
    product = await store.update_by_id(Product, product_id, average_rating=average)
    if product is None:
        return None
    await store.commit()
    return average


async def refresh_ratings(store: DocumentStore, product_ids: Iterable[int]) -> None:
    """
    触发写入已提交后批量重新计算，失败只记录日志 (Recompute after a committed write; log failures)

    单个商品失败不影响其他商品。
    A failure on one product does not stop the others.
    """
    for product_id in sorted(set(product_ids)):
        try:
            await recompute_average_rating(store, product_id)
        except Exception:
            logger.exception("Failed to recompute average rating for product %s, cache left stale", product_id)
            await store.rollback()
