"""
商品与反馈服务 (Product & Feedback Service)

所有变更操作遵循同一顺序：
    1. 授权守卫（在任何写入之前）
    2. 参数校验 / 资源存在性检查
    3. 持久化写入并提交
    4. 如果影响了反馈与商品的关联，重新计算缓存平均分
    5. 登记审计记录（尽力而为，响应之后执行）

Every mutation follows the same order:
    1. authorization guard (before any write)
    2. validation / existence checks
    3. persistence write and commit
    4. average-rating recomputation when feedback linkage changed
    5. audit entry registration (best-effort, runs after the response)
"""
import logging
from typing import Optional

from app.core.exceptions import NotFoundError, ValidationError
from app.core.guard import authorize, require_authenticated
from app.core.store import DocumentStore
from app.models.feedback import MAX_RATING, MIN_RATING, Feedback
from app.models.product import Product
from app.models.user import User
from app.services.effects import SideEffects
from app.services.rating import refresh_ratings

logger = logging.getLogger(__name__)


def validate_rating(rating: int) -> int:
    """评分必须是 1-5 的整数 (Rating must be an integer in [1, 5])"""
    if isinstance(rating, bool) or not isinstance(rating, int) or not MIN_RATING <= rating <= MAX_RATING:
        raise ValidationError(f"Rating must be {MIN_RATING}-{MAX_RATING}", f"got {rating!r}")
    return rating


def _validate_name(name: Optional[str]) -> None:
    if name is not None and not name.strip():
        raise ValidationError("Name must not be empty")


# ---------------------------------------------------------------------------
# 商品 (Products)
# ---------------------------------------------------------------------------

async def add_product(
    store: DocumentStore,
    effects: SideEffects,
    caller: Optional[User],
    name: str,
    description: Optional[str] = None,
) -> Product:
    admin = authorize("addProduct", caller)
    _validate_name(name)
    product = await store.create(Product, name=name, description=description, average_rating=0.0)
    await store.commit()
    effects.audit(admin.id, "addProduct", f"Added product: {name}")
    return product


async def update_product(
    store: DocumentStore,
    effects: SideEffects,
    caller: Optional[User],
    product_id: int,
    name: Optional[str] = None,
    description: Optional[str] = None,
) -> Product:
    """未提供的字段保持不变 (Fields left as None stay unchanged)"""
    admin = authorize("updateProduct", caller)
    _validate_name(name)
    changes = {k: v for k, v in {"name": name, "description": description}.items() if v is not None}
    product = await store.update_by_id(Product, product_id, **changes)
    if product is None:
        raise NotFoundError("Product not found")
    await store.commit()
    effects.audit(admin.id, "updateProduct", f"Updated product {product_id}: {', '.join(sorted(changes)) or 'no changes'}")
    return product


async def delete_product(store: DocumentStore, effects: SideEffects, caller: Optional[User], product_id: int) -> bool:
    """删除商品，先级联删除其全部反馈 (Delete a product after cascading its feedback)"""
    admin = authorize("deleteProduct", caller)
    if await store.find_by_id(Product, product_id) is None:
        raise NotFoundError("Product not found")
    removed = await store.delete_many(Feedback, product_id=product_id)
    await store.delete_by_id(Product, product_id)
    await store.commit()
    effects.audit(admin.id, "deleteProduct", f"Deleted product {product_id} and {removed} feedback")
    return True


# ---------------------------------------------------------------------------
# 反馈 (Feedback)
# ---------------------------------------------------------------------------

async def add_feedback(
    store: DocumentStore,
    effects: SideEffects,
    caller: Optional[User],
    product_id: int,
    rating: int,
    comment: Optional[str] = None,
) -> Feedback:
    """
    提交反馈 (Submit feedback)

    仅非管理员用户可以提交。写入后同步重新计算商品平均分。
    Only non-admin users may submit. The product average is recomputed right after the write.

    Raises:
        UnauthorizedError: 未登录或调用者为管理员
        ValidationError: 评分不在 1-5 之间
        NotFoundError: 商品不存在
    """
    user_id = authorize("addFeedback", caller).id
    validate_rating(rating)
    if await store.find_by_id(Product, product_id) is None:
        raise NotFoundError("Product not found")

    feedback = await store.create(
        Feedback, user_id=user_id, product_id=product_id, rating=rating, comment=comment
    )
    await store.commit()
    feedback_id = feedback.id

    await refresh_ratings(store, [product_id])
    effects.audit(user_id, "addFeedback", f"Added feedback for product {product_id}: {rating} stars")
    return await store.find_by_id(Feedback, feedback_id)


async def update_feedback(
    store: DocumentStore,
    effects: SideEffects,
    caller: Optional[User],
    feedback_id: int,
    rating: Optional[int] = None,
    comment: Optional[str] = None,
) -> Feedback:
    """
    修改反馈的评分或评论 (Change a feedback's rating or comment)

    仅反馈所有者或管理员可以修改；评分非法时不写入任何内容。
    Only the owner or an admin may change it; an invalid rating writes nothing.
    """
    require_authenticated(caller)
    feedback = await store.find_by_id(Feedback, feedback_id)
    if feedback is None:
        raise NotFoundError("Feedback not found")
    actor_id = authorize("updateFeedback", caller, owner_id=feedback.user_id).id
    if rating is not None:
        validate_rating(rating)

    changes = {k: v for k, v in {"rating": rating, "comment": comment}.items() if v is not None}
    product_id = feedback.product_id
    await store.update_by_id(Feedback, feedback_id, **changes)
    await store.commit()

    await refresh_ratings(store, [product_id])
    effects.audit(actor_id, "updateFeedback", f"Updated feedback {feedback_id} for product {product_id}")
    return await store.find_by_id(Feedback, feedback_id)


async def delete_feedback(store: DocumentStore, effects: SideEffects, caller: Optional[User], feedback_id: int) -> bool:
    require_authenticated(caller)
    feedback = await store.find_by_id(Feedback, feedback_id)
    if feedback is None:
        raise NotFoundError("Feedback not found")
    actor_id = authorize("deleteFeedback", caller, owner_id=feedback.user_id).id

    product_id = feedback.product_id
    await store.delete_by_id(Feedback, feedback_id)
    await store.commit()

    await refresh_ratings(store, [product_id])
    effects.audit(actor_id, "deleteFeedback", f"Deleted feedback {feedback_id} for product {product_id}")
    return True
