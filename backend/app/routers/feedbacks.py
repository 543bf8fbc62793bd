"""
反馈路由 (Feedback Router)

功能说明：反馈查询、提交、修改和删除
核心职责：
  - 反馈列表（可按商品、用户筛选）和详情
  - 提交反馈（仅非管理员用户），写入后同步重新计算商品平均分
  - 修改 / 删除反馈（仅所有者或管理员），同样触发平均分重新计算
API端点：GET/POST /api/v1/feedbacks, GET/PUT/DELETE /api/v1/feedbacks/{id}
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, status

from app.core.deps import get_caller, get_effects
from app.core.exceptions import NotFoundError
from app.core.store import DocumentStore, get_store
from app.models.feedback import Feedback
from app.models.user import User
from app.schemas.feedback import FeedbackCreate, FeedbackOut, FeedbackUpdate
from app.services import catalog
from app.services.effects import SideEffects

router = APIRouter(prefix="/api/v1/feedbacks", tags=["feedbacks"])


@router.get("", response_model=List[FeedbackOut])
async def list_feedbacks(
    product_id: Optional[int] = None,
    user_id: Optional[int] = None,
    store: DocumentStore = Depends(get_store),
):
    """反馈列表，可组合筛选 (List feedback with optional filters)"""
    filters = {}
    if product_id is not None:
        filters["product_id"] = product_id
    if user_id is not None:
        filters["user_id"] = user_id
    return await store.find(Feedback, order_by=Feedback.created_at.desc(), **filters)


@router.get("/{feedback_id}", response_model=FeedbackOut)
async def get_feedback(feedback_id: int, store: DocumentStore = Depends(get_store)):
    feedback = await store.find_by_id(Feedback, feedback_id)
    if feedback is None:
        raise NotFoundError("Feedback not found")
    return feedback


@router.post("", response_model=FeedbackOut, status_code=status.HTTP_201_CREATED)
async def add_feedback(
    data: FeedbackCreate,
    store: DocumentStore = Depends(get_store),
    effects: SideEffects = Depends(get_effects),
    caller: Optional[User] = Depends(get_caller),
):
    """
    提交反馈 (Submit feedback)

    Raises:
        401/403: 未登录或调用者为管理员
        422: 评分不在 1-5 之间
        404: 商品不存在
    """
    return await catalog.add_feedback(store, effects, caller, data.product_id, data.rating, data.comment)


@router.put("/{feedback_id}", response_model=FeedbackOut)
async def update_feedback(
    feedback_id: int,
    data: FeedbackUpdate,
    store: DocumentStore = Depends(get_store),
    effects: SideEffects = Depends(get_effects),
    caller: Optional[User] = Depends(get_caller),
):
    """修改反馈（仅所有者或管理员） (Update feedback, owner or admin)"""
    return await catalog.update_feedback(store, effects, caller, feedback_id, data.rating, data.comment)


@router.delete("/{feedback_id}")
async def delete_feedback(
    feedback_id: int,
    store: DocumentStore = Depends(get_store),
    effects: SideEffects = Depends(get_effects),
    caller: Optional[User] = Depends(get_caller),
):
    """删除反馈（仅所有者或管理员） (Delete feedback, owner or admin)"""
    return {"deleted": await catalog.delete_feedback(store, effects, caller, feedback_id)}
