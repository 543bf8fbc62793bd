"""
用户管理路由 (User Management Router)

功能说明：用户查询、编辑和删除
核心职责：
  - 用户列表（仅管理员，可按角色、验证状态筛选，分页）
  - 用户详情（本人或管理员）及其全部反馈
  - 编辑用户（仅管理员，角色限 user / admin，邮箱唯一）
  - 删除用户（仅管理员，级联删除其反馈并重新计算受影响商品的平均分）
API端点：GET /api/v1/users, GET/PUT/DELETE /api/v1/users/{id}, GET /api/v1/users/{id}/feedbacks
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from app.core.deps import get_caller, get_effects
from app.core.exceptions import NotFoundError
from app.core.guard import authorize
from app.core.store import DocumentStore, get_store
from app.models.feedback import Feedback
from app.models.user import User
from app.schemas.feedback import FeedbackOut
from app.schemas.user import UserListResponse, UserOut, UserUpdate
from app.services import users as user_service
from app.services.effects import SideEffects

router = APIRouter(prefix="/api/v1/users", tags=["users"])


@router.get("", response_model=UserListResponse)
async def list_users(
    role: Optional[str] = None,
    verified: Optional[bool] = None,
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    store: DocumentStore = Depends(get_store),
    caller: Optional[User] = Depends(get_caller),
):
    """
    获取用户列表 (Get Users List)

    Security:
        - 仅限 admin 角色用户访问
        - 返回数据排除密码哈希和一次性令牌
    """
    authorize("listUsers", caller)
    filters = {}
    if role is not None:
        filters["role"] = role
    if verified is not None:
        filters["verified"] = verified

    total = await store.count(User, **filters)
    users = await store.find(User, offset=(page - 1) * page_size, limit=page_size, **filters)
    return UserListResponse(
        items=[UserOut.model_validate(u) for u in users],
        total=total,
        page=page,
        page_size=page_size,
    )


@router.get("/{user_id}", response_model=UserOut)
async def get_user(
    user_id: int,
    store: DocumentStore = Depends(get_store),
    caller: Optional[User] = Depends(get_caller),
):
    """获取用户详情（本人或管理员） (Get user detail, self or admin)"""
    authorize("getUser", caller, owner_id=user_id)
    user = await store.find_by_id(User, user_id)
    if user is None:
        raise NotFoundError("User not found")
    return user


@router.get("/{user_id}/feedbacks", response_model=List[FeedbackOut])
async def user_feedbacks(user_id: int, store: DocumentStore = Depends(get_store)):
    """用户提交的全部反馈 (All feedback submitted by a user)"""
    return await store.find(Feedback, user_id=user_id)


@router.put("/{user_id}", response_model=UserOut)
async def update_user(
    user_id: int,
    data: UserUpdate,
    store: DocumentStore = Depends(get_store),
    effects: SideEffects = Depends(get_effects),
    caller: Optional[User] = Depends(get_caller),
):
    """
    编辑用户信息 (Update User Information)

    Raises:
        403: 调用者不是管理员
        404: 用户不存在
        409: 邮箱已被使用
        422: 角色值无效
    """
    return await user_service.update_user(
        store, effects, caller, user_id, name=data.name, email=data.email, role=data.role
    )


@router.delete("/{user_id}")
async def delete_user(
    user_id: int,
    store: DocumentStore = Depends(get_store),
    effects: SideEffects = Depends(get_effects),
    caller: Optional[User] = Depends(get_caller),
):
    """
    删除用户 (Delete User)

    硬删除且不可逆；管理员不能删除自己。
    """
    return {"deleted": await user_service.delete_user(store, effects, caller, user_id)}
