"""
用户管理服务 (User Management Service)

管理员修改和删除用户。删除用户会级联删除该用户的全部反馈，并重新计算受影响商品的平均分。
Admin-only user edits and deletion. Deleting a user cascades to all of their
feedback and recomputes the average of every affected product.
"""
import logging
from typing import Optional

from app.core.exceptions import ConflictError, NotFoundError, ValidationError
from app.core.guard import authorize
from app.core.store import DocumentStore
from app.models.feedback import Feedback
from app.models.user import ROLES, User
from app.services.effects import SideEffects
from app.services.rating import refresh_ratings

logger = logging.getLogger(__name__)


async def update_user(
    store: DocumentStore,
    effects: SideEffects,
    caller: Optional[User],
    user_id: int,
    name: Optional[str] = None,
    email: Optional[str] = None,
    role: Optional[str] = None,
) -> User:
    """
    编辑用户信息 (Update user information)

    Raises:
        UnauthorizedError: 调用者不是管理员
        ValidationError: 角色值无效
        ConflictError: 邮箱已被其他用户使用
        NotFoundError: 用户不存在
    """
    admin_id = authorize("updateUser", caller).id
    if role is not None and role not in ROLES:
        raise ValidationError(f"Role must be one of {' / '.join(ROLES)}")
    if name is not None and not name.strip():
        raise ValidationError("Name must not be empty")
    if email is not None:
        email = email.strip().lower()
        other = await store.find_one(User, User.id != user_id, email=email)
        if other is not None:
            raise ConflictError("Email already registered")

    changes = {k: v for k, v in {"name": name, "email": email, "role": role}.items() if v is not None}
    user = await store.update_by_id(User, user_id, **changes)
    if user is None:
        raise NotFoundError("User not found")
    await store.commit()
    effects.audit(admin_id, "updateUser", f"Updated user {user_id}: {', '.join(sorted(changes)) or 'no changes'}")
    return user


async def delete_user(store: DocumentStore, effects: SideEffects, caller: Optional[User], user_id: int) -> bool:
    """
    删除用户 (Delete user)

    管理员不能删除自己。先删除该用户的全部反馈，再删除用户，最后重新计算受影响商品的平均分。
    An admin cannot delete themself. The user's feedback goes first, then the user,
    then every affected product average is recomputed.
    """
    admin_id = authorize("deleteUser", caller).id
    if admin_id == user_id:
        raise ValidationError("Cannot delete yourself")
    user = await store.find_by_id(User, user_id)
    if user is None:
        raise NotFoundError("User not found")
    email = user.email

    affected = {f.product_id for f in await store.find(Feedback, user_id=user_id)}
    removed = await store.delete_many(Feedback, user_id=user_id)
    await store.delete_by_id(User, user_id)
    await store.commit()
    logger.info("Deleted user %s with %d feedback", user_id, removed)

    await refresh_ratings(store, affected)
    effects.audit(admin_id, "deleteUser", f"Deleted user {user_id} ({email}) and {removed} feedback")
    return True
