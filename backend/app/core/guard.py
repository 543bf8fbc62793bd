"""
授权守卫 (Authorization Guard)

把分散在各个处理函数里的角色判断收拢为一张声明式策略表：操作名 → 所需谓词。
所有变更操作在任何持久化写入之前调用 authorize()，谓词不满足时抛出 UnauthorizedError。

Collapses per-handler role checks into one declarative policy table mapping
operation name to required predicate. Every mutation calls authorize() before any
persistence write; an unmet predicate raises UnauthorizedError.

谓词（严格程度递增）(Predicates, increasing strictness):
    AUTHENTICATED   调用者身份存在 (caller present)
    NON_ADMIN       已认证且不是管理员，仅用于提交反馈 (authenticated and not admin; feedback submission)
    ADMIN           已认证且为管理员 (authenticated and admin)
    OWNER_OR_ADMIN  已认证且为资源所有者或管理员 (authenticated and resource owner or admin)

管理员不能提交反馈是一项明确的产品策略，需与业务方确认，并非代码缺陷的修复。
Admins being unable to submit feedback is a deliberate product policy to confirm
with stakeholders, not a bug fix.
"""
import enum
import logging
from typing import Optional

from app.core.exceptions import AuthenticationRequiredError, UnauthorizedError
from app.models.user import User

logger = logging.getLogger(__name__)


class Predicate(str, enum.Enum):
    AUTHENTICATED = "authenticated"
    NON_ADMIN = "non_admin"
    ADMIN = "admin"
    OWNER_OR_ADMIN = "owner_or_admin"


# 策略表 (Policy Table)
POLICY: dict[str, Predicate] = {
    "me": Predicate.AUTHENTICATED,
    "listUsers": Predicate.ADMIN,
    "getUser": Predicate.OWNER_OR_ADMIN,
    "addProduct": Predicate.ADMIN,
    "updateProduct": Predicate.ADMIN,
    "deleteProduct": Predicate.ADMIN,
    "addFeedback": Predicate.NON_ADMIN,
    "updateFeedback": Predicate.OWNER_OR_ADMIN,
    "deleteFeedback": Predicate.OWNER_OR_ADMIN,
    "updateUser": Predicate.ADMIN,
    "deleteUser": Predicate.ADMIN,
    "listAuditLogs": Predicate.ADMIN,
}


def check(predicate: Predicate, caller: Optional[User], owner_id: Optional[int] = None) -> bool:
    """对单个谓词求值，不抛异常 (Evaluate one predicate without raising)"""
    if caller is None:
        return False
    if predicate is Predicate.AUTHENTICATED:
        return True
    if predicate is Predicate.NON_ADMIN:
        return not caller.is_admin
    if predicate is Predicate.ADMIN:
        return caller.is_admin
    if predicate is Predicate.OWNER_OR_ADMIN:
        return caller.is_admin or (owner_id is not None and caller.id == owner_id)
    raise ValueError(f"unknown predicate {predicate!r}")


def authorize(operation: str, caller: Optional[User], owner_id: Optional[int] = None) -> User:
    """
    按策略表校验调用者 (Check the caller against the policy table)

    Args:
        operation: 策略表中的操作名 (operation name in POLICY)
        caller: 已解析的调用者，缺失或令牌无效时为 None (resolved caller, None when absent/invalid)
        owner_id: OWNER_OR_ADMIN 谓词使用的资源所有者 ID (resource owner id for OWNER_OR_ADMIN)

    Returns:
        User: 通过校验的调用者 (the authorized caller)

    Raises:
        AuthenticationRequiredError: 没有调用者身份 (no caller identity)
        UnauthorizedError: 有身份但谓词不满足 (identity present, predicate unmet)
    """
    predicate = POLICY[operation]
    if caller is None:
        raise AuthenticationRequiredError("Unauthorized", "authentication required")
    if not check(predicate, caller, owner_id):
        logger.info("Denied %s for user %s (requires %s)", operation, caller.id, predicate.value)
        raise UnauthorizedError("Unauthorized", f"{operation} requires {predicate.value}")
    return caller


def require_authenticated(caller: Optional[User]) -> User:
    """
    仅校验身份存在，用于需要先加载资源才能判断所有权的操作
    (Identity-only check for operations that must load the resource before judging ownership)
    """
    if caller is None:
        raise AuthenticationRequiredError("Unauthorized", "authentication required")
    return caller
