"""
审计日志服务 (Audit Log Service)

功能描述 (Description):
    追加式审计记录器。每个成功改变持久化状态的操作写入一条记录：操作者、操作类型、
    可读的详情描述和时间戳。系统发起的操作（月度清理）操作者为空。

    Append-only audit recorder. Every operation that changed persisted state
    appends one entry: actor, action label, human-readable detail and timestamp.
    System-initiated actions (monthly cleanup) record a null actor.

技术特性 (Technical Features):
    - 独立会话：审计写入使用自己的会话，在主操作提交之后执行
    - 尽力而为：由副作用分发器调用，失败只记录运维日志，不回滚也不影响主操作结果
    - 只追加：不提供修改或删除接口
"""
import logging
from typing import Optional

from sqlalchemy.ext.asyncio import async_sessionmaker

from app.models.audit_log import AuditLog

logger = logging.getLogger(__name__)


async def record_audit(
    session_factory: async_sessionmaker,
    user_id: Optional[int],
    action: str,
    detail: Optional[str] = None,
) -> AuditLog:
    """
    写入一条审计记录 (Append one audit entry)

    Args:
        session_factory: 会话工厂，审计记录在独立会话中提交
        user_id: 操作用户ID，系统操作传 None
        action: 操作类型标识，例如 addFeedback / deleteUser / monthlyCleanup
        detail: 可读的详情描述

    使用示例:
        await record_audit(async_session, user.id, "addProduct", "Added product: Mug")
        await record_audit(async_session, None, "monthlyCleanup", "Deleted product 7 with all feedback <=1")
    """
    async with session_factory() as session:
        entry = AuditLog(user_id=user_id, action=action, detail=detail)
        session.add(entry)
        await session.commit()
    logger.debug("Audit %s by %s: %s", action, user_id, detail)
    return entry
