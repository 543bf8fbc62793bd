"""
审计日志路由 (Audit Log Router)

功能说明：提供审计日志的查询功能，用于安全审计和操作追踪
核心职责：
  - 支持按操作者、操作类型筛选
  - 分页查询，按时间倒序展示
  - 严格的权限控制（仅管理员可访问）
API端点：GET /api/v1/audit-logs
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query

from app.core.deps import get_caller
from app.core.guard import authorize
from app.core.store import DocumentStore, get_store
from app.models.audit_log import AuditLog
from app.models.user import User
from app.schemas.audit_log import AuditLogListResponse, AuditLogOut

router = APIRouter(prefix="/api/v1/audit-logs", tags=["audit-logs"])


@router.get("", response_model=AuditLogListResponse)
async def list_audit_logs(
    user_id: Optional[int] = None,
    action: Optional[str] = None,
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    store: DocumentStore = Depends(get_store),
    caller: Optional[User] = Depends(get_caller),
):
    """
    查询审计日志列表 (Get Audit Logs List)

    Args:
        user_id: 可选的操作者ID筛选
        action: 可选的操作类型筛选（如 "addFeedback", "monthlyCleanup"）
        page: 页码，从1开始
        page_size: 每页记录数，限制1-100条

    Filter Examples:
        - GET /api/v1/audit-logs?user_id=123
        - GET /api/v1/audit-logs?action=deleteUser
    """
    authorize("listAuditLogs", caller)
    filters = {}
    if user_id is not None:
        filters["user_id"] = user_id
    if action:
        filters["action"] = action

    total = await store.count(AuditLog, **filters)
    logs = await store.find(
        AuditLog,
        order_by=AuditLog.id.desc(),  # 最新操作在前
        offset=(page - 1) * page_size,
        limit=page_size,
        **filters,
    )
    return AuditLogListResponse(
        items=[AuditLogOut.model_validate(log) for log in logs],
        total=total,
        page=page,
        page_size=page_size,
    )
