"""
审计日志响应模型
"""
from datetime import datetime
from typing import Optional, List

from pydantic import BaseModel


class AuditLogOut(BaseModel):
    """审计日志条目"""
    id: int
    user_id: Optional[int]
    action: str
    detail: Optional[str]
    created_at: datetime

    model_config = {"from_attributes": True}


class AuditLogListResponse(BaseModel):
    """审计日志分页响应"""
    items: List[AuditLogOut]
    total: int
    page: int
    page_size: int
