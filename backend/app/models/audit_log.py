"""
审计日志模型 (Audit Log Model)

记录改变持久化状态的操作，用于安全审计和操作回溯。只追加，正常流程中不修改也不删除。
user_id 为空表示系统发起的操作（例如月度清理）；它不是外键，删除用户后审计记录仍然保留。

Records operations that changed persisted state, for auditing and traceability.
Append-only: never updated or deleted by normal operation. A null user_id marks a
system-initiated action (such as the monthly cleanup); it is not a foreign key, so
entries survive deletion of their actor.
"""
from datetime import datetime
from typing import Optional

from sqlalchemy import String, Integer, Text, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database import Base
from app.core.timeutil import utcnow


class AuditLog(Base):
    """审计日志表 (Audit Log Table)"""
    __tablename__ = "audit_logs"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)  # 主键 ID (Primary Key ID)
    user_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True, index=True)  # 操作用户 ID，系统操作为空 (Actor, null for system)
    action: Mapped[str] = mapped_column(String(50), nullable=False, index=True)  # 操作类型，如 addFeedback (Action Label)
    detail: Mapped[Optional[str]] = mapped_column(Text, nullable=True)  # 操作详情描述 (Operation Detail Description)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, index=True
    )  # 操作时间 (Operation Time)
