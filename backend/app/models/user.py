"""
用户模型 (User Model)

定义系统用户表结构，包括邮箱、密码哈希、角色、邮箱验证状态和一次性令牌字段。

Defines the user table: email, password hash, role, email verification state
and the one-time verification / reset token fields.
"""
from datetime import datetime
from typing import Optional

from sqlalchemy import String, Boolean, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database import Base
from app.core.timeutil import utcnow

ROLE_USER = "user"
ROLE_ADMIN = "admin"
ROLES = (ROLE_USER, ROLE_ADMIN)


class User(Base):
    """
    用户表 (User Table)

    注册时创建为未验证状态；verification_token 使用一次后清空；
    reset_token 一次性且限时（默认 1 小时）。

    Created unverified at registration; the verification token is cleared after
    its single use; the reset token is single-use and time-boxed (1 hour by default).
    """
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)  # 主键 ID (Primary Key ID)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)  # 用户邮箱（登录名） (User Email, Login Name)
    name: Mapped[str] = mapped_column(String(100), nullable=False)  # 用户姓名 (User Name)
    hashed_password: Mapped[str] = mapped_column(String(255), nullable=False)  # 哈希后的密码 (Hashed Password)
    role: Mapped[str] = mapped_column(String(20), nullable=False, default=ROLE_USER)  # 用户角色：user/admin (User Role)
    verified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)  # 邮箱是否已验证 (Email Verified)

    verification_token: Mapped[Optional[str]] = mapped_column(String(64), nullable=True, index=True)
    verification_token_expires_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    reset_token: Mapped[Optional[str]] = mapped_column(String(64), nullable=True, index=True)
    reset_token_expires_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow
    )  # 账户创建时间 (Account Creation Time)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )  # 账户更新时间 (Account Update Time)

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN
