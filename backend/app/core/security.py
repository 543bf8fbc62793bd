"""
安全工具模块 (Security Tools Module)

提供密码哈希、JWT 令牌生成与解析、一次性令牌生成等凭证功能。
使用 bcrypt 算法进行密码加密，JWT 进行用户认证和会话管理。

Provides credential functions: password hashing, JWT token generation/parsing and
one-time token generation. Uses bcrypt for password hashing and JWT for sessions.
"""
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt
from passlib.context import CryptContext

from app.core.config import settings

# 密码哈希上下文，使用 bcrypt 算法 (Password Hash Context using bcrypt algorithm)
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    """
    对明文密码进行哈希加密 (Hash plain text password)

    生成的哈希值包含盐值，每次哈希同一密码都会产生不同的结果。
    The resulting hash embeds its salt, so hashing the same password twice differs.
    """
    return pwd_context.hash(password)


def verify_password(plain: str, hashed: str) -> bool:
    """验证明文密码是否与哈希值匹配 (Verify if plain text password matches hash)"""
    return pwd_context.verify(plain, hashed)


def create_access_token(subject: str, role: str, expires_minutes: Optional[int] = None) -> str:
    """
    生成访问令牌 (Generate access token)

    Args:
        subject: 用户 ID (User ID)
        role: 签发时的用户角色，仅供客户端展示，服务端始终以数据库角色为准
              (Role at issue time, informational; the server always re-reads the stored role)
        expires_minutes: 覆盖默认有效期 (Override default expiry)

    Returns:
        str: JWT 访问令牌字符串 (JWT access token string)
    """
    minutes = settings.jwt_access_token_expire_minutes if expires_minutes is None else expires_minutes
    expire = datetime.now(timezone.utc) + timedelta(minutes=minutes)
    return jwt.encode(
        {"sub": subject, "role": role, "exp": expire, "type": "access"},
        settings.jwt_secret_key,
        algorithm=settings.jwt_algorithm
    )


def decode_token(token: str) -> dict | None:
    """
    解析 JWT 令牌，失败返回 None (Decode JWT token, return None on failure)

    令牌格式错误、签名无效或已过期时返回 None。
    Returns None if the token is malformed, badly signed or expired.
    """
    try:
        return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None


def generate_one_time_token() -> str:
    """生成邮箱验证 / 密码重置用的一次性令牌 (Generate a one-time verification/reset token)"""
    return secrets.token_hex(32)
