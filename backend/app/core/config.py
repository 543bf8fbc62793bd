"""
应用配置模块 (Application Configuration Module)

使用 Pydantic Settings 管理反馈服务的所有配置项，支持从 .env 文件和环境变量读取。
提供数据库连接、JWT 认证、一次性令牌、SMTP 邮件和定时清理任务的配置管理。

Uses Pydantic Settings to manage all configuration items for the feedback service,
supporting reading from .env files and environment variables. Covers database
connections, JWT authentication, one-time tokens, SMTP mail and the scheduled cleanup job.
"""
import logging
import secrets
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """
    应用全局配置类 (Application Global Configuration Class)

    字段名自动映射同名环境变量（不区分大小写），支持 .env 文件加载。

    Field names automatically map to same-named environment variables (case insensitive),
    supporting .env file loading.
    """

    # 数据库配置 (Database Configuration)
    postgres_host: str = "localhost"  # PostgreSQL 主机地址 (PostgreSQL Host)
    postgres_port: int = 5432  # PostgreSQL 端口号 (PostgreSQL Port)
    postgres_db: str = "feedback"  # 数据库名称 (Database Name)
    postgres_user: str = "feedback"  # 数据库用户名 (Database Username)
    postgres_password: str = "feedback_dev_password"  # 数据库密码 (Database Password)
    database_url_override: Optional[str] = Field(default=None, validation_alias="DATABASE_URL")  # 完整连接串，优先于上面的字段 (Full URL, wins over the fields above)

    # JWT 认证配置 (JWT Authentication Configuration)
    # ⚠️ 生产环境必须通过环境变量 JWT_SECRET_KEY 设置！未设置时自动生成随机密钥（每次重启会变化）
    # ⚠️ MUST set JWT_SECRET_KEY env var in production! Auto-generated random key changes on every restart.
    jwt_secret_key: str = ""  # JWT 签名密钥 (JWT Secret Key)
    jwt_algorithm: str = "HS256"  # JWT 算法 (JWT Algorithm)
    jwt_access_token_expire_minutes: int = 60 * 24  # 访问令牌过期时间，默认 1 天 (Access Token Expiry, 1 day)

    # 一次性令牌配置 (One-time Token Configuration)
    verification_token_expire_hours: int = 24  # 邮箱验证令牌有效期 (Email Verification Token TTL)
    reset_token_expire_minutes: int = 60  # 密码重置令牌有效期 (Password Reset Token TTL)

    # SMTP 邮件配置 (SMTP Mail Configuration)
    smtp_host: str = "smtp.gmail.com"  # SMTP 主机 (SMTP Host)
    smtp_port: int = 465  # SMTP 端口 (SMTP Port)
    smtp_user: str = ""  # SMTP 用户名 (SMTP Username)
    smtp_password: str = ""  # SMTP 密码 (SMTP Password)
    smtp_ssl: bool = True  # True 使用隐式 TLS，False 使用 STARTTLS (Implicit TLS vs STARTTLS)
    mail_from: str = "NeedYourFeedback <no-reply@example.com>"  # 发件人 (Sender)

    # 定时清理配置 (Scheduled Cleanup Configuration)
    cleanup_enabled: bool = True  # 是否启用月度清理 (Enable Monthly Cleanup)
    cleanup_cron: str = "0 0 1 * *"  # 每月 1 日 00:00 (1st of every month at midnight)

    # 运行环境 (Runtime)
    log_level: str = "INFO"  # 日志级别 (Log Level)
    environment: str = "development"  # 运行环境：development/production (Runtime Environment)
    frontend_url: str = "http://localhost:3000"  # 前端 URL，用于 CORS (Frontend URL for CORS)

    @property
    def database_url(self) -> str:
        """
        构造异步数据库连接 URL (Build Async Database Connection URL)

        设置了 DATABASE_URL 环境变量时直接使用，否则拼接 asyncpg 连接串。
        Uses the DATABASE_URL environment variable when set, otherwise builds an asyncpg connection string.
        """
        if self.database_url_override:
            return self.database_url_override
        return (
            f"postgresql+asyncpg://{self.postgres_user}:{self.postgres_password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}  # Pydantic 配置：自动加载 .env 文件 (Pydantic Config: Auto-load .env file)


# 全局配置实例 (Global Configuration Instance)
settings = Settings()

# JWT 密钥安全检查：未设置时生成随机密钥并警告
if not settings.jwt_secret_key or settings.jwt_secret_key == "change-me-in-production":
    settings.jwt_secret_key = secrets.token_urlsafe(64)
    logger.warning(
        "JWT_SECRET_KEY 未设置，已自动生成随机密钥。此密钥在每次重启后会变化，所有已签发的 token 将失效。"
        " | JWT_SECRET_KEY not set, using auto-generated random key. "
        "All issued tokens will be invalidated on restart."
    )
