"""
反馈服务应用入口模块 (Feedback Service Application Entry Module)

负责 FastAPI 应用的完整生命周期管理：数据库表创建、邮件客户端和后台调度器的创建与关闭、
中间件配置和路由注册。协作组件（数据库引擎、邮件客户端、调度器）都由这里显式创建并注入，
业务组件不持有全局连接。

Main application entry point, responsible for the FastAPI application lifecycle:
table creation, construction and shutdown of the mailer and the background
scheduler, middleware configuration and route registration. Collaborators (engine,
mailer, scheduler) are created here explicitly and injected; business components
hold no global connections.
"""
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text

from app.core.config import settings as app_settings
from app.core.database import Base, async_session, engine
from app.core.exceptions import register_exception_handlers
from app.core.scheduler import create_scheduler, start_scheduler, stop_scheduler
# 导入所有模型以确保 SQLAlchemy 表注册 (Import all models to ensure SQLAlchemy table registration)
from app.models import AuditLog, Feedback, Product, User  # noqa: F401
from app.routers import audit_logs, auth, feedbacks, products, users
from app.services.notification import Mailer
from app.tasks.cleanup_sweep import sweep_low_rated_products

logging.basicConfig(
    level=app_settings.log_level.upper(),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    应用生命周期管理器 (Application Lifecycle Manager)

    启动：创建表结构、邮件客户端和月度清理调度器。
    关闭：停止调度器并释放连接池。
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    mailer = Mailer.from_settings(app_settings)
    app.state.mailer = mailer

    async def cleanup_job():
        await sweep_low_rated_products(async_session)

    scheduler = None
    if app_settings.cleanup_enabled:
        scheduler = create_scheduler(cleanup_job, app_settings.cleanup_cron)
        start_scheduler(scheduler)
    app.state.scheduler = scheduler

    yield

    stop_scheduler(scheduler)
    await engine.dispose()


app = FastAPI(
    title="Feedback Service",
    description="Users, products and feedback with cached average ratings",
    version="0.1.0",
    lifespan=lifespan,
)

# 注册全局异常处理器 (Register global exception handlers)
register_exception_handlers(app)

# 生产环境下的 CORS 配置更加严格 (Stricter CORS configuration in production)
allowed_origins = [app_settings.frontend_url] if app_settings.is_production else ["*"]
app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)

# 注册所有 API 路由模块 (Register all API router modules)
app.include_router(auth.router)  # 用户认证 (Authentication)
app.include_router(users.router)  # 用户管理 (User management)
app.include_router(products.router)  # 商品 (Products)
app.include_router(feedbacks.router)  # 反馈 (Feedback)
app.include_router(audit_logs.router)  # 审计日志 (Audit logs)


@app.get("/health")
@app.get("/api/v1/health")
async def health():
    """
    健康检查接口 (Health Check Endpoint)

    Returns:
        dict: 包含各组件状态和时间戳的健康检查结果
    """
    checks = {"api": "ok"}

    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        checks["database"] = "ok"
    except Exception:
        logger.warning("Health check: database unreachable", exc_info=True)
        checks["database"] = "error"

    status = "ok" if all(v == "ok" for v in checks.values()) else "degraded"
    return {
        "status": status,
        "checks": checks,
        "timestamp": datetime.now(timezone.utc).isoformat()
    }
