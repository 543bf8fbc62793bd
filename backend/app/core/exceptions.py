"""
全局异常处理模块 (Global Exception Handling Module)

定义业务异常类和 FastAPI 全局异常处理器，提供统一的错误响应格式。
守卫、校验、令牌和凭证失败都以业务异常的形式抛出，在这里转换为结构化 JSON 响应。

Defines business exception classes and FastAPI global exception handlers,
providing a unified error response format. Guard, validation, token and credential
failures are raised as business errors and converted to structured JSON responses here.
"""
import logging
import traceback
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import HTTPException
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


# ============================================================
# 业务异常类 (Business Exception Classes)
# ============================================================

class BusinessError(Exception):
    """业务异常基类 (Base Business Exception)"""
    status_code: int = 400
    error: str = "business_error"

    def __init__(self, message: str, detail: Optional[str] = None):
        self.message = message
        self.detail = detail
        super().__init__(message)


class NotFoundError(BusinessError):
    """资源不存在 (Resource Not Found)"""
    status_code = 404
    error = "not_found"


class UnauthorizedError(BusinessError):
    """调用者不满足操作的授权谓词 (Caller does not satisfy the operation's guard predicate)"""
    status_code = 403
    error = "unauthorized"


class AuthenticationRequiredError(UnauthorizedError):
    """缺少有效身份 (No valid caller identity)"""
    status_code = 401


class ValidationError(BusinessError):
    """数据校验失败 (Validation Error)"""
    status_code = 422
    error = "validation_error"


class ConflictError(ValidationError):
    """资源冲突，例如邮箱重复 (Resource Conflict, e.g. duplicate email)"""
    status_code = 409
    error = "conflict"


class InvalidTokenError(BusinessError):
    """验证 / 重置令牌无效或已过期 (Verification or reset token unknown or expired)"""
    status_code = 400
    error = "invalid_token"


class InvalidCredentialsError(BusinessError):
    """登录凭证不匹配 (Login credentials mismatch)"""
    status_code = 401
    error = "invalid_credentials"


class EmailNotVerifiedError(BusinessError):
    """邮箱未验证，不能登录 (Email not verified, login refused)"""
    status_code = 403
    error = "email_not_verified"


# ============================================================
# 全局异常处理器注册 (Global Exception Handler Registration)
# ============================================================

def register_exception_handlers(app: FastAPI) -> None:
    """
    注册全局异常处理器到 FastAPI 应用 (Register global exception handlers to FastAPI app)

    处理优先级：
    1. BusinessError 子类 → 对应 HTTP 状态码 + 结构化响应
    2. HTTPException → 保持原样，包装为统一格式
    3. Exception → 500 + 完整 traceback 日志
    """

    @app.exception_handler(BusinessError)
    async def business_error_handler(request: Request, exc: BusinessError) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "error": exc.error,
                "message": exc.message,
                "detail": exc.detail,
                "status_code": exc.status_code,
            },
        )

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "error": "http_error",
                "message": str(exc.detail),
                "detail": None,
                "status_code": exc.status_code,
            },
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error(
            "Unhandled exception on %s %s: %s\n%s",
            request.method,
            request.url.path,
            str(exc),
            traceback.format_exc(),
        )
        return JSONResponse(
            status_code=500,
            content={
                "error": "internal_server_error",
                "message": "Internal server error, please try again later",
                "detail": None,
                "status_code": 500,
            },
        )
