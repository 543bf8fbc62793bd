"""
用户认证路由模块 (User Authentication Router)

功能说明：提供注册、邮箱验证、登录、密码重置等认证相关接口
核心职责：
  - 用户注册（首个用户自动设为管理员，注册后需验证邮箱）
  - 发送 / 重发验证邮件，使用一次性令牌验证邮箱
  - 登录验证与访问令牌签发（未验证邮箱的用户不能登录）
  - 申请密码重置与使用重置令牌设置新密码
  - 获取当前用户信息
依赖关系：依赖账户服务、副作用分发器（邮件、审计）
API端点：POST /register, /send-verification-email, /verify-email, /login,
        /request-password-reset, /reset-password, GET /me
"""
from typing import Optional

from fastapi import APIRouter, Depends, status

from app.core.deps import get_caller, get_effects
from app.core.guard import authorize
from app.core.store import DocumentStore, get_store
from app.models.user import User
from app.schemas.auth import (
    EmailRequest,
    MessageResponse,
    PasswordResetConfirm,
    RegisterResponse,
    TokenRequest,
    TokenResponse,
    UserLogin,
    UserRegister,
)
from app.schemas.user import UserOut
from app.services import accounts
from app.services.effects import SideEffects

router = APIRouter(prefix="/api/v1/auth", tags=["auth"])


@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
async def register(
    data: UserRegister,
    store: DocumentStore = Depends(get_store),
    effects: SideEffects = Depends(get_effects),
):
    """
    用户注册接口 (User Registration)

    系统中第一个注册的用户自动成为管理员。注册后发送验证邮件，验证前不能登录。

    Raises:
        409: 邮箱已被注册
    """
    user = await accounts.register(store, effects, data.name, data.email, data.password)
    return RegisterResponse(user=UserOut.model_validate(user), message=accounts.VERIFICATION_SENT)


@router.post("/send-verification-email", response_model=MessageResponse)
async def send_verification_email(
    data: EmailRequest,
    store: DocumentStore = Depends(get_store),
    effects: SideEffects = Depends(get_effects),
):
    """重发验证邮件 (Resend the verification mail)"""
    return MessageResponse(message=await accounts.send_verification_email(store, effects, data.email))


@router.post("/verify-email", response_model=MessageResponse)
async def verify_email(
    data: TokenRequest,
    store: DocumentStore = Depends(get_store),
    effects: SideEffects = Depends(get_effects),
):
    """
    邮箱验证接口 (Email Verification)

    Raises:
        400: 令牌无效或已过期
    """
    return MessageResponse(message=await accounts.verify_email(store, effects, data.token))


@router.post("/login", response_model=TokenResponse)
async def login(data: UserLogin, store: DocumentStore = Depends(get_store)):
    """
    用户登录接口 (User Login)

    Raises:
        401: 凭证无效（邮箱不存在或密码错误）
        403: 邮箱未验证
    """
    result = await accounts.login(store, data.email, data.password)
    return TokenResponse(access_token=result.access_token, user=UserOut.model_validate(result.user))


@router.post("/request-password-reset", response_model=MessageResponse)
async def request_password_reset(
    data: EmailRequest,
    store: DocumentStore = Depends(get_store),
    effects: SideEffects = Depends(get_effects),
):
    """申请密码重置，令牌 1 小时内有效 (Request a reset token valid for 1 hour)"""
    return MessageResponse(message=await accounts.request_password_reset(store, effects, data.email))


@router.post("/reset-password", response_model=MessageResponse)
async def reset_password(
    data: PasswordResetConfirm,
    store: DocumentStore = Depends(get_store),
    effects: SideEffects = Depends(get_effects),
):
    """
    使用重置令牌设置新密码 (Reset password with the reset token)

    Raises:
        400: 令牌无效、已过期或已使用
    """
    return MessageResponse(message=await accounts.reset_password(store, effects, data.token, data.new_password))


@router.get("/me", response_model=UserOut)
async def me(caller: Optional[User] = Depends(get_caller)):
    """获取当前用户信息 (Get Current User)"""
    return authorize("me", caller)
