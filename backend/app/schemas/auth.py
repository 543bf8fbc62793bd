"""
认证相关请求/响应模型

定义注册、邮箱验证、登录、密码重置等 API 的数据结构。
"""
from pydantic import BaseModel, EmailStr

from app.schemas.user import UserOut


class UserRegister(BaseModel):
    """用户注册请求体。角色由服务端决定，首个用户为管理员。"""
    name: str
    email: EmailStr
    password: str


class EmailRequest(BaseModel):
    """只包含邮箱的请求体（重发验证邮件、申请重置密码）。"""
    email: EmailStr


class TokenRequest(BaseModel):
    """邮箱验证请求体。"""
    token: str


class PasswordResetConfirm(BaseModel):
    """使用重置令牌设置新密码。"""
    token: str
    new_password: str


class UserLogin(BaseModel):
    """用户登录请求体。"""
    email: EmailStr
    password: str


class TokenResponse(BaseModel):
    """登录响应体，包含访问令牌和当前用户。"""
    access_token: str
    token_type: str = "bearer"
    user: UserOut


class RegisterResponse(BaseModel):
    """注册响应体。注册后需先验证邮箱才能登录，因此不返回令牌。"""
    user: UserOut
    message: str


class MessageResponse(BaseModel):
    """只包含提示信息的响应体。"""
    message: str
