"""
用户管理相关的请求/响应数据模型。

定义用户查询、更新等操作的 Schema；响应模型不包含密码哈希和一次性令牌。
"""
from datetime import datetime
from typing import Optional, List

from pydantic import BaseModel, EmailStr


class UserUpdate(BaseModel):
    """更新用户请求体，所有字段可选。"""
    name: Optional[str] = None
    email: Optional[EmailStr] = None
    role: Optional[str] = None  # user / admin


class UserOut(BaseModel):
    """用户信息响应模型。"""
    id: int
    email: str
    name: str
    role: str
    verified: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class UserListResponse(BaseModel):
    """用户列表分页响应。"""
    items: List[UserOut]
    total: int
    page: int
    page_size: int
