"""
商品相关请求/响应模型
"""
from datetime import datetime
from typing import Optional, List

from pydantic import BaseModel

from app.schemas.feedback import FeedbackOut


class ProductCreate(BaseModel):
    """创建商品请求体"""
    name: str
    description: Optional[str] = None


class ProductUpdate(BaseModel):
    """更新商品请求体，未提供的字段保持不变"""
    name: Optional[str] = None
    description: Optional[str] = None


class ProductOut(BaseModel):
    """商品响应体，average_rating 为缓存值"""
    id: int
    name: str
    description: Optional[str]
    average_rating: float
    created_at: datetime

    model_config = {"from_attributes": True}


class ProductDetail(ProductOut):
    """商品详情，附带全部反馈"""
    feedbacks: List[FeedbackOut] = []
