"""
反馈相关请求/响应模型

评分范围在服务层统一校验（1-5）。评分字段使用严格模式，true / 2.5 之类的值不会被转换成整数。
"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, computed_field


class FeedbackCreate(BaseModel):
    """提交反馈请求体"""
    product_id: int
    rating: int = Field(..., strict=True, description="评分 1-5")
    comment: Optional[str] = None


class FeedbackUpdate(BaseModel):
    """修改反馈请求体"""
    rating: Optional[int] = Field(None, strict=True, description="评分 1-5")
    comment: Optional[str] = None


class FeedbackOut(BaseModel):
    """反馈响应体"""
    id: int
    user_id: int
    product_id: int
    rating: int
    comment: Optional[str]
    created_at: datetime

    model_config = {"from_attributes": True}

    @computed_field
    @property
    def date(self) -> str:
        """日-月-年 格式的日期 (Date as DD-MM-YYYY)"""
        return self.created_at.strftime("%d-%m-%Y")
