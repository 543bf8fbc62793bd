"""
商品模型 (Product Model)

average_rating 是由反馈集合派生的缓存值，只由评分聚合器写入。
average_rating is a cached value derived from the feedback set and is only
written by the rating aggregator.
"""
from datetime import datetime
from typing import Optional

from sqlalchemy import String, Text, Float, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database import Base
from app.core.timeutil import utcnow


class Product(Base):
    """商品表 (Product Table)"""
    __tablename__ = "products"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False, index=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    average_rating: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)  # 缓存的平均评分 (Cached Average Rating)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)
