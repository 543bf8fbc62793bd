"""
反馈模型 (Feedback Model)

每条反馈通过外键引用其所属用户和目标商品，不做嵌套包含；关系通过查找解析。
Each feedback row references its owner and its product by foreign key; relations
are resolved by lookup, never by containment.
"""
from datetime import datetime
from typing import Optional

from sqlalchemy import Integer, Text, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database import Base
from app.core.timeutil import utcnow

MIN_RATING = 1
MAX_RATING = 5


class Feedback(Base):
    """反馈表 (Feedback Table)"""
    __tablename__ = "feedbacks"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False, index=True)  # 反馈所有者 (Owner)
    product_id: Mapped[int] = mapped_column(Integer, ForeignKey("products.id"), nullable=False, index=True)  # 被评价商品 (Subject)
    rating: Mapped[int] = mapped_column(Integer, nullable=False)  # 评分 1-5 (Rating 1-5)
    comment: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, index=True)
