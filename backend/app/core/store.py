"""
持久化访问层 (Persistence Access Layer)

DocumentStore 把 SQLAlchemy 异步会话包装成按集合（模型类）操作的小接口：
按 ID 查找、按条件查找、创建、按 ID 更新、按 ID 删除、批量删除。
找不到记录时返回 None / False，而不是抛异常，由调用方决定如何处理。

DocumentStore wraps an async SQLAlchemy session in a small per-collection
interface: find by id, find by filter, create, update by id, delete by id and
delete many. Missing rows yield None / False instead of raising; callers decide.
"""
from typing import Any, Optional, Sequence, Type, TypeVar

from fastapi import Depends
from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import Base, get_db

M = TypeVar("M", bound=Base)


class DocumentStore:
    """Collection-style facade over one AsyncSession."""

    def __init__(self, session: AsyncSession):
        self.session = session

    @staticmethod
    def _criteria(model: Type[M], criteria: Sequence[Any], filters: dict) -> list:
        clauses = list(criteria)
        for field, value in filters.items():
            clauses.append(getattr(model, field) == value)
        return clauses

    async def find_by_id(self, model: Type[M], id_: int) -> Optional[M]:
        return await self.session.get(model, id_)

    async def find(
        self,
        model: Type[M],
        *criteria: Any,
        order_by: Any = None,
        offset: Optional[int] = None,
        limit: Optional[int] = None,
        **filters: Any,
    ) -> list[M]:
        """
        按条件查询 (Find by filter)

        关键字参数做等值匹配，位置参数接受任意 SQLAlchemy 表达式。
        Keyword filters are equality matches; positional criteria accept any SQLAlchemy expression.
        """
        stmt = select(model).where(*self._criteria(model, criteria, filters))
        stmt = stmt.order_by(order_by if order_by is not None else model.id)
        if offset:
            stmt = stmt.offset(offset)
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def find_one(self, model: Type[M], *criteria: Any, **filters: Any) -> Optional[M]:
        stmt = select(model).where(*self._criteria(model, criteria, filters)).limit(1)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def count(self, model: Type[M], *criteria: Any, **filters: Any) -> int:
        stmt = select(func.count()).select_from(model).where(*self._criteria(model, criteria, filters))
        return (await self.session.execute(stmt)).scalar() or 0

    async def create(self, model: Type[M], **fields: Any) -> M:
        obj = model(**fields)
        self.session.add(obj)
        await self.session.flush()  # 分配主键 (Assign primary key)
        await self.session.refresh(obj)
        return obj

    async def update_by_id(self, model: Type[M], id_: int, **fields: Any) -> Optional[M]:
        """只更新传入的字段；记录不存在返回 None (Patch the given fields; None when missing)"""
        obj = await self.find_by_id(model, id_)
        if obj is None:
            return None
        for field, value in fields.items():
            setattr(obj, field, value)
        await self.session.flush()
        await self.session.refresh(obj)
        return obj

    async def delete_by_id(self, model: Type[M], id_: int) -> bool:
        obj = await self.find_by_id(model, id_)
        if obj is None:
            return False
        await self.session.delete(obj)
        await self.session.flush()
        return True

    async def delete_many(self, model: Type[M], *criteria: Any, **filters: Any) -> int:
        stmt = delete(model).where(*self._criteria(model, criteria, filters))
        result = await self.session.execute(stmt)
        return result.rowcount or 0

    async def commit(self) -> None:
        await self.session.commit()

    async def rollback(self) -> None:
        await self.session.rollback()


def get_store(db: AsyncSession = Depends(get_db)) -> DocumentStore:
    """FastAPI 依赖项：请求级 DocumentStore (FastAPI Dependency: request-scoped store)"""
    return DocumentStore(db)
