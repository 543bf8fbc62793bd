"""时间工具 (Time Helpers)"""
from datetime import datetime, timezone
from typing import Optional


def utcnow() -> datetime:
    """当前 UTC 时间（带时区） (Current timezone-aware UTC time)"""
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """
    统一为带时区的 UTC 时间 (Normalise to timezone-aware UTC)

    SQLite 读回的 DateTime 不带时区，PostgreSQL 带时区；比较前统一处理。
    SQLite returns naive datetimes while PostgreSQL returns aware ones.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
