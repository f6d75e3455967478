"""时间工具 -- 统一使用带时区的 UTC 时间"""

from datetime import UTC, datetime


def utc_now() -> datetime:
    """当前 UTC 时间"""
    return datetime.now(UTC)


def ensure_utc(value: datetime) -> datetime:
    """无时区信息的 datetime 按 UTC 解释，带时区的保持原样"""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value
