"""SqliteActivationStore -- 基于 aiosqlite 的持久化键值存储

每次写入自行提交事务；set_many 在同一事务内写入全部键，失败时回滚。
"""

from collections.abc import Mapping
from typing import Any, TypeVar

import aiosqlite
import structlog

from ..clock import utc_now
from ..exceptions import ValueNotFoundError
from .codec import decode_value, encode_value

T = TypeVar("T")

log = structlog.get_logger()

_UPSERT_SQL = """
INSERT INTO activation_kv (key, value, updated_at)
VALUES (?, ?, ?)
ON CONFLICT(key) DO UPDATE SET value = excluded.value,
                               updated_at = excluded.updated_at
"""


class SqliteActivationStore:
    """ActivationStore 的 SQLite 实现"""

    def __init__(self, conn: aiosqlite.Connection) -> None:
        self._conn = conn

    @property
    def conn(self) -> aiosqlite.Connection:
        return self._conn

    async def get(self, key: str, value_type: type[T]) -> T | None:
        cursor = await self._conn.execute(
            "SELECT value FROM activation_kv WHERE key = ?",
            (key,),
        )
        row = await cursor.fetchone()
        if row is None:
            return None
        return decode_value(key, row[0], value_type)

    async def set(self, key: str, value: Any) -> None:
        await self.set_many({key: value})

    async def set_many(self, items: Mapping[str, Any]) -> None:
        """在同一事务内写入全部键

        Raises:
            SerializationFailedError: 任一值无法编码（此时不写入任何键）
        """
        updated_at = utc_now().isoformat()
        rows = [(key, encode_value(key, value), updated_at) for key, value in items.items()]
        try:
            await self._conn.executemany(_UPSERT_SQL, rows)
            await self._conn.commit()
        except Exception:
            await self._conn.rollback()
            log.error("activation_kv_write_failed", keys=list(items))
            raise

    async def remove(self, key: str) -> None:
        try:
            cursor = await self._conn.execute(
                "DELETE FROM activation_kv WHERE key = ?",
                (key,),
            )
            deleted = cursor.rowcount
            await self._conn.commit()
        except Exception:
            await self._conn.rollback()
            raise
        if deleted == 0:
            raise ValueNotFoundError(key)

    async def close(self) -> None:
        await self._conn.close()
