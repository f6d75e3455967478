"""TrackKit Store -- 存储协议与参考实现

引擎不提供隐式默认存储，嵌入方显式选择并注入。
"""

from pathlib import Path

import aiosqlite
import structlog

from .codec import decode_value, encode_value
from .memory_store import InMemoryActivationStore
from .protocols import ActivationStore
from .sqlite_init import init_db, verify_wal_mode
from .sqlite_store import SqliteActivationStore

log = structlog.get_logger()


async def create_sqlite_store(db_path: str | Path) -> SqliteActivationStore:
    """打开数据库并返回已初始化的 SqliteActivationStore

    Args:
        db_path: SQLite 数据库文件路径，父目录不存在时自动创建

    Returns:
        SqliteActivationStore 实例，调用方负责 close()
    """
    Path(db_path).parent.mkdir(parents=True, exist_ok=True)

    conn = await aiosqlite.connect(str(db_path))
    try:
        await init_db(conn)
        if not await verify_wal_mode(conn):
            # 部分文件系统不支持 WAL，退回默认日志模式仍可用，但并发读写会互相阻塞
            log.warning("sqlite_wal_unavailable", db_path=str(db_path))
    except BaseException:
        await conn.close()
        raise
    return SqliteActivationStore(conn)


__all__ = [
    "ActivationStore",
    "InMemoryActivationStore",
    "SqliteActivationStore",
    "create_sqlite_store",
    "decode_value",
    "encode_value",
    "init_db",
    "verify_wal_mode",
]
