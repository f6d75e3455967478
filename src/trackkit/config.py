"""TrackKit 配置 -- 可通过环境变量覆盖

环境变量:
    TRACKKIT_DATA_DIR: data 基础目录（默认 data）
    TRACKKIT_DB_PATH: SQLite 数据库路径（默认 <data>/sqlite/trackkit.db）
    TRACKKIT_KEY_NAMESPACE: 存储键命名空间前缀（默认 tk）
    TRACKKIT_QUEUE_MAXSIZE: 队列订阅者的默认容量（默认 100）
"""

import os
from pathlib import Path

import structlog
from pydantic import BaseModel, Field

log = structlog.get_logger()

# 存储键命名空间，区分本引擎与共享存储中的其他数据
DEFAULT_KEY_NAMESPACE: str = "tk"

DEFAULT_QUEUE_MAXSIZE: int = 100


def _get_base_dir() -> Path:
    """获取 data 基础目录"""
    return Path(os.environ.get("TRACKKIT_DATA_DIR", "data"))


def get_db_path() -> str:
    """获取 SQLite 数据库路径"""
    return os.environ.get(
        "TRACKKIT_DB_PATH",
        str(_get_base_dir() / "sqlite" / "trackkit.db"),
    )


class TrackKitSettings(BaseModel):
    """引擎运行配置"""

    db_path: str = Field(description="SQLite 数据库路径")
    key_namespace: str = Field(
        default=DEFAULT_KEY_NAMESPACE,
        min_length=1,
        description="存储键命名空间前缀",
    )
    queue_maxsize: int = Field(
        default=DEFAULT_QUEUE_MAXSIZE,
        ge=1,
        description="队列订阅者默认容量",
    )


def load_settings() -> TrackKitSettings:
    """从环境变量加载配置

    无效的整数值记录警告并回退到默认值，不阻塞启动。
    """
    kwargs: dict = {"db_path": get_db_path()}

    if val := os.environ.get("TRACKKIT_KEY_NAMESPACE"):
        kwargs["key_namespace"] = val

    if val := os.environ.get("TRACKKIT_QUEUE_MAXSIZE"):
        try:
            kwargs["queue_maxsize"] = int(val)
        except ValueError:
            log.warning(
                "invalid_queue_maxsize_config",
                env_var="TRACKKIT_QUEUE_MAXSIZE",
                value=val,
                fallback=DEFAULT_QUEUE_MAXSIZE,
            )

    return TrackKitSettings(**kwargs)
