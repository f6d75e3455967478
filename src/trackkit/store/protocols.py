"""Store Protocol 接口定义

引擎只依赖此协议，具体存储技术由嵌入方注入。
使用 Python Protocol 实现结构化子类型（duck typing）。
"""

from collections.abc import Mapping
from typing import Any, Protocol, TypeVar

T = TypeVar("T")


class ActivationStore(Protocol):
    """键值存储接口

    缺失的键在 get 时返回 None，不是错误。
    """

    async def get(self, key: str, value_type: type[T]) -> T | None:
        """读取并按 value_type 解码

        Raises:
            SerializationFailedError: 已存储的值无法解码为 value_type
        """
        ...

    async def set(self, key: str, value: Any) -> None:
        """写入单个值

        Raises:
            SerializationFailedError: 值无法编码
        """
        ...

    async def set_many(self, items: Mapping[str, Any]) -> None:
        """原子写入多个值，全部成功或全部不生效"""
        ...

    async def remove(self, key: str) -> None:
        """删除键

        Raises:
            ValueNotFoundError: 键不存在
        """
        ...
