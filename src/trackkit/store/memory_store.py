"""InMemoryActivationStore -- 进程内键值存储

值以编码后的 JSON 文本保存，与持久化实现保持相同的序列化行为。
适用于测试与无需持久化的嵌入场景。
"""

from collections.abc import Mapping
from typing import Any, TypeVar

from ..exceptions import ValueNotFoundError
from .codec import decode_value, encode_value

T = TypeVar("T")


class InMemoryActivationStore:
    """ActivationStore 的内存实现"""

    def __init__(self) -> None:
        self._data: dict[str, str] = {}

    async def get(self, key: str, value_type: type[T]) -> T | None:
        raw = self._data.get(key)
        if raw is None:
            return None
        return decode_value(key, raw, value_type)

    async def set(self, key: str, value: Any) -> None:
        self._data[key] = encode_value(key, value)

    async def set_many(self, items: Mapping[str, Any]) -> None:
        # 先全部编码，任一失败则不写入
        encoded = {key: encode_value(key, value) for key, value in items.items()}
        self._data.update(encoded)

    async def remove(self, key: str) -> None:
        if key not in self._data:
            raise ValueNotFoundError(key)
        del self._data[key]

    def keys(self) -> list[str]:
        """当前所有键（按写入顺序）"""
        return list(self._data)
