"""存储值编解码 -- JSON 文本，基于 pydantic

datetime 编码为 ISO 8601 字符串，int 编码为 JSON 数字。
"""

from functools import lru_cache
from typing import Any, TypeVar

from pydantic import TypeAdapter, ValidationError
from pydantic_core import PydanticSerializationError, to_json

from ..exceptions import SerializationFailedError

T = TypeVar("T")


@lru_cache(maxsize=32)
def _adapter(value_type: type) -> TypeAdapter:
    return TypeAdapter(value_type)


def encode_value(key: str, value: Any) -> str:
    """将值编码为 JSON 文本"""
    try:
        return to_json(value).decode("utf-8")
    except PydanticSerializationError as e:
        raise SerializationFailedError(key, str(e)) from e


def decode_value(key: str, raw: str | bytes, value_type: type[T]) -> T:
    """将 JSON 文本解码为 value_type（严格模式，不做字符串到数字的隐式转换）"""
    try:
        return _adapter(value_type).validate_json(raw, strict=True)
    except ValidationError as e:
        raise SerializationFailedError(key, str(e)) from e
