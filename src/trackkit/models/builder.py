"""EventConfigBuilder -- 链式构建 EventConfig"""

from datetime import datetime
from typing import Any, Self

from ..exceptions import InvalidConfigError
from .event_config import EventConfig


class EventConfigBuilder:
    """EventConfig 的链式构建器

    每个 set_* 方法返回构建器本身，build() 在缺少 id 时抛出
    InvalidConfigError。
    """

    def __init__(self) -> None:
        self._id: str | None = None
        self._min_interval: float = 0.0
        self._expiration_date: datetime | None = None
        self._max_activation_count: int | None = None
        self._priority: int = 0
        self._probability: float = 1.0
        self._metadata: dict[str, Any] | None = None
        self._dependencies: list[str] = []

    def set_id(self, event_id: str) -> Self:
        self._id = event_id
        return self

    def set_min_interval(self, seconds: float) -> Self:
        self._min_interval = seconds
        return self

    def set_expiration_date(self, date: datetime | None) -> Self:
        self._expiration_date = date
        return self

    def set_max_activation_count(self, count: int | None) -> Self:
        self._max_activation_count = count
        return self

    def set_priority(self, priority: int) -> Self:
        self._priority = priority
        return self

    def set_probability(self, probability: float) -> Self:
        # 截断在 EventConfig 构造时完成
        self._probability = probability
        return self

    def set_metadata(self, metadata: dict[str, Any] | None) -> Self:
        self._metadata = metadata
        return self

    def set_dependencies(self, dependencies: list[str]) -> Self:
        self._dependencies = list(dependencies)
        return self

    def build(self) -> EventConfig:
        """构建 EventConfig

        Raises:
            InvalidConfigError: 未设置 id 或参数非法
        """
        if self._id is None:
            raise InvalidConfigError("EventConfig 需要 id，请先调用 set_id()")
        return EventConfig(
            id=self._id,
            min_interval=self._min_interval,
            expiration_date=self._expiration_date,
            max_activation_count=self._max_activation_count,
            priority=self._priority,
            probability=self._probability,
            metadata=self._metadata,
            dependencies=tuple(self._dependencies),
        )
