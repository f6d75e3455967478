"""EventConfig 数据模型

事件配置构造后不可变，引擎只读取、不修改。
probability 在构造时截断到 [0.0, 1.0]，越界值不会被拒绝。
"""

import math
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..clock import ensure_utc
from ..exceptions import InvalidConfigError


class EventConfig(BaseModel):
    """单个事件的资格规则与标识

    InvalidConfigError 不是 ValueError 的子类，pydantic 不会将其包装为
    ValidationError，调用方直接收到类型化的错误。
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(description="事件唯一标识，用于生成存储键")
    min_interval: float = Field(default=0.0, description="两次激活之间的最小间隔（秒）")
    expiration_date: datetime | None = Field(
        default=None,
        description="过期时间，超过后永久不可激活",
    )
    max_activation_count: int | None = Field(
        default=None,
        description="最大激活次数，达到后永久不可激活",
    )
    priority: int = Field(default=0, description="多个事件同时可激活时的排序依据，降序")
    probability: float = Field(default=1.0, description="激活概率，截断到 [0.0, 1.0]")
    metadata: dict[str, Any] | None = Field(
        default=None,
        description="透传数据，引擎不解释",
    )
    dependencies: tuple[str, ...] = Field(
        default=(),
        description="前置事件 id，每个都至少激活过一次才可激活",
    )

    @field_validator("id")
    @classmethod
    def _check_id(cls, value: str) -> str:
        if not value.strip():
            raise InvalidConfigError("EventConfig 需要非空 id")
        return value

    @field_validator("min_interval")
    @classmethod
    def _check_min_interval(cls, value: float) -> float:
        if math.isnan(value) or value < 0:
            raise InvalidConfigError(f"min_interval 不能为负数: {value}")
        return value

    @field_validator("max_activation_count")
    @classmethod
    def _check_max_activation_count(cls, value: int | None) -> int | None:
        if value is not None and value < 0:
            raise InvalidConfigError(f"max_activation_count 不能为负数: {value}")
        return value

    @field_validator("probability")
    @classmethod
    def _clamp_probability(cls, value: float) -> float:
        if math.isnan(value):
            raise InvalidConfigError("probability 不能为 NaN")
        return max(0.0, min(value, 1.0))

    @field_validator("expiration_date")
    @classmethod
    def _normalize_expiration(cls, value: datetime | None) -> datetime | None:
        return ensure_utc(value) if value is not None else None
