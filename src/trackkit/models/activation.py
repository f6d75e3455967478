"""激活相关模型 -- 历史记录快照、激活通知、资格判定结果"""

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field
from ulid import ULID


class IneligibleReason(StrEnum):
    """不可激活原因，与检查顺序一致"""

    EXPIRED = "EXPIRED"
    MAX_COUNT_REACHED = "MAX_COUNT_REACHED"
    INTERVAL_NOT_ELAPSED = "INTERVAL_NOT_ELAPSED"
    DEPENDENCY_UNMET = "DEPENDENCY_UNMET"
    PROBABILITY_REJECTED = "PROBABILITY_REJECTED"
    CUSTOM_CONDITION_REJECTED = "CUSTOM_CONDITION_REJECTED"


class ActivationRecord(BaseModel):
    """某个事件的激活历史快照（存储中为两个独立的键）"""

    event_id: str
    last_activated_at: datetime | None = Field(default=None, description="最近激活时间")
    activation_count: int = Field(default=0, ge=0, description="累计激活次数")


class ActivationEvent(BaseModel):
    """激活通知 -- 每次 mark_activated 成功后广播一次，不持久化"""

    model_config = ConfigDict(frozen=True)

    activation_id: str = Field(
        default_factory=lambda: str(ULID()),
        description="ULID 格式，时间有序",
    )
    event_id: str = Field(description="被激活的事件 id")
    activated_at: datetime = Field(description="激活时间")
    activation_count: int = Field(description="递增后的累计激活次数")


class EligibilityResult(BaseModel):
    """资格判定结果"""

    event_id: str
    eligible: bool
    reason: IneligibleReason | None = Field(
        default=None,
        description="不可激活原因，eligible=True 时为 None",
    )
    blocking_dependency: str | None = Field(
        default=None,
        description="reason 为 DEPENDENCY_UNMET 时，第一个未满足的前置事件 id",
    )
