"""TrackKit 领域模型 -- 公共类型导出"""

from .activation import (
    ActivationEvent,
    ActivationRecord,
    EligibilityResult,
    IneligibleReason,
)
from .builder import EventConfigBuilder
from .event_config import EventConfig

__all__ = [
    # 配置
    "EventConfig",
    "EventConfigBuilder",
    # 激活
    "ActivationEvent",
    "ActivationRecord",
    # 判定
    "EligibilityResult",
    "IneligibleReason",
]
