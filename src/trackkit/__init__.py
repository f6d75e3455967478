"""TrackKit -- 事件资格判定引擎

给定事件配置与激活历史，判断事件当前能否触发，并记录激活。
"""

from .engine import EligibilityEngine
from .exceptions import (
    CustomConditionError,
    InvalidConfigError,
    SerializationFailedError,
    TrackKitError,
    ValueNotFoundError,
)
from .hub import ActivationHub, QueueSubscription, Subscription
from .models import (
    ActivationEvent,
    ActivationRecord,
    EligibilityResult,
    EventConfig,
    EventConfigBuilder,
    IneligibleReason,
)
from .store import ActivationStore, InMemoryActivationStore, SqliteActivationStore

__all__ = [
    # 引擎
    "EligibilityEngine",
    # 模型
    "EventConfig",
    "EventConfigBuilder",
    "ActivationEvent",
    "ActivationRecord",
    "EligibilityResult",
    "IneligibleReason",
    # 通知
    "ActivationHub",
    "Subscription",
    "QueueSubscription",
    # 存储
    "ActivationStore",
    "InMemoryActivationStore",
    "SqliteActivationStore",
    # 异常
    "TrackKitError",
    "ValueNotFoundError",
    "SerializationFailedError",
    "InvalidConfigError",
    "CustomConditionError",
]
