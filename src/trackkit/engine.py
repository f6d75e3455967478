"""EligibilityEngine -- 事件资格判定与激活记录

判定顺序（首个失败即返回，先做不读存储的检查）：
1. 过期时间
2. 激活次数上限
3. 最小间隔
4. 前置依赖
5. 概率采样
6. 自定义条件

激活历史保存在注入的 ActivationStore 中，每个事件两个键：
"<namespace>.<event_id>.lastActivatedAt" 与 "<namespace>.<event_id>.activationCount"。
引擎是这两个键含义的唯一解释者。
"""

import asyncio
import inspect
import random
from collections.abc import AsyncIterator, Awaitable, Callable, Iterable, Mapping
from contextlib import asynccontextmanager
from datetime import datetime

import structlog

from .clock import ensure_utc, utc_now
from .config import DEFAULT_KEY_NAMESPACE
from .exceptions import CustomConditionError, InvalidConfigError, ValueNotFoundError
from .hub import ActivationHub
from .models.activation import (
    ActivationEvent,
    ActivationRecord,
    EligibilityResult,
    IneligibleReason,
)
from .models.event_config import EventConfig
from .store.protocols import ActivationStore

log = structlog.get_logger()

LAST_ACTIVATED_FIELD = "lastActivatedAt"
ACTIVATION_COUNT_FIELD = "activationCount"

CustomCondition = Callable[[], bool | Awaitable[bool]]


class EligibilityEngine:
    """事件资格判定引擎

    Args:
        store: 激活历史存储（必须显式注入）
        hub: 激活通知广播器，默认新建一个
        namespace: 存储键命名空间前缀
        rng: 概率采样的随机源，random() 返回 [0, 1) 的浮点数
        clock: 返回当前时间的函数
    """

    def __init__(
        self,
        store: ActivationStore,
        hub: ActivationHub | None = None,
        *,
        namespace: str = DEFAULT_KEY_NAMESPACE,
        rng: random.Random | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._store = store
        self.hub = hub if hub is not None else ActivationHub()
        self._namespace = namespace
        self._rng = rng if rng is not None else random.Random()
        self._clock = clock
        self._locks: dict[str, asyncio.Lock] = {}
        # 每个锁的持有者与等待者数量，归零时移除
        self._lock_users: dict[str, int] = {}

    # ------------------------------------------------------------------
    # 资格判定
    # ------------------------------------------------------------------

    async def can_activate(
        self,
        config: EventConfig,
        now: datetime | None = None,
        custom_condition: CustomCondition | None = None,
    ) -> bool:
        """判断事件当前是否可激活"""
        result = await self.evaluate(config, now, custom_condition)
        return result.eligible

    async def evaluate(
        self,
        config: EventConfig,
        now: datetime | None = None,
        custom_condition: CustomCondition | None = None,
    ) -> EligibilityResult:
        """判断事件当前是否可激活，并给出不可激活的原因

        Args:
            config: 事件配置
            now: 判定时间，默认取引擎时钟
            custom_condition: 所有内置检查通过后才执行的自定义条件，
                可返回 bool 或 awaitable

        Raises:
            CustomConditionError: 自定义条件抛出异常
            SerializationFailedError: 存储值无法解码
        """
        now = ensure_utc(now if now is not None else self._clock())
        event_id = config.id

        if config.expiration_date is not None and now > config.expiration_date:
            return self._reject(event_id, IneligibleReason.EXPIRED)

        activation_count = await self.get_activation_count(event_id)
        if (
            config.max_activation_count is not None
            and activation_count >= config.max_activation_count
        ):
            return self._reject(event_id, IneligibleReason.MAX_COUNT_REACHED)

        last_activated_at = await self.get_last_activated_at(event_id)
        if last_activated_at is not None:
            elapsed = (now - last_activated_at).total_seconds()
            if elapsed < config.min_interval:
                return self._reject(event_id, IneligibleReason.INTERVAL_NOT_ELAPSED)

        for dependency_id in config.dependencies:
            if await self.get_activation_count(dependency_id) == 0:
                return self._reject(
                    event_id,
                    IneligibleReason.DEPENDENCY_UNMET,
                    blocking_dependency=dependency_id,
                )

        if not self._sample(config.probability):
            return self._reject(event_id, IneligibleReason.PROBABILITY_REJECTED)

        if custom_condition is not None:
            if not await self._run_condition(event_id, custom_condition):
                return self._reject(event_id, IneligibleReason.CUSTOM_CONDITION_REJECTED)

        return EligibilityResult(event_id=event_id, eligible=True)

    async def get_eligible(
        self,
        configs: Iterable[EventConfig],
        custom_conditions: Mapping[str, CustomCondition] | None = None,
    ) -> list[EventConfig]:
        """返回当前可激活的事件，按 priority 降序

        priority 相同的事件保持输入顺序。任一事件判定出错时整批中止，
        错误原样抛出。
        """
        custom_conditions = custom_conditions or {}
        eligible: list[EventConfig] = []
        for config in configs:
            if await self.can_activate(
                config,
                custom_condition=custom_conditions.get(config.id),
            ):
                eligible.append(config)
        # sorted 是稳定排序，reverse=True 不改变相等元素的相对顺序
        return sorted(eligible, key=lambda c: c.priority, reverse=True)

    # ------------------------------------------------------------------
    # 激活记录
    # ------------------------------------------------------------------

    async def mark_activated(
        self,
        event_id: str,
        at: datetime | None = None,
    ) -> ActivationEvent:
        """记录一次激活并广播通知

        同一 event_id 的调用被串行化，计数不会丢失更新。
        lastActivatedAt 与 activationCount 通过一次 set_many 写入。

        Returns:
            已广播的 ActivationEvent
        """
        self._check_event_id(event_id)
        activated_at = ensure_utc(at if at is not None else self._clock())

        async with self._event_lock(event_id):
            activation_count = await self.get_activation_count(event_id) + 1
            await self._store.set_many(
                {
                    self.key_for(event_id, LAST_ACTIVATED_FIELD): activated_at,
                    self.key_for(event_id, ACTIVATION_COUNT_FIELD): activation_count,
                }
            )
            event = ActivationEvent(
                event_id=event_id,
                activated_at=activated_at,
                activation_count=activation_count,
            )
            # 在锁内广播，保证同一事件的通知顺序与调用顺序一致
            self.hub.publish(event)

        log.info(
            "event_activated",
            event_id=event_id,
            activation_count=activation_count,
            activation_id=event.activation_id,
        )
        return event

    async def reset(self, event_id: str) -> None:
        """清除激活历史，恢复为"从未激活"状态

        键不存在时视为无操作，对从未激活的事件调用不会报错。
        """
        self._check_event_id(event_id)
        async with self._event_lock(event_id):
            for field in (LAST_ACTIVATED_FIELD, ACTIVATION_COUNT_FIELD):
                key = self.key_for(event_id, field)
                try:
                    await self._store.remove(key)
                except ValueNotFoundError:
                    log.debug("reset_key_absent", event_id=event_id, key=key)
        log.info("event_reset", event_id=event_id)

    # ------------------------------------------------------------------
    # 历史查询
    # ------------------------------------------------------------------

    async def get_activation_count(self, event_id: str) -> int:
        """累计激活次数，未激活过返回 0"""
        count = await self._store.get(self.key_for(event_id, ACTIVATION_COUNT_FIELD), int)
        return count or 0

    async def get_last_activated_at(self, event_id: str) -> datetime | None:
        """最近激活时间，未激活过返回 None"""
        value = await self._store.get(
            self.key_for(event_id, LAST_ACTIVATED_FIELD),
            datetime,
        )
        return ensure_utc(value) if value is not None else None

    async def get_record(self, event_id: str) -> ActivationRecord:
        """读取激活历史快照"""
        return ActivationRecord(
            event_id=event_id,
            last_activated_at=await self.get_last_activated_at(event_id),
            activation_count=await self.get_activation_count(event_id),
        )

    def key_for(self, event_id: str, field: str) -> str:
        """生成存储键 "<namespace>.<event_id>.<field>" """
        return f"{self._namespace}.{event_id}.{field}"

    # ------------------------------------------------------------------
    # 内部方法
    # ------------------------------------------------------------------

    def _sample(self, probability: float) -> bool:
        if probability <= 0.0:
            return False
        if probability >= 1.0:
            return True
        return self._rng.random() < probability

    async def _run_condition(self, event_id: str, condition: CustomCondition) -> bool:
        try:
            result = condition()
            if inspect.isawaitable(result):
                result = await result
        except Exception as e:
            log.warning(
                "custom_condition_failed",
                event_id=event_id,
                error_type=type(e).__name__,
            )
            raise CustomConditionError(event_id) from e
        return bool(result)

    @asynccontextmanager
    async def _event_lock(self, event_id: str) -> AsyncIterator[None]:
        """持有事件级别锁，序列化同一事件的激活与重置

        最后一个使用者退出后清理 lock，避免字典随事件数无限增长。
        不能只看 lock.locked()：release 后被唤醒的等待者尚未重新获取锁。
        """
        lock = self._locks.get(event_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[event_id] = lock
        self._lock_users[event_id] = self._lock_users.get(event_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            remaining = self._lock_users[event_id] - 1
            if remaining:
                self._lock_users[event_id] = remaining
            else:
                del self._lock_users[event_id]
                self._locks.pop(event_id, None)

    @staticmethod
    def _check_event_id(event_id: str) -> None:
        if not event_id or not event_id.strip():
            raise InvalidConfigError("event_id 不能为空")

    @staticmethod
    def _reject(
        event_id: str,
        reason: IneligibleReason,
        blocking_dependency: str | None = None,
    ) -> EligibilityResult:
        log.debug(
            "event_ineligible",
            event_id=event_id,
            reason=reason.value,
            blocking_dependency=blocking_dependency,
        )
        return EligibilityResult(
            event_id=event_id,
            eligible=False,
            reason=reason,
            blocking_dependency=blocking_dependency,
        )
