"""ActivationHub -- 进程内激活通知广播器

订阅者有两种形式：
- 回调订阅：同步调用，按注册顺序执行
- 队列订阅：每个订阅者持有一个 asyncio.Queue，put_nowait 非阻塞投递

广播是尽力而为的：回调抛出的异常只记录日志，队列已满的订阅者被移除。
不回放历史事件。
"""

import asyncio
from collections.abc import Callable
from typing import Self

import structlog

from .config import DEFAULT_QUEUE_MAXSIZE
from .models.activation import ActivationEvent

log = structlog.get_logger()

ActivationHandler = Callable[[ActivationEvent], None]


class Subscription:
    """订阅句柄 -- unsubscribe() 取消订阅，可重复调用"""

    def __init__(
        self,
        hub: "ActivationHub",
        handler: ActivationHandler,
        event_id: str | None,
    ) -> None:
        self._hub = hub
        self.handler = handler
        self.event_id = event_id

    @property
    def active(self) -> bool:
        return self._hub.is_subscribed(self)

    def matches(self, event: ActivationEvent) -> bool:
        return self.event_id is None or self.event_id == event.event_id

    def unsubscribe(self) -> None:
        self._hub.unsubscribe(self)

    def __enter__(self) -> Self:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.unsubscribe()


class QueueSubscription(Subscription):
    """队列订阅句柄 -- 事件被推送到 queue"""

    def __init__(
        self,
        hub: "ActivationHub",
        queue: asyncio.Queue[ActivationEvent],
        event_id: str | None,
    ) -> None:
        super().__init__(hub, queue.put_nowait, event_id)
        self.queue = queue

    async def get(self) -> ActivationEvent:
        """等待下一条激活通知"""
        return await self.queue.get()


class ActivationHub:
    """激活通知广播器 -- 订阅者注册表由实例持有"""

    def __init__(self, queue_maxsize: int = DEFAULT_QUEUE_MAXSIZE) -> None:
        # dict 作为有序集合，保证按注册顺序投递
        self._subscribers: dict[Subscription, None] = {}
        self._queue_maxsize = queue_maxsize

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def subscribe(
        self,
        handler: ActivationHandler,
        event_id: str | None = None,
    ) -> Subscription:
        """注册回调订阅

        Args:
            handler: 接收 ActivationEvent 的同步回调
            event_id: 只接收该事件的通知，None 表示全部

        Returns:
            Subscription 句柄
        """
        subscription = Subscription(self, handler, event_id)
        self._subscribers[subscription] = None
        return subscription

    def listen(
        self,
        event_id: str | None = None,
        maxsize: int | None = None,
    ) -> QueueSubscription:
        """注册队列订阅

        Args:
            event_id: 只接收该事件的通知，None 表示全部
            maxsize: 队列容量，默认使用 hub 的 queue_maxsize，0 表示不限

        Returns:
            QueueSubscription 句柄，通过 queue 或 get() 读取通知
        """
        queue: asyncio.Queue[ActivationEvent] = asyncio.Queue(
            maxsize=self._queue_maxsize if maxsize is None else maxsize
        )
        subscription = QueueSubscription(self, queue, event_id)
        self._subscribers[subscription] = None
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        self._subscribers.pop(subscription, None)

    def is_subscribed(self, subscription: Subscription) -> bool:
        return subscription in self._subscribers

    def publish(self, event: ActivationEvent) -> None:
        """向所有匹配的订阅者广播激活通知

        返回时所有当前订阅者都已被通知。
        """
        dead: list[Subscription] = []
        # 复制一份，回调内取消订阅不影响本轮遍历
        for subscription in list(self._subscribers):
            if not subscription.matches(event):
                continue
            try:
                subscription.handler(event)
            except asyncio.QueueFull:
                dead.append(subscription)
            except Exception as e:
                log.warning(
                    "activation_handler_failed",
                    event_id=event.event_id,
                    error_type=type(e).__name__,
                    error=str(e),
                )

        for subscription in dead:
            self.unsubscribe(subscription)
            log.warning(
                "activation_queue_full_dropped",
                event_id=event.event_id,
                subscribed_event_id=subscription.event_id,
            )
