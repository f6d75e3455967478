"""TrackKit 异常体系

所有异常继承 TrackKitError，存储与序列化错误原样向调用方传播。
"""


class TrackKitError(Exception):
    """TrackKit 包基础异常"""


class ValueNotFoundError(TrackKitError):
    """删除不存在的键

    读取路径上缺失的键视为"不存在"而非错误，只有显式删除会抛出此异常。
    """

    def __init__(self, key: str) -> None:
        """
        Args:
            key: 不存在的存储键
        """
        super().__init__(f"存储中不存在键: {key}")
        self.key = key


class SerializationFailedError(TrackKitError):
    """值编码/解码失败

    引擎不会自动重试，重试策略属于存储实现。
    """

    def __init__(self, key: str, message: str) -> None:
        super().__init__(f"序列化失败 [{key}]: {message}")
        self.key = key


class InvalidConfigError(TrackKitError):
    """事件配置构造参数非法（例如空 id）"""


class CustomConditionError(TrackKitError):
    """自定义条件执行时抛出异常

    原始异常通过 __cause__ 保留。
    """

    def __init__(self, event_id: str) -> None:
        super().__init__(f"事件 {event_id} 的自定义条件执行失败")
        self.event_id = event_id
