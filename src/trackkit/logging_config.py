"""structlog 配置模块

引擎、Hub 与存储适配器均通过 structlog.get_logger() 输出结构化日志，
嵌入方在启动时调用一次 setup_logging() 即可。

dev 模式：ConsoleRenderer 彩色输出
json 模式：单行 JSON，附带异常堆栈

aiosqlite 在 DEBUG 级别为每条 SQL 输出一行日志，这里将其限制在 INFO 及以上，
除非显式设置 TRACKKIT_SQL_DEBUG=true。
"""

import logging
import os

import structlog

_LOG_FORMATS = ("dev", "json")
_NOISY_LOGGERS = ("aiosqlite",)


def _parse_level(log_level: str) -> int:
    """日志级别名称或数字 → logging 常量，无法识别时返回 INFO"""
    if log_level.isdigit():
        return int(log_level)
    level = logging.getLevelName(log_level.upper())
    return level if isinstance(level, int) else logging.INFO


def _build_processors(
    log_format: str,
) -> tuple[list[structlog.types.Processor], structlog.types.Processor]:
    """返回 (共享处理器链, 最终渲染器)"""
    processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
    ]
    if log_format == "json":
        # JSON 模式下异常需要先格式化为字符串字段
        processors.append(structlog.processors.format_exc_info)
        return processors, structlog.processors.JSONRenderer(ensure_ascii=False)
    return processors, structlog.dev.ConsoleRenderer()


def setup_logging(log_format: str | None = None, log_level: str | None = None) -> None:
    """初始化 structlog 配置

    Args:
        log_format: "dev" 或 "json"，未传入时读取 TRACKKIT_LOG_FORMAT（默认 dev）
        log_level: 日志级别名称或数字，未传入时读取 TRACKKIT_LOG_LEVEL（默认 INFO）
    """
    log_format = log_format or os.environ.get("TRACKKIT_LOG_FORMAT", "dev")
    if log_format not in _LOG_FORMATS:
        log_format = "dev"
    level = _parse_level(log_level or os.environ.get("TRACKKIT_LOG_LEVEL", "INFO"))
    sql_debug = os.environ.get("TRACKKIT_SQL_DEBUG", "false").lower() == "true"

    shared_processors, renderer = _build_processors(log_format)
    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler()
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=renderer,
            foreign_pre_chain=shared_processors,
        )
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(level)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(level if sql_debug else max(level, logging.INFO))
