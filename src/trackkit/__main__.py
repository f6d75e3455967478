"""CLI 入口模块 -- python -m trackkit <command> <event_id>

支持的命令：
  status    查看事件的激活历史
  activate  记录一次激活
  reset     清除激活历史

数据库路径取自 TRACKKIT_DB_PATH（见 trackkit.config）。
"""

import asyncio
import sys

from .config import load_settings
from .engine import EligibilityEngine
from .hub import ActivationHub
from .logging_config import setup_logging
from .store import create_sqlite_store

_COMMANDS = ("status", "activate", "reset")


def _usage() -> None:
    print("用法: python -m trackkit <command> <event_id>")
    print("命令:")
    print("  status    查看事件的激活历史")
    print("  activate  记录一次激活")
    print("  reset     清除激活历史")


def main(argv: list[str] | None = None) -> int:
    """CLI 主入口，返回退出码"""
    args = sys.argv[1:] if argv is None else argv
    if len(args) < 2:
        _usage()
        return 1

    command, event_id = args[0], args[1]
    if command not in _COMMANDS:
        print(f"未知命令: {command}")
        print(f"可用命令: {', '.join(_COMMANDS)}")
        return 1

    setup_logging()
    asyncio.run(run_command(command, event_id))
    return 0


async def run_command(command: str, event_id: str) -> None:
    """打开 SQLite 存储并执行命令"""
    settings = load_settings()
    store = await create_sqlite_store(settings.db_path)
    engine = EligibilityEngine(
        store,
        ActivationHub(settings.queue_maxsize),
        namespace=settings.key_namespace,
    )

    try:
        if command == "activate":
            event = await engine.mark_activated(event_id)
            print(f"已激活 {event_id}，累计 {event.activation_count} 次")
        elif command == "reset":
            await engine.reset(event_id)
            print(f"已重置 {event_id}")
        else:
            record = await engine.get_record(event_id)
            last = record.last_activated_at.isoformat() if record.last_activated_at else "-"
            print(f"事件: {event_id}")
            print(f"激活次数: {record.activation_count}")
            print(f"最近激活: {last}")
    finally:
        await store.close()


if __name__ == "__main__":
    sys.exit(main())
