"""测试配置 -- 存储、引擎与固定时间 fixture"""

import random
from collections.abc import AsyncGenerator
from datetime import UTC, datetime
from pathlib import Path

import pytest
import pytest_asyncio
from trackkit.engine import EligibilityEngine
from trackkit.hub import ActivationHub
from trackkit.store import InMemoryActivationStore, SqliteActivationStore, create_sqlite_store

T0 = datetime(2026, 1, 1, 12, 0, 0, tzinfo=UTC)


@pytest.fixture
def memory_store() -> InMemoryActivationStore:
    """提供空的内存存储"""
    return InMemoryActivationStore()


@pytest.fixture
def hub() -> ActivationHub:
    return ActivationHub()


@pytest.fixture
def engine(memory_store: InMemoryActivationStore, hub: ActivationHub) -> EligibilityEngine:
    """基于内存存储的引擎，时钟固定在 T0，随机源固定种子"""
    return EligibilityEngine(
        memory_store,
        hub,
        rng=random.Random(20260101),
        clock=lambda: T0,
    )


@pytest_asyncio.fixture
async def sqlite_store(tmp_path: Path) -> AsyncGenerator[SqliteActivationStore, None]:
    """提供已初始化的临时 SQLite 存储"""
    store = await create_sqlite_store(tmp_path / "sqlite" / "test.db")
    yield store
    await store.close()
