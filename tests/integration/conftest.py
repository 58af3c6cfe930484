import asyncio
import os
import random
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

import psycopg
import pytest

from taxibot.config.settings import Settings
from taxibot.database.connection import Database, build_conninfo
from taxibot.database.schema import ensure_schema

T = TypeVar("T")


def _test_settings() -> Settings:
    os.environ.setdefault("DB_DATABASE", "taxibot_test")
    return Settings()


async def _ping(settings: Settings) -> None:
    conn = await psycopg.AsyncConnection.connect(build_conninfo(settings), connect_timeout=3)
    await conn.close()


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    return _test_settings()


@pytest.fixture(scope="session")
def database_available(test_settings: Settings) -> None:
    try:
        asyncio.run(_ping(test_settings))
    except Exception as e:
        pytest.skip(
            f"PostgreSQL test DB not available: {e}. "
            "Set DB_* env to point at a disposable database"
        )


@pytest.fixture
def test_user_id() -> int:
    return random.randint(10**9, 2 * 10**9)


@pytest.fixture
def with_database(
    database_available: None,
    test_settings: Settings,
    test_user_id: int,
) -> Callable[[Callable[[Database], Awaitable[T]]], T]:
    """Run a coroutine against an open pool; rows of the test user are removed afterwards."""

    async def _run(fn: Callable[[Database], Awaitable[Any]]) -> Any:
        database = Database(test_settings)
        await database.open()
        try:
            await ensure_schema(database)
            try:
                return await fn(database)
            finally:
                async with database.connection() as conn:
                    await conn.execute("DELETE FROM documents WHERE user_id = %s", (test_user_id,))
                    await conn.execute(
                        "DELETE FROM monthly_reports WHERE user_id = %s", (test_user_id,)
                    )
                    await conn.execute(
                        "DELETE FROM compliance_warnings WHERE user_id = %s", (test_user_id,)
                    )
                    await conn.commit()
        finally:
            await database.close()

    return lambda fn: asyncio.run(_run(fn))
