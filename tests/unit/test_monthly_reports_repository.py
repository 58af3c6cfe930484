import asyncio
from unittest.mock import AsyncMock, MagicMock

import psycopg
import pytest

from taxibot.database.connection import Database
from taxibot.database.exceptions import StorageError
from taxibot.database.repositories.monthly_reports_repository import MonthlyReportsRepository


def _async_cm(value: object) -> MagicMock:
    cm = MagicMock()
    cm.__aenter__ = AsyncMock(return_value=value)
    cm.__aexit__ = AsyncMock(return_value=False)
    return cm


def _make_repo(cursor: MagicMock) -> tuple[MonthlyReportsRepository, MagicMock]:
    conn = MagicMock()
    conn.commit = AsyncMock()
    conn.cursor.return_value = _async_cm(cursor)
    database = MagicMock(spec=Database)
    database.connection.return_value = _async_cm(conn)
    return MonthlyReportsRepository(database), conn


class TestMonthlyReportsRepository:
    def test_insert_returns_id(self) -> None:
        cursor = MagicMock()
        cursor.execute = AsyncMock()
        cursor.fetchone = AsyncMock(return_value=(5,))
        repo, conn = _make_repo(cursor)

        report_id = asyncio.run(repo.insert(7, 3, 2024, {"totalDocuments": 2}))

        assert report_id == 5
        conn.commit.assert_awaited_once()
        assert cursor.execute.call_args[0][1][:3] == (7, 3, 2024)

    def test_insert_error_raises_storage_error(self) -> None:
        cursor = MagicMock()
        cursor.execute = AsyncMock(side_effect=psycopg.OperationalError("down"))
        repo, _ = _make_repo(cursor)

        with pytest.raises(StorageError, match="monthly report"):
            asyncio.run(repo.insert(7, 3, 2024, {}))

    def test_find_latest_maps_row(self) -> None:
        cursor = MagicMock()
        cursor.execute = AsyncMock()
        cursor.fetchone = AsyncMock(
            return_value={
                "id": 5,
                "user_id": 7,
                "month": 3,
                "year": 2024,
                "report_data": {"totalDocuments": 2},
                "created_at": None,
            }
        )
        repo, _ = _make_repo(cursor)

        report = asyncio.run(repo.find_latest(7, 3, 2024))

        assert report is not None
        assert report.report_data == {"totalDocuments": 2}

    def test_find_latest_returns_none(self) -> None:
        cursor = MagicMock()
        cursor.execute = AsyncMock()
        cursor.fetchone = AsyncMock(return_value=None)
        repo, _ = _make_repo(cursor)

        assert asyncio.run(repo.find_latest(7, 3, 2024)) is None

    def test_find_latest_error_raises_storage_error(self) -> None:
        cursor = MagicMock()
        cursor.execute = AsyncMock(side_effect=psycopg.OperationalError("down"))
        repo, _ = _make_repo(cursor)

        with pytest.raises(StorageError, match="Failed to load monthly report"):
            asyncio.run(repo.find_latest(7, 3, 2024))
