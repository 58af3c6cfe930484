from typing import Any

import psycopg
from psycopg.rows import dict_row
from psycopg.types.json import Jsonb

from taxibot.database.connection import Database
from taxibot.database.exceptions import StorageError
from taxibot.database.models import StoredMonthlyReport


class MonthlyReportsRepository:
    """Append-only access to the monthly_reports table."""

    def __init__(self, database: Database) -> None:
        self._database = database

    async def insert(self, user_id: int, month: int, year: int, report_data: dict[str, Any]) -> int:
        """Store a report snapshot and return its generated id.

        Raises:
            StorageError: if the insert fails.
        """
        try:
            async with self._database.connection() as conn:
                async with conn.cursor() as cur:
                    await cur.execute(
                        """
                        INSERT INTO monthly_reports (user_id, month, year, report_data)
                        VALUES (%s, %s, %s, %s)
                        RETURNING id
                        """,
                        (user_id, month, year, Jsonb(report_data)),
                    )
                    row = await cur.fetchone()
                await conn.commit()
        except psycopg.Error as exc:
            raise StorageError(f"Failed to store monthly report for user {user_id}: {exc}") from exc
        if row is None:
            raise StorageError(f"Report insert for user {user_id} returned no id")
        return int(row[0])

    async def find_latest(self, user_id: int, month: int, year: int) -> StoredMonthlyReport | None:
        """Most recent snapshot for a user and month, or None when none was stored.

        Raises:
            StorageError: if the query fails.
        """
        try:
            async with self._database.connection() as conn:
                async with conn.cursor(row_factory=dict_row) as cur:
                    await cur.execute(
                        """
                        SELECT id, user_id, month, year, report_data, created_at
                        FROM monthly_reports
                        WHERE user_id = %s AND month = %s AND year = %s
                        ORDER BY created_at DESC, id DESC
                        LIMIT 1
                        """,
                        (user_id, month, year),
                    )
                    row = await cur.fetchone()
        except psycopg.Error as exc:
            raise StorageError(f"Failed to load monthly report for user {user_id}: {exc}") from exc

        if row is None:
            return None

        return StoredMonthlyReport(
            id=row["id"],
            user_id=row["user_id"],
            month=row["month"],
            year=row["year"],
            report_data=row["report_data"],
            created_at=row["created_at"],
        )
