from typing import Sequence

import psycopg

from taxibot.compliance.models import ComplianceWarning
from taxibot.database.connection import Database
from taxibot.database.exceptions import StorageError


class ComplianceWarningsRepository:
    """Append-only access to the compliance_warnings table."""

    def __init__(self, database: Database) -> None:
        self._database = database

    async def insert_many(self, user_id: int, warnings: Sequence[ComplianceWarning]) -> int:
        """Store warnings in one transaction and return how many were written.

        Raises:
            StorageError: if the insert fails.
        """
        if not warnings:
            return 0
        try:
            async with self._database.connection() as conn:
                async with conn.cursor() as cur:
                    await cur.executemany(
                        """
                        INSERT INTO compliance_warnings
                            (user_id, type, message, severity, obligation, due_date)
                        VALUES (%s, %s, %s, %s, %s, %s)
                        """,
                        [
                            (
                                user_id,
                                warning.type.value,
                                warning.message,
                                warning.severity.value,
                                warning.obligation,
                                warning.due_date,
                            )
                            for warning in warnings
                        ],
                    )
                await conn.commit()
        except psycopg.Error as exc:
            raise StorageError(
                f"Failed to store compliance warnings for user {user_id}: {exc}"
            ) from exc
        return len(warnings)
