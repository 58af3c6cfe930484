from datetime import datetime, timezone
from decimal import Decimal
from typing import Any

import psycopg
from psycopg.rows import dict_row
from psycopg.types.json import Jsonb

from taxibot.database.connection import Database
from taxibot.database.exceptions import StorageError
from taxibot.database.models import StoredDocument
from taxibot.extraction.models import DocumentRecord


def month_bounds(month: int, year: int) -> tuple[datetime, datetime]:
    """Half-open [start, end) UTC range covering a calendar month."""
    if not 1 <= month <= 12:
        raise ValueError(f"month must be in 1..12, got {month}")
    start = datetime(year, month, 1, tzinfo=timezone.utc)
    end = datetime(year + month // 12, month % 12 + 1, 1, tzinfo=timezone.utc)
    return start, end


def year_bounds(year: int) -> tuple[datetime, datetime]:
    """Half-open [start, end) UTC range covering a calendar year."""
    return (
        datetime(year, 1, 1, tzinfo=timezone.utc),
        datetime(year + 1, 1, 1, tzinfo=timezone.utc),
    )


class DocumentsRepository:
    """Append-only access to the documents table."""

    def __init__(self, database: Database) -> None:
        self._database = database

    async def insert(self, user_id: int, record: DocumentRecord) -> int:
        """Store a structured document and return its generated id.

        Raises:
            StorageError: if the insert fails.
        """
        try:
            async with self._database.connection() as conn:
                async with conn.cursor() as cur:
                    await cur.execute(
                        """
                        INSERT INTO documents
                            (user_id, document_type, total_value, state, municipality, raw_data)
                        VALUES (%s, %s, %s, %s, %s, %s)
                        RETURNING id
                        """,
                        (
                            user_id,
                            record.document_type.value,
                            record.total_value,
                            record.state,
                            record.municipality,
                            Jsonb(record.to_dict()),
                        ),
                    )
                    row = await cur.fetchone()
                await conn.commit()
        except psycopg.Error as exc:
            raise StorageError(f"Failed to store document for user {user_id}: {exc}") from exc
        if row is None:
            raise StorageError(f"Insert for user {user_id} returned no id")
        return int(row[0])

    async def find_for_month(self, user_id: int, month: int, year: int) -> list[StoredDocument]:
        """Documents a user stored in the given month, oldest first.

        Raises:
            StorageError: if the query fails.
        """
        start, end = month_bounds(month, year)
        try:
            async with self._database.connection() as conn:
                async with conn.cursor(row_factory=dict_row) as cur:
                    await cur.execute(
                        """
                        SELECT id, user_id, document_type, total_value, state,
                               municipality, raw_data, created_at
                        FROM documents
                        WHERE user_id = %s
                          AND created_at >= %s
                          AND created_at < %s
                        ORDER BY created_at ASC, id ASC
                        """,
                        (user_id, start, end),
                    )
                    rows = await cur.fetchall()
        except psycopg.Error as exc:
            raise StorageError(f"Failed to load documents for user {user_id}: {exc}") from exc
        return [self._to_document(row) for row in rows]

    async def find_raw_data_for_month(
        self, user_id: int, month: int, year: int
    ) -> list[dict[str, Any]]:
        documents = await self.find_for_month(user_id, month, year)
        return [document.raw_data for document in documents]

    async def total_value_for_year(self, user_id: int, year: int) -> Decimal:
        """Sum of document totals a user stored in the given year.

        Raises:
            StorageError: if the query fails.
        """
        start, end = year_bounds(year)
        try:
            async with self._database.connection() as conn:
                async with conn.cursor() as cur:
                    await cur.execute(
                        """
                        SELECT COALESCE(SUM(total_value), 0)
                        FROM documents
                        WHERE user_id = %s
                          AND created_at >= %s
                          AND created_at < %s
                        """,
                        (user_id, start, end),
                    )
                    row = await cur.fetchone()
        except psycopg.Error as exc:
            raise StorageError(f"Failed to sum revenue for user {user_id}: {exc}") from exc
        if row is None:
            return Decimal("0")
        return Decimal(row[0])

    @staticmethod
    def _to_document(row: dict[str, Any]) -> StoredDocument:
        return StoredDocument(
            id=row["id"],
            user_id=row["user_id"],
            document_type=row["document_type"],
            total_value=row["total_value"],
            state=row["state"],
            municipality=row["municipality"],
            raw_data=row["raw_data"],
            created_at=row["created_at"],
        )
