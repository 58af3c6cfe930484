import psycopg

from taxibot.database.connection import Database
from taxibot.database.exceptions import StorageError

SCHEMA_STATEMENTS = (
    """
    CREATE TABLE IF NOT EXISTS documents (
        id BIGSERIAL PRIMARY KEY,
        user_id BIGINT NOT NULL,
        document_type TEXT NOT NULL,
        total_value NUMERIC(18, 2) NOT NULL DEFAULT 0,
        state TEXT NOT NULL DEFAULT '',
        municipality TEXT NOT NULL DEFAULT '',
        raw_data JSONB NOT NULL,
        created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
    )
    """,
    """
    CREATE INDEX IF NOT EXISTS documents_user_created_idx
    ON documents (user_id, created_at)
    """,
    """
    CREATE TABLE IF NOT EXISTS monthly_reports (
        id BIGSERIAL PRIMARY KEY,
        user_id BIGINT NOT NULL,
        month SMALLINT NOT NULL CHECK (month BETWEEN 1 AND 12),
        year INTEGER NOT NULL,
        report_data JSONB NOT NULL,
        created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS compliance_warnings (
        id BIGSERIAL PRIMARY KEY,
        user_id BIGINT NOT NULL,
        type TEXT NOT NULL,
        message TEXT NOT NULL,
        severity TEXT NOT NULL,
        obligation TEXT,
        due_date DATE,
        created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
    )
    """,
)


async def ensure_schema(database: Database) -> None:
    """Create the storage tables and indexes when missing."""
    try:
        async with database.connection() as conn:
            for statement in SCHEMA_STATEMENTS:
                await conn.execute(statement)
            await conn.commit()
    except psycopg.Error as exc:
        raise StorageError(f"Failed to create schema: {exc}") from exc
