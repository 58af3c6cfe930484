from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any


@dataclass
class StoredDocument:
    """Represents a row from the documents table."""

    id: int
    user_id: int
    document_type: str
    total_value: Decimal
    state: str
    municipality: str
    raw_data: dict[str, Any]
    created_at: datetime | None = None


@dataclass
class StoredMonthlyReport:
    """Represents a row from the monthly_reports table."""

    id: int
    user_id: int
    month: int
    year: int
    report_data: dict[str, Any]
    created_at: datetime | None = None
