"""Standing compliance checks that do not depend on a single document.

Two checks run for a user: yearly revenue against the Simples Nacional
ceiling, and upcoming due dates of recurring ancillary obligations.
"""

import calendar
from dataclasses import dataclass
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Callable, Sequence

from taxibot.compliance.models import ComplianceWarning, WarningSeverity, WarningType
from taxibot.database.repositories.compliance_warnings_repository import (
    ComplianceWarningsRepository,
)
from taxibot.database.repositories.documents_repository import DocumentsRepository
from taxibot.logging.logger import Log

SIMPLES_NACIONAL_REVENUE_LIMIT = Decimal("3600000")
DEADLINE_WINDOW_DAYS = 7
HIGH_SEVERITY_DAYS = 3

SIMPLES_NACIONAL_MESSAGE = (
    "Possível desenquadramento do Simples Nacional por excesso de faturamento."
)


@dataclass(frozen=True)
class Obligation:
    """An ancillary obligation due on a fixed day; month None means every month."""

    name: str
    day: int
    month: int | None = None

    def due_date(self, today: date) -> date:
        month = self.month or today.month
        last_day = calendar.monthrange(today.year, month)[1]
        return date(today.year, month, min(self.day, last_day))


OBLIGATIONS: tuple[Obligation, ...] = (
    Obligation("SPED ECD", day=31, month=5),
    Obligation("SPED ECF", day=31, month=7),
    Obligation("DCTF", day=15),
    Obligation("GISS", day=10),
    Obligation("ICMS ST", day=10),
)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def revenue_warnings(yearly_revenue: Decimal) -> list[ComplianceWarning]:
    if yearly_revenue <= SIMPLES_NACIONAL_REVENUE_LIMIT:
        return []
    return [
        ComplianceWarning(
            type=WarningType.SIMPLES_NACIONAL,
            message=SIMPLES_NACIONAL_MESSAGE,
            severity=WarningSeverity.HIGH,
        )
    ]


def deadline_warnings(
    today: date,
    obligations: Sequence[Obligation] = OBLIGATIONS,
) -> list[ComplianceWarning]:
    """Warnings for obligations due within the next DEADLINE_WINDOW_DAYS days.

    Only this year's yearly obligations and this month's monthly ones are
    considered. Due dates already reached (0 days left or past) are skipped.
    """
    warnings: list[ComplianceWarning] = []
    for obligation in obligations:
        due = obligation.due_date(today)
        days_left = (due - today).days
        if not 0 < days_left <= DEADLINE_WINDOW_DAYS:
            continue
        severity = (
            WarningSeverity.HIGH if days_left <= HIGH_SEVERITY_DAYS else WarningSeverity.MEDIUM
        )
        warnings.append(
            ComplianceWarning(
                type=WarningType.DEADLINE,
                message=f"{obligation.name} vence em {days_left} dias",
                severity=severity,
                obligation=obligation.name,
                due_date=due,
            )
        )
    return warnings


class ComplianceMonitor:
    """Checks a user's standing obligations and records the warnings found."""

    def __init__(
        self,
        documents_repo: DocumentsRepository,
        warnings_repo: ComplianceWarningsRepository | None = None,
        clock: Callable[[], datetime] = _utc_now,
        obligations: Sequence[Obligation] = OBLIGATIONS,
    ) -> None:
        self._documents_repo = documents_repo
        self._warnings_repo = warnings_repo
        self._clock = clock
        self._obligations = obligations

    async def check(self, user_id: int) -> list[ComplianceWarning]:
        """Return revenue warnings first, then deadline warnings in table order.

        Raises:
            StorageError: if the revenue query or storing the warnings fails.
        """
        today = self._clock().date()
        yearly_revenue = await self._documents_repo.total_value_for_year(user_id, today.year)
        warnings = revenue_warnings(yearly_revenue)
        warnings.extend(deadline_warnings(today, self._obligations))

        if warnings and self._warnings_repo is not None:
            await self._warnings_repo.insert_many(user_id, warnings)
        Log.info(
            f"Compliance monitor for user {user_id} on {today.isoformat()}: "
            f"{len(warnings)} warnings"
        )
        return warnings
