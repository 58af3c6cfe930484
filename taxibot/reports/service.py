from taxibot.database.repositories.documents_repository import DocumentsRepository
from taxibot.database.repositories.monthly_reports_repository import MonthlyReportsRepository
from taxibot.logging.logger import Log
from taxibot.reports.aggregation import aggregate_monthly
from taxibot.reports.models import MonthlyReport
from taxibot.taxes.registry import TaxCalculatorRegistry


class MonthlyReportService:
    """Aggregates a user's documents for a month and stores the snapshot."""

    def __init__(
        self,
        documents_repo: DocumentsRepository,
        reports_repo: MonthlyReportsRepository,
        registry: TaxCalculatorRegistry,
    ) -> None:
        self._documents_repo = documents_repo
        self._reports_repo = reports_repo
        self._registry = registry

    async def generate(self, user_id: int, month: int, year: int) -> MonthlyReport:
        """Build and persist the monthly report.

        Raises:
            StorageError: if loading documents or storing the report fails.
        """
        blobs = await self._documents_repo.find_raw_data_for_month(user_id, month, year)
        report = aggregate_monthly(blobs, self._registry)
        report.user_id, report.month, report.year = user_id, month, year
        report_id = await self._reports_repo.insert(user_id, month, year, report.to_dict())
        Log.info(
            f"Monthly report {report_id} stored for user {user_id} ({month:02d}/{year}): "
            f"{report.total_documents} documents"
        )
        return report
