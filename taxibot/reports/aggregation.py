import json
from collections.abc import Iterable, Mapping
from typing import Any

from taxibot.extraction.validator import build_document_record
from taxibot.logging.logger import Log
from taxibot.reports.models import MonthlyReport
from taxibot.taxes.registry import TaxCalculatorRegistry


def aggregate_monthly(
    raw_data_blobs: Iterable[str | Mapping[str, Any]],
    registry: TaxCalculatorRegistry | None = None,
) -> MonthlyReport:
    """Sum documents and recalculated taxes over stored `raw_data` blobs.

    Taxes are recalculated without retrieved rules. Blobs that are not JSON
    objects are skipped.
    """
    registry = registry or TaxCalculatorRegistry()
    report = MonthlyReport()
    for blob in raw_data_blobs:
        data = _load_blob(blob)
        if data is None:
            continue
        record = build_document_record(data)
        calculation = registry.calculate(record, [])
        for name, amount in calculation.taxes.items():
            report.taxes[name] = report.taxes.get(name, 0) + amount
        report.total_value += record.total_value
        report.total_documents += 1
    return report


def _load_blob(blob: str | Mapping[str, Any]) -> Mapping[str, Any] | None:
    if isinstance(blob, Mapping):
        return blob
    try:
        data = json.loads(blob)
    except (TypeError, json.JSONDecodeError) as exc:
        Log.warning(f"Skipping unreadable document blob: {exc}")
        return None
    if not isinstance(data, dict):
        Log.warning("Skipping document blob that is not a JSON object")
        return None
    return data
