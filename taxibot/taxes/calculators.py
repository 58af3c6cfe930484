"""Per-document-type tax calculators.

Each calculator is a pure function of the record, the retrieved rules and
the rate tables. Rules are accepted for signature symmetry; the current
formulas use only RateTables.
"""

from collections.abc import Sequence
from decimal import Decimal
from typing import Callable

from taxibot.extraction.models import DocumentRecord
from taxibot.retrieval.models import TaxRuleExcerpt
from taxibot.taxes.amounts import ZERO, percent_of
from taxibot.taxes.models import TaxCalculation
from taxibot.taxes.rate_tables import RateTables

PIS_RATE = Decimal("1.65")
COFINS_RATE = Decimal("7.6")
IPI_BASIC_RATE = Decimal("4")
CTE_ICMS_RATE = Decimal("12")
DEFAULT_SERVICE_CODE = "1001"

Calculator = Callable[[DocumentRecord, Sequence[TaxRuleExcerpt], RateTables], TaxCalculation]


def calculate_nfe(
    record: DocumentRecord,
    rules: Sequence[TaxRuleExcerpt],
    rate_tables: RateTables,
) -> TaxCalculation:
    """Goods invoice: ICMS (standard rate), IPI, PIS, COFINS."""
    base = record.total_value
    icms = rate_tables.icms(record.state, record.operation_type)
    return TaxCalculation(
        base_value=base,
        taxes={
            "ICMS": percent_of(base, icms.standard),
            "IPI": calculate_ipi(record),
            "PIS": percent_of(base, PIS_RATE),
            "COFINS": percent_of(base, COFINS_RATE),
        },
    )


def calculate_nfse(
    record: DocumentRecord,
    rules: Sequence[TaxRuleExcerpt],
    rate_tables: RateTables,
) -> TaxCalculation:
    """Service invoice: municipal ISS, PIS, COFINS."""
    base = record.total_value
    service_code = record.tax_info.get("serviceCode") or DEFAULT_SERVICE_CODE
    iss_rate = rate_tables.iss(record.municipality, str(service_code))
    return TaxCalculation(
        base_value=base,
        taxes={
            "ISS": percent_of(base, iss_rate),
            "PIS": percent_of(base, PIS_RATE),
            "COFINS": percent_of(base, COFINS_RATE),
        },
    )


def calculate_nfce(
    record: DocumentRecord,
    rules: Sequence[TaxRuleExcerpt],
    rate_tables: RateTables,
) -> TaxCalculation:
    """Consumer invoice: ICMS (reduced rate), PIS, COFINS."""
    base = record.total_value
    icms = rate_tables.icms(record.state, record.operation_type)
    return TaxCalculation(
        base_value=base,
        taxes={
            "ICMS": percent_of(base, icms.reduced),
            "PIS": percent_of(base, PIS_RATE),
            "COFINS": percent_of(base, COFINS_RATE),
        },
    )


def calculate_cte(
    record: DocumentRecord,
    rules: Sequence[TaxRuleExcerpt],
    rate_tables: RateTables,
) -> TaxCalculation:
    """Transport document: flat ICMS."""
    base = record.total_value
    return TaxCalculation(
        base_value=base,
        taxes={"ICMS": percent_of(base, CTE_ICMS_RATE)},
    )


def calculate_ipi(record: DocumentRecord) -> Decimal:
    if record.tax_info.get("ipiCategory") == "basic":
        return percent_of(record.total_value, IPI_BASIC_RATE)
    return ZERO
