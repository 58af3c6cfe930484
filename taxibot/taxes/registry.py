from collections.abc import Sequence

from taxibot.extraction.models import DocumentRecord, DocumentType
from taxibot.retrieval.models import TaxRuleExcerpt
from taxibot.taxes.calculators import (
    Calculator,
    calculate_cte,
    calculate_nfce,
    calculate_nfe,
    calculate_nfse,
)
from taxibot.taxes.models import TaxCalculation
from taxibot.taxes.rate_tables import RateTables
from taxibot.taxes.regimes import RegimeAdjuster


class TaxCalculatorRegistry:
    """Dispatches a record to its document-type calculator, then applies regimes."""

    def __init__(
        self,
        rate_tables: RateTables | None = None,
        regime_adjuster: RegimeAdjuster | None = None,
    ) -> None:
        self._rate_tables = rate_tables or RateTables()
        self._regime_adjuster = regime_adjuster or RegimeAdjuster()

    @staticmethod
    def calculator_for(document_type: DocumentType) -> Calculator:
        match document_type:
            case DocumentType.NFE:
                return calculate_nfe
            case DocumentType.NFSE:
                return calculate_nfse
            case DocumentType.NFCE:
                return calculate_nfce
            case DocumentType.CTE:
                return calculate_cte
            case _:
                return calculate_nfe

    def calculate(
        self,
        record: DocumentRecord,
        rules: Sequence[TaxRuleExcerpt] = (),
    ) -> TaxCalculation:
        calculator = self.calculator_for(record.document_type)
        base_calculation = calculator(record, rules, self._rate_tables)
        return self._regime_adjuster.adjust(base_calculation, record)
