from dataclasses import dataclass

from taxibot.compliance.models import ComplianceResult
from taxibot.extraction.models import DocumentRecord
from taxibot.retrieval.models import TaxRuleExcerpt
from taxibot.taxes.models import TaxCalculation


@dataclass(frozen=True)
class PipelineResult:
    """Everything one pipeline run produced for a document."""

    document_record: DocumentRecord
    tax_calculation: TaxCalculation
    compliance_result: ComplianceResult
    applied_rules: tuple[TaxRuleExcerpt, ...] = ()

    def to_dict(self) -> dict[str, object]:
        return {
            "documentData": self.document_record.to_dict(),
            "taxCalculation": self.tax_calculation.to_dict(),
            "complianceCheck": self.compliance_result.to_dict(),
            "applicableRules": [rule.to_dict() for rule in self.applied_rules],
        }
