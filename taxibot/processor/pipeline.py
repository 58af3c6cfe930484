from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar

from taxibot.compliance.models import ComplianceResult
from taxibot.extraction.models import DocumentRecord
from taxibot.processor.exceptions import IncompletePipelineError, InvalidStateTransitionError
from taxibot.processor.models import PipelineResult
from taxibot.retrieval.models import TaxRuleExcerpt
from taxibot.taxes.models import TaxCalculation


class PipelineState(str, Enum):
    INGESTING = "ingesting"
    EXTRACTING = "extracting"
    RETRIEVING_RULES = "retrieving_rules"
    CALCULATING = "calculating"
    VALIDATING = "validating"
    DONE = "done"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (PipelineState.DONE, PipelineState.FAILED)


_ORDER = list(PipelineState)


@dataclass(slots=True)
class PipelineContext:
    raw_bytes: bytes
    mime_type: str
    user_id: int | None = None
    state: PipelineState = PipelineState.INGESTING
    extracted_text: str = ""
    document_record: DocumentRecord | None = None
    document_id: int | None = None
    rules: list[TaxRuleExcerpt] = field(default_factory=list)
    tax_calculation: TaxCalculation | None = None
    compliance_result: ComplianceResult | None = None
    error_message: str = ""

    def advance(self, target: PipelineState) -> None:
        """Move the run forward. Backward moves and moves out of Done/Failed raise."""
        if target == self.state:
            return
        if self.state.is_terminal:
            raise InvalidStateTransitionError(
                f"Run already {self.state.value}, cannot move to {target.value}"
            )
        if target != PipelineState.FAILED and _ORDER.index(target) < _ORDER.index(self.state):
            raise InvalidStateTransitionError(
                f"Cannot move back from {self.state.value} to {target.value}"
            )
        self.state = target

    def to_result(self) -> PipelineResult:
        if (
            self.state != PipelineState.DONE
            or self.document_record is None
            or self.tax_calculation is None
            or self.compliance_result is None
        ):
            raise IncompletePipelineError(f"Run ended in state {self.state.value}")
        return PipelineResult(
            document_record=self.document_record,
            tax_calculation=self.tax_calculation,
            compliance_result=self.compliance_result,
            applied_rules=tuple(self.rules),
        )


class PipelineStep(ABC):
    state: ClassVar[PipelineState]

    @abstractmethod
    async def run(self, context: PipelineContext) -> PipelineContext:
        raise NotImplementedError
