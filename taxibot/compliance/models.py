from dataclasses import dataclass, field
from datetime import date
from enum import Enum

FALLBACK_ISSUE = "could not parse upstream response"


class ComplianceStatus(str, Enum):
    OK = "ok"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class ComplianceResult:
    """Judgment on a document: status plus ordered issues and suggestions."""

    status: ComplianceStatus
    issues: tuple[str, ...] = field(default_factory=tuple)
    suggestions: tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def fallback(cls) -> "ComplianceResult":
        return cls(status=ComplianceStatus.WARNING, issues=(FALLBACK_ISSUE,))

    def to_dict(self) -> dict[str, object]:
        return {
            "status": self.status.value,
            "issues": list(self.issues),
            "suggestions": list(self.suggestions),
        }


class WarningType(str, Enum):
    SIMPLES_NACIONAL = "SIMPLES_NACIONAL"
    DEADLINE = "DEADLINE"


class WarningSeverity(str, Enum):
    MEDIUM = "medium"
    HIGH = "high"


@dataclass(frozen=True)
class ComplianceWarning:
    """A standing obligation or threshold the user should act on."""

    type: WarningType
    message: str
    severity: WarningSeverity
    obligation: str | None = None
    due_date: date | None = None

    def to_dict(self) -> dict[str, object]:
        data: dict[str, object] = {
            "type": self.type.value,
            "message": self.message,
            "severity": self.severity.value,
        }
        if self.obligation is not None:
            data["obligation"] = self.obligation
        if self.due_date is not None:
            data["dueDate"] = self.due_date.isoformat()
        return data
