from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping

DEFAULT_STATE = "SP"
DEFAULT_MUNICIPALITY = "São Paulo"
DEFAULT_OPERATION_TYPE = "VENDA"


class DocumentType(str, Enum):
    """Brazilian fiscal document types handled by the calculators."""

    NFE = "NFE"
    NFSE = "NFSE"
    NFCE = "NFCE"
    CTE = "CTE"

    @classmethod
    def parse(cls, raw: object) -> "DocumentType":
        """Map free-form labels ("NF-e", "nfse", "CT-e") to a type; unknown -> NFE."""
        if isinstance(raw, cls):
            return raw
        if not isinstance(raw, str):
            return cls.NFE
        key = raw.upper().replace("-", "").replace("_", "").replace(" ", "")
        try:
            return cls(key)
        except ValueError:
            return cls.NFE


def _frozen_mapping(data: Mapping[str, Any] | None = None) -> Mapping[str, Any]:
    return MappingProxyType(dict(data or {}))


@dataclass(frozen=True)
class DocumentRecord:
    """Structured fiscal document produced by the DataExtractor."""

    document_type: DocumentType = DocumentType.NFE
    total_value: Decimal = Decimal("0")
    operation_type: str = DEFAULT_OPERATION_TYPE
    state: str = DEFAULT_STATE
    municipality: str = DEFAULT_MUNICIPALITY
    tax_info: Mapping[str, Any] = field(default_factory=_frozen_mapping)
    issue_date: str | None = None
    access_key: str | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.tax_info, MappingProxyType):
            object.__setattr__(self, "tax_info", _frozen_mapping(self.tax_info))

    @classmethod
    def default(cls) -> "DocumentRecord":
        """Canonical record used when the document could not be structured."""
        return cls()

    @property
    def regime(self) -> str | None:
        value = self.tax_info.get("regime")
        return value if isinstance(value, str) else None

    def to_dict(self) -> dict[str, Any]:
        return {
            "documentType": self.document_type.value,
            "totalValue": float(self.total_value),
            "operationType": self.operation_type,
            "state": self.state,
            "municipality": self.municipality,
            "taxInfo": dict(self.tax_info),
            "issueDate": self.issue_date,
            "accessKey": self.access_key,
        }
