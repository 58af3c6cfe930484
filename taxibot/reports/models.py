from dataclasses import dataclass, field
from decimal import Decimal

REPORTED_TAXES = ("ICMS", "ISS", "PIS", "COFINS", "IPI")


def _empty_taxes() -> dict[str, Decimal]:
    return {name: Decimal("0") for name in REPORTED_TAXES}


@dataclass
class MonthlyReport:
    """Totals over a set of stored documents."""

    total_documents: int = 0
    total_value: Decimal = Decimal("0")
    taxes: dict[str, Decimal] = field(default_factory=_empty_taxes)
    user_id: int | None = None
    month: int | None = None
    year: int | None = None

    def to_dict(self) -> dict[str, object]:
        data: dict[str, object] = {
            "totalDocuments": self.total_documents,
            "totalValue": float(self.total_value),
            "taxes": {name: float(amount) for name, amount in self.taxes.items()},
        }
        if self.user_id is not None:
            data.update(userId=self.user_id, month=self.month, year=self.year)
        return data
