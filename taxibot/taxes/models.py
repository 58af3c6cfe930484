from dataclasses import dataclass, field, replace
from decimal import Decimal
from types import MappingProxyType
from typing import Mapping

from taxibot.taxes.amounts import ZERO


@dataclass(frozen=True)
class TaxCalculation:
    """Taxes computed for one document; amounts are non-negative and in cents."""

    base_value: Decimal
    taxes: Mapping[str, Decimal] = field(default_factory=lambda: MappingProxyType({}))

    def __post_init__(self) -> None:
        if not isinstance(self.taxes, MappingProxyType):
            object.__setattr__(self, "taxes", MappingProxyType(dict(self.taxes)))

    @property
    def total_tax(self) -> Decimal:
        return sum(self.taxes.values(), ZERO)

    @property
    def net_value(self) -> Decimal:
        return self.base_value - self.total_tax

    def with_tax(self, name: str, amount: Decimal) -> "TaxCalculation":
        """Return a copy with one tax component replaced."""
        taxes = dict(self.taxes)
        taxes[name] = amount
        return replace(self, taxes=taxes)

    def to_dict(self) -> dict[str, object]:
        return {
            "baseValue": float(self.base_value),
            "taxes": {name: float(amount) for name, amount in self.taxes.items()},
            "totalTax": float(self.total_tax),
            "netValue": float(self.net_value),
        }
