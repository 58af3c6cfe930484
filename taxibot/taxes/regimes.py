"""Special tax regime overrides applied after the base calculator."""

from dataclasses import dataclass
from decimal import Decimal
from typing import Callable

from taxibot.extraction.models import DocumentRecord
from taxibot.logging.logger import Log
from taxibot.taxes.amounts import quantize
from taxibot.taxes.models import TaxCalculation

SIMPLES_NACIONAL = "Simples Nacional"
SIMPLES_NACIONAL_ICMS_FACTOR = Decimal("0.5")


@dataclass(frozen=True)
class RegimeRule:
    """A predicate on the record and the transform it triggers."""

    name: str
    applies: Callable[[DocumentRecord], bool]
    transform: Callable[[TaxCalculation], TaxCalculation]


def _is_simples_nacional(record: DocumentRecord) -> bool:
    return record.regime == SIMPLES_NACIONAL


def _halve_icms(calculation: TaxCalculation) -> TaxCalculation:
    icms = calculation.taxes.get("ICMS")
    if icms is None:
        return calculation
    return calculation.with_tax("ICMS", quantize(icms * SIMPLES_NACIONAL_ICMS_FACTOR))


SIMPLES_NACIONAL_RULE = RegimeRule(
    name=SIMPLES_NACIONAL,
    applies=_is_simples_nacional,
    transform=_halve_icms,
)

DEFAULT_RULES: tuple[RegimeRule, ...] = (SIMPLES_NACIONAL_RULE,)


class RegimeAdjuster:
    """Evaluates regime rules in order; every matching rule transforms the result."""

    def __init__(self, rules: tuple[RegimeRule, ...] = DEFAULT_RULES) -> None:
        self._rules = rules

    @property
    def rules(self) -> tuple[RegimeRule, ...]:
        return self._rules

    def with_rule(self, rule: RegimeRule) -> "RegimeAdjuster":
        return RegimeAdjuster(self._rules + (rule,))

    def adjust(self, calculation: TaxCalculation, record: DocumentRecord) -> TaxCalculation:
        for rule in self._rules:
            if rule.applies(record):
                Log.debug(f"Applying regime rule '{rule.name}'")
                calculation = rule.transform(calculation)
        return calculation
