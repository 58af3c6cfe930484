from taxibot.taxes.models import TaxCalculation
from taxibot.taxes.rate_tables import RateTables
from taxibot.taxes.regimes import RegimeAdjuster, RegimeRule
from taxibot.taxes.registry import TaxCalculatorRegistry

__all__ = [
    "RateTables",
    "RegimeAdjuster",
    "RegimeRule",
    "TaxCalculation",
    "TaxCalculatorRegistry",
]
