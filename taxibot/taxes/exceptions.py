class TaxError(Exception):
    """Base exception for tax computation errors."""


class CalculationError(TaxError):
    """Raised when a numeric field required by a calculation is missing or invalid."""


class RateTableError(TaxError):
    """Raised when a rate table file cannot be loaded."""
