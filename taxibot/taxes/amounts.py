"""Decimal helpers shared by the calculators and record coercion."""

import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from taxibot.logging.logger import Log
from taxibot.taxes.exceptions import CalculationError

CENTS = Decimal("0.01")
ZERO = Decimal("0")
# Amounts at or above this are rejected so quantizing to cents stays within
# the default decimal precision.
MAX_AMOUNT = Decimal("1e15")

_CURRENCY_NOISE = re.compile(r"[R$\s]")


def quantize(amount: Decimal) -> Decimal:
    return amount.quantize(CENTS, rounding=ROUND_HALF_UP)


def percent_of(base: Decimal, rate_percent: Decimal) -> Decimal:
    return quantize(base * rate_percent / Decimal(100))


def to_decimal(value: object) -> Decimal:
    """Convert a JSON-ish value to Decimal.

    Accepts ints, floats, Decimals and strings in either "1234.56" or the
    Brazilian "1.234,56" notation, optionally prefixed with "R$".
    When a string carries both "," and ".", whichever comes last is the
    decimal separator and the other one groups thousands. A separator that
    repeats ("1.234.567") only groups thousands.

    Raises:
        CalculationError: if the value is missing or not numeric.
    """
    if value is None or isinstance(value, bool):
        raise CalculationError(f"not a number: {value!r}")
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, int):
        result = Decimal(value)
    elif isinstance(value, float):
        result = Decimal(repr(value))
    elif isinstance(value, str):
        result = _parse_decimal_string(value)
    else:
        raise CalculationError(f"not a number: {value!r}")
    if not result.is_finite():
        raise CalculationError(f"not a finite number: {value!r}")
    return result


def _parse_decimal_string(raw: str) -> Decimal:
    text = _CURRENCY_NOISE.sub("", raw)
    if "," in text and "." in text:
        # The separator that appears last marks the decimals.
        grouping = "." if text.rfind(",") > text.rfind(".") else ","
        text = text.replace(grouping, "")
    elif text.count(",") > 1 or text.count(".") > 1:
        text = text.replace(",", "").replace(".", "")
    text = text.replace(",", ".")
    try:
        return Decimal(text)
    except InvalidOperation as exc:
        raise CalculationError(f"not a number: {raw!r}") from exc


def coerce_amount(value: object, field_name: str) -> Decimal:
    """Non-negative amount for a record field.

    Missing, invalid, negative or out-of-range (>= MAX_AMOUNT) values -> 0.
    """
    if value is None:
        return ZERO
    try:
        amount = to_decimal(value)
    except CalculationError as exc:
        Log.warning(f"Field '{field_name}' treated as 0: {exc}")
        return ZERO
    if amount < ZERO:
        Log.warning(f"Field '{field_name}' is negative ({amount}), treated as 0")
        return ZERO
    if amount >= MAX_AMOUNT:
        Log.warning(f"Field '{field_name}' is out of range ({amount}), treated as 0")
        return ZERO
    return amount
