"""Jurisdiction rate lookup for ICMS (state) and ISS (municipality).

Rates are illustrative percentages. A JSON file with the same shape as
DEFAULT_TABLES can replace the built-in table:

    {
      "icms": {"default": {"standard": 18, "reduced": 12},
               "states": {"RJ": {"*": {"standard": 20, "reduced": 13}}}},
      "iss": {"default": 3, "municipalities": {"são paulo": {"*": 5}}}
    }

Within a state or municipality, an operation or service-code entry wins
over the "*" entry.
"""

import json
from dataclasses import dataclass
from decimal import Decimal
from pathlib import Path
from typing import Any

from taxibot.taxes.amounts import to_decimal
from taxibot.taxes.exceptions import CalculationError, RateTableError

WILDCARD = "*"

DEFAULT_TABLES: dict[str, Any] = {
    "icms": {
        "default": {"standard": 18, "reduced": 12},
        "states": {
            "SP": {"VENDA": {"standard": 18, "reduced": 12}},
            "RJ": {WILDCARD: {"standard": 20, "reduced": 13}},
        },
    },
    "iss": {
        "default": 3,
        "municipalities": {"são paulo": {WILDCARD: 5}},
    },
}


@dataclass(frozen=True)
class IcmsRates:
    standard: Decimal
    reduced: Decimal


class RateTables:
    """Read-only ICMS / ISS rate lookup shared by all pipeline runs."""

    def __init__(self, tables: dict[str, Any] | None = None) -> None:
        tables = tables if tables is not None else DEFAULT_TABLES
        icms = tables.get("icms", {})
        iss = tables.get("iss", {})
        try:
            self._icms_default = self._icms_rates(
                icms.get("default", DEFAULT_TABLES["icms"]["default"])
            )
            self._icms: dict[str, dict[str, IcmsRates]] = {
                state.upper(): {
                    operation.upper(): self._icms_rates(rates)
                    for operation, rates in operations.items()
                }
                for state, operations in icms.get("states", {}).items()
            }
            self._iss_default = to_decimal(iss.get("default", DEFAULT_TABLES["iss"]["default"]))
            self._iss: dict[str, dict[str, Decimal]] = {
                municipality.casefold(): {
                    str(code): to_decimal(rate) for code, rate in codes.items()
                }
                for municipality, codes in iss.get("municipalities", {}).items()
            }
        except (AttributeError, KeyError, TypeError, CalculationError) as exc:
            raise RateTableError(f"Invalid rate table: {exc}") from exc

    @classmethod
    def from_file(cls, path: Path) -> "RateTables":
        """Load tables from a JSON file.

        Raises:
            RateTableError: if the file cannot be read or has the wrong shape.
        """
        try:
            tables = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise RateTableError(f"Failed to load rate tables from {path}: {exc}") from exc
        if not isinstance(tables, dict):
            raise RateTableError(f"Rate tables in {path} must be a JSON object")
        return cls(tables)

    def icms(self, state: str, operation: str) -> IcmsRates:
        operations = self._icms.get(state.strip().upper())
        if operations is None:
            return self._icms_default
        return (
            operations.get(operation.strip().upper())
            or operations.get(WILDCARD)
            or self._icms_default
        )

    def iss(self, municipality: str, service_code: str) -> Decimal:
        codes = self._iss.get(municipality.strip().casefold())
        if codes is None:
            return self._iss_default
        rate = codes.get(service_code.strip())
        if rate is None:
            rate = codes.get(WILDCARD, self._iss_default)
        return rate

    @staticmethod
    def _icms_rates(raw: dict[str, Any]) -> IcmsRates:
        return IcmsRates(
            standard=to_decimal(raw["standard"]),
            reduced=to_decimal(raw["reduced"]),
        )
