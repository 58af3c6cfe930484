"""Coerces parsed structuring-service JSON into a DocumentRecord.

The service output is loosely shaped: keys may come in camelCase or
snake_case, numbers as strings, locations missing. Every gap is filled with
the visible default instead of rejecting the whole record.
"""

from collections.abc import Mapping
from typing import Any

from taxibot.extraction.models import (
    DEFAULT_MUNICIPALITY,
    DEFAULT_OPERATION_TYPE,
    DEFAULT_STATE,
    DocumentRecord,
    DocumentType,
)
from taxibot.taxes.amounts import coerce_amount

_FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    "documentType": ("documentType", "document_type", "type", "tipoDocumento"),
    "totalValue": ("totalValue", "total_value", "valorTotal", "value"),
    "operationType": ("operationType", "operation_type", "operation", "naturezaOperacao"),
    "state": ("state", "uf", "UF"),
    "municipality": ("municipality", "city", "municipio"),
    "taxInfo": ("taxInfo", "tax_info", "taxes", "impostos"),
    "issueDate": ("issueDate", "issue_date", "date", "dataEmissao"),
    "accessKey": ("accessKey", "access_key", "chaveAcesso"),
}


def build_document_record(data: Mapping[str, Any]) -> DocumentRecord:
    """Build a well-formed DocumentRecord from loosely shaped JSON."""
    tax_info = _build_tax_info(_lookup(data, "taxInfo"))
    regime = _lookup(data, "regime") if "regime" not in tax_info else None
    if isinstance(regime, str) and regime.strip():
        tax_info["regime"] = regime.strip()
    return DocumentRecord(
        document_type=DocumentType.parse(_lookup(data, "documentType")),
        total_value=coerce_amount(_lookup(data, "totalValue"), "totalValue"),
        operation_type=_text(_lookup(data, "operationType"), DEFAULT_OPERATION_TYPE),
        state=_state(_lookup(data, "state")),
        municipality=_text(_lookup(data, "municipality"), DEFAULT_MUNICIPALITY),
        tax_info=tax_info,
        issue_date=_optional_text(_lookup(data, "issueDate")),
        access_key=_optional_text(_lookup(data, "accessKey")),
    )


def _lookup(data: Mapping[str, Any], field: str) -> Any:
    for alias in _FIELD_ALIASES.get(field, (field,)):
        if alias in data and data[alias] is not None:
            return data[alias]
    return None


def _text(raw: Any, default: str) -> str:
    if isinstance(raw, str) and raw.strip():
        return raw.strip()
    return default


def _optional_text(raw: Any) -> str | None:
    if isinstance(raw, str) and raw.strip():
        return raw.strip()
    return None


def _state(raw: Any) -> str:
    state = _text(raw, DEFAULT_STATE).upper()
    if len(state) != 2 or not state.isalpha():
        return DEFAULT_STATE
    return state


def _build_tax_info(raw: Any) -> dict[str, Any]:
    if not isinstance(raw, Mapping):
        return {}
    return {str(key): value for key, value in raw.items()}
