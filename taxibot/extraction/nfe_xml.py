"""Deterministic structuring of NFe / NFCe XML (SEFAZ `nfeProc` layout).

Authorized XML already carries every field the pipeline needs, so no model
call is made for it. Tag lookup ignores the `http://www.portalfiscal.inf.br/nfe`
namespace.
"""

from typing import Any
from xml.etree import ElementTree

from taxibot.extraction.exceptions import StructuringParseError
from taxibot.extraction.models import DocumentRecord
from taxibot.extraction.validator import build_document_record

NFCE_MODEL = "65"
SIMPLES_NACIONAL_CRT = frozenset({"1", "2"})
_ITEM_FIELDS = {
    "code": "cProd",
    "description": "xProd",
    "ncm": "NCM",
    "quantity": "qCom",
    "unitValue": "vUnCom",
    "totalValue": "vProd",
}


def looks_like_nfe_xml(text: str) -> bool:
    head = text.lstrip()[:2048]
    return head.startswith("<") and ("<nfeProc" in head or "<NFe" in head)


def parse_nfe_xml(text: str) -> DocumentRecord:
    """Build a DocumentRecord from an NFe or NFCe XML document.

    Raises:
        StructuringParseError: if the XML is malformed or has no infNFe block.
    """
    try:
        root = ElementTree.fromstring(text.encode("utf-8"))
    except ElementTree.ParseError as exc:
        raise StructuringParseError(f"Malformed NFe XML: {exc}") from exc

    inf_nfe = _find(root, "infNFe") if _local(root.tag) != "infNFe" else root
    if inf_nfe is None:
        raise StructuringParseError("NFe XML has no infNFe element")

    model = _text(inf_nfe, "ide", "mod")
    is_nfce = model == NFCE_MODEL
    state = (
        _text(inf_nfe, "emit", "enderEmit", "UF")
        if is_nfce
        else _text(inf_nfe, "dest", "enderDest", "UF") or _text(inf_nfe, "emit", "enderEmit", "UF")
    )
    data: dict[str, Any] = {
        "documentType": "NFCE" if is_nfce else "NFE",
        "totalValue": _text(inf_nfe, "total", "ICMSTot", "vNF"),
        "operationType": _operation_type(_text(inf_nfe, "ide", "natOp")),
        "state": state,
        "municipality": _text(inf_nfe, "emit", "enderEmit", "xMun"),
        "issueDate": _text(inf_nfe, "ide", "dhEmi") or _text(inf_nfe, "ide", "dEmi"),
        "accessKey": _text(root, "protNFe", "infProt", "chNFe") or _access_key_from_id(inf_nfe),
        "taxInfo": _tax_info(inf_nfe, is_nfce),
    }
    return build_document_record(data)


def _tax_info(inf_nfe: ElementTree.Element, is_nfce: bool) -> dict[str, Any]:
    declared_fields = {"icms": "vICMS", "pis": "vPIS", "cofins": "vCOFINS"}
    if not is_nfce:
        declared_fields["ipi"] = "vIPI"
    declared = {
        name: value
        for name, tag in declared_fields.items()
        if (value := _text(inf_nfe, "total", "ICMSTot", tag)) is not None
    }
    info: dict[str, Any] = {
        "declaredTaxes": declared,
        "issuerCnpj": _text(inf_nfe, "emit", "CNPJ"),
        "issuerName": _text(inf_nfe, "emit", "xNome"),
        "issuerIe": _text(inf_nfe, "emit", "IE"),
        "recipientCnpj": _text(inf_nfe, "dest", "CNPJ"),
        "recipientName": _text(inf_nfe, "dest", "xNome"),
        "recipientIe": _text(inf_nfe, "dest", "IE"),
        "items": _items(inf_nfe),
    }
    if _text(inf_nfe, "emit", "CRT") in SIMPLES_NACIONAL_CRT:
        info["regime"] = "Simples Nacional"
    return {key: value for key, value in info.items() if value is not None}


def _items(inf_nfe: ElementTree.Element) -> list[dict[str, str]]:
    """Product lines from the `det` elements in document order, values as XML text."""
    items = []
    for det in inf_nfe:
        if _local(det.tag) != "det":
            continue
        item = {
            key: value
            for key, tag in _ITEM_FIELDS.items()
            if (value := _text(det, "prod", tag)) is not None
        }
        if item:
            items.append(item)
    return items


def _operation_type(nat_op: str | None) -> str | None:
    if nat_op is None:
        return None
    return "VENDA" if "VENDA" in nat_op.upper() else nat_op


def _access_key_from_id(inf_nfe: ElementTree.Element) -> str | None:
    raw_id = inf_nfe.get("Id", "")
    return raw_id[3:] if raw_id.startswith("NFe") else None


def _local(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def _child(element: ElementTree.Element, name: str) -> ElementTree.Element | None:
    for child in element:
        if _local(child.tag) == name:
            return child
    return None


def _find(element: ElementTree.Element, name: str) -> ElementTree.Element | None:
    for candidate in element.iter():
        if _local(candidate.tag) == name:
            return candidate
    return None


def _text(element: ElementTree.Element, *path: str) -> str | None:
    node: ElementTree.Element | None = element
    for name in path:
        if node is None:
            return None
        node = _child(node, name) if node is not element else _find(node, name)
    if node is None or node.text is None:
        return None
    return node.text.strip() or None
