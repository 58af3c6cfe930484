from decimal import Decimal

import pytest

from taxibot.extraction.models import DocumentRecord, DocumentType


class TestDocumentTypeParse:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("NFE", DocumentType.NFE),
            ("nfse", DocumentType.NFSE),
            ("NF-e", DocumentType.NFE),
            ("NFC-e", DocumentType.NFCE),
            ("CT-e", DocumentType.CTE),
            ("nf_se", DocumentType.NFSE),
        ],
    )
    def test_parses_known_labels(self, raw: str, expected: DocumentType) -> None:
        assert DocumentType.parse(raw) is expected

    @pytest.mark.parametrize("raw", ["recibo", "", None, 55])
    def test_unknown_defaults_to_nfe(self, raw: object) -> None:
        assert DocumentType.parse(raw) is DocumentType.NFE


class TestDocumentRecord:
    def test_default_record(self) -> None:
        record = DocumentRecord.default()
        assert record.document_type is DocumentType.NFE
        assert record.total_value == Decimal("0")
        assert record.operation_type == "VENDA"
        assert record.state == "SP"
        assert record.municipality == "São Paulo"
        assert dict(record.tax_info) == {}

    def test_tax_info_is_read_only(self) -> None:
        source = {"regime": "Simples Nacional"}
        record = DocumentRecord(tax_info=source)
        source["regime"] = "Lucro Real"
        assert record.regime == "Simples Nacional"
        with pytest.raises(TypeError):
            record.tax_info["regime"] = "Lucro Real"  # type: ignore[index]

    def test_regime_is_none_when_missing(self) -> None:
        assert DocumentRecord().regime is None

    def test_to_dict_uses_camel_case(self) -> None:
        record = DocumentRecord(
            document_type=DocumentType.NFSE,
            total_value=Decimal("1500.50"),
            municipality="Campinas",
            tax_info={"serviceCode": "1401"},
        )
        assert record.to_dict() == {
            "documentType": "NFSE",
            "totalValue": 1500.5,
            "operationType": "VENDA",
            "state": "SP",
            "municipality": "Campinas",
            "taxInfo": {"serviceCode": "1401"},
            "issueDate": None,
            "accessKey": None,
        }
