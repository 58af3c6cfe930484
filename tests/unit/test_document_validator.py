from decimal import Decimal
from unittest.mock import patch

from taxibot.extraction.models import DocumentType
from taxibot.extraction.validator import build_document_record


class TestBuildDocumentRecord:
    def test_builds_complete_record(self) -> None:
        record = build_document_record(
            {
                "documentType": "NFSE",
                "totalValue": 1000,
                "operationType": "PRESTACAO DE SERVICO",
                "state": "rj",
                "municipality": "Rio de Janeiro",
                "taxInfo": {"serviceCode": "1401"},
                "issueDate": "2024-02-01",
            }
        )
        assert record.document_type is DocumentType.NFSE
        assert record.total_value == Decimal("1000")
        assert record.operation_type == "PRESTACAO DE SERVICO"
        assert record.state == "RJ"
        assert record.municipality == "Rio de Janeiro"
        assert record.tax_info["serviceCode"] == "1401"
        assert record.issue_date == "2024-02-01"

    def test_empty_object_yields_defaults(self) -> None:
        record = build_document_record({})
        assert record.document_type is DocumentType.NFE
        assert record.total_value == Decimal("0")
        assert record.state == "SP"
        assert record.municipality == "São Paulo"
        assert record.operation_type == "VENDA"

    def test_accepts_snake_case_and_portuguese_keys(self) -> None:
        record = build_document_record(
            {"document_type": "CT-e", "valorTotal": "1.234,56", "uf": "MG", "municipio": "BH"}
        )
        assert record.document_type is DocumentType.CTE
        assert record.total_value == Decimal("1234.56")
        assert record.state == "MG"
        assert record.municipality == "BH"

    def test_invalid_state_falls_back(self) -> None:
        assert build_document_record({"state": "São Paulo"}).state == "SP"

    def test_non_numeric_total_becomes_zero_with_warning(self) -> None:
        with patch("taxibot.taxes.amounts.Log") as mock_log:
            record = build_document_record({"totalValue": "about a thousand"})
        assert record.total_value == Decimal("0")
        mock_log.warning.assert_called_once()
        assert "totalValue" in mock_log.warning.call_args[0][0]

    def test_negative_total_becomes_zero_with_warning(self) -> None:
        with patch("taxibot.taxes.amounts.Log") as mock_log:
            record = build_document_record({"totalValue": -50})
        assert record.total_value == Decimal("0")
        assert "negative" in mock_log.warning.call_args[0][0]

    def test_huge_total_becomes_zero_with_warning(self) -> None:
        with patch("taxibot.taxes.amounts.Log") as mock_log:
            record = build_document_record({"totalValue": 1e30})
        assert record.total_value == Decimal("0")
        assert "out of range" in mock_log.warning.call_args[0][0]

    def test_us_formatted_total_string(self) -> None:
        assert build_document_record({"totalValue": "1,234.56"}).total_value == Decimal(
            "1234.56"
        )

    def test_top_level_regime_moves_into_tax_info(self) -> None:
        record = build_document_record({"regime": "Simples Nacional"})
        assert record.regime == "Simples Nacional"

    def test_tax_info_regime_wins_over_top_level(self) -> None:
        record = build_document_record(
            {"regime": "Lucro Real", "taxInfo": {"regime": "Simples Nacional"}}
        )
        assert record.regime == "Simples Nacional"

    def test_non_mapping_tax_info_is_dropped(self) -> None:
        record = build_document_record({"taxInfo": ["ICMS", "PIS"]})
        assert dict(record.tax_info) == {}
