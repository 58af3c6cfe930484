import asyncio
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from taxibot.compliance.models import ComplianceResult, ComplianceStatus
from taxibot.compliance.validator import ComplianceValidator
from taxibot.database.exceptions import StorageError
from taxibot.database.repositories.documents_repository import DocumentsRepository
from taxibot.extraction.base import BaseDataExtractor
from taxibot.extraction.models import DocumentRecord, DocumentType
from taxibot.extraction.validator import build_document_record
from taxibot.ingestion.exceptions import TextExtractionError
from taxibot.processor.processor import Processor, build_processor
from taxibot.processor.steps import (
    CalculateTaxesStep,
    ExtractTextStep,
    PersistDocumentStep,
    RetrieveRulesStep,
    StructureDocumentStep,
    ValidateComplianceStep,
)
from taxibot.retrieval.exceptions import RetrievalError
from taxibot.retrieval.models import TaxRuleExcerpt
from taxibot.retrieval.rule_retriever import RuleRetriever
from taxibot.taxes.registry import TaxCalculatorRegistry

RECORD = DocumentRecord(
    document_type=DocumentType.NFE,
    total_value=Decimal("1000"),
    operation_type="VENDA",
    state="SP",
)
RULE = TaxRuleExcerpt(
    source_uri="https://www.confaz.fazenda.gov.br/convenio",
    text="Alíquota de ICMS 18% em operações internas",
    relevance_score=0.87,
)


def _make_pipeline(
    documents_repo: MagicMock | None = None,
) -> tuple[Processor, MagicMock, MagicMock, MagicMock, MagicMock, list[str]]:
    calls: list[str] = []

    text_extractor = MagicMock()
    text_extractor.extract.side_effect = lambda raw: calls.append("ingest") or "NFe text"
    data_extractor = MagicMock(spec=BaseDataExtractor)
    data_extractor.extract = AsyncMock(
        side_effect=lambda text: calls.append("extract") or RECORD
    )
    rule_retriever = MagicMock(spec=RuleRetriever)
    rule_retriever.retrieve = AsyncMock(
        side_effect=lambda *args, **kwargs: calls.append("retrieve") or [RULE]
    )
    validator = MagicMock(spec=ComplianceValidator)
    validator.validate = AsyncMock(
        side_effect=lambda record, rules: calls.append("validate")
        or ComplianceResult(status=ComplianceStatus.OK)
    )

    steps = [
        ExtractTextStep(lambda mime_type: text_extractor),
        StructureDocumentStep(data_extractor),
        PersistDocumentStep(documents_repo),
        RetrieveRulesStep(rule_retriever),
        CalculateTaxesStep(TaxCalculatorRegistry()),
        ValidateComplianceStep(validator),
    ]
    return (
        Processor(steps=steps),
        text_extractor,
        data_extractor,
        rule_retriever,
        validator,
        calls,
    )


class TestProcessorPipeline:
    def test_runs_all_stages_in_order(self) -> None:
        processor, text_extractor, data_extractor, rule_retriever, validator, calls = (
            _make_pipeline()
        )

        result = asyncio.run(processor.process(b"%PDF-fake", "application/pdf"))

        assert calls == ["ingest", "extract", "retrieve", "validate"]
        text_extractor.extract.assert_called_once_with(b"%PDF-fake")
        data_extractor.extract.assert_awaited_once_with("NFe text")
        rule_retriever.retrieve.assert_awaited_once_with(
            "NFE VENDA SP", document_type="NFE", state="SP"
        )
        validator.validate.assert_awaited_once_with(RECORD, [RULE])
        assert result.document_record == RECORD
        assert result.applied_rules == (RULE,)

    def test_result_carries_calculation_and_compliance(self) -> None:
        processor, *_ = _make_pipeline()

        result = asyncio.run(processor.process(b"x", "application/pdf")).to_dict()

        assert result["taxCalculation"]["taxes"] == {
            "ICMS": 180.0,
            "IPI": 0.0,
            "PIS": 16.5,
            "COFINS": 76.0,
        }
        assert result["complianceCheck"]["status"] == "ok"
        assert result["applicableRules"][0]["sourceUri"] == RULE.source_uri

    def test_retrieval_failure_continues_without_rules(self) -> None:
        processor, _, _, rule_retriever, validator, _ = _make_pipeline()
        rule_retriever.retrieve.side_effect = RetrievalError("Search request failed: 503")

        with patch("taxibot.processor.steps.Log") as mock_log:
            result = asyncio.run(processor.process(b"x", "application/pdf"))

        assert result.applied_rules == ()
        assert result.tax_calculation.taxes["ICMS"] == Decimal("180.00")
        validator.validate.assert_awaited_once_with(RECORD, [])
        mock_log.warning.assert_called_once()

    def test_absurd_extracted_total_completes_with_zero_taxes(self) -> None:
        processor, _, data_extractor, _, _, _ = _make_pipeline()
        with patch("taxibot.taxes.amounts.Log"):
            data_extractor.extract.side_effect = None
            data_extractor.extract.return_value = build_document_record(
                {"documentType": "NFE", "totalValue": 1e30, "state": "SP"}
            )

        result = asyncio.run(processor.process(b"x", "application/pdf"))

        assert result.document_record.total_value == Decimal("0")
        assert result.tax_calculation.total_tax == Decimal("0")
        assert set(result.tax_calculation.taxes.values()) == {Decimal("0")}

    def test_ingestion_failure_fails_run_and_skips_later_stages(self) -> None:
        processor, text_extractor, data_extractor, _, validator, _ = _make_pipeline()
        text_extractor.extract.side_effect = TextExtractionError("pdfplumber extraction failed")

        with patch("taxibot.processor.processor.Log") as mock_log:
            with pytest.raises(TextExtractionError):
                asyncio.run(processor.process(b"broken", "application/pdf"))

        data_extractor.extract.assert_not_called()
        validator.validate.assert_not_called()
        mock_log.error.assert_called_once()
        assert "while ingesting" in mock_log.error.call_args[0][0]

    def test_unexpected_validation_error_propagates(self) -> None:
        processor, _, _, _, validator, _ = _make_pipeline()
        validator.validate.side_effect = RuntimeError("boom")

        with patch("taxibot.processor.processor.Log") as mock_log:
            with pytest.raises(RuntimeError, match="boom"):
                asyncio.run(processor.process(b"x", "application/pdf"))

        assert "while validating" in mock_log.error.call_args[0][0]


class TestPersistDocumentStep:
    def test_stores_record_when_user_given(self) -> None:
        repo = MagicMock(spec=DocumentsRepository)
        repo.insert = AsyncMock(return_value=42)
        processor, *_ = _make_pipeline(documents_repo=repo)

        asyncio.run(processor.process(b"x", "application/pdf", user_id=7))

        repo.insert.assert_awaited_once_with(7, RECORD)

    def test_skips_anonymous_runs(self) -> None:
        repo = MagicMock(spec=DocumentsRepository)
        repo.insert = AsyncMock(return_value=42)
        processor, *_ = _make_pipeline(documents_repo=repo)

        asyncio.run(processor.process(b"x", "application/pdf"))

        repo.insert.assert_not_called()

    def test_storage_failure_does_not_fail_run(self) -> None:
        repo = MagicMock(spec=DocumentsRepository)
        repo.insert = AsyncMock(side_effect=StorageError("connection lost"))
        processor, *_ = _make_pipeline(documents_repo=repo)

        with patch("taxibot.processor.steps.Log") as mock_log:
            result = asyncio.run(processor.process(b"x", "application/pdf", user_id=7))

        assert result.document_record == RECORD
        mock_log.error.assert_called_once()


class TestBuildProcessor:
    def test_wires_all_steps(self) -> None:
        settings = MagicMock(
            llm_provider="example",
            llm_api_key="k",
            llm_base_url="",
            llm_model_name="gpt-4o-mini",
            llm_temperature=0.0,
            llm_timeout_seconds=30,
            embedding_model_name="text-embedding-3-small",
            search_api_key="s",
            search_base_url="https://search.example",
            search_result_count=10,
            search_timeout_seconds=15,
            rate_tables_path="",
        )
        with patch("taxibot.retrieval.embeddings.openai.AsyncOpenAI"):
            processor = build_processor(settings)

        step_types = [type(step) for step in processor._steps]
        assert step_types == [
            ExtractTextStep,
            StructureDocumentStep,
            PersistDocumentStep,
            RetrieveRulesStep,
            CalculateTaxesStep,
            ValidateComplianceStep,
        ]
