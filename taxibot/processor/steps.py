import asyncio
from typing import Callable

from taxibot.compliance.validator import ComplianceValidator
from taxibot.database.exceptions import StorageError
from taxibot.database.repositories.documents_repository import DocumentsRepository
from taxibot.extraction.base import BaseDataExtractor
from taxibot.ingestion.base import BaseTextExtractor
from taxibot.logging.logger import Log
from taxibot.processor.pipeline import PipelineContext, PipelineState, PipelineStep
from taxibot.retrieval.exceptions import RetrievalError
from taxibot.retrieval.rule_retriever import RuleRetriever
from taxibot.taxes.registry import TaxCalculatorRegistry

TextExtractorProvider = Callable[[str], BaseTextExtractor]


class ExtractTextStep(PipelineStep):
    state = PipelineState.INGESTING

    def __init__(self, extractor_for: TextExtractorProvider) -> None:
        self._extractor_for = extractor_for

    async def run(self, context: PipelineContext) -> PipelineContext:
        extractor = self._extractor_for(context.mime_type)
        context.extracted_text = await asyncio.to_thread(extractor.extract, context.raw_bytes)
        Log.info(
            f"Extracted {len(context.extracted_text)} chars from "
            f"{len(context.raw_bytes)} bytes ({context.mime_type})"
        )
        return context


class StructureDocumentStep(PipelineStep):
    state = PipelineState.EXTRACTING

    def __init__(self, data_extractor: BaseDataExtractor) -> None:
        self._data_extractor = data_extractor

    async def run(self, context: PipelineContext) -> PipelineContext:
        context.document_record = await self._data_extractor.extract(context.extracted_text)
        return context


class PersistDocumentStep(PipelineStep):
    state = PipelineState.EXTRACTING

    def __init__(self, documents_repo: DocumentsRepository | None) -> None:
        self._documents_repo = documents_repo

    async def run(self, context: PipelineContext) -> PipelineContext:
        if self._documents_repo is None or context.user_id is None:
            return context
        if context.document_record is None:
            raise ValueError("PipelineContext.document_record must be set before persist")
        try:
            context.document_id = await self._documents_repo.insert(
                context.user_id, context.document_record
            )
        except StorageError as exc:
            Log.error(f"Document for user {context.user_id} not stored: {exc}")
        else:
            Log.info(f"Stored document {context.document_id} for user {context.user_id}")
        return context


class RetrieveRulesStep(PipelineStep):
    state = PipelineState.RETRIEVING_RULES

    def __init__(self, rule_retriever: RuleRetriever) -> None:
        self._rule_retriever = rule_retriever

    async def run(self, context: PipelineContext) -> PipelineContext:
        record = context.document_record
        if record is None:
            raise ValueError("PipelineContext.document_record must be set before rule retrieval")
        document_type = record.document_type.value
        query = f"{document_type} {record.operation_type} {record.state}"
        try:
            context.rules = await self._rule_retriever.retrieve(
                query, document_type=document_type, state=record.state
            )
        except RetrievalError as exc:
            Log.warning(f"Rule retrieval failed, continuing without rules: {exc}")
            context.rules = []
        return context


class CalculateTaxesStep(PipelineStep):
    state = PipelineState.CALCULATING

    def __init__(self, registry: TaxCalculatorRegistry) -> None:
        self._registry = registry

    async def run(self, context: PipelineContext) -> PipelineContext:
        if context.document_record is None:
            raise ValueError("PipelineContext.document_record must be set before calculation")
        context.tax_calculation = self._registry.calculate(context.document_record, context.rules)
        Log.info(
            f"Calculated {len(context.tax_calculation.taxes)} taxes, "
            f"total {context.tax_calculation.total_tax}"
        )
        return context


class ValidateComplianceStep(PipelineStep):
    state = PipelineState.VALIDATING

    def __init__(self, validator: ComplianceValidator) -> None:
        self._validator = validator

    async def run(self, context: PipelineContext) -> PipelineContext:
        if context.document_record is None:
            raise ValueError("PipelineContext.document_record must be set before validation")
        context.compliance_result = await self._validator.validate(
            context.document_record, context.rules
        )
        return context
