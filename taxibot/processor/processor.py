from functools import partial
from pathlib import Path

from taxibot.compliance.validator import ComplianceValidator
from taxibot.config.settings import Settings
from taxibot.database.connection import Database
from taxibot.database.repositories.documents_repository import DocumentsRepository
from taxibot.extraction.extractor import DataExtractor
from taxibot.ingestion.factory import TextExtractorFactory
from taxibot.llm.factory import LLMClientFactory
from taxibot.logging.logger import Log
from taxibot.processor.models import PipelineResult
from taxibot.processor.pipeline import PipelineContext, PipelineState, PipelineStep
from taxibot.processor.steps import (
    CalculateTaxesStep,
    ExtractTextStep,
    PersistDocumentStep,
    RetrieveRulesStep,
    StructureDocumentStep,
    ValidateComplianceStep,
)
from taxibot.retrieval.embeddings import OpenAIEmbeddingsAdapter
from taxibot.retrieval.rule_retriever import RuleRetriever
from taxibot.retrieval.search_client import BraveSearchClient
from taxibot.taxes.rate_tables import RateTables
from taxibot.taxes.registry import TaxCalculatorRegistry


class Processor:
    """Orchestrates the document tax pipeline.

    Pipeline: ingest -> structure -> (persist) -> retrieve rules -> calculate -> validate.
    Steps run strictly in order; a step that raises fails the whole run and
    no result is built. Degraded stages handle their own fallbacks.
    """

    def __init__(self, steps: list[PipelineStep]) -> None:
        self._steps = steps

    async def process(
        self,
        raw_bytes: bytes,
        mime_type: str,
        user_id: int | None = None,
    ) -> PipelineResult:
        """Run the full pipeline for one document."""
        context = PipelineContext(raw_bytes=raw_bytes, mime_type=mime_type, user_id=user_id)
        Log.info(f"Processing {mime_type} document ({len(raw_bytes)} bytes)")
        try:
            for step in self._steps:
                context.advance(step.state)
                Log.debug(f"Pipeline state: {context.state.value} ({type(step).__name__})")
                context = await step.run(context)
        except Exception as exc:
            failed_in = context.state
            context.error_message = str(exc)
            context.advance(PipelineState.FAILED)
            Log.error(f"Pipeline failed while {failed_in.value}: {exc}")
            raise
        context.advance(PipelineState.DONE)
        result = context.to_result()
        Log.info(
            f"Pipeline done: {result.document_record.document_type.value}, "
            f"compliance {result.compliance_result.status.value}, "
            f"{len(result.applied_rules)} rules"
        )
        return result


def build_processor(
    settings: Settings,
    database: Database | None = None,
) -> Processor:
    """Build a Processor with all required adapters."""
    llm_client = LLMClientFactory.create(settings)
    model = LLMClientFactory.resolve_model_name(settings)
    temperature = LLMClientFactory.resolve_temperature(settings)

    rate_tables = (
        RateTables.from_file(Path(settings.rate_tables_path))
        if settings.rate_tables_path
        else RateTables()
    )
    rule_retriever = RuleRetriever(
        search_client=BraveSearchClient(
            api_key=settings.search_api_key,
            base_url=settings.search_base_url,
            result_count=settings.search_result_count,
            timeout_seconds=settings.search_timeout_seconds,
        ),
        embeddings_client=OpenAIEmbeddingsAdapter(
            api_key=settings.llm_api_key,
            model=settings.embedding_model_name,
            timeout_seconds=settings.llm_timeout_seconds,
            base_url=LLMClientFactory.resolve_embeddings_base_url(settings),
        ),
    )
    documents_repo = DocumentsRepository(database) if database is not None else None

    steps: list[PipelineStep] = [
        ExtractTextStep(partial(TextExtractorFactory.create, settings)),
        StructureDocumentStep(
            DataExtractor(client=llm_client, model=model, temperature=temperature)
        ),
        PersistDocumentStep(documents_repo),
        RetrieveRulesStep(rule_retriever),
        CalculateTaxesStep(TaxCalculatorRegistry(rate_tables=rate_tables)),
        ValidateComplianceStep(
            ComplianceValidator(client=llm_client, model=model, temperature=temperature)
        ),
    ]
    return Processor(steps=steps)
