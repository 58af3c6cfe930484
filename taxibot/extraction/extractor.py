"""AI-powered structuring of fiscal document text."""

import json
from pathlib import Path

from taxibot.extraction.base import BaseDataExtractor
from taxibot.extraction.exceptions import StructuringParseError
from taxibot.extraction.models import DocumentRecord
from taxibot.extraction.nfe_xml import looks_like_nfe_xml, parse_nfe_xml
from taxibot.extraction.validator import build_document_record
from taxibot.llm.client_base import BaseLLMClient
from taxibot.llm.exceptions import LLMError
from taxibot.llm.parsing import ParseFailed, ParseOk, parse_json_object
from taxibot.llm.prompt_loader import load_json_schema, load_prompt_template
from taxibot.logging.logger import Log

_PROMPT_DIR = Path(__file__).parent / "prompts"


class DataExtractor(BaseDataExtractor):
    """Structures document text with the judgment service, NFe XML without it."""

    def __init__(
        self,
        *,
        client: BaseLLMClient,
        model: str,
        temperature: float = 0.0,
        prompt_dir: Path | None = None,
    ) -> None:
        prompt_dir = prompt_dir or _PROMPT_DIR
        self._client = client
        self._model = model
        self._temperature = max(0.0, min(0.2, temperature))
        self._system_prompt = load_prompt_template(prompt_dir / "structuring_system_prompt.txt")
        self._prompt_template = load_prompt_template(prompt_dir / "structuring_prompt.txt")
        self._json_schema = load_json_schema(prompt_dir / "document_schema.json")

    async def extract(self, text: str) -> DocumentRecord:
        if looks_like_nfe_xml(text):
            try:
                record = parse_nfe_xml(text)
            except StructuringParseError as exc:
                Log.warning(f"NFe XML fast path failed, asking the model instead: {exc}")
            else:
                Log.info(f"Structured {record.document_type.value} from XML without model call")
                return record

        try:
            return await self._structure_with_model(text)
        except StructuringParseError as exc:
            Log.warning(f"Structuring fallback: default document record used ({exc})")
            return DocumentRecord.default()

    async def _structure_with_model(self, text: str) -> DocumentRecord:
        prompt = self._build_prompt(text)
        Log.debug(f"Structuring prompt:\n{prompt}")

        try:
            raw_response = await self._client.create_chat_completion(
                model=self._model,
                temperature=self._temperature,
                system_prompt=self._system_prompt,
                user_prompt=prompt,
                json_schema=self._json_schema,
            )
        except LLMError as exc:
            raise StructuringParseError(f"structuring service failed: {exc}") from exc
        Log.debug(f"Structuring raw response:\n{raw_response}")

        match parse_json_object(raw_response):
            case ParseOk(data):
                record = build_document_record(data)
            case ParseFailed(reason):
                raise StructuringParseError(reason)

        Log.info(
            f"Structured {record.document_type.value} document, "
            f"total {record.total_value}, state {record.state}"
        )
        return record

    def _build_prompt(self, text: str) -> str:
        return self._prompt_template.format(
            document_text=text,
            json_schema=json.dumps(self._json_schema, indent=2),
        )
