"""AI-powered compliance judgment of structured documents."""

import json
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from taxibot.compliance.exceptions import ValidationParseError
from taxibot.compliance.models import ComplianceResult, ComplianceStatus
from taxibot.extraction.models import DocumentRecord
from taxibot.llm.client_base import BaseLLMClient
from taxibot.llm.exceptions import LLMError
from taxibot.llm.parsing import ParseFailed, ParseOk, parse_json_object
from taxibot.llm.prompt_loader import load_json_schema, load_prompt_template
from taxibot.logging.logger import Log
from taxibot.retrieval.models import TaxRuleExcerpt

_PROMPT_DIR = Path(__file__).parent / "prompts"


def build_compliance_result(data: dict[str, Any]) -> ComplianceResult:
    """Validate a parsed judgment payload.

    Raises:
        ValidationParseError: if status, issues or suggestions are malformed.
    """
    raw_status = data.get("status")
    if not isinstance(raw_status, str):
        raise ValidationParseError("'status' must be a string")
    try:
        status = ComplianceStatus(raw_status.strip().lower())
    except ValueError as exc:
        raise ValidationParseError(f"Unknown compliance status {raw_status!r}") from exc
    return ComplianceResult(
        status=status,
        issues=_string_list(data.get("issues", []), "issues"),
        suggestions=_string_list(data.get("suggestions", []), "suggestions"),
    )


def _string_list(raw: Any, field: str) -> tuple[str, ...]:
    if raw is None:
        return ()
    if not isinstance(raw, list):
        raise ValidationParseError(f"'{field}' must be a list")
    if not all(isinstance(item, str) for item in raw):
        raise ValidationParseError(f"'{field}' must contain only strings")
    return tuple(raw)


class ComplianceValidator:
    """Judges a DocumentRecord against retrieved rules; never raises on bad output."""

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
        self._system_prompt = load_prompt_template(prompt_dir / "compliance_system_prompt.txt")
        self._prompt_template = load_prompt_template(prompt_dir / "compliance_prompt.txt")
        self._json_schema = load_json_schema(prompt_dir / "compliance_schema.json")

    async def validate(
        self,
        record: DocumentRecord,
        rules: Sequence[TaxRuleExcerpt],
    ) -> ComplianceResult:
        try:
            result = await self._judge(record, rules)
        except ValidationParseError as exc:
            Log.warning(f"Compliance fallback: {exc}")
            return ComplianceResult.fallback()
        Log.info(
            f"Compliance check {result.status.value}: "
            f"{len(result.issues)} issues, {len(result.suggestions)} suggestions"
        )
        return result

    async def _judge(
        self,
        record: DocumentRecord,
        rules: Sequence[TaxRuleExcerpt],
    ) -> ComplianceResult:
        prompt = self._prompt_template.format(
            document_json=json.dumps(record.to_dict(), ensure_ascii=False),
            rules_json=json.dumps([rule.to_dict() for rule in rules], ensure_ascii=False),
        )
        Log.debug(f"Compliance prompt:\n{prompt}")
        try:
            raw_response = await self._client.create_chat_completion(
                model=self._model,
                temperature=self._temperature,
                system_prompt=self._system_prompt,
                user_prompt=prompt,
                json_schema=self._json_schema,
            )
        except LLMError as exc:
            raise ValidationParseError(f"judgment service failed: {exc}") from exc
        Log.debug(f"Compliance raw response:\n{raw_response}")

        match parse_json_object(raw_response):
            case ParseOk(data):
                return build_compliance_result(data)
            case ParseFailed(reason):
                raise ValidationParseError(reason)
