import json
from pathlib import Path

from taxibot.llm.exceptions import LLMError


def load_prompt_template(path: Path) -> str:
    """Load a prompt template from a file.

    Returns:
        The raw template string with placeholders.

    Raises:
        LLMError: if the file cannot be read.
    """
    try:
        return path.read_text(encoding="utf-8")
    except OSError as exc:
        raise LLMError(f"Failed to load prompt template: {exc}") from exc


def load_json_schema(path: Path) -> dict[str, object]:
    """Load a JSON schema describing the expected model response.

    Raises:
        LLMError: if the file cannot be read or is not a JSON object.
    """
    try:
        schema = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise LLMError(f"Failed to load JSON schema: {exc}") from exc
    if not isinstance(schema, dict):
        raise LLMError(f"JSON schema in {path} must be an object")
    return schema
