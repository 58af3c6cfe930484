"""Parsing of judgment-service output into JSON objects.

Model output is untrusted: it may be wrapped in markdown fences, truncated,
or not JSON at all. Parsing never raises; callers match on the result and
build their fallback on the failed arm.
"""

import json
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class ParseOk:
    data: dict[str, Any]


@dataclass(frozen=True)
class ParseFailed:
    reason: str


ParseResult = ParseOk | ParseFailed


def strip_code_fences(raw: str) -> str:
    cleaned = raw.strip()
    if cleaned.startswith("```"):
        lines = cleaned.splitlines()
        if lines and lines[0].startswith("```"):
            lines = lines[1:]
        if lines and lines[-1].strip() == "```":
            lines = lines[:-1]
        cleaned = "\n".join(lines)
    return cleaned


def parse_json_object(raw: str | None) -> ParseResult:
    if raw is None:
        return ParseFailed("empty response")
    cleaned = strip_code_fences(raw)
    try:
        parsed = json.loads(cleaned)
    except json.JSONDecodeError as exc:
        return ParseFailed(f"invalid JSON response: {exc}")
    if not isinstance(parsed, dict):
        return ParseFailed("JSON response must be an object")
    return ParseOk(parsed)
