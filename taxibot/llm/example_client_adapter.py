"""Offline judgment-service adapter.

Returns canned JSON so the pipeline can run locally without an AI provider.
Implement BaseLLMClient and register the provider in LLMClientFactory to add
a real provider.
"""

import json
from typing import ClassVar

from taxibot.llm.client_base import BaseLLMClient


class ExampleClientAdapter(BaseLLMClient):
    """Adapter that answers every prompt with a fixed JSON payload."""

    DOCUMENT_RESPONSE: ClassVar[dict[str, object]] = {
        "documentType": "NFE",
        "operationType": "VENDA",
        "totalValue": 0,
        "state": "SP",
        "municipality": "São Paulo",
        "taxInfo": {},
        "issueDate": None,
    }

    COMPLIANCE_RESPONSE: ClassVar[dict[str, object]] = {
        "status": "ok",
        "issues": [],
        "suggestions": [],
    }

    async def create_chat_completion(
        self,
        *,
        model: str,
        temperature: float,
        system_prompt: str,
        user_prompt: str,
        json_schema: dict[str, object] | None = None,
    ) -> str:
        _ = model, temperature, user_prompt
        properties = (json_schema or {}).get("properties", {})
        if isinstance(properties, dict) and "status" in properties:
            return json.dumps(self.COMPLIANCE_RESPONSE)
        if "compliance" in system_prompt.lower():
            return json.dumps(self.COMPLIANCE_RESPONSE)
        return json.dumps(self.DOCUMENT_RESPONSE, ensure_ascii=False)
