"""Extraction adapters for unstructured documents.

Provides a base interface, an adapter for OpenAI-compatible chat APIs that
accept inline PDF file parts, and a deterministic mock for testing.
"""

import base64
import json
import os
from abc import ABC, abstractmethod
from typing import Dict, Optional

from document_extraction.prompt_builder import CONTRACT_AWARDS, MARKET_REPORT, ExtractionPrompt


class BaseExtractionAdapter(ABC):
    """Abstract base for all extraction adapters."""

    @abstractmethod
    def extract(self, *, document: bytes, file_name: str, prompt: ExtractionPrompt) -> str:
        """Send a document with instructions and return the raw response text.

        Args:
            document: Raw PDF bytes.
            file_name: Original file name, forwarded to the service.
            prompt: Instructions describing the expected JSON output.

        Returns:
            Raw string response from the model (expected to contain JSON).
        """


class OpenAIExtractionAdapter(BaseExtractionAdapter):
    """Adapter for OpenAI-compatible chat completion APIs.

    The document travels as a base64 ``file`` content part next to the
    text instructions. Transport and API errors are not caught here.
    """

    def __init__(
        self,
        model: str = "gpt-4o",
        max_tokens: int = 16000,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
    ) -> None:
        """Initialise the OpenAI adapter.

        Args:
            model: Model identifier.
            max_tokens: Maximum tokens in the completion.
            api_key: OpenAI API key. Falls back to OPENAI_API_KEY env var.
            base_url: Optional base URL for OpenAI-compatible endpoints.
        """
        from openai import OpenAI

        resolved_key = api_key or os.environ.get("OPENAI_API_KEY", "")
        client_kwargs: dict = {"api_key": resolved_key}
        if base_url:
            client_kwargs["base_url"] = base_url

        self._client = OpenAI(**client_kwargs)
        self._model = model
        self._max_tokens = max_tokens

    def extract(self, *, document: bytes, file_name: str, prompt: ExtractionPrompt) -> str:
        encoded = base64.b64encode(document).decode("ascii")
        response = self._client.chat.completions.create(
            model=self._model,
            messages=[
                {
                    "role": "user",
                    "content": [
                        {
                            "type": "file",
                            "file": {
                                "file_data": f"data:application/pdf;base64,{encoded}",
                                "filename": file_name,
                            },
                        },
                        {"type": "text", "text": prompt.text},
                    ],
                }
            ],
            temperature=0,
            max_completion_tokens=self._max_tokens,
            stream=False,
        )
        return response.choices[0].message.content or ""


# ---------------------------------------------------------------------------
# Fixed mock responses used for local testing.
# ---------------------------------------------------------------------------
_MOCK_RESPONSES: Dict[str, str] = {
    CONTRACT_AWARDS: json.dumps(
        [
            {
                "supplier": "Mock Subsea AS",
                "operator": "Mock Energy",
                "value": "USD 120M",
                "scope": "Mock SURF scope for testing purposes.",
                "region": "North Sea",
                "segment": "SURF",
                "duration": "2026-2028",
            }
        ],
        indent=2,
    ),
    MARKET_REPORT: json.dumps(
        {
            "report_period": "Q1 2026",
            "report_title": "Mock Subsea Market Report",
            "summary": "Mock summary for testing purposes.",
            "highlights": ["Mock highlight for testing purposes."],
            "key_figures": {"total_subsea_capex_usd_bn": 50.0},
            "forecasts": [
                {"year": 2026, "metric": "subsea_spend_usd_bn", "value": 50.0, "unit": "USD bn"}
            ],
        },
        indent=2,
    ),
}


class MockExtractionAdapter(BaseExtractionAdapter):
    """Deterministic adapter that returns a fixed response per prompt kind.

    Used for local testing and CI pipelines where no extraction API is
    available. Tests may pass their own responses.
    """

    def __init__(self, responses: Optional[Dict[str, str]] = None) -> None:
        self._responses = dict(_MOCK_RESPONSES)
        if responses:
            self._responses.update(responses)
        self.calls: list = []

    def extract(self, *, document: bytes, file_name: str, prompt: ExtractionPrompt) -> str:
        """Return the canned response for ``prompt.kind`` regardless of input.

        Args:
            document: Ignored - present only to satisfy the interface.
            file_name: Recorded for assertions.
            prompt: Selects which canned response to return.

        Returns:
            The configured raw response string.
        """
        self.calls.append((file_name, prompt.kind))
        return self._responses.get(prompt.kind, "")
