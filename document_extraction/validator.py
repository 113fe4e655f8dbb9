"""Validation layer for raw document-extraction output.

Locates the JSON payload in a model response and validates it against the
extraction schemas.
"""

import json
import re
from typing import Any, List, Optional

from pydantic import ValidationError

from document_extraction.schema import ContractAwardRow, MarketReportExtraction


class ExtractionOutputValidationError(Exception):
    """Raised when model output fails parsing or schema validation.

    Attributes:
        stage: Which validation step failed ("json_parse" or "schema").
        errors: List of human-readable error descriptions.
        raw_response: The original string that failed validation.
    """

    def __init__(
        self,
        stage: str,
        errors: List[str],
        raw_response: str,
    ) -> None:
        self.stage = stage
        self.errors = errors
        self.raw_response = raw_response
        message = (
            f"Extraction output validation failed at stage '{stage}': "
            + "; ".join(errors)
        )
        super().__init__(message)


def _strip_markdown_fences(text: str) -> str:
    """Remove optional markdown code fences wrapping JSON.

    Args:
        text: Raw model response string.

    Returns:
        The text with leading/trailing code fences removed, if present.
    """
    stripped = text.strip()
    match = re.match(
        r"^```(?:json)?\s*\n?(.*?)\n?\s*```$",
        stripped,
        re.DOTALL,
    )
    if match:
        return match.group(1).strip()
    return stripped


def _find_balanced(text: str, opener: str, closer: str) -> Optional[str]:
    """Return the first balanced ``opener``...``closer`` span, string-aware.

    Args:
        text: Text that may contain prose around a JSON value.
        opener: "{" or "[".
        closer: "}" or "]".

    Returns:
        The JSON candidate substring, or None when no balanced span exists.
    """
    start = text.find(opener)
    if start < 0:
        return None

    depth = 0
    in_string = False
    escaping = False
    for index in range(start, len(text)):
        char = text[index]
        if in_string:
            if escaping:
                escaping = False
            elif char == "\\":
                escaping = True
            elif char == '"':
                in_string = False
            continue
        if char == '"':
            in_string = True
        elif char == opener:
            depth += 1
        elif char == closer:
            depth -= 1
            if depth == 0:
                return text[start : index + 1]
    return None


def _parse_json(raw_response: str, opener: str, closer: str) -> Any:
    cleaned = _strip_markdown_fences(raw_response or "")
    candidate = cleaned if cleaned.startswith(opener) else _find_balanced(cleaned, opener, closer)
    if candidate is None:
        raise ExtractionOutputValidationError(
            stage="json_parse",
            errors=[f"no JSON value starting with '{opener}' found"],
            raw_response=raw_response,
        )
    try:
        return json.loads(candidate)
    except (json.JSONDecodeError, TypeError) as exc:
        raise ExtractionOutputValidationError(
            stage="json_parse",
            errors=[str(exc)],
            raw_response=raw_response,
        ) from exc


def _schema_errors(exc: ValidationError) -> List[str]:
    return [
        f"{'.'.join(str(loc) for loc in e['loc'])}: {e['msg']}"
        for e in exc.errors()
    ]


def validate_contract_rows(raw_response: str) -> List[ContractAwardRow]:
    """Parse a JSON array of contract-award rows.

    Non-object items in the array are ignored.

    Raises:
        ExtractionOutputValidationError: If no array can be parsed.
    """
    data = _parse_json(raw_response, "[", "]")
    if not isinstance(data, list):
        raise ExtractionOutputValidationError(
            stage="schema",
            errors=["top-level JSON must be an array"],
            raw_response=raw_response,
        )

    try:
        return [ContractAwardRow.model_validate(item) for item in data if isinstance(item, dict)]
    except ValidationError as exc:
        raise ExtractionOutputValidationError(
            stage="schema",
            errors=_schema_errors(exc),
            raw_response=raw_response,
        ) from exc


def validate_market_report(raw_response: str) -> MarketReportExtraction:
    """Parse a single market report JSON object.

    Raises:
        ExtractionOutputValidationError: If no object can be parsed.
    """
    data = _parse_json(raw_response, "{", "}")
    if not isinstance(data, dict):
        raise ExtractionOutputValidationError(
            stage="schema",
            errors=["top-level JSON must be an object"],
            raw_response=raw_response,
        )

    try:
        return MarketReportExtraction.model_validate(data)
    except ValidationError as exc:
        raise ExtractionOutputValidationError(
            stage="schema",
            errors=_schema_errors(exc),
            raw_response=raw_response,
        ) from exc
