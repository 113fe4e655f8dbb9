"""Retry logic for extraction formatting errors.

Retries only on JSON parse or schema validation failures.
Does NOT retry on adapter transport errors.
"""

import logging
from typing import Callable, List, TypeVar

from document_extraction.adapter import BaseExtractionAdapter
from document_extraction.prompt_builder import ExtractionPrompt
from document_extraction.validator import ExtractionOutputValidationError

logger = logging.getLogger(__name__)

_RETRYABLE_STAGES = frozenset({"json_parse", "schema"})

T = TypeVar("T")


class ExtractionRetryExhaustedError(Exception):
    """Raised when all retry attempts fail validation.

    Attributes:
        attempts: Total number of attempts made (initial + retries).
        last_error: The validation error from the final attempt.
        history: Validation errors from every failed attempt.
    """

    def __init__(
        self,
        attempts: int,
        last_error: ExtractionOutputValidationError,
        history: List[ExtractionOutputValidationError],
    ) -> None:
        self.attempts = attempts
        self.last_error = last_error
        self.history = history
        super().__init__(
            f"Extraction output validation failed after {attempts} attempt(s). "
            f"Last error: {last_error}"
        )


def extract_with_retry(
    adapter: BaseExtractionAdapter,
    *,
    document: bytes,
    file_name: str,
    prompt: ExtractionPrompt,
    validate: Callable[[str], T],
    max_retries: int = 1,
) -> T:
    """Extract document content with retry on formatting errors.

    Args:
        adapter: An extraction adapter.
        document: Raw document bytes.
        file_name: Original file name.
        prompt: Instructions for the expected output.
        validate: Parses the raw response, raising
            ``ExtractionOutputValidationError`` when it cannot.
        max_retries: Maximum number of *additional* attempts after the
            first failure. Total attempts = 1 + max_retries.

    Returns:
        The value produced by ``validate``.

    Raises:
        ExtractionOutputValidationError: If a non-retryable validation error occurs.
        ExtractionRetryExhaustedError: If all attempts fail with retryable errors.
    """
    errors: List[ExtractionOutputValidationError] = []
    total_attempts = 1 + max(0, max_retries)

    for attempt in range(1, total_attempts + 1):
        raw = adapter.extract(document=document, file_name=file_name, prompt=prompt)

        try:
            result = validate(raw)
            if attempt > 1:
                logger.info(
                    "Extraction output validated on attempt %d/%d",
                    attempt,
                    total_attempts,
                )
            return result

        except ExtractionOutputValidationError as exc:
            if exc.stage not in _RETRYABLE_STAGES:
                raise

            errors.append(exc)
            logger.warning(
                "Attempt %d/%d for %s failed at stage '%s': %s",
                attempt,
                total_attempts,
                file_name,
                exc.stage,
                "; ".join(exc.errors),
            )

    raise ExtractionRetryExhaustedError(
        attempts=total_attempts,
        last_error=errors[-1],
        history=errors,
    )
