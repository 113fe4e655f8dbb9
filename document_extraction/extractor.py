"""Document extractor used by the import pipeline.

Wraps an adapter with prompts, validation and retry. Output that still
cannot be parsed after every retry degrades to an empty result; adapter
transport errors propagate to the caller.
"""

import logging
from typing import List, Optional

from document_extraction.adapter import BaseExtractionAdapter
from document_extraction.prompt_builder import ExtractionPromptBuilder
from document_extraction.retry import ExtractionRetryExhaustedError, extract_with_retry
from document_extraction.schema import ContractAwardRow, MarketReportExtraction
from document_extraction.validator import validate_contract_rows, validate_market_report

logger = logging.getLogger(__name__)


class DocumentExtractor:
    """Typed extraction of contract-award tables and market reports."""

    def __init__(
        self,
        adapter: BaseExtractionAdapter,
        *,
        max_retries: int = 1,
        prompt_builder: Optional[ExtractionPromptBuilder] = None,
    ) -> None:
        self._adapter = adapter
        self._max_retries = max_retries
        self._prompts = prompt_builder or ExtractionPromptBuilder()

    def extract_contract_rows(self, document: bytes, file_name: str) -> List[ContractAwardRow]:
        try:
            return extract_with_retry(
                self._adapter,
                document=document,
                file_name=file_name,
                prompt=self._prompts.contract_awards(),
                validate=validate_contract_rows,
                max_retries=self._max_retries,
            )
        except ExtractionRetryExhaustedError as exc:
            logger.warning("No contract rows extracted from %s: %s", file_name, exc)
            return []

    def extract_market_report(self, document: bytes, file_name: str) -> MarketReportExtraction:
        try:
            return extract_with_retry(
                self._adapter,
                document=document,
                file_name=file_name,
                prompt=self._prompts.market_report(),
                validate=validate_market_report,
                max_retries=self._max_retries,
            )
        except ExtractionRetryExhaustedError as exc:
            logger.warning("No market report content extracted from %s: %s", file_name, exc)
            return MarketReportExtraction.empty()
