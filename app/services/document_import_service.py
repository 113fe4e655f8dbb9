"""
app/services/document_import_service.py

Extracted-document import paths: contract-award tables and market reports.
"""

from __future__ import annotations

import logging

from app.domain.contract import CONTRACT_CONFLICT_KEY
from app.domain.import_summary import BatchStats, UpsertResult
from app.domain.market_report import FORECAST_CONFLICT_KEY
from app.mappers.contract_mapper import map_contract_awards
from app.mappers.forecast_mapper import build_market_report, market_report_markdown
from app.repositories.chunked_upsert_repository import ChunkedUpsertRepository
from db.repositories.datastore import ConflictPolicy
from db.repositories.document_repository import DocumentRepository
from db.session import Database
from document_extraction.extractor import DocumentExtractor

logger = logging.getLogger(__name__)

CONTRACT_TABLE = "contracts"
FORECAST_TABLE = "forecasts"
DOCUMENT_TABLE = "documents"
PDF_MIME_TYPE = "application/pdf"


class DocumentImportService:
    def __init__(
        self,
        *,
        database: Database,
        writer: ChunkedUpsertRepository,
        extractor: DocumentExtractor,
    ) -> None:
        self._database = database
        self._writer = writer
        self._extractor = extractor

    def import_contract_awards(self, content: bytes, *, file_name: str) -> BatchStats:
        """
        Extract award rows and upsert them as awarded contracts.

        ``total`` is the number of extracted rows.
        """

        rows = self._extractor.extract_contract_rows(content, file_name)
        contracts = map_contract_awards(rows)
        logger.info("Extracted %s contract row(s) from %s", len(rows), file_name)

        result = self._writer.upsert(
            CONTRACT_TABLE,
            [contract.to_record() for contract in contracts],
            conflict_columns=CONTRACT_CONFLICT_KEY,
            policy=ConflictPolicy.UPDATE,
        )
        stats = BatchStats()
        stats.record(result, rows=len(rows))
        return stats

    def import_market_report(
        self,
        content: bytes,
        *,
        file_name: str,
        file_path: str,
    ) -> BatchStats:
        """
        Store the report summary document and its forecast datapoints.

        The document counts as one record, so ``total`` is forecasts + 1.
        A failure to store the document fails the import.
        """

        extraction = self._extractor.extract_market_report(content, file_name)
        report = build_market_report(extraction, file_name=file_name)

        with self._database.session() as session:
            DocumentRepository(session).save_summary(
                file_name=file_name,
                file_path=file_path,
                file_type=PDF_MIME_TYPE,
                file_size_bytes=len(content),
                ai_summary=market_report_markdown(report, file_name=file_name),
            )
            session.commit()

        forecast_result = self._writer.upsert(
            FORECAST_TABLE,
            [point.to_record() for point in report.forecasts],
            conflict_columns=FORECAST_CONFLICT_KEY,
            policy=ConflictPolicy.UPDATE,
        )
        logger.info(
            "Market report %s: %s forecast(s), imported=%s skipped=%s",
            file_name,
            len(report.forecasts),
            forecast_result.imported,
            forecast_result.skipped,
        )

        stats = BatchStats()
        stats.record(forecast_result, rows=len(report.forecasts))
        stats.record(UpsertResult(table=DOCUMENT_TABLE, imported=1), rows=1)
        return stats
