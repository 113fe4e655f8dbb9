"""
app/services/workbook_import_service.py

Spreadsheet import path: sheets → normalized rows → source tables →
project aggregates → forecast contracts.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Sequence

from app.connectors.workbook_connector import WorkbookConnector
from app.domain.contract import CONTRACT_CONFLICT_KEY
from app.domain.import_summary import BatchStats
from app.domain.source_rows import ROW_TYPES, SHAPE_ORDER, AwardForecastRow, SourceRow, SourceShape
from app.mappers.contract_mapper import project_award_contracts
from app.mappers.row_normalizer import normalize_rows
from app.mappers.sheet_classifier import DEFAULT_SHEET_ROLES, SheetRole, classify_sheets
from app.repositories.chunked_upsert_repository import ChunkedUpsertRepository
from app.services.aggregation_service import ProjectAggregationService
from db.repositories.datastore import ConflictPolicy

logger = logging.getLogger(__name__)

CONTRACT_TABLE = "contracts"


class WorkbookImportService:
    """
    Imports one market workbook.

    Batch totals count source-fact rows only; project and contract writes are
    reported per table.
    """

    def __init__(
        self,
        *,
        writer: ChunkedUpsertRepository,
        aggregation: ProjectAggregationService,
        sheet_roles: Sequence[SheetRole] = DEFAULT_SHEET_ROLES,
    ) -> None:
        self._writer = writer
        self._aggregation = aggregation
        self._sheet_roles = tuple(sheet_roles)

    def read_rows(self, content: bytes, *, file_name: str) -> dict[SourceShape, list[SourceRow]]:
        """
        Open the workbook and normalize every classified sheet.
        """

        rows_by_shape: dict[SourceShape, list[SourceRow]] = {}
        with WorkbookConnector(content, file_name=file_name) as workbook:
            sheet_names = workbook.list_sheets()
            for shape, sheet_name in classify_sheets(sheet_names, self._sheet_roles).items():
                if sheet_name is None:
                    logger.warning("No %s sheet in %s (sheets=%s)", shape.value, file_name, sheet_names)
                    rows_by_shape[shape] = []
                    continue
                raw_rows = workbook.read_sheet(sheet_name)
                rows_by_shape[shape] = normalize_rows(shape, raw_rows)
                logger.info(
                    "Sheet %r → %s: %s/%s row(s) kept",
                    sheet_name,
                    shape.value,
                    len(rows_by_shape[shape]),
                    len(raw_rows),
                )
        return rows_by_shape

    def import_workbook(
        self,
        content: bytes,
        *,
        file_name: str,
        batch_id: uuid.UUID,
    ) -> BatchStats:
        rows_by_shape = self.read_rows(content, file_name=file_name)
        stats = BatchStats()

        for shape in SHAPE_ORDER:
            rows = rows_by_shape.get(shape, [])
            row_type = ROW_TYPES[shape]
            result = self._writer.upsert(
                row_type.table,
                [row.to_record(batch_id) for row in rows],
                conflict_columns=row_type.conflict_key,
                additive_columns=row_type.additive_columns,
                policy=ConflictPolicy.UPDATE,
            )
            stats.record(result, rows=len(rows))

        projects, project_result = self._aggregation.aggregate(rows_by_shape)
        stats.record(project_result, rows=len(projects), counted=False)

        awards = [row for row in rows_by_shape.get(SourceShape.AWARDS, []) if isinstance(row, AwardForecastRow)]
        contracts = project_award_contracts(awards)
        contract_result = self._writer.upsert(
            CONTRACT_TABLE,
            [contract.to_record() for contract in contracts],
            conflict_columns=CONTRACT_CONFLICT_KEY,
            policy=ConflictPolicy.UPDATE,
        )
        stats.record(contract_result, rows=len(contracts), counted=False)
        return stats
