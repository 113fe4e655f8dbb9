"""
app/services package marker.
"""

from app.services.aggregation_service import ProjectAggregationService, fold_projects
from app.services.document_import_service import DocumentImportService
from app.services.import_orchestrator_service import (
    FastAPIBackgroundTaskExecutor,
    ImportOrchestratorService,
    ImportProcessingError,
    build_import_orchestrator,
)
from app.services.workbook_import_service import WorkbookImportService

__all__ = [
    "DocumentImportService",
    "FastAPIBackgroundTaskExecutor",
    "ImportOrchestratorService",
    "ImportProcessingError",
    "ProjectAggregationService",
    "WorkbookImportService",
    "build_import_orchestrator",
    "fold_projects",
]
