"""
Shared fixtures: in-memory SQLite datastore, temp file storage, mock
extraction adapter and an openpyxl workbook builder.
"""

from __future__ import annotations

import io
from collections.abc import Callable, Iterator, Sequence
from pathlib import Path
from typing import Any

import pytest
from openpyxl import Workbook
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

import db.models  # noqa: F401  (registers ORM models on Base.metadata)
from app.config import ExtractionSettings, ImportSettings
from app.services.import_orchestrator_service import ImportOrchestratorService, build_import_orchestrator
from db.base import Base
from db.repositories.storage import LocalFileStorage
from db.session import Database
from document_extraction.adapter import MockExtractionAdapter

WorkbookBuilder = Callable[[dict[str, Sequence[Sequence[Any]]]], bytes]

XMT_HEADERS = [
    "Year",
    "Country",
    "Continent",
    "Development Project",
    "Asset",
    "Operator",
    "XMT Purpose",
    "XMT State",
    "XMTs installed (also future)",
]
SURF_HEADERS = [
    "Year",
    "Country",
    "Development Project",
    "Asset",
    "Operator",
    "SURF Line Design Category",
    "SURF Line Group",
    "KM Surf Lines",
]
UNIT_HEADERS = [
    "Year",
    "Country",
    "Development Project",
    "Asset",
    "Subsea Unit Category",
    "Subsea Units",
]
AWARD_HEADERS = [
    "Year",
    "Country",
    "Development Project",
    "Asset",
    "Operator",
    "SURF Installation Contractor",
    "Facility Category",
    "Field Size Category",
    "XMTs Awarded",
]


@pytest.fixture()
def database() -> Iterator[Database]:
    engine = create_engine(
        "sqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(engine)
    handle = Database(engine)
    try:
        yield handle
    finally:
        handle.dispose()


@pytest.fixture()
def storage(tmp_path: Path) -> LocalFileStorage:
    return LocalFileStorage(tmp_path / "storage")


@pytest.fixture()
def mock_adapter() -> MockExtractionAdapter:
    return MockExtractionAdapter()


@pytest.fixture()
def import_settings() -> ImportSettings:
    return ImportSettings(chunk_size=500, project_merge_policy="replace")


@pytest.fixture()
def orchestrator(
    database: Database,
    storage: LocalFileStorage,
    mock_adapter: MockExtractionAdapter,
    import_settings: ImportSettings,
) -> ImportOrchestratorService:
    return build_import_orchestrator(
        database,
        import_settings=import_settings,
        extraction_settings=ExtractionSettings(adapter="mock"),
        storage=storage,
        extraction_adapter=mock_adapter,
    )


@pytest.fixture()
def build_workbook() -> WorkbookBuilder:
    """Return a builder turning {sheet name: rows} into .xlsx bytes."""

    def _build(sheets: dict[str, Sequence[Sequence[Any]]]) -> bytes:
        workbook = Workbook()
        workbook.remove(workbook.active)
        for name, rows in sheets.items():
            sheet = workbook.create_sheet(title=name)
            for row in rows:
                sheet.append(list(row))
        buffer = io.BytesIO()
        workbook.save(buffer)
        return buffer.getvalue()

    return _build


@pytest.fixture()
def market_workbook(build_workbook: WorkbookBuilder) -> bytes:
    """
    One project (Alpha/A1/NO) across all four sheets, plus a blank-project row.
    """

    return build_workbook(
        {
            "Read me": [["Source", "Rystad"]],
            "XMTs 2025": [
                XMT_HEADERS,
                [2024, "NO", "Europe", "Alpha", "A1", "Equinor", "Production", "Installed", 3],
                [2025, "NO", "Europe", "Alpha", "A1", "Equinor", "Production", "Installed", 2],
                [2025, "NO", "Europe", None, "A9", "Equinor", "Production", "Installed", 7],
            ],
            "Surf lines": [
                SURF_HEADERS,
                [2024, "NO", "Alpha", "A1", "Other Operator", "Rigid", "Flowlines", 12.5],
            ],
            "Subsea units": [
                UNIT_HEADERS,
                [2025, "NO", "Alpha", "A1", "Manifold", 4],
            ],
            "Upcomming awards 04.04.25": [
                AWARD_HEADERS,
                [2027, "NO", "Alpha", "A1", "Equinor", "Subsea7", "Subsea tieback", "Large", 6],
            ],
        }
    )
