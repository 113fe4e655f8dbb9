"""
Model package exports.

Import all SQLAlchemy models here so metadata registration and Alembic
autogeneration work without extra imports.
"""

from db.models.contract import Contract
from db.models.import_batch import ImportBatch
from db.models.import_job import ImportJob
from db.models.market_report import Document, Forecast
from db.models.project import Project
from db.models.source_facts import SubseaUnitRecord, SurfLineRecord, UpcomingAwardRecord, XmtRecord

__all__ = [
    "Contract",
    "Document",
    "Forecast",
    "ImportBatch",
    "ImportJob",
    "Project",
    "SubseaUnitRecord",
    "SurfLineRecord",
    "UpcomingAwardRecord",
    "XmtRecord",
]
