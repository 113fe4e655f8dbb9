"""
app/api/dependencies.py

Shared FastAPI dependencies for import intake.
"""

from __future__ import annotations

from fastapi import Depends, File, HTTPException, Request, UploadFile, status

from app.config import ImportSettings, get_import_settings
from app.services.import_orchestrator_service import ImportOrchestratorService
from app.validators.upload_validator import UploadValidator
from db.session import Database


def get_database(request: Request) -> Database:
    """
    Return the ``Database`` built in the application lifespan.
    """

    database = getattr(request.app.state, "database", None)
    if database is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Database is not initialized.",
        )
    return database


def get_import_orchestrator(request: Request) -> ImportOrchestratorService:
    orchestrator = getattr(request.app.state, "import_orchestrator", None)
    if orchestrator is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Import pipeline is not initialized.",
        )
    return orchestrator


def get_settings() -> ImportSettings:
    return get_import_settings()


def get_upload_validator(settings: ImportSettings = Depends(get_settings)) -> UploadValidator:
    return UploadValidator(storage_bucket=settings.storage_bucket)


def get_named_upload(file: UploadFile = File(...)) -> UploadFile:
    """
    Reject multipart uploads that carry no file name.
    """

    if not (file.filename or "").strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Missing file name.",
        )
    return file
