"""
app/config.py

Application-level configuration helpers.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from db.config import load_env_files

_ALLOWED_MERGE_POLICIES = {"replace", "accumulate"}
_ALLOWED_EXTRACTION_ADAPTERS = {"openai", "mock"}


@lru_cache(maxsize=1)
def _load_env_once() -> None:
    """
    Ensure project `.env` files are loaded once before reading app settings.
    """

    load_env_files()


def _get_bool_env(name: str, default: bool) -> bool:
    """
    Read a boolean from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    return raw_value.strip().lower() in {"1", "true", "yes", "on"}


def _get_int_env(name: str, default: int) -> int:
    """
    Read an integer from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return int(raw_value)
    except ValueError:
        return default


def _get_str_env(name: str, default: str) -> str:
    """
    Read a string from environment variables with fallback.
    """

    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return default
    stripped = value.strip()
    return stripped if stripped else default


def _get_optional_str_env(name: str) -> str | None:
    """
    Read an optional string value from environment variables.
    """

    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return None
    stripped = value.strip()
    return stripped if stripped else None


def _get_choice_env(name: str, default: str, allowed: set[str]) -> str:
    """
    Read a lower-cased string that must be one of ``allowed``.
    """

    value = _get_str_env(name, default).lower()
    if value not in allowed:
        raise RuntimeError(f"{name}='{value}' is not valid. Allowed values: {sorted(allowed)}.")
    return value


@dataclass(frozen=True)
class ImportSettings:
    """
    Runtime settings for the import pipeline and upload intake.
    """

    chunk_size: int = 500
    project_merge_policy: str = "replace"
    storage_root: str = "data/imports"
    storage_bucket: str = "imports"
    max_excel_bytes: int = 50 * 1024 * 1024
    max_pdf_bytes: int = 25 * 1024 * 1024
    status_list_limit: int = 40


@dataclass(frozen=True)
class ExtractionSettings:
    """
    Document-extraction adapter settings.
    """

    adapter: str = "openai"
    model: str = "gpt-4o"
    max_tokens: int = 16000
    api_key: str | None = None
    base_url: str | None = None
    max_retries: int = 1


@dataclass(frozen=True)
class SchedulerSettings:
    """
    Pending-job sweep settings.
    """

    sweep_enabled: bool = False
    sweep_interval_seconds: int = 60
    sweep_batch_size: int = 20


@lru_cache(maxsize=1)
def get_import_settings() -> ImportSettings:
    """
    Return cached import settings from environment variables.
    """

    return ImportSettings(
        chunk_size=max(1, _get_int_env("IMPORT_CHUNK_SIZE", 500)),
        project_merge_policy=_get_choice_env(
            "IMPORT_PROJECT_MERGE_POLICY",
            "replace",
            _ALLOWED_MERGE_POLICIES,
        ),
        storage_root=_get_str_env("IMPORT_STORAGE_ROOT", "data/imports"),
        storage_bucket=_get_str_env("IMPORT_STORAGE_BUCKET", "imports"),
        max_excel_bytes=max(1, _get_int_env("IMPORT_MAX_EXCEL_BYTES", 50 * 1024 * 1024)),
        max_pdf_bytes=max(1, _get_int_env("IMPORT_MAX_PDF_BYTES", 25 * 1024 * 1024)),
        status_list_limit=max(1, _get_int_env("IMPORT_STATUS_LIST_LIMIT", 40)),
    )


@lru_cache(maxsize=1)
def get_extraction_settings() -> ExtractionSettings:
    """
    Return cached document-extraction settings from environment variables.
    """

    return ExtractionSettings(
        adapter=_get_choice_env("EXTRACTION_ADAPTER", "openai", _ALLOWED_EXTRACTION_ADAPTERS),
        model=_get_str_env("EXTRACTION_MODEL", "gpt-4o"),
        max_tokens=max(1, _get_int_env("EXTRACTION_MAX_TOKENS", 16000)),
        api_key=_get_optional_str_env("OPENAI_API_KEY"),
        base_url=_get_optional_str_env("OPENAI_BASE_URL"),
        max_retries=max(0, _get_int_env("EXTRACTION_MAX_RETRIES", 1)),
    )


@lru_cache(maxsize=1)
def get_scheduler_settings() -> SchedulerSettings:
    """
    Return cached pending-job sweep settings.
    """

    return SchedulerSettings(
        sweep_enabled=_get_bool_env("IMPORT_SWEEP_ENABLED", False),
        sweep_interval_seconds=max(5, _get_int_env("IMPORT_SWEEP_INTERVAL_SECONDS", 60)),
        sweep_batch_size=max(1, _get_int_env("IMPORT_SWEEP_BATCH_SIZE", 20)),
    )


def get_log_level() -> str:
    return _get_str_env("LOG_LEVEL", "INFO").upper()
