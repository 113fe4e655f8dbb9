"""
app/connectors/workbook_connector.py

Spreadsheet ingestion adapter: binary workbook in, named sheets of row
mappings out.
"""

from __future__ import annotations

import io
import logging
import zipfile
from typing import Any

import pandas as pd
from openpyxl.utils.exceptions import InvalidFileException

logger = logging.getLogger(__name__)

_READ_ERRORS = (ValueError, KeyError, OSError, zipfile.BadZipFile, InvalidFileException)


class WorkbookReadError(RuntimeError):
    """
    Raised when a workbook cannot be opened or a sheet cannot be parsed.
    """


class WorkbookConnector:
    """
    Reads an .xlsx workbook held in memory.

    Rows are mappings from header to cell value; empty cells become None.
    """

    def __init__(self, content: bytes, *, file_name: str = "workbook.xlsx") -> None:
        self._file_name = file_name
        try:
            self._excel = pd.ExcelFile(io.BytesIO(content), engine="openpyxl")
        except _READ_ERRORS as exc:
            raise WorkbookReadError(f"Cannot open workbook {file_name}: {exc}") from exc

    def __enter__(self) -> "WorkbookConnector":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        self._excel.close()

    def list_sheets(self) -> list[str]:
        return [str(name) for name in self._excel.sheet_names]

    def read_sheet(self, sheet_name: str) -> list[dict[str, Any]]:
        if sheet_name not in self._excel.sheet_names:
            return []
        try:
            frame = self._excel.parse(sheet_name, dtype=object)
        except _READ_ERRORS as exc:
            raise WorkbookReadError(
                f"Cannot parse sheet {sheet_name!r} in {self._file_name}: {exc}"
            ) from exc

        frame = frame.dropna(how="all")
        frame.columns = [str(column).strip() for column in frame.columns]
        cleaned = frame.astype(object).where(pd.notna(frame), None)
        rows = cleaned.to_dict(orient="records")
        logger.debug("Read %s row(s) from sheet %r of %s", len(rows), sheet_name, self._file_name)
        return rows
