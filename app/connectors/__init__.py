"""
app/connectors package marker.
"""

from app.connectors.workbook_connector import WorkbookConnector, WorkbookReadError

__all__ = [
    "WorkbookConnector",
    "WorkbookReadError",
]
