"""
Repository for stored report documents.
"""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from db.models.market_report import Document


class DocumentRepository:
    def __init__(self, session: Session) -> None:
        self._session = session

    def get_by_file_name(self, file_name: str) -> Document | None:
        stmt = (
            select(Document)
            .where(Document.file_name == file_name)
            .order_by(Document.created_at.desc())
            .limit(1)
        )
        return self._session.scalars(stmt).first()

    def save_summary(
        self,
        *,
        file_name: str,
        file_path: str,
        file_type: str | None,
        file_size_bytes: int | None,
        ai_summary: str,
    ) -> Document:
        """
        Update the document stored under ``file_name`` or insert a new one.
        """

        document = self.get_by_file_name(file_name)
        if document is None:
            document = Document(file_name=file_name)
            self._session.add(document)

        document.file_path = file_path
        document.file_type = file_type
        document.file_size_bytes = file_size_bytes
        document.ai_summary = ai_summary
        self._session.flush()
        return document
