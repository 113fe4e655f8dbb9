"""
db/repositories/datastore.py

Single-table upsert-by-key over an explicitly constructed ``Database``.

Every call opens its own session and commits on success, so one failed
statement never poisons the rows already written by earlier calls.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any, Protocol

from sqlalchemy import Table, func
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError

from db.base import Base
from db.repositories.errors import DatastoreWriteError
from db.session import Database

logger = logging.getLogger(__name__)

_IMMUTABLE_COLUMNS = frozenset({"id", "created_at"})


class ConflictPolicy(str, Enum):
    """What happens when an incoming row collides with a stored one."""

    UPDATE = "update"
    IGNORE = "ignore"
    ACCUMULATE = "accumulate"


@dataclass(frozen=True)
class AccumulateRule:
    """
    Column roles for ``ConflictPolicy.ACCUMULATE``.

    ``additive`` columns are summed with the stored value, ``least`` and
    ``greatest`` columns widen a stored range. Any other non-key column keeps
    the stored value and is only filled when the stored value is NULL.
    """

    additive: tuple[str, ...] = ()
    least: tuple[str, ...] = ()
    greatest: tuple[str, ...] = ()


class Datastore(Protocol):
    def upsert(
        self,
        table: str,
        rows: Sequence[Mapping[str, Any]],
        *,
        conflict_columns: Sequence[str],
        policy: ConflictPolicy,
        accumulate: AccumulateRule | None = None,
    ) -> int:
        """Write ``rows`` in one statement and return how many rows were written."""
        ...


class SqlAlchemyDatastore:
    """
    Datastore backed by PostgreSQL (or SQLite for local runs and tests).
    """

    def __init__(self, database: Database) -> None:
        dialect = database.dialect_name
        if dialect == "postgresql":
            self._insert = postgresql.insert
        elif dialect == "sqlite":
            self._insert = sqlite.insert
        else:
            raise RuntimeError(f"Upsert is not supported on dialect {dialect!r}.")
        self._database = database
        self._least = func.least if dialect == "postgresql" else func.min
        self._greatest = func.greatest if dialect == "postgresql" else func.max

    def upsert(
        self,
        table: str,
        rows: Sequence[Mapping[str, Any]],
        *,
        conflict_columns: Sequence[str],
        policy: ConflictPolicy,
        accumulate: AccumulateRule | None = None,
    ) -> int:
        if not rows:
            return 0

        target = self._resolve_table(table)
        payloads = [self._with_primary_key(target, row) for row in rows]
        stmt = self._insert(target).values(payloads)

        if policy is ConflictPolicy.IGNORE:
            stmt = stmt.on_conflict_do_nothing(index_elements=list(conflict_columns))
        else:
            set_ = self._build_set(
                target,
                stmt.excluded,
                columns=payloads[0].keys(),
                conflict_columns=conflict_columns,
                policy=policy,
                accumulate=accumulate or AccumulateRule(),
            )
            stmt = stmt.on_conflict_do_update(index_elements=list(conflict_columns), set_=set_)
        stmt = stmt.returning(target.c.id)

        with self._database.session() as session:
            try:
                written = len(session.execute(stmt).all())
                session.commit()
            except SQLAlchemyError as exc:
                session.rollback()
                raise DatastoreWriteError(
                    table=table,
                    row_count=len(payloads),
                    message=str(exc.__cause__ or exc).splitlines()[0],
                ) from exc

        logger.debug("Upserted %s/%s row(s) into %s (%s)", written, len(payloads), table, policy.value)
        return written

    @staticmethod
    def _resolve_table(table: str) -> Table:
        try:
            return Base.metadata.tables[table]
        except KeyError as exc:
            raise ValueError(f"Unknown table: {table}") from exc

    @staticmethod
    def _with_primary_key(target: Table, row: Mapping[str, Any]) -> dict[str, Any]:
        payload = dict(row)
        if "id" in target.c and payload.get("id") is None:
            payload["id"] = uuid.uuid4()
        return payload

    def _build_set(
        self,
        target: Table,
        excluded: Any,
        *,
        columns: Any,
        conflict_columns: Sequence[str],
        policy: ConflictPolicy,
        accumulate: AccumulateRule,
    ) -> dict[str, Any]:
        set_: dict[str, Any] = {}
        for name in columns:
            if name in conflict_columns or name in _IMMUTABLE_COLUMNS:
                continue
            stored = target.c[name]
            incoming = excluded[name]

            if policy is ConflictPolicy.UPDATE:
                set_[name] = incoming
            elif name in accumulate.additive:
                set_[name] = func.coalesce(stored, 0) + func.coalesce(incoming, 0)
            elif name in accumulate.least:
                set_[name] = self._least(
                    func.coalesce(stored, incoming), func.coalesce(incoming, stored)
                )
            elif name in accumulate.greatest:
                set_[name] = self._greatest(
                    func.coalesce(stored, incoming), func.coalesce(incoming, stored)
                )
            else:
                set_[name] = func.coalesce(stored, incoming)

        if "updated_at" in target.c:
            set_["updated_at"] = func.now()
        if not set_:
            # DO UPDATE still has to assign something for RETURNING to report the row.
            key = conflict_columns[0]
            set_[key] = excluded[key]
        return set_
