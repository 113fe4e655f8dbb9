from __future__ import annotations

import pytest
from sqlalchemy import func, select

from db.models.market_report import Forecast
from db.repositories.datastore import AccumulateRule, ConflictPolicy, SqlAlchemyDatastore
from db.repositories.errors import DatastoreWriteError
from db.session import Database

KEY = ("year", "metric")


def _forecast(value: float, unit: str | None = "USD bn") -> dict:
    return {"year": 2026, "metric": "subsea_spend_usd_bn", "value": value, "unit": unit, "source": "rystad_report"}


def _stored(database: Database) -> list[Forecast]:
    with database.session() as session:
        return list(session.scalars(select(Forecast)).all())


class TestSqlAlchemyDatastore:
    def test_update_policy_overwrites_non_key_columns(self, database: Database) -> None:
        datastore = SqlAlchemyDatastore(database)

        datastore.upsert("forecasts", [_forecast(40.0)], conflict_columns=KEY, policy=ConflictPolicy.UPDATE)
        written = datastore.upsert("forecasts", [_forecast(52.5)], conflict_columns=KEY, policy=ConflictPolicy.UPDATE)

        rows = _stored(database)
        assert written == 1
        assert len(rows) == 1
        assert rows[0].value == 52.5

    def test_ignore_policy_keeps_the_stored_row(self, database: Database) -> None:
        datastore = SqlAlchemyDatastore(database)

        datastore.upsert("forecasts", [_forecast(40.0)], conflict_columns=KEY, policy=ConflictPolicy.IGNORE)
        written = datastore.upsert("forecasts", [_forecast(52.5)], conflict_columns=KEY, policy=ConflictPolicy.IGNORE)

        assert written == 0
        assert _stored(database)[0].value == 40.0

    def test_accumulate_policy_sums_additive_and_fills_missing_text(self, database: Database) -> None:
        datastore = SqlAlchemyDatastore(database)
        rule = AccumulateRule(additive=("value",))

        datastore.upsert("forecasts", [_forecast(40.0, unit=None)], conflict_columns=KEY, policy=ConflictPolicy.ACCUMULATE, accumulate=rule)
        datastore.upsert("forecasts", [_forecast(2.0, unit="USD bn")], conflict_columns=KEY, policy=ConflictPolicy.ACCUMULATE, accumulate=rule)

        stored = _stored(database)[0]
        assert stored.value == 42.0
        assert stored.unit == "USD bn"

    def test_empty_rows_are_a_no_op(self, database: Database) -> None:
        written = SqlAlchemyDatastore(database).upsert(
            "forecasts",
            [],
            conflict_columns=KEY,
            policy=ConflictPolicy.UPDATE,
        )

        assert written == 0

    def test_unknown_table_raises_value_error(self, database: Database) -> None:
        with pytest.raises(ValueError):
            SqlAlchemyDatastore(database).upsert(
                "no_such_table",
                [{"a": 1}],
                conflict_columns=("a",),
                policy=ConflictPolicy.UPDATE,
            )

    def test_constraint_violation_is_wrapped_and_rolled_back(self, database: Database) -> None:
        datastore = SqlAlchemyDatastore(database)
        bad = {"year": 2026, "metric": None, "value": 1.0, "unit": None, "source": "rystad_report"}

        with pytest.raises(DatastoreWriteError) as exc_info:
            datastore.upsert("forecasts", [_forecast(1.0), bad], conflict_columns=KEY, policy=ConflictPolicy.UPDATE)

        assert exc_info.value.table == "forecasts"
        assert exc_info.value.row_count == 2
        with database.session() as session:
            assert session.scalar(select(func.count()).select_from(Forecast)) == 0
