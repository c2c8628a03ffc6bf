"""
Row-Set Query

Runs ad-hoc SQL over in-memory rows (filter, aggregate, project). The
default engine loads the rows into an in-memory SQLite database through
pandas and SQLAlchemy and exposes them as table `data`:

    SELECT region, SUM(total) AS total FROM data GROUP BY region

`FROM ?` is accepted as an alias for `FROM data`. Parameters bind
positionally (`?`, list params) or by name (`:name`, dict params).
"""

import json
import logging
import re
from typing import Any, Protocol

import pandas as pd
from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import StaticPool

from dashboard_builder.core.exceptions import QueryTransformError

logger = logging.getLogger(__name__)

ROWS_TABLE = "data"

_TABLE_PLACEHOLDER_RE = re.compile(r"\b(FROM|JOIN)\s+\?", re.IGNORECASE)


class RowSetQueryEngine(Protocol):
    """Anything that can run a query over a list of records."""

    def query(self, sql: str, rows: list[dict[str, Any]], params: Any = None) -> list[dict[str, Any]]:
        ...


def to_rows(data: Any) -> list[dict[str, Any]]:
    """
    Coerce fetched data into queryable records.

    Non-list values become a single row; non-dict rows are wrapped as
    {"value": row}.
    """
    items = data if isinstance(data, list) else [data]
    return [item if isinstance(item, dict) else {"value": item} for item in items]


def _flatten_value(value: Any) -> Any:
    if isinstance(value, (dict, list)):
        return json.dumps(value, default=str)
    return value


class SQLiteRowSetEngine:
    """In-memory SQLite implementation of RowSetQueryEngine."""

    def query(self, sql: str, rows: list[dict[str, Any]], params: Any = None) -> list[dict[str, Any]]:
        sql = _TABLE_PLACEHOLDER_RE.sub(lambda m: f"{m.group(1)} {ROWS_TABLE}", sql)

        frame = pd.DataFrame([{k: _flatten_value(v) for k, v in row.items()} for row in rows])
        if frame.columns.empty:
            # SQLite cannot create a table without columns
            frame = pd.DataFrame({"value": pd.Series([None] * len(rows), dtype=object)})

        if isinstance(params, list):
            params = tuple(params)

        engine = create_engine("sqlite://", poolclass=StaticPool)
        try:
            with engine.connect() as conn:
                frame.to_sql(ROWS_TABLE, conn, index=False)
                result = pd.read_sql_query(sql, conn, params=params)
        finally:
            engine.dispose()

        result = result.astype(object).where(pd.notna(result), None)
        return result.to_dict(orient="records")


_default_engine: RowSetQueryEngine = SQLiteRowSetEngine()


def apply_query_transform(
    data: Any,
    sql: str,
    params: Any = None,
    engine: RowSetQueryEngine | None = None,
) -> list[dict[str, Any]]:
    """
    Run `sql` over `data` treated as a single table.

    Raises:
        QueryTransformError: The query could not be executed
    """
    rows = to_rows(data)
    try:
        return (engine or _default_engine).query(sql, rows, params)
    except QueryTransformError:
        raise
    except (SQLAlchemyError, pd.errors.DatabaseError, ValueError, TypeError) as e:
        raise QueryTransformError(f"Query transform failed: {e}") from e
