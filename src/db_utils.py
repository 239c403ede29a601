"""
Shared database utilities.
Single source of truth for PostgreSQL connection-string resolution and
the row fetch used by the insights pipeline.
"""

from __future__ import annotations

import logging
import os
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional

import psycopg2
from psycopg2 import sql
from psycopg2.extras import RealDictCursor

log = logging.getLogger("db_utils")

# Tables the dashboard reads, with the column used for the date window
SOURCE_TABLES = {
    "daily_log": "created_at",
    "journals": "created_at",
    "sleep_export": "created_at",
    "location_log": "created_at",
}


def get_conn_str() -> str:
    """Return PostgreSQL connection string.

    Checks POSTGRES_CONNECTION_STRING first, falls back to DATABASE_URL
    (Heroku standard).  Normalises postgres:// to postgresql:// for psycopg2.
    """
    url = os.getenv("POSTGRES_CONNECTION_STRING") or os.getenv("DATABASE_URL") or ""
    if url.startswith("postgres://"):
        url = "postgresql://" + url[len("postgres://"):]
    return url


def _to_plain(value: Any) -> Any:
    if isinstance(value, Decimal):
        return float(value)
    return value


def fetch_rows(table: str, since: Optional[date] = None,
               conn_str: Optional[str] = None) -> List[Dict[str, Any]]:
    """Fetch all rows of *table* created on or after *since*.

    Timestamps are returned as ``datetime`` objects; numeric columns as
    floats.  Raises RuntimeError when no connection string is configured.
    """
    if table not in SOURCE_TABLES:
        raise ValueError(f"Unsupported table: {table!r}")
    cs = conn_str or get_conn_str()
    if not cs:
        raise RuntimeError("POSTGRES_CONNECTION_STRING is not set")

    date_col = SOURCE_TABLES[table]
    query = sql.SQL("SELECT * FROM {}").format(sql.Identifier(table))
    params: tuple = ()
    if since is not None:
        query = query + sql.SQL(" WHERE {} >= %s").format(sql.Identifier(date_col))
        params = (since,)
    query = query + sql.SQL(" ORDER BY {}").format(sql.Identifier(date_col))

    conn = psycopg2.connect(cs)
    try:
        with conn.cursor(cursor_factory=RealDictCursor) as cur:
            cur.execute(query, params)
            rows = [{k: _to_plain(v) for k, v in dict(row).items()} for row in cur.fetchall()]
    finally:
        conn.close()
    log.info("Fetched %d rows from %s", len(rows), table)
    return rows
