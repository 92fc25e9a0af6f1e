"""MySQL connection handling."""

from __future__ import annotations

import threading
from typing import Any

import pymysql

HOST = "127.0.0.1"
PORT = 13306
USER = "root"
PASSWORD = "password"
DATABASE = "fileserver"
CHARSET = "utf8"

_local = threading.local()
_override: Any = None


def db_conn() -> Any:
    """Return the connection in use, opening one for this thread if needed."""
    if _override is not None:
        return _override
    if getattr(_local, "conn", None) is None:
        _local.conn = pymysql.connect(
            host=HOST, port=PORT, user=USER, password=PASSWORD,
            database=DATABASE, charset=CHARSET, autocommit=True,
        )
    return _local.conn


def set_db_conn(conn: Any) -> None:
    """Use ``conn`` for all queries; None drops it and this thread's cached connection."""
    global _override
    _override = conn
    if conn is None:
        _local.conn = None


def parse_rows(cursor: Any) -> list[dict[str, Any]]:
    """Rows of an executed cursor as dicts, leaving out NULL columns."""
    if cursor.description is None:
        return []
    columns = [column[0] for column in cursor.description]
    return [
        {name: value for name, value in zip(columns, row) if value is not None}
        for row in cursor.fetchall()
    ]