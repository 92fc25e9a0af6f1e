"""Access to the user and token tables."""

from __future__ import annotations

import datetime
import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional, Tuple

import pymysql

from cloudstore import mysql_conn

logger = logging.getLogger(__name__)

INSERT_USER_SQL = "insert ignore into tbl_user(`user_name`,`user_pwd`) values(%s,%s)"
SELECT_USER_SQL = "select * from tbl_user where user_name=%s limit 1"
REPLACE_TOKEN_SQL = "replace into tbl_user_token(`user_name`,`user_token`) values(%s,%s)"
SELECT_USER_INFO_SQL = "select user_name,signup_at from tbl_user where user_name=%s limit 1"

_TIME_FORMAT = "%Y-%m-%d %H:%M:%S"


@dataclass
class User:
    """Public profile of a user."""

    username: str = ""
    email: str = ""
    phone: str = ""
    signup_at: str = ""
    last_active_at: str = ""
    status: int = 0


def _as_str(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("utf-8")
    if isinstance(value, datetime.datetime):
        return value.strftime(_TIME_FORMAT)
    return str(value)


def _query(sql: str, params: tuple, fetch: Optional[Callable[[Any], Any]] = None) -> Tuple[int, Any]:
    """Run one statement; give back the affected row count and what fetch read."""
    with mysql_conn.db_conn().cursor() as cursor:
        cursor.execute(sql, params)
        return cursor.rowcount, (fetch(cursor) if fetch else None)


def _guarded(action: str, sql: str, params: tuple, fetch=None) -> Optional[Tuple[int, Any]]:
    """Like _query, but log a database error and give back None instead."""
    try:
        return _query(sql, params, fetch)
    except pymysql.MySQLError as exc:
        logger.error("%s failed: %s", action, exc)
        return None


def user_signup(username: str, passwd: str) -> bool:
    """Create a user; False if the name is taken or the database fails."""
    outcome = _guarded("signup", INSERT_USER_SQL, (username, passwd))
    return outcome is not None and outcome[0] > 0


def user_signin(username: str, encpwd: str) -> bool:
    """Check an encoded password against the stored one."""
    outcome = _guarded("signin", SELECT_USER_SQL, (username,), mysql_conn.parse_rows)
    if outcome is None:
        return False
    rows = outcome[1]
    return bool(rows) and "user_pwd" in rows[0] and _as_str(rows[0]["user_pwd"]) == encpwd


def update_token(username: str, token: str) -> bool:
    """Store the latest token of a user."""
    return _guarded("token update", REPLACE_TOKEN_SQL, (username, token)) is not None


def get_user_info(username: str) -> User:
    """Fetch a user's profile or raise LookupError if there is none."""
    _, row = _query(SELECT_USER_INFO_SQL, (username,), lambda cursor: cursor.fetchone())
    if row is None:
        raise LookupError(f"user {username!r} not found")
    name, signup_at = row
    return User(username=_as_str(name), signup_at=_as_str(signup_at))