"""Access to the per-user file table."""

from __future__ import annotations

import datetime
import logging
from dataclasses import dataclass

import pymysql

from cloudstore import mysql_conn

logger = logging.getLogger(__name__)

INSERT_USER_FILE_SQL = (
    "insert ignore into tbl_user_file(`user_name`,`file_sha1`,`file_name`,`file_size`,`upload_at`)"
    "values(%s,%s,%s,%s,%s)"
)
SELECT_USER_FILES_SQL = (
    "select file_sha1,file_name,file_size,upload_at,last_update "
    "from tbl_user_file where user_name=%s limit %s"
)


@dataclass
class UserFile:
    """A file in a user's listing."""

    user_name: str = ""
    file_hash: str = ""
    file_name: str = ""
    file_size: int = 0
    upload_at: str = ""
    last_updated: str = ""


def _text(value) -> str:
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("utf-8")
    if isinstance(value, datetime.datetime):
        return value.strftime("%Y-%m-%d %H:%M:%S")
    return str(value)


def on_user_file_upload_finished(username: str, filehash: str, filename: str, filesize: int) -> bool:
    """Add a file to a user's listing. False on a database error."""
    try:
        with mysql_conn.db_conn().cursor() as cursor:
            cursor.execute(
                INSERT_USER_FILE_SQL,
                (username, filehash, filename, filesize, datetime.datetime.now()),
            )
    except pymysql.MySQLError as exc:
        logger.error("user file insert failed: %s", exc)
        return False
    return True


def query_user_file_metas(username: str, limit: int) -> list[UserFile]:
    """List up to ``limit`` files of a user; a row with NULL columns ends the listing."""
    with mysql_conn.db_conn().cursor() as cursor:
        cursor.execute(SELECT_USER_FILES_SQL, (username, limit))
        rows = cursor.fetchall()
    files: list[UserFile] = []
    for row in rows:
        if None in row:
            logger.error("unreadable user file row for %s", username)
            break
        file_hash, file_name, file_size, upload_at, last_update = row
        files.append(UserFile(
            file_hash=_text(file_hash),
            file_name=_text(file_name),
            file_size=int(file_size),
            upload_at=_text(upload_at),
            last_updated=_text(last_update),
        ))
    return files