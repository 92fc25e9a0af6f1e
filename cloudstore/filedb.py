"""Access to the file table."""

from __future__ import annotations

import logging
from dataclasses import dataclass

import pymysql

from cloudstore import mysql_conn

logger = logging.getLogger(__name__)

INSERT_FILE_SQL = (
    "insert ignore into tbl_file(`file_sha1`,`file_name`,`file_size`,`file_addr`,`status`) "
    "values (%s,%s,%s,%s,1)"
)
SELECT_FILE_SQL = (
    "select file_sha1,file_addr,file_name,file_size "
    "from tbl_file where file_sha1=%s and status=1 limit 1"
)


@dataclass
class TableFile:
    """A row of the file table; nullable columns are None when NULL."""

    file_hash: str
    file_name: str | None = None
    file_size: int | None = None
    file_addr: str | None = None


class FileMetaNotFound(LookupError):
    """No active file has the requested hash."""


def _text(value):
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("utf-8")
    return None if value is None else str(value)


def on_file_upload_finished(filehash: str, filename: str, filesize: int, fileaddr: str) -> bool:
    """Record a finished upload; duplicates are ignored. False on a database error."""
    try:
        with mysql_conn.db_conn().cursor() as cursor:
            cursor.execute(INSERT_FILE_SQL, (filehash, filename, filesize, fileaddr))
            affected = cursor.rowcount
    except pymysql.MySQLError as exc:
        logger.error("sql err: %s", exc)
        return False
    if affected <= 0:
        logger.info("file with hash %s already recorded", filehash)
    return True


def get_file_meta(filehash: str) -> TableFile:
    """Fetch the active file with this hash or raise FileMetaNotFound."""
    with mysql_conn.db_conn().cursor() as cursor:
        cursor.execute(SELECT_FILE_SQL, (filehash,))
        row = cursor.fetchone()
    if row is None:
        raise FileMetaNotFound(filehash)
    file_hash, file_addr, file_name, file_size = row
    return TableFile(
        _text(file_hash) or "",
        _text(file_name),
        None if file_size is None else int(file_size),
        _text(file_addr),
    )