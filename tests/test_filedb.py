import pymysql
import pytest

from cloudstore import filedb, mysql_conn
from cloudstore.filedb import FileMetaNotFound, TableFile

COLUMNS = ["file_sha1", "file_addr", "file_name", "file_size"]


class ScriptedDB:
    """Connection and cursor in one, answering each query from a script."""

    def __init__(self, *script):
        self.script = list(script)
        self.executed = []
        self.rowcount = -1
        self.description = None
        self.rows = []

    def cursor(self):
        return self

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def execute(self, sql, params=None):
        self.executed.append((sql, params))
        step = self.script.pop(0)
        if isinstance(step, Exception):
            raise step
        columns, rows, self.rowcount = step
        self.rows = list(rows)
        self.description = [(c,) + (None,) * 6 for c in columns] or None
        return self.rowcount

    def fetchone(self):
        return self.rows.pop(0) if self.rows else None

    def fetchall(self):
        taken, self.rows = self.rows, []
        return taken


@pytest.fixture
def install():
    def _install(*script):
        db = ScriptedDB(*script)
        mysql_conn.set_db_conn(db)
        return db

    yield _install
    mysql_conn.set_db_conn(None)


@pytest.mark.parametrize("affected", [1, 0])
def test_upload_finished_is_success(install, affected):
    db = install(([], [], affected))
    assert filedb.on_file_upload_finished("h1", "a.txt", 10, "/tmp/a.txt") is True
    sql, params = db.executed[0]
    assert "insert ignore into tbl_file" in sql
    assert params == ("h1", "a.txt", 10, "/tmp/a.txt")


def test_upload_finished_db_error(install):
    install(pymysql.OperationalError(2013, "lost"))
    assert filedb.on_file_upload_finished("h1", "a.txt", 10, "") is False


@pytest.mark.parametrize(
    "row,expected",
    [
        (("h2", "/data/b.bin", "b.bin", 42), TableFile("h2", "b.bin", 42, "/data/b.bin")),
        ((b"h3", None, None, None), TableFile("h3", None, None, None)),
    ],
)
def test_get_file_meta(install, row, expected):
    db = install((COLUMNS, [row], 1))
    assert filedb.get_file_meta("h2") == expected
    assert db.executed[0][1] == ("h2",)


def test_get_file_meta_missing(install):
    install((COLUMNS, [], 0))
    with pytest.raises(FileMetaNotFound):
        filedb.get_file_meta("absent")


def test_get_file_meta_db_error_propagates(install):
    install(pymysql.ProgrammingError(1064, "syntax"))
    with pytest.raises(pymysql.MySQLError):
        filedb.get_file_meta("h4")