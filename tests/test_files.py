import io
import json

import pytest

from cloudstore import meta, mysql_conn, util
from cloudstore.server import create_app

TOKEN = "token" * 8


class FakeCursor:
    def __init__(self, db):
        self.db = db
        self.rowcount = 0
        self.description = None
        self._rows = []

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def execute(self, sql, params):
        self.rowcount, self._rows = self.db.run(sql, params)

    def fetchone(self):
        return self._rows[0] if self._rows else None

    def fetchall(self):
        return list(self._rows)


class FakeDB:
    def __init__(self):
        self.files = {}
        self.user_files = []

    def cursor(self):
        return FakeCursor(self)

    def run(self, sql, params):
        if sql.startswith("insert ignore into tbl_file("):
            sha, name, size, addr = params
            if sha in self.files:
                return 0, []
            self.files[sha] = (sha, addr, name, size)
            return 1, []
        if sql.startswith("select file_sha1,file_addr"):
            row = self.files.get(params[0])
            return (1, [row]) if row else (0, [])
        if sql.startswith("insert ignore into tbl_user_file("):
            self.user_files.append(params)
            return 1, []
        if sql.startswith("select file_sha1,file_name,file_size,upload_at"):
            user, limit = params
            rows = [
                (p[1], p[2], p[3], "2020-01-01 00:00:00", "2020-01-02 00:00:00")
                for p in self.user_files
                if p[0] == user
            ][:limit]
            return len(rows), rows
        raise AssertionError(sql)


@pytest.fixture
def db():
    fake = FakeDB()
    mysql_conn.set_db_conn(fake)
    yield fake
    mysql_conn.set_db_conn(None)


@pytest.fixture
def client(tmp_path):
    static = tmp_path / "static"
    static.mkdir()
    uploads = tmp_path / "uploads"
    uploads.mkdir()
    app = create_app()
    app.config["STATIC_DIR"] = str(static)
    app.config["UPLOAD_DIR"] = str(uploads)
    return app.test_client()


def test_upload_get_without_page(client):
    assert client.get("/file/upload").data == b"internal server error"


def test_upload_post_stores_file(client, db, tmp_path):
    resp = client.post(
        "/file/upload?username=alice",
        data={"file": (io.BytesIO(b"hello world"), "a.txt")},
        content_type="multipart/form-data",
    )
    assert resp.status_code == 302
    assert resp.headers["Location"].endswith("/static/view/home.html")
    assert (tmp_path / "uploads" / "a.txt").read_bytes() == b"hello world"
    sha = util.sha1(b"hello world")
    assert db.files[sha][2] == "a.txt"
    assert db.files[sha][3] == 11
    assert db.user_files[0][:4] == ("alice", sha, "a.txt", 11)


def test_upload_suc(client):
    assert client.get("/file/upload/suc").data == b"Upload finished"


def test_meta_handler_reads_db(client, db):
    db.files["abc"] = ("abc", "/x", "n.bin", 5)
    body = json.loads(client.get("/file/meta", query_string={"filehash": "abc"}).data)
    assert body["FileSha1"] == "abc"
    assert body["FileName"] == "n.bin"
    assert body["FileSize"] == 5


def test_meta_handler_unknown_is_empty(client, db):
    body = json.loads(client.get("/file/meta", query_string={"filehash": "zzz"}).data)
    assert body["FileSha1"] == ""


def test_query_empty_is_null(client, db):
    resp = client.get("/file/query", query_string={"username": "alice", "limit": "5"})
    assert resp.data == b"null"


def test_query_lists_files(client, db):
    db.user_files.append(("alice", "h1", "f1", 3, None))
    db.user_files.append(("alice", "h2", "f2", 4, None))
    body = json.loads(client.get("/file/query", query_string={"username": "alice", "limit": "1"}).data)
    assert [f["FileHash"] for f in body] == ["h1"]


def test_download(client, tmp_path):
    target = tmp_path / "d.bin"
    target.write_bytes(b"\x00\x01payload")
    meta.update_file_meta(meta.FileMeta(file_sha1="dl", file_name="d.bin", location=str(target)))
    try:
        resp = client.get("/file/download", query_string={"filehash": "dl"})
        assert resp.data == b"\x00\x01payload"
        assert resp.headers["Content-Type"] == "application/octect-stream"
        assert resp.headers["content-disposition"] == 'attachment; filename="d.bin"'
    finally:
        meta.remove_file_meta("dl")


def test_download_unknown_is_500(client):
    assert client.get("/file/download", query_string={"filehash": "none"}).status_code == 500


def test_update_rules_and_rename(client):
    meta.update_file_meta(meta.FileMeta(file_sha1="up", file_name="old"))
    try:
        assert client.post("/file/update", data={"op": "1", "filehash": "up"}).status_code == 403
        assert client.get("/file/update", query_string={"op": "0", "filehash": "up"}).status_code == 405
        resp = client.post("/file/update", data={"op": "0", "filehash": "up", "filename": "new"})
        assert json.loads(resp.data)["FileName"] == "new"
        assert meta.get_file_meta("up").file_name == "new"
    finally:
        meta.remove_file_meta("up")


def test_delete_removes_file_and_meta(client, tmp_path):
    target = tmp_path / "gone.bin"
    target.write_bytes(b"x")
    meta.update_file_meta(meta.FileMeta(file_sha1="del", location=str(target)))
    resp = client.get("/file/delete", query_string={"filehash": "del"})
    assert resp.status_code == 200
    assert not target.exists()
    assert meta.get_file_meta("del") == meta.FileMeta()


def test_fast_upload_unknown_is_500(client, db):
    resp = client.post(
        "/file/fastupload",
        data={"username": "alice", "token": TOKEN, "filehash": "none"},
    )
    assert resp.status_code == 500


def test_fast_upload_known(client, db):
    db.files["known"] = ("known", "/x", "k", 7)
    resp = client.post(
        "/file/fastupload",
        data={"username": "alice", "token": TOKEN, "filehash": "known", "filename": "k2", "filesize": "7"},
    )
    body = json.loads(resp.data)
    assert body["code"] == 0
    assert body["msg"] == "成功"
    assert db.user_files[0][:4] == ("alice", "known", "k2", 7)