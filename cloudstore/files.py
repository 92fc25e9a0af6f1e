"""File upload, query, download and metadata handlers."""

from __future__ import annotations

import dataclasses
import datetime
import json
import logging
import os
import re
from typing import Any

import pymysql
from flask import Response, abort, current_app, redirect, request

from cloudstore import filedb, meta, userfiledb, util
from cloudstore.auth import DEFAULT_STATIC_DIR
from cloudstore.resp import RespMsg

logger = logging.getLogger(__name__)

DEFAULT_UPLOAD_DIR = "./uploads"
_INT_RE = re.compile(r"[+-]?[0-9]+")


def _atoi(text: str) -> int:
    return int(text) if _INT_RE.fullmatch(text) else 0


def _dumps(payload: Any) -> bytes:
    return json.dumps(payload, ensure_ascii=False, separators=(",", ":")).encode("utf-8")


def _meta_json(fmeta: meta.FileMeta) -> dict[str, Any]:
    return {
        "FileSha1": fmeta.file_sha1,
        "FileName": fmeta.file_name,
        "FileSize": fmeta.file_size,
        "Location": fmeta.location,
        "UploadAt": fmeta.upload_at,
    }


def _user_file_json(ufile: userfiledb.UserFile) -> dict[str, Any]:
    return {
        "UserName": ufile.user_name,
        "FileHash": ufile.file_hash,
        "FileName": ufile.file_name,
        "FileSize": ufile.file_size,
        "UploadAt": ufile.upload_at,
        "LastUpdated": ufile.last_updated,
    }


def upload_handler() -> Response:
    """Serve the upload page or store an uploaded file."""
    if request.method == "GET":
        page = os.path.join(current_app.config.get("STATIC_DIR", DEFAULT_STATIC_DIR), "view", "index.html")
        try:
            with open(page, "rb") as fh:
                return Response(fh.read())
        except OSError as exc:
            logger.error("err: %s", exc)
            return Response(b"internal server error")
    if request.method != "POST":
        return Response(b"")
    upload = request.files.get("file")
    if upload is None:
        logger.error("failed to get data")
        return Response(b"")
    upload_dir = current_app.config.get("UPLOAD_DIR", DEFAULT_UPLOAD_DIR)
    fmeta = meta.FileMeta(
        file_name=upload.filename or "",
        location=os.path.join(upload_dir, upload.filename or ""),
        upload_at=datetime.datetime.now().strftime(meta.BASE_FORMAT),
    )
    try:
        with open(fmeta.location, "w+b") as out:
            upload.save(out)
            fmeta.file_size = out.tell()
            out.seek(0)
            fmeta.file_sha1 = util.file_sha1(out)
    except OSError as exc:
        logger.error("failed to store file: %s", exc)
        return Response(b"")
    meta.update_file_meta_db(fmeta)
    username = request.values.get("username", "")
    if userfiledb.on_user_file_upload_finished(
        username, fmeta.file_sha1, fmeta.file_name, fmeta.file_size
    ):
        return redirect("/static/view/home.html", code=302)
    return Response(b"failed")


def upload_suc_handler() -> Response:
    """Confirm a finished upload."""
    return Response(b"Upload finished")


def get_file_meta_handler() -> Response:
    """Return the stored metadata of a file as JSON."""
    hashes = request.values.getlist("filehash")
    if not hashes:
        abort(400, description="filehash is required")
    return Response(_dumps(_meta_json(meta.get_file_meta_db(hashes[0]))))


def file_query_handler() -> Response:
    """List a user's files as JSON."""
    limit = _atoi(request.values.get("limit", ""))
    username = request.values.get("username", "")
    try:
        files = userfiledb.query_user_file_metas(username, limit)
    except pymysql.MySQLError as exc:
        logger.error("query failed: %s", exc)
        files = []
    payload = [_user_file_json(f) for f in files] or None
    return Response(_dumps(payload))


def download_handler() -> Response:
    """Send the content of a file as an attachment."""
    fmeta = meta.get_file_meta(request.values.get("filehash", ""))
    try:
        with open(fmeta.location, "rb") as fh:
            data = fh.read()
    except OSError:
        return Response(b"", status=500)
    return Response(
        data,
        content_type="application/octect-stream",
        headers={"content-disposition": f'attachment; filename="{fmeta.file_name}"'},
    )


def file_meta_update_handler() -> Response:
    """Rename a file in the in-memory metadata."""
    op_type = request.values.get("op", "")
    file_sha1 = request.values.get("filehash", "")
    new_name = request.values.get("filename", "")
    if op_type != "0":
        return Response(b"", status=403)
    if request.method != "POST":
        return Response(b"", status=405)
    current = dataclasses.replace(meta.get_file_meta(file_sha1), file_name=new_name)
    meta.update_file_meta(current)
    return Response(_dumps(_meta_json(current)), status=200)


def file_meta_delete_handler() -> Response:
    """Delete a file from disk and from the in-memory metadata."""
    file_sha1 = request.values.get("filehash", "")
    fmeta = meta.get_file_meta(file_sha1)
    try:
        os.remove(fmeta.location)
    except OSError:
        pass
    meta.remove_file_meta(file_sha1)
    return Response(b"", status=200)


def try_fast_upload_handler() -> Response:
    """Link an already stored file to a user without uploading it again."""
    username = request.values.get("username", "")
    filehash = request.values.get("filehash", "")
    filename = request.values.get("filename", "")
    filesize = _atoi(request.values.get("filesize", ""))
    try:
        filedb.get_file_meta(filehash)
    except (filedb.FileMetaNotFound, pymysql.MySQLError) as exc:
        logger.error("fast upload lookup failed: %s", exc)
        return Response(b"", status=500)
    if userfiledb.on_user_file_upload_finished(username, filehash, filename, filesize):
        return Response(RespMsg(code=0, msg="成功").json_bytes())
    return Response(RespMsg(code=-2, msg="失败").json_bytes())