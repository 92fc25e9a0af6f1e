"""Multipart (chunked) upload handlers."""

from __future__ import annotations

import math
import os
import re
import time
from dataclasses import dataclass

import redis
from flask import Response, current_app, request

from cloudstore import filedb, redis_conn, userfiledb
from cloudstore.resp import new_resp_msg

CHUNK_SIZE = 5 * 1024 * 1024
DEFAULT_PART_DIR = "./data"
_READ_SIZE = 1024 * 1024
_INT_RE = re.compile(r"[+-]?[0-9]+")


@dataclass
class MultipartUploadInfo:
    """State of a chunked upload as reported to the client."""

    file_hash: str
    file_size: int
    upload_id: str
    chunk_size: int
    chunk_count: int

    def to_json(self) -> dict:
        return {
            "FileHash": self.file_hash,
            "FileSize": self.file_size,
            "UploadID": self.upload_id,
            "ChunkSize": self.chunk_size,
            "ChunkCount": self.chunk_count,
        }


def _text(value) -> str:
    return value.decode("utf-8") if isinstance(value, (bytes, bytearray)) else str(value)


def initial_multipart_upload_handler() -> Response:
    """Start a chunked upload and record it in the cache."""
    username = request.values.get("username", "")
    filehash = request.values.get("filehash", "")
    size_text = request.values.get("filesize", "")
    if not _INT_RE.fullmatch(size_text):
        return Response(new_resp_msg(-1, "params invalid", None).json_bytes())
    filesize = int(size_text)
    info = MultipartUploadInfo(
        file_hash=filehash,
        file_size=filesize,
        upload_id=username + format(time.time_ns(), "x"),
        chunk_size=CHUNK_SIZE,
        chunk_count=math.ceil(filesize / CHUNK_SIZE),
    )
    client = redis_conn.redis_client()
    key = "MP_" + info.upload_id
    client.hset(key, "chunkcount", info.chunk_count)
    client.hset(key, "filehash", info.file_hash)
    client.hset(key, "filesize", info.file_size)
    return Response(new_resp_msg(0, "OK", info.to_json()).json_bytes())


def upload_part_handler() -> Response:
    """Store one chunk of a chunked upload."""
    upload_id = request.values.get("uploadid", "")
    chunk_index = request.values.get("index", "")
    part_dir = current_app.config.get("PART_DIR", DEFAULT_PART_DIR)
    fpath = os.path.join(part_dir, upload_id, chunk_index)
    try:
        os.makedirs(os.path.dirname(fpath), mode=0o744, exist_ok=True)
        with open(fpath, "wb") as out:
            for chunk in iter(lambda: request.stream.read(_READ_SIZE), b""):
                out.write(chunk)
    except OSError:
        return Response(new_resp_msg(-1, "Upload part failed", None).json_bytes())
    redis_conn.redis_client().hset("MP_" + upload_id, "chkidx_" + chunk_index, 1)
    return Response(new_resp_msg(0, "OK", None).json_bytes())


def complete_upload_handler() -> Response:
    """Finish a chunked upload once every chunk has arrived."""
    upload_id = request.values.get("uploadid", "")
    username = request.values.get("username", "")
    filehash = request.values.get("filehash", "")
    size_text = request.values.get("filesize", "")
    filename = request.values.get("filename", "")
    try:
        data = redis_conn.redis_client().hgetall("MP_" + upload_id)
    except redis.RedisError:
        return Response(new_resp_msg(-1, "err", None).json_bytes())
    total = 0
    done = 0
    for raw_key, raw_value in data.items():
        key, value = _text(raw_key), _text(raw_value)
        if key == "chunkcount":
            total = int(value) if _INT_RE.fullmatch(value) else 0
        elif key.startswith("chkidx_") and value == "1":
            done += 1
    if total != done:
        return Response(new_resp_msg(-2, "err", None).json_bytes())
    fsize = int(size_text) if _INT_RE.fullmatch(size_text) else 0
    filedb.on_file_upload_finished(filehash, filename, fsize, "")
    userfiledb.on_user_file_upload_finished(username, filehash, filename, fsize)
    return Response(new_resp_msg(0, "OK", None).json_bytes())