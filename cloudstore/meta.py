"""File metadata kept in memory and mirrored to the database."""

from __future__ import annotations

import dataclasses
import datetime
from collections.abc import Iterable
from dataclasses import dataclass

import pymysql

from cloudstore import filedb

BASE_FORMAT = "%Y-%m-%d %H:%M:%S"


@dataclass
class FileMeta:
    """Metadata of a stored file."""

    file_sha1: str = ""
    file_name: str = ""
    file_size: int = 0
    location: str = ""
    upload_at: str = ""


_file_metas: dict[str, FileMeta] = {}


def update_file_meta(fmeta: FileMeta) -> None:
    """Add or replace the in-memory metadata for a file."""
    _file_metas[fmeta.file_sha1] = dataclasses.replace(fmeta)


def update_file_meta_db(fmeta: FileMeta) -> bool:
    """Record the file in the database."""
    return filedb.on_file_upload_finished(
        fmeta.file_sha1, fmeta.file_name, fmeta.file_size, fmeta.location
    )


def get_file_meta(file_sha1: str) -> FileMeta:
    """Return a copy of the in-memory metadata, or an empty record if unknown."""
    stored = _file_metas.get(file_sha1)
    return dataclasses.replace(stored) if stored is not None else FileMeta()


def get_file_meta_db(file_sha1: str) -> FileMeta:
    """Load metadata from the database, or an empty record if it cannot be read."""
    try:
        record = filedb.get_file_meta(file_sha1)
    except (filedb.FileMetaNotFound, pymysql.MySQLError):
        return FileMeta()
    return FileMeta(
        file_sha1=record.file_hash,
        file_name=record.file_name or "",
        file_size=record.file_size or 0,
        location=record.file_addr or "",
    )


def _upload_time(fmeta: FileMeta) -> datetime.datetime:
    try:
        return datetime.datetime.strptime(fmeta.upload_at, BASE_FORMAT)
    except ValueError:
        return datetime.datetime.min


def sort_by_upload_time(metas: Iterable[FileMeta]) -> list[FileMeta]:
    """Sort newest first; unparsable times count as the earliest."""
    return sorted(metas, key=_upload_time, reverse=True)


def get_last_file_metas(count: int) -> list[FileMeta]:
    """Return up to ``count`` most recently uploaded files."""
    return [dataclasses.replace(m) for m in sort_by_upload_time(_file_metas.values())[:count]]


def remove_file_meta(file_sha1: str) -> None:
    """Forget the in-memory metadata of a file."""
    _file_metas.pop(file_sha1, None)