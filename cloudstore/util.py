"""Hashing and filesystem helpers."""

from __future__ import annotations

import hashlib
import os
import stat


class Sha1Stream:
    """SHA-1 digest fed in pieces."""

    def __init__(self) -> None:
        self._sha1 = hashlib.sha1()

    def update(self, data: bytes) -> None:
        self._sha1.update(data)

    def sum(self) -> str:
        return self._sha1.hexdigest()


def _digest(hasher, file) -> str:
    for chunk in iter(lambda: file.read(65536), b""):
        hasher.update(chunk)
    return hasher.hexdigest()


def sha1(data: bytes) -> str:
    return hashlib.sha1(data).hexdigest()


def file_sha1(file) -> str:
    """Hex SHA-1 of a binary file from its current position."""
    return _digest(hashlib.sha1(), file)


def md5(data: bytes) -> str:
    return hashlib.md5(data).hexdigest()


def file_md5(file) -> str:
    """Hex MD5 of a binary file from its current position."""
    return _digest(hashlib.md5(), file)


def path_exists(path) -> bool:
    """Tell whether ``path`` exists; errors other than absence are raised."""
    try:
        os.stat(path)
    except FileNotFoundError:
        return False
    return True


def _walk(path: str):
    info = os.lstat(path)
    yield info
    if stat.S_ISDIR(info.st_mode):
        for name in sorted(os.listdir(path)):
            yield from _walk(os.path.join(path, name))


def get_file_size(filename) -> int:
    """Size of ``filename``; for a directory, of the last entry walked in lexical order."""
    size = 0
    for info in _walk(os.fspath(filename)):
        size = info.st_size
    return size