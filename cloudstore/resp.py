"""The common JSON envelope for HTTP responses."""

from __future__ import annotations

import base64
import dataclasses
import datetime
import json
from typing import Any

_ESCAPES = {"<": "\\u003c", ">": "\\u003e", "&": "\\u0026", "\u2028": "\\u2028", "\u2029": "\\u2029"}


def _default(value: Any) -> Any:
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return dataclasses.asdict(value)
    if isinstance(value, (bytes, bytearray)):
        return base64.b64encode(bytes(value)).decode("ascii")
    if isinstance(value, (datetime.datetime, datetime.date)):
        return value.isoformat()
    raise TypeError(f"object of type {type(value).__name__} is not JSON serialisable")


@dataclasses.dataclass
class RespMsg:
    """Response body with a status code, a message and optional data."""

    code: int
    msg: str
    data: Any = None

    def json_string(self) -> str:
        text = json.dumps(
            {"code": self.code, "msg": self.msg, "data": self.data},
            ensure_ascii=False,
            separators=(",", ":"),
            default=_default,
        )
        for char, escaped in _ESCAPES.items():
            text = text.replace(char, escaped)
        return text

    def json_bytes(self) -> bytes:
        return self.json_string().encode("utf-8")


def new_resp_msg(code: int, msg: str, data: Any) -> RespMsg:
    return RespMsg(code, msg, data)


def gen_simple_resp_string(code: int, msg: str) -> str:
    """Body holding only code and message."""
    return '{"code":%d,"msg":"%s"}' % (code, msg)


def gen_simple_resp_stream(code: int, msg: str) -> bytes:
    return gen_simple_resp_string(code, msg).encode("utf-8")