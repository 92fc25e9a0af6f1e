"""Request authentication helpers."""

from __future__ import annotations

import functools
import os
import time
from collections.abc import Callable
from typing import Any

from flask import Response, current_app, request

from cloudstore import util

DEFAULT_STATIC_DIR = "./static"
TOKEN_LENGTH = 40
_TOKEN_SALT = "_tokensalt"


def _static_dir() -> str:
    return current_app.config.get("STATIC_DIR", DEFAULT_STATIC_DIR)


def is_token_valid(token: str) -> bool:
    """Tell whether a token has the shape of one issued by gen_token."""
    return len(token) == TOKEN_LENGTH


def gen_token(username: str) -> str:
    """Issue a 40 character token for ``username``."""
    ts = format(int(time.time()), "x")
    prefix = util.md5((username + ts + _TOKEN_SALT).encode("utf-8"))
    return prefix + ts[:8]


def http_interceptor(view: Callable[..., Any]) -> Callable[..., Any]:
    """Wrap a view so that requests without a valid user and token get the sign-in page."""

    @functools.wraps(view)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        username = request.values.get("username", "")
        token = request.values.get("token", "")
        if len(username) < 3 or not is_token_valid(token):
            page = os.path.join(_static_dir(), "view", "signin.html")
            try:
                with open(page, "rb") as fh:
                    return Response(fh.read())
            except OSError:
                return Response(b"", status=500)
        return view(*args, **kwargs)

    return wrapper