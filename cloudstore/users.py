"""Sign-up, sign-in and profile handlers."""

from __future__ import annotations

import os

import pymysql
from flask import Response, current_app, request

from cloudstore import userdb, util
from cloudstore.auth import DEFAULT_STATIC_DIR, gen_token, is_token_valid
from cloudstore.resp import RespMsg

PWD_SALT = "#890"


def _page(name: str) -> Response:
    path = os.path.join(current_app.config.get("STATIC_DIR", DEFAULT_STATIC_DIR), "view", name)
    try:
        with open(path, "rb") as fh:
            return Response(fh.read())
    except OSError:
        return Response(b"", status=500)


def _encode_password(password: str) -> str:
    return util.sha1((password + PWD_SALT).encode("utf-8"))


def signup_handler() -> Response:
    """Show the sign-up page or register a user."""
    if request.method == "GET":
        return _page("signup.html")
    username = request.values.get("username", "")
    passwd = request.values.get("password", "")
    if len(username) < 3 or len(passwd) < 5:
        return Response(b"invalid parameter")
    ok = userdb.user_signup(username, _encode_password(passwd))
    return Response(b"success" if ok else b"failed")


def signin_handler() -> Response:
    """Show the sign-in page or check credentials and issue a token."""
    if request.method == "GET":
        return _page("signin.html")
    username = request.values.get("username", "")
    passwd = request.values.get("password", "")
    if not userdb.user_signin(username, _encode_password(passwd)):
        return Response(b"failed")
    token = gen_token(username)
    if not userdb.update_token(username, token):
        return Response(b"failed")
    data = {
        "Location": "http://" + request.host + "/static/view/home.html",
        "Username": username,
        "Token": token,
    }
    return Response(RespMsg(0, "ok", data).json_bytes())


def user_info_handler() -> Response:
    """Return the profile of the requesting user."""
    if not is_token_valid(request.values.get("token", "")):
        return Response(b"", status=403)
    try:
        user = userdb.get_user_info(request.values.get("username", ""))
    except (LookupError, pymysql.MySQLError):
        return Response(b"", status=403)
    data = {
        "Username": user.username,
        "Email": user.email,
        "Phone": user.phone,
        "SignupAt": user.signup_at,
        "LastActiveAt": user.last_active_at,
        "Status": user.status,
    }
    return Response(RespMsg(0, "ok", data).json_bytes())