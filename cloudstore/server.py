"""HTTP server wiring."""

from __future__ import annotations

import argparse
import os

from flask import Flask, current_app, send_from_directory

from cloudstore import files, mpupload, users
from cloudstore.auth import DEFAULT_STATIC_DIR, http_interceptor

DEFAULT_PORT = 8080
_METHODS = ["GET", "POST", "PUT", "DELETE", "PATCH", "HEAD", "OPTIONS"]


def _static(filename: str):
    directory = os.path.abspath(current_app.config.get("STATIC_DIR", DEFAULT_STATIC_DIR))
    return send_from_directory(directory, filename)


def create_app() -> Flask:
    """Build the application with all routes registered."""
    app = Flask(__name__, static_folder=None)
    app.config.setdefault("STATIC_DIR", DEFAULT_STATIC_DIR)
    app.config.setdefault("UPLOAD_DIR", files.DEFAULT_UPLOAD_DIR)
    app.config.setdefault("PART_DIR", mpupload.DEFAULT_PART_DIR)
    guarded = http_interceptor
    routes = {
        "/static/<path:filename>": _static,
        "/file/upload": files.upload_handler,
        "/file/upload/suc": files.upload_suc_handler,
        "/file/meta": files.get_file_meta_handler,
        "/file/query": files.file_query_handler,
        "/file/download": files.download_handler,
        "/file/update": files.file_meta_update_handler,
        "/file/delete": files.file_meta_delete_handler,
        "/file/fastupload": guarded(files.try_fast_upload_handler),
        "/file/mpupload/init": guarded(mpupload.initial_multipart_upload_handler),
        "/file/mpupload/uppart": guarded(mpupload.upload_part_handler),
        "/file/mpupload/complete": guarded(mpupload.complete_upload_handler),
        "/user/signup": users.signup_handler,
        "/user/signin": users.signin_handler,
        "/user/info": guarded(users.user_info_handler),
    }
    for rule, view in routes.items():
        app.add_url_rule(rule, endpoint=rule, view_func=view, methods=_METHODS)
    return app


def main(argv: list[str] | None = None) -> int:
    """Run the server."""
    parser = argparse.ArgumentParser(description="File storage server")
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("--port", type=int, default=DEFAULT_PORT)
    args = parser.parse_args(argv)
    print(f"localhost:{args.port}")
    create_app().run(host=args.host, port=args.port)
    return 0