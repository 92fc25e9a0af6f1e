"""File storage server with user accounts, instant upload, chunked upload and a WebSocket echo server."""

__version__ = "0.1.0"