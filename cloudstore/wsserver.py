"""WebSocket echo server with a periodic heartbeat."""

from __future__ import annotations

import argparse
import asyncio
import enum
from dataclasses import dataclass
from typing import Any

import websockets

DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 7777
WS_PATH = "/ws"
QUEUE_SIZE = 1000
HEARTBEAT_INTERVAL = 2.0
HEARTBEAT_TEXT = "heartbeat from server"


class MessageType(enum.IntEnum):
    TEXT = 1
    BINARY = 2


@dataclass(frozen=True)
class WsMessage:
    """A message read from or written to a client."""

    message_type: MessageType
    data: str | bytes

    @classmethod
    def from_frame(cls, frame: str | bytes) -> WsMessage:
        if isinstance(frame, str):
            return cls(MessageType.TEXT, frame)
        return cls(MessageType.BINARY, bytes(frame))

    def payload(self) -> str | bytes:
        """The data in the form the socket sends for this type."""
        if self.message_type is MessageType.TEXT:
            return self.data if isinstance(self.data, str) else self.data.decode("utf-8")
        return self.data.encode("utf-8") if isinstance(self.data, str) else self.data


class ConnectionClosed(Exception):
    """The connection was closed."""


class WsConnection:
    """A client connection with separate read and write queues."""

    def __init__(self, websocket: Any, heartbeat_interval: float = HEARTBEAT_INTERVAL) -> None:
        self.websocket = websocket
        self.heartbeat_interval = heartbeat_interval
        self._in: asyncio.Queue[WsMessage] = asyncio.Queue(maxsize=QUEUE_SIZE)
        self._out: asyncio.Queue[WsMessage] = asyncio.Queue(maxsize=QUEUE_SIZE)
        self._closed = asyncio.Event()

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    async def _unless_closed(self, awaitable):
        """Await ``awaitable`` unless the connection closes first."""
        if self.closed:
            raise ConnectionClosed("websocket closed")
        work = asyncio.ensure_future(awaitable)
        closing = asyncio.ensure_future(self._closed.wait())
        try:
            done, _ = await asyncio.wait({work, closing}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            work.cancel()
            closing.cancel()
        if work in done:
            return work.result()
        raise ConnectionClosed("websocket closed")

    async def read_loop(self) -> None:
        """Move messages from the socket into the read queue."""
        while True:
            try:
                frame = await self.websocket.recv()
            except Exception:
                await self.close()
                return
            try:
                await self._unless_closed(self._in.put(WsMessage.from_frame(frame)))
            except ConnectionClosed:
                return

    async def write_loop(self) -> None:
        """Move messages from the write queue to the socket."""
        while True:
            try:
                message = await self._unless_closed(self._out.get())
            except ConnectionClosed:
                return
            try:
                await self.websocket.send(message.payload())
            except Exception:
                await self.close()
                return

    async def _heartbeat(self) -> None:
        while True:
            try:
                await asyncio.wait_for(self._closed.wait(), self.heartbeat_interval)
            except asyncio.TimeoutError:
                pass
            try:
                await self.write(WsMessage(MessageType.TEXT, HEARTBEAT_TEXT))
            except ConnectionClosed:
                print("heartbeat fail")
                await self.close()
                return

    async def proc_loop(self) -> None:
        """Echo every message back, sending a heartbeat meanwhile."""
        heartbeat = asyncio.ensure_future(self._heartbeat())
        try:
            while True:
                try:
                    message = await self.read()
                except ConnectionClosed:
                    print("read fail")
                    break
                data = message.data
                print(data if isinstance(data, str) else data.decode("utf-8", "replace"))
                try:
                    await self.write(message)
                except ConnectionClosed:
                    print("write fail")
                    break
        finally:
            await heartbeat

    async def write(self, message: WsMessage) -> None:
        """Queue a message for sending; raise ConnectionClosed once closed."""
        await self._unless_closed(self._out.put(message))

    async def read(self) -> WsMessage:
        """Take the next received message; raise ConnectionClosed once closed."""
        return await self._unless_closed(self._in.get())

    async def close(self) -> None:
        """Close the socket and wake everything waiting on the connection."""
        try:
            await self.websocket.close()
        except Exception:
            pass
        self._closed.set()


async def ws_handler(websocket: Any) -> None:
    """Serve one client until its connection closes."""
    request = getattr(websocket, "request", None)
    path = getattr(request, "path", None) if request is not None else getattr(websocket, "path", None)
    if path is not None and path != WS_PATH:
        await websocket.close(code=1008, reason="not found")
        return
    conn = WsConnection(websocket)
    await asyncio.gather(conn.proc_loop(), conn.read_loop(), conn.write_loop())


async def _serve(host: str, port: int) -> None:
    async with websockets.serve(ws_handler, host, port):
        await asyncio.Future()


def main(argv: list[str] | None = None) -> int:
    """Run the WebSocket server."""
    parser = argparse.ArgumentParser(description="WebSocket echo server")
    parser.add_argument("--host", default=DEFAULT_HOST)
    parser.add_argument("--port", type=int, default=DEFAULT_PORT)
    args = parser.parse_args(argv)
    try:
        asyncio.run(_serve(args.host, args.port))
    except KeyboardInterrupt:
        pass
    return 0