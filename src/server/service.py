from __future__ import annotations

import asyncio
import contextlib
import logging
import threading
from pathlib import Path
from typing import Any, Callable, Optional
from urllib.parse import urlsplit

import websockets
from websockets.asyncio.server import ServerConnection, broadcast
from websockets.datastructures import Headers
from websockets.http11 import Request, Response

from contracts.ui_protocol import (
    EVENT_ERROR,
    EVENT_HELLO,
    EVENT_REMINDER,
    EVENT_REMINDER_WITHDRAWN,
)

from .config import HEALTHZ_PATH, INDEX_PATH, ROOT_PATH, UIServerConfig
from .events import StickyEventStore, make_event, parse_client_message

ClientMessageHandler = Callable[[dict[str, Any]], None]

_HTML = "text/html; charset=utf-8"
_TEXT = "text/plain; charset=utf-8"


class UIServer:
    """Websocket bridge to the presentation client.

    Runs its own asyncio loop on a daemon thread. Engine-side code calls
    ``publish`` from any thread; inbound client frames are decoded here and
    handed to the message handler, which must not block.
    """

    def __init__(
        self,
        config: UIServerConfig,
        logger: Optional[logging.Logger] = None,
        on_message: Optional[ClientMessageHandler] = None,
    ):
        self._config = config
        self._logger = logger or logging.getLogger("ui_server")
        self._on_message = on_message
        self._thread: Optional[threading.Thread] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._stop_async: Optional[asyncio.Event] = None
        self._started = threading.Event()
        self._startup_error: Optional[Exception] = None
        self._clients: set[ServerConnection] = set()
        self._sticky_events = StickyEventStore()
        self._routes: dict[str, tuple[bytes, str]] = {HEALTHZ_PATH: (b"ok\n", _TEXT)}
        if config.index_file:
            index_html = Path(config.index_file).read_bytes()
            self._routes[ROOT_PATH] = (index_html, _HTML)
            self._routes[INDEX_PATH] = (index_html, _HTML)

    @property
    def host(self) -> str:
        return self._config.host

    @property
    def port(self) -> int:
        return self._config.port

    @property
    def is_running(self) -> bool:
        return (
            self._thread is not None
            and self._thread.is_alive()
            and self._startup_error is None
        )

    def set_message_handler(self, handler: Optional[ClientMessageHandler]) -> None:
        self._on_message = handler

    def start(self, timeout_seconds: float = 5.0) -> None:
        if self.is_running:
            self._logger.warning("UI server is already running")
            return

        self._startup_error = None
        self._started.clear()
        self._thread = threading.Thread(
            target=self._run_loop,
            daemon=True,
            name="ui-server",
        )
        self._thread.start()

        if not self._started.wait(timeout_seconds):
            raise RuntimeError(f"UI server did not start within {timeout_seconds:.1f}s")
        if self._startup_error is not None:
            raise RuntimeError(f"UI server startup failed: {self._startup_error}")

    def stop(self, timeout_seconds: float = 5.0) -> None:
        thread = self._thread
        if thread is None:
            return

        if self._loop is not None and self._stop_async is not None:
            with contextlib.suppress(RuntimeError):
                self._loop.call_soon_threadsafe(self._stop_async.set)

        thread.join(timeout=timeout_seconds)
        if thread.is_alive():
            self._logger.error("UI server thread did not stop within %.1fs", timeout_seconds)

        self._thread = None
        self._loop = None
        self._stop_async = None

    def publish(self, event_type: str, **payload: Any) -> None:
        """Record sticky state and fan the event out to connected clients."""
        message = make_event(event_type, **payload)
        if event_type == EVENT_REMINDER_WITHDRAWN:
            self._sticky_events.forget(EVENT_REMINDER)
        else:
            self._sticky_events.remember(event_type, message)

        loop = self._loop
        if not self.is_running or loop is None:
            return
        with contextlib.suppress(RuntimeError):
            # RuntimeError: loop already closed during shutdown.
            loop.call_soon_threadsafe(self._broadcast, message)

    def _broadcast(self, message: str) -> None:
        if self._clients:
            broadcast(self._clients, message)

    def _run_loop(self) -> None:
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        self._loop = loop
        self._stop_async = asyncio.Event()

        try:
            loop.run_until_complete(self._serve())
        except Exception as error:  # pragma: no cover - needs a real socket
            self._startup_error = error
            self._logger.error("UI server failed: %s", error, exc_info=True)
            self._started.set()
        finally:
            pending = asyncio.all_tasks(loop)
            for task in pending:
                task.cancel()
            with contextlib.suppress(Exception):
                loop.run_until_complete(asyncio.gather(*pending, return_exceptions=True))
            loop.close()

    async def _serve(self) -> None:
        async with websockets.serve(
            self._handler,
            host=self._config.host,
            port=self._config.port,
            process_request=self._process_request,
            logger=self._logger,
        ):
            self._logger.info(
                "UI server running at http://%s:%d (websocket: %s)",
                self._config.host,
                self._config.port,
                self._config.websocket_path,
            )
            self._started.set()
            await self._stop_async.wait()
            await self._close_clients()

    async def _handler(self, websocket: ServerConnection) -> None:
        self._clients.add(websocket)
        self._logger.info(
            "Client connected: %s (%d connected)",
            websocket.remote_address,
            len(self._clients),
        )
        try:
            await websocket.send(make_event(EVENT_HELLO, message="UI websocket connected"))
            for message in self._sticky_events.snapshot():
                await websocket.send(message)
            async for raw in websocket:
                await self._receive(websocket, raw)
        except websockets.exceptions.ConnectionClosed as error:
            self._logger.debug("Client connection closed: %s", error)
        finally:
            self._clients.discard(websocket)
            self._logger.info("Client disconnected: %s", websocket.remote_address)

    async def _receive(self, websocket: ServerConnection, raw: str | bytes) -> None:
        payload = parse_client_message(raw)
        if payload is None:
            self._logger.warning("Ignoring malformed client message: %r", raw)
            await websocket.send(make_event(EVENT_ERROR, message="Malformed message"))
            return

        self._logger.debug("Received from UI: %s", payload)
        handler = self._on_message
        if handler is None:
            return
        try:
            handler(payload)
        except Exception as error:
            self._logger.error("Client message handler failed: %s", error, exc_info=True)

    async def _process_request(
        self,
        connection: ServerConnection,
        request: Request,
    ) -> Optional[Response]:
        del connection
        path = urlsplit(request.path).path
        if path == self._config.websocket_path:
            return None

        body, content_type = self._routes.get(path, (b"not found\n", _TEXT))
        status = (200, "OK") if path in self._routes else (404, "Not Found")
        headers = Headers()
        headers["Content-Type"] = content_type
        headers["Content-Length"] = str(len(body))
        headers["Cache-Control"] = "no-store"
        return Response(status[0], status[1], headers, body)

    async def _close_clients(self) -> None:
        clients = tuple(self._clients)
        if not clients:
            return
        await asyncio.gather(
            *(client.close(code=1001, reason="Server shutting down") for client in clients),
            return_exceptions=True,
        )
        self._clients.clear()
