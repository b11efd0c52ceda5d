"""WebSocket connection to the lobby server, run on a background thread."""

from __future__ import annotations

import asyncio
import logging
import queue
import threading
import time
from collections.abc import Awaitable, Iterator
from dataclasses import dataclass
from typing import Any, TypeVar

import websockets
from websockets.exceptions import ConnectionClosed, WebSocketException

from .actions import Action
from .protocol import (
    ClientMessage,
    LobbyAction,
    LobbyMessage,
    ProtocolError,
    RoomMessage,
    ServerMessage,
    dumps,
    loads_server,
)

log = logging.getLogger(__name__)

RECONNECT_DELAY = 2.0
FLUSH_INTERVAL = 0.016
_SHUTDOWN_POLL = 0.05
_JOIN_TIMEOUT = 3.0

T = TypeVar("T")


class WsEvent:
    """Something that happened on the connection."""


@dataclass(frozen=True)
class Connected(WsEvent):
    """The connection was established."""


@dataclass(frozen=True)
class MessageReceived(WsEvent):
    """A server message arrived."""

    message: ServerMessage


@dataclass(frozen=True)
class Disconnected(WsEvent):
    """Connecting failed or the connection was lost; a retry follows."""


class WsChannels:
    """Queues shared with a connection worker: incoming events, outgoing messages."""

    def __init__(
        self,
        events: queue.Queue[WsEvent] | None = None,
        outgoing: queue.Queue[ClientMessage] | None = None,
        shutdown: threading.Event | None = None,
        worker: threading.Thread | None = None,
    ) -> None:
        self.events: queue.Queue[WsEvent] = events if events is not None else queue.Queue()
        self.outgoing: queue.Queue[ClientMessage] = (
            outgoing if outgoing is not None else queue.Queue()
        )
        self._shutdown = shutdown if shutdown is not None else threading.Event()
        self._worker = worker

    @property
    def closed(self) -> bool:
        return self._shutdown.is_set()

    def send(self, message: ClientMessage) -> None:
        """Queue a client message for the worker to send."""
        if not isinstance(message, ClientMessage):
            raise TypeError(f"expected a ClientMessage, got {type(message).__name__}")
        self.outgoing.put(message)

    def send_lobby(self, action: LobbyAction) -> None:
        self.send(LobbyMessage(action))

    def send_action(self, room: str | None, action: Action) -> None:
        """Queue a room-scoped game action; dropped when not in a room."""
        if room is not None:
            self.send(RoomMessage(room=room, action=action))

    def poll_events(self) -> Iterator[WsEvent]:
        """Yield every event received so far without blocking."""
        while True:
            try:
                yield self.events.get_nowait()
            except queue.Empty:
                return

    def close(self) -> None:
        """Tell the worker to stop and wait briefly for it to finish."""
        self._shutdown.set()
        worker = self._worker
        if worker is not None and worker is not threading.current_thread():
            worker.join(_JOIN_TIMEOUT)

    def __enter__(self) -> WsChannels:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()


class _ShutdownRequested(Exception):
    pass


async def _watch(shutdown: threading.Event) -> None:
    while not shutdown.is_set():
        await asyncio.sleep(_SHUTDOWN_POLL)


async def _sleep_or_shutdown(delay: float, shutdown: threading.Event) -> bool:
    """Sleep for ``delay`` seconds; True if shutdown was requested meanwhile."""
    deadline = time.monotonic() + delay
    while not shutdown.is_set():
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            return False
        await asyncio.sleep(min(remaining, _SHUTDOWN_POLL))
    return True


async def _unless_shutdown(awaitable: Awaitable[T], shutdown: threading.Event) -> T:
    task = asyncio.ensure_future(awaitable)
    watcher = asyncio.create_task(_watch(shutdown))
    done, _ = await asyncio.wait({task, watcher}, return_when=asyncio.FIRST_COMPLETED)
    if task in done:
        watcher.cancel()
        await asyncio.gather(watcher, return_exceptions=True)
        return task.result()
    task.cancel()
    await asyncio.gather(task, return_exceptions=True)
    raise _ShutdownRequested


async def _open(url: str) -> Any:
    return await websockets.connect(url)


async def _read(connection: Any, events: queue.Queue[WsEvent]) -> None:
    try:
        async for frame in connection:
            if not isinstance(frame, str):
                continue
            try:
                message = loads_server(frame)
            except ProtocolError as exc:
                log.warning("WS deserialize error: %s", exc)
                continue
            events.put(MessageReceived(message))
    except ConnectionClosed as exc:
        log.warning("WS error: %s", exc)


async def _write(connection: Any, outgoing: queue.Queue[ClientMessage]) -> None:
    while True:
        await asyncio.sleep(FLUSH_INTERVAL)
        while True:
            try:
                message = outgoing.get_nowait()
            except queue.Empty:
                break
            try:
                await connection.send(dumps(message))
            except ConnectionClosed:
                return


async def _session(
    connection: Any,
    events: queue.Queue[WsEvent],
    outgoing: queue.Queue[ClientMessage],
    shutdown: threading.Event,
) -> bool:
    """Run one connection until it drops; True if shutdown ended it."""
    watcher = asyncio.create_task(_watch(shutdown))
    tasks = {
        asyncio.create_task(_read(connection, events)),
        asyncio.create_task(_write(connection, outgoing)),
        watcher,
    }
    done, pending = await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)
    for task in pending:
        task.cancel()
    await asyncio.gather(*pending, return_exceptions=True)
    try:
        await connection.close()
    except (ConnectionClosed, OSError):
        pass
    return watcher in done


async def _worker(
    url: str,
    events: queue.Queue[WsEvent],
    outgoing: queue.Queue[ClientMessage],
    shutdown: threading.Event,
) -> None:
    """Connect, relay messages, and reconnect until shutdown."""
    while not shutdown.is_set():
        try:
            connection = await _unless_shutdown(_open(url), shutdown)
        except _ShutdownRequested:
            return
        except (OSError, WebSocketException) as exc:
            log.warning("WS connect failed (%s): %s", url, exc)
            events.put(Disconnected())
            if await _sleep_or_shutdown(RECONNECT_DELAY, shutdown):
                return
            continue

        log.debug("WS connected to %s", url)
        events.put(Connected())
        if await _session(connection, events, outgoing, shutdown):
            return

        log.debug("WS disconnected, reconnecting in %ss", RECONNECT_DELAY)
        events.put(Disconnected())
        if await _sleep_or_shutdown(RECONNECT_DELAY, shutdown):
            return


def spawn_ws(url: str) -> WsChannels:
    """Start a reconnecting connection worker for ``url`` on a daemon thread."""
    events: queue.Queue[WsEvent] = queue.Queue()
    outgoing: queue.Queue[ClientMessage] = queue.Queue()
    shutdown = threading.Event()

    def run() -> None:
        asyncio.run(_worker(url, events, outgoing, shutdown))

    worker = threading.Thread(target=run, name="ws-worker", daemon=True)
    worker.start()
    return WsChannels(events, outgoing, shutdown, worker)