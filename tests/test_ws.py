import asyncio
import contextlib
import socket
import threading
import time

import pytest
import websockets
from websockets.exceptions import ConnectionClosed

from powergrid.actions import StartGame
from powergrid.protocol import (
    ListRooms,
    LobbyError,
    LobbyMessage,
    RoomList,
    RoomMessage,
    RoomSummary,
    dumps,
    loads_client,
)
from powergrid.ws import Connected, Disconnected, MessageReceived, WsChannels, spawn_ws


def _free_port() -> int:
    with socket.socket() as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


def _collect(channels, count, timeout=5.0):
    events = []
    deadline = time.monotonic() + timeout
    while len(events) < count and time.monotonic() < deadline:
        events.extend(channels.poll_events())
        time.sleep(0.02)
    return events


def _wait_for(predicate, timeout=5.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.02)
    return predicate()


@contextlib.contextmanager
def _server(greetings, received):
    port = _free_port()
    ready = threading.Event()
    stop = threading.Event()

    async def handler(connection):
        for text in greetings:
            await connection.send(text)
        try:
            received.append(await connection.recv())
        except ConnectionClosed:
            pass

    async def main():
        async with websockets.serve(handler, "127.0.0.1", port):
            ready.set()
            while not stop.is_set():
                await asyncio.sleep(0.02)

    thread = threading.Thread(target=lambda: asyncio.run(main()), daemon=True)
    thread.start()
    assert ready.wait(5)
    try:
        yield f"ws://127.0.0.1:{port}"
    finally:
        stop.set()
        thread.join(5)


def test_send_lobby_queues_envelope():
    channels = WsChannels()
    channels.send_lobby(ListRooms())
    assert channels.outgoing.get_nowait() == LobbyMessage(ListRooms())


def test_send_action_without_room_is_dropped():
    channels = WsChannels()
    channels.send_action(None, StartGame())
    assert channels.outgoing.empty()


def test_send_action_with_room_is_scoped():
    channels = WsChannels()
    channels.send_action("alpha", StartGame())
    assert channels.outgoing.get_nowait() == RoomMessage(room="alpha", action=StartGame())


def test_send_rejects_non_client_message():
    channels = WsChannels()
    with pytest.raises(TypeError):
        channels.send(StartGame())


def test_poll_events_drains_in_order():
    channels = WsChannels()
    received = MessageReceived(LobbyError(message="room not found"))
    for event in (Connected(), received, Disconnected()):
        channels.events.put(event)
    assert list(channels.poll_events()) == [Connected(), received, Disconnected()]
    assert list(channels.poll_events()) == []


def test_context_manager_closes():
    with WsChannels() as channels:
        assert not channels.closed
    assert channels.closed


def test_unreachable_server_reports_disconnected():
    with spawn_ws(f"ws://127.0.0.1:{_free_port()}") as channels:
        events = _collect(channels, 1)
    assert events[:1] == [Disconnected()]


def test_worker_delivers_messages_and_flushes_actions():
    summary = RoomSummary(
        name="friday", player_count=2, max_players=6, in_lobby=True, has_started=False
    )
    greeting = RoomList(rooms=[summary])
    received = []
    with _server([dumps(greeting)], received) as url:
        with spawn_ws(url) as channels:
            channels.send_lobby(ListRooms())
            events = _collect(channels, 2)
            assert _wait_for(lambda: bool(received))
    assert events[:2] == [Connected(), MessageReceived(greeting)]
    assert loads_client(received[0]) == LobbyMessage(ListRooms())


def test_worker_skips_undecodable_text():
    valid = LobbyError(message="room not found")
    received = []
    with _server(["not json", dumps(valid)], received) as url:
        with spawn_ws(url) as channels:
            events = _collect(channels, 2)
    assert events[:2] == [Connected(), MessageReceived(valid)]