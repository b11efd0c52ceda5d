"""Wire messages exchanged between clients and the lobby server."""

from __future__ import annotations

import dataclasses
import json
import uuid
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any, ClassVar

from .actions import Action, PlayerColor, action_from_dict
from .map import Map

_U8_MAX = 0xFF


class ProtocolError(ValueError):
    """Raised when a message is malformed or cannot be decoded."""


def _text(value: Any, name: str) -> str:
    if not isinstance(value, str):
        raise ProtocolError(f"{name} must be a string")
    return value


def _player_id(value: Any, name: str) -> str:
    if isinstance(value, uuid.UUID):
        return str(value)
    _text(value, name)
    try:
        return str(uuid.UUID(value))
    except ValueError:
        raise ProtocolError(f"{name} is not a valid player id: {value!r}") from None


def _u8(value: Any, name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= _U8_MAX:
        raise ProtocolError(f"{name} must be an integer between 0 and {_U8_MAX}")
    return value


def _flag(value: Any, name: str) -> bool:
    if not isinstance(value, bool):
        raise ProtocolError(f"{name} must be a boolean")
    return value


def _encode(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (list, tuple)):
        return [_encode(v) for v in value]
    if isinstance(value, (RoomSummary, Map, Action, LobbyAction)):
        return value.to_dict()
    return value


def _fields_of(cls: type, data: Mapping[str, Any], tag: str) -> dict[str, Any]:
    kwargs = {}
    for f in dataclasses.fields(cls):
        if f.name not in data:
            raise ProtocolError(f"{tag}: missing field '{f.name}'")
        kwargs[f.name] = data[f.name]
    return kwargs


def _body(obj: Any, key: str, tag: str) -> dict[str, Any]:
    body: dict[str, Any] = {key: tag}
    for f in dataclasses.fields(obj):
        body[f.name] = _encode(getattr(obj, f.name))
    return body


def _decode(registry: Mapping[str, Any], key: str, data: Any, what: str) -> Any:
    if not isinstance(data, Mapping):
        raise ProtocolError(f"{what} must be an object")
    tag = data.get(key)
    cls = registry.get(tag) if isinstance(tag, str) else None
    if cls is None:
        raise ProtocolError(f"unknown {what} {tag!r}")
    try:
        return cls._from_fields(data)
    except ProtocolError:
        raise
    except ValueError as exc:
        raise ProtocolError(f"{tag}: {exc}") from exc


def _without(data: Mapping[str, Any], key: str) -> dict[str, Any]:
    return {k: v for k, v in data.items() if k != key}


@dataclass(frozen=True)
class RoomSummary:
    """One entry of the room list."""

    name: str
    player_count: int
    max_players: int
    in_lobby: bool
    has_started: bool

    def __post_init__(self) -> None:
        _text(self.name, "name")
        _u8(self.player_count, "player_count")
        _u8(self.max_players, "max_players")
        _flag(self.in_lobby, "in_lobby")
        _flag(self.has_started, "has_started")

    def to_dict(self) -> dict[str, Any]:
        return dataclasses.asdict(self)

    @classmethod
    def from_dict(cls, data: Any) -> RoomSummary:
        if not isinstance(data, Mapping):
            raise ProtocolError("room summary must be an object")
        return cls(**_fields_of(cls, data, "room summary"))


# ---------------------------------------------------------------------------
# Lobby actions
# ---------------------------------------------------------------------------


class LobbyAction:
    """Room and bot management requests; tagged with an ``action`` key."""

    TAG: ClassVar[str] = ""
    _registry: ClassVar[dict[str, type[LobbyAction]]] = {}

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        if cls.TAG:
            LobbyAction._registry[cls.TAG] = cls

    def to_dict(self) -> dict[str, Any]:
        return _body(self, "action", self.TAG)

    @classmethod
    def _from_fields(cls, data: Mapping[str, Any]) -> LobbyAction:
        return cls(**_fields_of(cls, data, cls.TAG))


@dataclass(frozen=True)
class ListRooms(LobbyAction):
    """List all current rooms."""

    TAG: ClassVar[str] = "list_rooms"


@dataclass(frozen=True)
class CreateRoom(LobbyAction):
    """Create a new room."""

    TAG: ClassVar[str] = "create_room"
    name: str

    def __post_init__(self) -> None:
        _text(self.name, "name")


@dataclass(frozen=True)
class JoinRoom(LobbyAction):
    """Join an existing room."""

    TAG: ClassVar[str] = "join_room"
    name: str

    def __post_init__(self) -> None:
        _text(self.name, "name")


@dataclass(frozen=True)
class LeaveRoom(LobbyAction):
    """Leave the current room."""

    TAG: ClassVar[str] = "leave_room"


@dataclass(frozen=True)
class AddBot(LobbyAction):
    """Add a bot to the current room (host only, lobby phase only)."""

    TAG: ClassVar[str] = "add_bot"
    bot_name: str
    color: PlayerColor

    def __post_init__(self) -> None:
        _text(self.bot_name, "bot_name")
        try:
            color = PlayerColor(self.color)
        except ValueError:
            raise ProtocolError(f"color: unknown value {self.color!r}") from None
        object.__setattr__(self, "color", color)


@dataclass(frozen=True)
class RemoveBot(LobbyAction):
    """Remove a bot from the current room (host only, lobby phase only)."""

    TAG: ClassVar[str] = "remove_bot"
    bot_id: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "bot_id", _player_id(self.bot_id, "bot_id"))


# ---------------------------------------------------------------------------
# Client → server
# ---------------------------------------------------------------------------


class ClientMessage:
    """Envelope for everything a client sends; tagged with a ``type`` key."""

    TAG: ClassVar[str] = ""
    _registry: ClassVar[dict[str, type[ClientMessage]]] = {}

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        if cls.TAG:
            ClientMessage._registry[cls.TAG] = cls

    def to_dict(self) -> dict[str, Any]:
        return _body(self, "type", self.TAG)

    @classmethod
    def _from_fields(cls, data: Mapping[str, Any]) -> ClientMessage:
        return cls(**_fields_of(cls, data, cls.TAG))


@dataclass(frozen=True)
class Authenticate(ClientMessage):
    """First message after connecting; carries the session token."""

    TAG: ClassVar[str] = "authenticate"
    token: str

    def __post_init__(self) -> None:
        _text(self.token, "token")


@dataclass(frozen=True)
class LobbyMessage(ClientMessage):
    """A lobby action, inlined into the envelope object."""

    TAG: ClassVar[str] = "lobby"
    action: LobbyAction

    def __post_init__(self) -> None:
        if not isinstance(self.action, LobbyAction):
            raise ProtocolError("lobby message must carry a lobby action")

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.TAG, **self.action.to_dict()}

    @classmethod
    def _from_fields(cls, data: Mapping[str, Any]) -> LobbyMessage:
        return cls(lobby_action_from_dict(_without(data, "type")))


@dataclass(frozen=True)
class RoomMessage(ClientMessage):
    """An in-game action scoped to a named room."""

    TAG: ClassVar[str] = "room"
    room: str
    action: Action

    def __post_init__(self) -> None:
        _text(self.room, "room")
        if not isinstance(self.action, Action):
            raise ProtocolError("room message must carry a game action")

    @classmethod
    def _from_fields(cls, data: Mapping[str, Any]) -> RoomMessage:
        kwargs = _fields_of(cls, data, cls.TAG)
        return cls(room=kwargs["room"], action=action_from_dict(kwargs["action"]))


# ---------------------------------------------------------------------------
# Server → client
# ---------------------------------------------------------------------------


class ServerMessage:
    """Everything the server sends; tagged with a ``type`` key."""

    TAG: ClassVar[str] = ""
    _registry: ClassVar[dict[str, type[ServerMessage]]] = {}

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        if cls.TAG:
            ServerMessage._registry[cls.TAG] = cls

    def to_dict(self) -> dict[str, Any]:
        return _body(self, "type", self.TAG)

    @classmethod
    def _from_fields(cls, data: Mapping[str, Any]) -> ServerMessage:
        return cls(**_fields_of(cls, data, cls.TAG))


@dataclass(frozen=True)
class Authenticated(ServerMessage):
    """Successful authentication handshake."""

    TAG: ClassVar[str] = "authenticated"
    user_id: str
    username: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "user_id", _player_id(self.user_id, "user_id"))
        _text(self.username, "username")


@dataclass(frozen=True)
class AuthError(ServerMessage):
    """Authentication failed; the connection will be closed."""

    TAG: ClassVar[str] = "auth_error"
    message: str

    def __post_init__(self) -> None:
        _text(self.message, "message")


@dataclass(frozen=True)
class Welcome(ServerMessage):
    """Player id announcement used by the standalone server."""

    TAG: ClassVar[str] = "welcome"
    your_id: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "your_id", _player_id(self.your_id, "your_id"))


@dataclass(frozen=True)
class StateUpdate(ServerMessage):
    """Game state broadcast; the state view is kept as its JSON object."""

    TAG: ClassVar[str] = "state_update"
    state: dict[str, Any]

    def __post_init__(self) -> None:
        if not isinstance(self.state, Mapping):
            raise ProtocolError("state must be an object")
        if "type" in self.state:
            raise ProtocolError("state must not contain a 'type' field")
        object.__setattr__(self, "state", dict(self.state))

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.TAG, **self.state}

    @classmethod
    def _from_fields(cls, data: Mapping[str, Any]) -> StateUpdate:
        return cls(_without(data, "type"))


@dataclass(frozen=True)
class ActionRejected(ServerMessage):
    """The sender's action was rejected."""

    TAG: ClassVar[str] = "action_error"
    message: str

    def __post_init__(self) -> None:
        _text(self.message, "message")


@dataclass(frozen=True)
class Event(ServerMessage):
    """An incremental game event description."""

    TAG: ClassVar[str] = "event"
    message: str

    def __post_init__(self) -> None:
        _text(self.message, "message")


@dataclass(frozen=True)
class LobbyError(ServerMessage):
    """A lobby-level error such as a missing room or a taken name."""

    TAG: ClassVar[str] = "lobby_error"
    message: str

    def __post_init__(self) -> None:
        _text(self.message, "message")


@dataclass(frozen=True)
class RoomList(ServerMessage):
    """The current list of rooms."""

    TAG: ClassVar[str] = "room_list"
    rooms: tuple[RoomSummary, ...]

    def __post_init__(self) -> None:
        rooms = tuple(self.rooms)
        if not all(isinstance(r, RoomSummary) for r in rooms):
            raise ProtocolError("rooms must be room summaries")
        object.__setattr__(self, "rooms", rooms)

    @classmethod
    def _from_fields(cls, data: Mapping[str, Any]) -> RoomList:
        rooms = _fields_of(cls, data, cls.TAG)["rooms"]
        if not isinstance(rooms, list):
            raise ProtocolError("rooms must be a list")
        return cls(tuple(RoomSummary.from_dict(r) for r in rooms))


@dataclass(frozen=True)
class RoomJoined(ServerMessage):
    """A room was joined or created; carries the full static map."""

    TAG: ClassVar[str] = "room_joined"
    room: str
    your_id: str
    map: Map

    def __post_init__(self) -> None:
        _text(self.room, "room")
        object.__setattr__(self, "your_id", _player_id(self.your_id, "your_id"))
        if not isinstance(self.map, Map):
            raise ProtocolError("map must be a Map")

    @classmethod
    def _from_fields(cls, data: Mapping[str, Any]) -> RoomJoined:
        kwargs = _fields_of(cls, data, cls.TAG)
        kwargs["map"] = Map.from_dict(kwargs["map"])
        return cls(**kwargs)


@dataclass(frozen=True)
class RoomLeft(ServerMessage):
    """The client left a room."""

    TAG: ClassVar[str] = "room_left"
    room: str

    def __post_init__(self) -> None:
        _text(self.room, "room")


# ---------------------------------------------------------------------------
# Decoding and JSON
# ---------------------------------------------------------------------------


def lobby_action_from_dict(data: Any) -> LobbyAction:
    """Build a lobby action from its ``action``-tagged object."""
    return _decode(LobbyAction._registry, "action", data, "lobby action")


def client_message_from_dict(data: Any) -> ClientMessage:
    """Build a client message from its ``type``-tagged object."""
    return _decode(ClientMessage._registry, "type", data, "client message")


def server_message_from_dict(data: Any) -> ServerMessage:
    """Build a server message from its ``type``-tagged object."""
    return _decode(ServerMessage._registry, "type", data, "server message")


def dumps(message: ClientMessage | ServerMessage) -> str:
    """Serialise a message to compact JSON text."""
    if not isinstance(message, (ClientMessage, ServerMessage)):
        raise TypeError(f"cannot serialise {type(message).__name__} as a message")
    return json.dumps(message.to_dict(), separators=(",", ":"), ensure_ascii=False)


def _parse(text: str | bytes) -> Any:
    try:
        return json.loads(text)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise ProtocolError(f"invalid JSON: {exc}") from exc


def loads_client(text: str | bytes) -> ClientMessage:
    """Parse JSON text into a client message."""
    return client_message_from_dict(_parse(text))


def loads_server(text: str | bytes) -> ServerMessage:
    """Parse JSON text into a server message."""
    return server_message_from_dict(_parse(text))