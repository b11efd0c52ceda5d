"""Game actions sent by players and the errors returned when they are rejected."""

from __future__ import annotations

import dataclasses
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any, ClassVar

_U8_MAX = 0xFF
_U32_MAX = 0xFFFFFFFF


class PlayerColor(Enum):
    RED = "Red"
    BLUE = "Blue"
    GREEN = "Green"
    YELLOW = "Yellow"
    PURPLE = "Purple"
    WHITE = "White"


class Resource(Enum):
    COAL = "Coal"
    OIL = "Oil"
    GARBAGE = "Garbage"
    URANIUM = "Uranium"


def _uint(value: Any, name: str, maximum: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= maximum:
        raise ValueError(f"{name} must be an integer between 0 and {maximum}")
    return value


def _text(value: Any, name: str) -> str:
    if not isinstance(value, str):
        raise ValueError(f"{name} must be a string")
    return value


def _enum(enum_cls: type[Enum], value: Any, name: str) -> Any:
    try:
        return enum_cls(value)
    except ValueError:
        raise ValueError(f"{name}: unknown value {value!r}") from None


def _sequence(value: Any, name: str) -> tuple[Any, ...]:
    if isinstance(value, (str, bytes, Mapping)) or not hasattr(value, "__iter__"):
        raise ValueError(f"{name} must be a list")
    return tuple(value)


def _encode(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, tuple):
        return [_encode(v) for v in value]
    return value


_ACTIONS: dict[str, type[Action]] = {}


class Action:
    """Base of every in-game action; serialised with a ``type`` tag."""

    TYPE: ClassVar[str] = ""

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        if cls.TYPE:
            _ACTIONS[cls.TYPE] = cls

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {"type": self.TYPE}
        for f in dataclasses.fields(self):  # type: ignore[arg-type]
            body[f.name] = _encode(getattr(self, f.name))
        return body


def _set(obj: Any, name: str, value: Any) -> None:
    object.__setattr__(obj, name, value)


@dataclass(frozen=True)
class JoinGame(Action):
    """Join the game lobby."""

    TYPE: ClassVar[str] = "join_game"
    name: str
    color: PlayerColor

    def __post_init__(self) -> None:
        _text(self.name, "name")
        _set(self, "color", _enum(PlayerColor, self.color, "color"))


@dataclass(frozen=True)
class StartGame(Action):
    """Host starts the game."""

    TYPE: ClassVar[str] = "start_game"


@dataclass(frozen=True)
class SelectPlant(Action):
    """Put a plant from the market up for auction."""

    TYPE: ClassVar[str] = "select_plant"
    plant_number: int

    def __post_init__(self) -> None:
        _uint(self.plant_number, "plant_number", _U8_MAX)


@dataclass(frozen=True)
class PlaceBid(Action):
    """Place or raise a bid on the plant under auction."""

    TYPE: ClassVar[str] = "place_bid"
    amount: int

    def __post_init__(self) -> None:
        _uint(self.amount, "amount", _U32_MAX)


@dataclass(frozen=True)
class PassAuction(Action):
    """Pass on the current bid or skip selecting a plant."""

    TYPE: ClassVar[str] = "pass_auction"


@dataclass(frozen=True)
class BuyResources(Action):
    """Buy some of one resource from the market."""

    TYPE: ClassVar[str] = "buy_resources"
    resource: Resource
    amount: int

    def __post_init__(self) -> None:
        _set(self, "resource", _enum(Resource, self.resource, "resource"))
        _uint(self.amount, "amount", _U8_MAX)


@dataclass(frozen=True)
class BuyResourceBatch(Action):
    """Buy a batch of resources at once and end the turn; empty means done buying."""

    TYPE: ClassVar[str] = "buy_resource_batch"
    purchases: tuple[tuple[Resource, int], ...]

    def __post_init__(self) -> None:
        items = []
        for item in _sequence(self.purchases, "purchases"):
            pair = _sequence(item, "purchase")
            if len(pair) != 2:
                raise ValueError("each purchase must be a (resource, amount) pair")
            resource, amount = pair
            items.append(
                (_enum(Resource, resource, "resource"), _uint(amount, "amount", _U8_MAX))
            )
        _set(self, "purchases", tuple(items))


@dataclass(frozen=True)
class DoneBuying(Action):
    """Finish buying resources."""

    TYPE: ClassVar[str] = "done_buying"


@dataclass(frozen=True)
class BuildCity(Action):
    """Build in one city."""

    TYPE: ClassVar[str] = "build_city"
    city_id: str

    def __post_init__(self) -> None:
        _text(self.city_id, "city_id")


@dataclass(frozen=True)
class BuildCities(Action):
    """Build in several cities in order and end the turn."""

    TYPE: ClassVar[str] = "build_cities"
    city_ids: tuple[str, ...]

    def __post_init__(self) -> None:
        ids = _sequence(self.city_ids, "city_ids")
        for cid in ids:
            _text(cid, "city_id")
        _set(self, "city_ids", ids)


@dataclass(frozen=True)
class DoneBuilding(Action):
    """Finish building."""

    TYPE: ClassVar[str] = "done_building"


@dataclass(frozen=True)
class PowerCities(Action):
    """Declare which plants to fire this round."""

    TYPE: ClassVar[str] = "power_cities"
    plant_numbers: tuple[int, ...]

    def __post_init__(self) -> None:
        numbers = _sequence(self.plant_numbers, "plant_numbers")
        for n in numbers:
            _uint(n, "plant_number", _U8_MAX)
        _set(self, "plant_numbers", numbers)


@dataclass(frozen=True)
class DiscardPlant(Action):
    """Discard an existing plant after winning a fourth."""

    TYPE: ClassVar[str] = "discard_plant"
    plant_number: int

    def __post_init__(self) -> None:
        _uint(self.plant_number, "plant_number", _U8_MAX)


@dataclass(frozen=True)
class DiscardResource(Action):
    """Drop coal and oil that hybrid plants can no longer hold."""

    TYPE: ClassVar[str] = "discard_resource"
    coal: int
    oil: int

    def __post_init__(self) -> None:
        _uint(self.coal, "coal", _U8_MAX)
        _uint(self.oil, "oil", _U8_MAX)


@dataclass(frozen=True)
class PowerCitiesFuel(Action):
    """Split hybrid plants' fuel cost between coal and oil."""

    TYPE: ClassVar[str] = "power_cities_fuel"
    coal: int
    oil: int

    def __post_init__(self) -> None:
        _uint(self.coal, "coal", _U8_MAX)
        _uint(self.oil, "oil", _U8_MAX)


def action_from_dict(data: Any) -> Action:
    """Build an action from its tagged dictionary form."""
    if not isinstance(data, Mapping):
        raise ValueError("action must be an object")
    tag = data.get("type")
    cls = _ACTIONS.get(tag) if isinstance(tag, str) else None
    if cls is None:
        raise ValueError(f"unknown action type {tag!r}")
    kwargs = {}
    for f in dataclasses.fields(cls):  # type: ignore[arg-type]
        if f.name not in data:
            raise ValueError(f"{tag}: missing field '{f.name}'")
        kwargs[f.name] = data[f.name]
    return cls(**kwargs)


class ActionErrorKind(Enum):
    """Reasons an action can be rejected, with their message templates."""

    GAME_FULL = ("GameFull", "game is full", 0)
    NAME_TAKEN = ("NameTaken", "name already taken", 0)
    COLOR_TAKEN = ("ColorTaken", "color already taken", 0)
    NOT_HOST = ("NotHost", "only the host can start the game", 0)
    NOT_ENOUGH_PLAYERS = ("NotEnoughPlayers", "need at least 2 players to start", 0)
    WRONG_PHASE = ("WrongPhase", "action not allowed in current phase", 0)
    NOT_YOUR_TURN = ("NotYourTurn", "it is not your turn", 0)
    PLANT_NOT_IN_MARKET = ("PlantNotInMarket", "plant {0} is not in the market", 1)
    BID_TOO_LOW = ("BidTooLow", "bid of {0} is too low; minimum is {1}", 2)
    CANNOT_AFFORD = ("CannotAfford", "you cannot afford that", 0)
    RESOURCE_UNAVAILABLE = (
        "ResourceUnavailable",
        "resource not available in that quantity",
        0,
    )
    OVER_CAPACITY = (
        "OverCapacity",
        "you do not have capacity for that many resources",
        0,
    )
    CITY_NOT_FOUND = ("CityNotFound", "city {0} does not exist", 1)
    CITY_FULL = ("CityFull", "city {0} is already full", 1)
    ALREADY_BUILT_THERE = ("AlreadyBuiltThere", "you already have a city there", 0)
    CANNOT_AFFORD_CITY = ("CannotAffordCity", "you cannot afford to build there", 0)
    EMPTY_BUILD_LIST = (
        "EmptyBuildList",
        "build list must not be empty; use DoneBuilding to skip",
        0,
    )
    DUPLICATE_CITY_IN_BUILD = ("DuplicateCityInBuild", "duplicate city in build list", 0)
    CITY_REGION_INACTIVE = ("CityRegionInactive", "city {0} is in an inactive region", 1)
    PLANT_NOT_OWNED = ("PlantNotOwned", "you do not own plant {0}", 1)
    UNKNOWN_PLAYER = ("UnknownPlayer", "unknown player", 0)
    MUST_BUY_PLANT_IN_ROUND_ONE = (
        "MustBuyPlantInRoundOne",
        "you must buy a power plant in the first round",
        0,
    )
    CANNOT_DISCARD_NEW_PLANT = (
        "CannotDiscardNewPlant",
        "cannot discard the plant you just acquired",
        0,
    )
    INVALID_DISCARD_SPLIT = (
        "InvalidDiscardSplit",
        "coal + oil must equal the required drop total, and neither may exceed what you hold",
        0,
    )
    INVALID_FUEL_SPLIT = (
        "InvalidFuelSplit",
        "coal + oil must equal the hybrid fuel cost, and neither may exceed what you hold "
        "after pure-fuel plants are paid",
        0,
    )

    def __init__(self, wire_name: str, template: str, arity: int) -> None:
        self.wire_name = wire_name
        self.template = template
        self.arity = arity

    @classmethod
    def from_wire(cls, name: str) -> ActionErrorKind:
        for kind in cls:
            if kind.wire_name == name:
                return kind
        raise ValueError(f"unknown action error {name!r}")


class ActionError(Exception):
    """An action was rejected by the game rules."""

    def __init__(self, kind: ActionErrorKind, *values: Any) -> None:
        if len(values) != kind.arity:
            raise TypeError(
                f"{kind.wire_name} takes {kind.arity} value(s), got {len(values)}"
            )
        super().__init__(kind.template.format(*values))
        self.kind = kind
        self.values = values

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ActionError):
            return NotImplemented
        return self.kind is other.kind and self.values == other.values

    def __hash__(self) -> int:
        return hash((self.kind, self.values))

    def __repr__(self) -> str:
        return f"ActionError({self.kind.name}, {', '.join(map(repr, self.values))})"

    def to_dict(self) -> str | dict[str, Any]:
        """Externally tagged form: a bare name, or a one-key object holding the values."""
        if self.kind.arity == 0:
            return self.kind.wire_name
        if self.kind.arity == 1:
            return {self.kind.wire_name: self.values[0]}
        return {self.kind.wire_name: list(self.values)}

    @classmethod
    def from_dict(cls, data: Any) -> ActionError:
        if isinstance(data, str):
            kind = ActionErrorKind.from_wire(data)
            if kind.arity != 0:
                raise ValueError(f"{data} requires values")
            return cls(kind)
        if not isinstance(data, Mapping) or len(data) != 1:
            raise ValueError("action error must be a name or a single-key object")
        ((name, payload),) = data.items()
        kind = ActionErrorKind.from_wire(name)
        if kind.arity == 0:
            raise ValueError(f"{name} takes no values")
        if kind.arity == 1:
            return cls(kind, payload)
        if not isinstance(payload, list) or len(payload) != kind.arity:
            raise ValueError(f"{name} requires {kind.arity} values")
        return cls(kind, *payload)