"""Board maps: cities, connections and network routing costs."""

from __future__ import annotations

import heapq
import math
import tomllib
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any


class MapError(ValueError):
    """Raised when map data is malformed."""


def _require_mapping(data: Any, where: str) -> Mapping[str, Any]:
    if not isinstance(data, Mapping):
        raise MapError(f"{where}: expected a table, got {type(data).__name__}")
    return data


def _require_str(data: Mapping[str, Any], key: str, where: str) -> str:
    try:
        value = data[key]
    except KeyError:
        raise MapError(f"{where}: missing field '{key}'") from None
    if not isinstance(value, str):
        raise MapError(f"{where}: field '{key}' must be a string")
    return value


def _optional_str(data: Mapping[str, Any], key: str, where: str) -> str | None:
    value = data.get(key)
    if value is not None and not isinstance(value, str):
        raise MapError(f"{where}: field '{key}' must be a string")
    return value


def _optional_float(data: Mapping[str, Any], key: str, where: str) -> float | None:
    value = data.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise MapError(f"{where}: field '{key}' must be a number")
    return float(value)


def _require_cost(value: Any, where: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= 0xFFFFFFFF:
        raise MapError(f"{where}: cost must be a non-negative integer")
    return value


def _require_list(data: Mapping[str, Any], key: str, where: str) -> list[Any]:
    try:
        value = data[key]
    except KeyError:
        raise MapError(f"{where}: missing field '{key}'") from None
    if not isinstance(value, list):
        raise MapError(f"{where}: field '{key}' must be a list")
    return value


@dataclass(frozen=True)
class CityData:
    """A city as written in a map file."""

    id: str
    name: str
    region: str
    x: float | None = None
    y: float | None = None

    @classmethod
    def from_dict(cls, data: Any) -> CityData:
        data = _require_mapping(data, "city")
        return cls(
            id=_require_str(data, "id", "city"),
            name=_require_str(data, "name", "city"),
            region=_require_str(data, "region", "city"),
            x=_optional_float(data, "x", "city"),
            y=_optional_float(data, "y", "city"),
        )


@dataclass(frozen=True)
class ConnectionData:
    """An undirected connection between two cities as written in a map file."""

    from_city: str
    to_city: str
    cost: int

    @classmethod
    def from_dict(cls, data: Any) -> ConnectionData:
        data = _require_mapping(data, "connection")
        if "cost" not in data:
            raise MapError("connection: missing field 'cost'")
        return cls(
            from_city=_require_str(data, "from", "connection"),
            to_city=_require_str(data, "to", "connection"),
            cost=_require_cost(data["cost"], "connection"),
        )


@dataclass(frozen=True)
class MapData:
    """The raw map file format."""

    name: str
    regions: list[str]
    cities: list[CityData]
    connections: list[ConnectionData]
    image: str | None = None

    @classmethod
    def from_dict(cls, data: Any) -> MapData:
        data = _require_mapping(data, "map")
        regions = _require_list(data, "regions", "map")
        if not all(isinstance(r, str) for r in regions):
            raise MapError("map: regions must be strings")
        return cls(
            name=_require_str(data, "name", "map"),
            regions=list(regions),
            cities=[CityData.from_dict(c) for c in _require_list(data, "cities", "map")],
            connections=[
                ConnectionData.from_dict(c) for c in _require_list(data, "connections", "map")
            ],
            image=_optional_str(data, "image", "map"),
        )


@dataclass
class City:
    """A city on the board together with the players who built there."""

    id: str
    name: str
    region: str
    owners: list[str] = field(default_factory=list)
    x: float | None = None
    y: float | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "region": self.region,
            "owners": list(self.owners),
            "x": self.x,
            "y": self.y,
        }

    @classmethod
    def from_dict(cls, data: Any) -> City:
        data = _require_mapping(data, "city")
        owners = _require_list(data, "owners", "city")
        if not all(isinstance(o, str) for o in owners):
            raise MapError("city: owners must be strings")
        return cls(
            id=_require_str(data, "id", "city"),
            name=_require_str(data, "name", "city"),
            region=_require_str(data, "region", "city"),
            owners=list(owners),
            x=_optional_float(data, "x", "city"),
            y=_optional_float(data, "y", "city"),
        )


@dataclass(frozen=True)
class ShortestPath:
    """Cheapest route to a city; each edge is stored as (smaller_id, larger_id)."""

    cost: int
    edges: list[tuple[str, str]]


@dataclass
class Map:
    """Runtime map: cities by id and a symmetric adjacency list of edge costs."""

    name: str
    regions: list[str]
    cities: dict[str, City]
    edges: dict[str, list[tuple[str, int]]]

    @classmethod
    def from_data(cls, data: MapData) -> Map:
        cities = {
            c.id: City(id=c.id, name=c.name, region=c.region, x=c.x, y=c.y)
            for c in data.cities
        }
        edges: dict[str, list[tuple[str, int]]] = {}
        for conn in data.connections:
            edges.setdefault(conn.from_city, []).append((conn.to_city, conn.cost))
            edges.setdefault(conn.to_city, []).append((conn.from_city, conn.cost))
        return cls(name=data.name, regions=list(data.regions), cities=cities, edges=edges)

    @classmethod
    def load(cls, toml_str: str) -> Map:
        try:
            raw = tomllib.loads(toml_str)
        except tomllib.TOMLDecodeError as exc:
            raise MapError(f"invalid map TOML: {exc}") from exc
        return cls.from_data(MapData.from_dict(raw))

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "regions": list(self.regions),
            "cities": {cid: city.to_dict() for cid, city in self.cities.items()},
            "edges": {
                cid: [[neighbor, cost] for neighbor, cost in adjacent]
                for cid, adjacent in self.edges.items()
            },
        }

    @classmethod
    def from_dict(cls, data: Any) -> Map:
        data = _require_mapping(data, "map")
        cities_raw = _require_mapping(data.get("cities"), "map cities")
        edges_raw = _require_mapping(data.get("edges"), "map edges")
        edges: dict[str, list[tuple[str, int]]] = {}
        for cid, adjacent in edges_raw.items():
            if not isinstance(adjacent, list):
                raise MapError("map: edge lists must be lists")
            pairs = []
            for pair in adjacent:
                if not isinstance(pair, (list, tuple)) or len(pair) != 2:
                    raise MapError("map: each edge must be a [neighbor, cost] pair")
                neighbor, cost = pair
                if not isinstance(neighbor, str):
                    raise MapError("map: edge neighbor must be a string")
                pairs.append((neighbor, _require_cost(cost, "edge")))
            edges[cid] = pairs
        regions = _require_list(data, "regions", "map")
        return cls(
            name=_require_str(data, "name", "map"),
            regions=list(regions),
            cities={cid: City.from_dict(c) for cid, c in cities_raw.items()},
            edges=edges,
        )

    def _search(self, sources: list[str], target: str) -> tuple[int, dict[str, str]] | None:
        """Multi-source Dijkstra; returns the target's cost and the parent links."""
        dist: dict[str, float] = {}
        parent: dict[str, str] = {}
        heap: list[tuple[int, str]] = []
        for start in sources:
            dist[start] = 0
            heapq.heappush(heap, (0, start))

        while heap:
            cost, node = heapq.heappop(heap)
            if node == target:
                return cost, parent
            if dist.get(node, math.inf) < cost:
                continue
            for neighbor, edge_cost in self.edges.get(node, ()):
                next_cost = cost + edge_cost
                if next_cost < dist.get(neighbor, math.inf):
                    dist[neighbor] = next_cost
                    parent[neighbor] = node
                    heapq.heappush(heap, (next_cost, neighbor))
        return None

    def shortest_path_to(self, owned_cities: Iterable[str], target: str) -> ShortestPath | None:
        """Cheapest path from any owned city to ``target``, with the edges traversed.

        Costs nothing when no city is owned yet or the target is already owned.
        Returns None when the target is unknown or unreachable.
        """
        if target not in self.cities:
            return None
        owned = list(owned_cities)
        if not owned or target in owned:
            return ShortestPath(cost=0, edges=[])

        found = self._search(owned, target)
        if found is None:
            return None
        cost, parent = found

        edges: list[tuple[str, str]] = []
        cur = target
        while cur in parent:
            prev = parent[cur]
            edges.append((prev, cur) if prev <= cur else (cur, prev))
            cur = prev
        return ShortestPath(cost=cost, edges=edges)

    def connection_cost_to(self, owned_cities: Iterable[str], target: str) -> int | None:
        """Cheapest routing cost from any owned city to ``target``, or None if unreachable."""
        owned = list(owned_cities)
        if not owned:
            return 0
        found = self._search(owned, target)
        return None if found is None else found[0]