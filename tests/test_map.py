import pytest

from powergrid.map import (
    City,
    CityData,
    ConnectionData,
    Map,
    MapData,
    MapError,
    ShortestPath,
)


def small_map():
    """a --5-- b --3-- c, and b --4-- d, plus an isolated city e."""
    return Map.from_data(
        MapData(
            name="Test",
            regions=["r"],
            image=None,
            cities=[
                CityData(id="a", name="A", region="r"),
                CityData(id="b", name="B", region="r"),
                CityData(id="c", name="C", region="r"),
                CityData(id="d", name="D", region="r"),
                CityData(id="e", name="E", region="r"),
            ],
            connections=[
                ConnectionData(from_city="a", to_city="b", cost=5),
                ConnectionData(from_city="b", to_city="c", cost=3),
                ConnectionData(from_city="b", to_city="d", cost=4),
            ],
        )
    )


TEST_TOML = """
name = "Test"
regions = ["r"]
image = "test.png"

[[cities]]
id = "a"
name = "A"
region = "r"
x = 0.25
y = 0.5

[[cities]]
id = "b"
name = "B"
region = "r"

[[connections]]
from = "a"
to = "b"
cost = 5
"""


def test_shortest_path_first_city_has_zero_cost_no_edges():
    path = small_map().shortest_path_to([], "c")
    assert path == ShortestPath(cost=0, edges=[])


def test_shortest_path_target_already_owned_returns_zero():
    path = small_map().shortest_path_to(["a", "c"], "c")
    assert path.cost == 0
    assert path.edges == []


def test_shortest_path_direct_connection():
    path = small_map().shortest_path_to(["a"], "b")
    assert path.cost == 5
    assert len(path.edges) == 1
    assert ("a", "b") in path.edges


def test_shortest_path_multi_hop():
    path = small_map().shortest_path_to(["a"], "c")
    assert path.cost == 8
    assert len(path.edges) == 2
    assert ("a", "b") in path.edges
    assert ("b", "c") in path.edges


def test_shortest_path_multi_source_picks_closer():
    path = small_map().shortest_path_to(["a", "b"], "c")
    assert path.cost == 3
    assert path.edges == [("b", "c")]


def test_shortest_path_nonexistent_target_returns_none():
    assert small_map().shortest_path_to(["a"], "z") is None


def test_shortest_path_unreachable_returns_none():
    assert small_map().shortest_path_to(["a"], "e") is None


def test_shortest_path_edges_are_ordered_when_walking_backwards():
    path = small_map().shortest_path_to(["c"], "a")
    assert path.cost == 8
    assert all(x <= y for x, y in path.edges)


def test_connection_cost_first_city_is_zero():
    assert small_map().connection_cost_to([], "z") == 0


def test_connection_cost_matches_shortest_path():
    m = small_map()
    for target in ("b", "c", "d"):
        assert m.connection_cost_to(["a"], target) == m.shortest_path_to(["a"], target).cost


def test_connection_cost_unreachable_is_none():
    assert small_map().connection_cost_to(["a"], "e") is None


def test_edges_are_symmetric():
    m = small_map()
    assert ("b", 5) in m.edges["a"]
    assert ("a", 5) in m.edges["b"]
    assert "e" not in m.edges


def test_load_from_toml():
    m = Map.load(TEST_TOML)
    assert m.name == "Test"
    assert m.regions == ["r"]
    assert set(m.cities) == {"a", "b"}
    assert m.cities["a"].x == 0.25
    assert m.cities["b"].x is None
    assert m.cities["a"].owners == []
    assert m.connection_cost_to(["a"], "b") == 5


def test_load_invalid_toml_raises():
    with pytest.raises(MapError):
        Map.load("name = ")


def test_load_missing_field_raises():
    with pytest.raises(MapError):
        Map.load('name = "X"\nregions = []\ncities = []\n')


def test_load_bad_cost_raises():
    bad = TEST_TOML.replace("cost = 5", "cost = -1")
    with pytest.raises(MapError):
        Map.load(bad)


def test_map_dict_round_trip():
    m = small_map()
    m.cities["a"].owners.append("player-1")
    restored = Map.from_dict(m.to_dict())
    assert restored == m
    assert restored.cities["a"].owners == ["player-1"]


def test_city_dict_round_trip():
    city = City(id="x", name="X", region="r", owners=["p"], x=0.1, y=0.9)
    assert City.from_dict(city.to_dict()) == city


def test_city_from_dict_missing_owners_raises():
    with pytest.raises(MapError):
        City.from_dict({"id": "x", "name": "X", "region": "r"})