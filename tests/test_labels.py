import pytest

from powergrid.actions import PlayerColor, Resource
from powergrid.labels import (
    Segment,
    color_label,
    dim_color,
    highlight_names,
    resource_name,
)


@pytest.mark.parametrize(
    "resource, expected",
    [
        (Resource.COAL, "COAL"),
        (Resource.OIL, "OIL"),
        (Resource.GARBAGE, "GARBAGE"),
        (Resource.URANIUM, "URANIUM"),
    ],
)
def test_resource_name(resource, expected):
    assert resource_name(resource) == expected


def test_resource_name_accepts_wire_value():
    assert resource_name("Garbage") == "GARBAGE"


def test_resource_name_unknown():
    with pytest.raises(ValueError):
        resource_name("Wood")


@pytest.mark.parametrize(
    "color, expected",
    [
        (PlayerColor.RED, "RED"),
        (PlayerColor.BLUE, "BLUE"),
        (PlayerColor.GREEN, "GREEN"),
        (PlayerColor.YELLOW, "YELLOW"),
        (PlayerColor.PURPLE, "PURPLE"),
        (PlayerColor.WHITE, "WHITE"),
    ],
)
def test_color_label(color, expected):
    assert color_label(color) == expected


def test_color_label_unknown():
    with pytest.raises(ValueError):
        color_label("Orange")


def test_dim_color_black_keeps_zero_and_fixed_alpha():
    assert dim_color((0, 0, 0)) == (0, 0, 0, 180)


def test_dim_color_ignores_input_alpha():
    assert dim_color((120, 40, 200, 10)) == dim_color((120, 40, 200))


@pytest.mark.parametrize("rgb", [(255, 255, 255), (150, 100, 55), (200, 30, 30)])
def test_dim_color_is_darker(rgb):
    dimmed = dim_color(rgb)
    assert len(dimmed) == 4
    assert dimmed[3] == 180
    assert all(d < c for d, c in zip(dimmed[:3], rgb))


@pytest.mark.parametrize("bad", [(1, 2), (1, 2, 3, 4, 5), (256, 0, 0), (-1, 0, 0), (1.5, 0, 0)])
def test_dim_color_rejects_bad_input(bad):
    with pytest.raises(ValueError):
        dim_color(bad)


def test_highlight_single_name():
    assert highlight_names("Alice built Berlin", ["Alice"]) == [
        Segment("Alice", "Alice"),
        Segment(" built Berlin", None),
    ]


def test_highlight_prefers_longest_at_same_position():
    segments = highlight_names("Alice wins", ["Al", "Alice"])
    assert segments[0] == Segment("Alice", "Alice")
    assert segments[1] == Segment(" wins", None)


def test_highlight_earliest_match_first():
    segments = highlight_names("Bob outbid Alice", ["Alice", "Bob"])
    assert segments == [
        Segment("Bob", "Bob"),
        Segment(" outbid ", None),
        Segment("Alice", "Alice"),
    ]


def test_highlight_no_names_gives_whole_entry():
    assert highlight_names("Round 2 begins", []) == [Segment("Round 2 begins", None)]


def test_highlight_empty_entry():
    assert highlight_names("", ["Alice"]) == []


def test_highlight_ignores_empty_name():
    assert highlight_names("Alice", [""]) == [Segment("Alice", None)]


def test_highlight_repeated_names_rejoin_to_entry():
    entry = "Carol paid Dave; Dave paid Carol."
    segments = highlight_names(entry, ["Carol", "Dave"])
    assert "".join(s.text for s in segments) == entry
    assert [s.name for s in segments if s.name] == ["Carol", "Dave", "Dave", "Carol"]