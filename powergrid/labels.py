"""Display labels, dimmed colours and player-name highlighting for game text."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import NamedTuple

from .actions import PlayerColor, Resource

DIM_FACTOR = 0.3
DIM_ALPHA = 180

_RESOURCE_NAMES = {
    Resource.COAL: "COAL",
    Resource.OIL: "OIL",
    Resource.GARBAGE: "GARBAGE",
    Resource.URANIUM: "URANIUM",
}

_COLOR_LABELS = {
    PlayerColor.RED: "RED",
    PlayerColor.BLUE: "BLUE",
    PlayerColor.GREEN: "GREEN",
    PlayerColor.YELLOW: "YELLOW",
    PlayerColor.PURPLE: "PURPLE",
    PlayerColor.WHITE: "WHITE",
}


def resource_name(resource: Resource | str) -> str:
    """Upper-case display name of a resource."""
    return _RESOURCE_NAMES[Resource(resource)]


def color_label(color: PlayerColor | str) -> str:
    """Upper-case display name of a player colour."""
    return _COLOR_LABELS[PlayerColor(color)]


def dim_color(color: Sequence[int]) -> tuple[int, int, int, int]:
    """Darken an RGB or RGBA colour to 30% brightness with a fixed translucent alpha.

    The input alpha, if any, is ignored. The result is unmultiplied RGBA.
    """
    components = tuple(color)
    if len(components) not in (3, 4):
        raise ValueError("colour must have 3 or 4 components")
    for c in components:
        if isinstance(c, bool) or not isinstance(c, int) or not 0 <= c <= 255:
            raise ValueError("colour components must be integers between 0 and 255")
    r, g, b = components[:3]
    return (
        int(r * DIM_FACTOR),
        int(g * DIM_FACTOR),
        int(b * DIM_FACTOR),
        DIM_ALPHA,
    )


class Segment(NamedTuple):
    """A run of text; ``name`` is the player name it matches, or None for plain text."""

    text: str
    name: str | None


def highlight_names(entry: str, names: Iterable[str]) -> list[Segment]:
    """Split ``entry`` into plain runs and player-name matches.

    At each point the earliest occurrence of any name is taken; when several names
    start at the same position the longest one wins.
    """
    # Stable sort keeps the caller's order among names of equal length.
    candidates = sorted((n for n in names if n), key=len, reverse=True)
    segments: list[Segment] = []
    remaining = entry
    while remaining:
        best: tuple[int, str] | None = None
        for name in candidates:
            pos = remaining.find(name)
            if pos != -1 and (best is None or pos < best[0]):
                best = (pos, name)
        if best is None:
            segments.append(Segment(remaining, None))
            break
        pos, name = best
        if pos > 0:
            segments.append(Segment(remaining[:pos], None))
        segments.append(Segment(name, name))
        remaining = remaining[pos + len(name):]
    return segments