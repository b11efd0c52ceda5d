"""Layout of the resource market, replenishment table and plant market columns."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, NamedTuple

COG_GROUPS = 8
COG_GROUP_SIZE = 3
COG_SLOTS = COG_GROUPS * COG_GROUP_SIZE
URANIUM_PRICES = (1, 2, 3, 4, 5, 6, 7, 8, 10, 12, 14, 16)


class Rates(NamedTuple):
    """Resources added to the market at the end of a round."""

    coal: int
    oil: int
    garbage: int
    uranium: int


class Slot(NamedTuple):
    """One market space: its price and whether a resource sits on it."""

    price: int
    filled: bool


class Column(NamedTuple):
    """A column of the plant market; ``label`` is None when it has no heading."""

    label: str | None
    plants: tuple[Any, ...]


_RATES: dict[int, dict[int, Rates]] = {
    1: {
        2: Rates(3, 2, 1, 1),
        3: Rates(4, 2, 1, 1),
        4: Rates(5, 3, 2, 1),
        5: Rates(5, 4, 3, 2),
        6: Rates(7, 5, 3, 2),
    },
    2: {
        2: Rates(4, 2, 1, 1),
        3: Rates(5, 3, 2, 1),
        4: Rates(6, 4, 3, 2),
        5: Rates(7, 5, 3, 3),
        6: Rates(9, 6, 5, 3),
    },
    3: {
        2: Rates(3, 4, 3, 1),
        3: Rates(3, 4, 3, 1),
        4: Rates(4, 5, 4, 2),
        5: Rates(5, 6, 5, 3),
        6: Rates(7, 7, 6, 3),
    },
}


def _count(value: Any, name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValueError(f"{name} must be a non-negative integer")
    return value


def replenish_rates(step: int, player_count: int) -> Rates:
    """Replenishment for a step and player count.

    Steps other than 1 and 2 use the step 3 row; player counts other than 2 to 5
    use the six-player column.
    """
    _count(step, "step")
    _count(player_count, "player_count")
    table = _RATES.get(step, _RATES[3])
    return table.get(player_count, table[6])


def cog_slots(count: int) -> list[Slot]:
    """The 24 coal/oil/garbage spaces, cheapest first.

    The market fills from the most expensive end, so ``count`` resources occupy
    the last ``count`` spaces.
    """
    _count(count, "count")
    return [
        Slot(price=pos // COG_GROUP_SIZE + 1, filled=(COG_SLOTS - 1 - pos) < count)
        for pos in range(COG_SLOTS)
    ]


def uranium_slots(count: int) -> list[Slot]:
    """The 12 uranium spaces, cheapest first, filled from the expensive end."""
    _count(count, "count")
    last = len(URANIUM_PRICES) - 1
    return [
        Slot(price=price, filled=(last - pos) < count)
        for pos, price in enumerate(URANIUM_PRICES)
    ]


def plant_columns(actual: Sequence[Any], future: Sequence[Any], step: int) -> list[Column]:
    """Columns in which to show the plant market.

    Before step 3 the actual and future markets are shown side by side under
    headings; from step 3 the actual market is split into two unlabelled halves,
    the first taking the extra plant when the count is odd.
    """
    _count(step, "step")
    actual = tuple(actual)
    if step >= 3:
        mid = (len(actual) + 1) // 2
        return [Column(None, actual[:mid]), Column(None, actual[mid:])]
    return [Column("ACTUAL", actual), Column("FUTURE", tuple(future))]