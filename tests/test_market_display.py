import pytest

from powergrid.market_display import (
    Column,
    Rates,
    cog_slots,
    plant_columns,
    replenish_rates,
    uranium_slots,
)


@pytest.mark.parametrize(
    "step, players, expected",
    [
        (1, 2, (3, 2, 1, 1)),
        (1, 6, (7, 5, 3, 2)),
        (2, 5, (7, 5, 3, 3)),
        (3, 4, (4, 5, 4, 2)),
        (3, 6, (7, 7, 6, 3)),
    ],
)
def test_replenish_rates_table(step, players, expected):
    assert tuple(replenish_rates(step, players)) == expected


def test_replenish_rates_named_fields():
    rates = replenish_rates(2, 6)
    assert (rates.coal, rates.oil, rates.garbage, rates.uranium) == (9, 6, 5, 3)


def test_unknown_player_count_uses_six_player_row():
    for step in (1, 2, 3):
        assert replenish_rates(step, 7) == replenish_rates(step, 6)


def test_later_step_uses_step_three_row():
    assert replenish_rates(4, 3) == replenish_rates(3, 3)
    assert replenish_rates(0, 3) == replenish_rates(3, 3)


def test_replenish_rejects_negative():
    with pytest.raises(ValueError):
        replenish_rates(1, -1)


def test_cog_slots_prices_ascend_in_groups_of_three():
    slots = cog_slots(0)
    assert len(slots) == 24
    prices = [s.price for s in slots]
    assert prices == sorted(prices)
    assert prices[0] == 1 and prices[-1] == 8
    assert all(prices.count(p) == 3 for p in range(1, 9))


@pytest.mark.parametrize("count", [0, 1, 5, 12, 23, 24, 30])
def test_cog_slots_fill_from_expensive_end(count):
    slots = cog_slots(count)
    filled = [s.filled for s in slots]
    assert sum(filled) == min(count, 24)
    # Filled spaces form a suffix.
    assert filled == sorted(filled)


def test_cog_single_resource_is_on_most_expensive_space():
    slots = cog_slots(1)
    assert slots[-1].filled
    assert not slots[-2].filled


def test_uranium_slot_prices():
    assert [s.price for s in uranium_slots(0)] == [1, 2, 3, 4, 5, 6, 7, 8, 10, 12, 14, 16]


@pytest.mark.parametrize("count", [0, 2, 11, 12, 20])
def test_uranium_slots_fill_from_expensive_end(count):
    filled = [s.filled for s in uranium_slots(count)]
    assert sum(filled) == min(count, 12)
    assert filled == sorted(filled)


def test_slots_reject_negative_count():
    with pytest.raises(ValueError):
        cog_slots(-1)
    with pytest.raises(ValueError):
        uranium_slots(-3)


def test_plant_columns_before_step_three():
    actual = [3, 4, 5, 6]
    future = [7, 8, 9, 10]
    cols = plant_columns(actual, future, 1)
    assert cols == [Column("ACTUAL", (3, 4, 5, 6)), Column("FUTURE", (7, 8, 9, 10))]


def test_plant_columns_step_three_even_split():
    cols = plant_columns([1, 2, 3, 4, 5, 6], [99], 3)
    assert cols == [Column(None, (1, 2, 3)), Column(None, (4, 5, 6))]


def test_plant_columns_step_three_odd_split_keeps_all():
    actual = [10, 20, 30, 40, 50]
    cols = plant_columns(actual, [], 3)
    assert [c.label for c in cols] == [None, None]
    assert len(cols[0].plants) >= len(cols[1].plants)
    assert cols[0].plants + cols[1].plants == tuple(actual)


def test_rates_is_tuple_of_four():
    assert Rates(1, 2, 3, 4)._fields == ("coal", "oil", "garbage", "uranium")