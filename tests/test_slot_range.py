from types import SimpleNamespace

import pytest

from services.errors import InvalidRange
from services.slot_range import (
    all_available,
    end_time_for,
    minutes_to_time,
    range_from_selected,
    range_price,
    resolve_range,
    time_to_minutes,
)


def _slot(time, price=500, available=True):
    return SimpleNamespace(time=time, price=price, is_available=available)


def test_time_conversions():
    assert time_to_minutes("00:00") == 0
    assert time_to_minutes("18:30") == 18 * 60 + 30
    assert minutes_to_time(21 * 60) == "21:00"
    assert minutes_to_time(24 * 60) == "24:00"


def test_resolve_returns_hourly_slots_in_order():
    slots = [_slot("20:00"), _slot("18:00"), _slot("19:00"), _slot("22:00")]
    resolved = resolve_range(slots, "18:00", "21:00")
    assert [s.time for s in resolved] == ["18:00", "19:00", "20:00"]
    assert len(resolved) == (time_to_minutes("21:00") - time_to_minutes("18:00")) // 60


def test_resolve_sums_individual_prices():
    slots = [_slot("17:00", 400), _slot("18:00", 600), _slot("19:00", 600)]
    resolved = resolve_range(slots, "17:00", "20:00")
    assert range_price(resolved) == 1600


def test_gap_yields_empty_result():
    slots = [_slot("18:00"), _slot("20:00")]
    assert resolve_range(slots, "18:00", "21:00") == []


def test_gap_is_distinct_from_unavailable():
    slots = [_slot("18:00"), _slot("19:00", available=False), _slot("20:00")]
    resolved = resolve_range(slots, "18:00", "21:00")
    assert len(resolved) == 3
    assert all_available(resolved) is False


def test_all_available_requires_non_empty():
    assert all_available([]) is False
    assert all_available([_slot("18:00")]) is True


@pytest.mark.parametrize("start,end", [("18:00", "18:00"), ("19:00", "18:00")])
def test_end_not_after_start_is_invalid(start, end):
    with pytest.raises(InvalidRange):
        resolve_range([_slot("18:00")], start, end)


def test_fractional_hour_range_is_invalid():
    with pytest.raises(InvalidRange):
        resolve_range([_slot("18:00")], "18:00", "19:30")


def test_end_time_for_duration():
    assert end_time_for("18:00", 3) == "21:00"
    assert end_time_for("23:00", 1) == "24:00"
    with pytest.raises(InvalidRange):
        end_time_for("23:00", 2)


def test_range_from_selected():
    assert range_from_selected(["19:00", "18:00"]) == ("18:00", "20:00")
    with pytest.raises(InvalidRange):
        range_from_selected(["18:00", "20:00"])
    with pytest.raises(InvalidRange):
        range_from_selected([])
