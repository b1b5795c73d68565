from services.errors import InvalidRange

SLOT_MINUTES = 60


def time_to_minutes(value: str) -> int:
    hours, minutes = value.split(":")
    return int(hours) * 60 + int(minutes)


def minutes_to_time(total: int) -> str:
    return f"{total // 60:02d}:{total % 60:02d}"


def end_time_for(start_time: str, duration: int) -> str:
    end = time_to_minutes(start_time) + duration * SLOT_MINUTES
    if end > 24 * 60:
        raise InvalidRange("Booking cannot extend past midnight")
    return minutes_to_time(end)


def resolve_range(slots, start_time: str, end_time: str):
    """
    Hourly slots covering [start_time, end_time), in time order.

    An empty list means some hour in the range has no offered slot, which
    is distinct from a slot that exists but is already taken.
    """
    start = time_to_minutes(start_time)
    end = time_to_minutes(end_time)
    if end <= start:
        raise InvalidRange("End time must be after start time")
    if (end - start) % SLOT_MINUTES:
        raise InvalidRange("Bookings must cover whole hours")

    by_time = {s.time: s for s in slots}
    resolved = []
    for minute in range(start, end, SLOT_MINUTES):
        slot = by_time.get(minutes_to_time(minute))
        if slot is None:
            return []
        resolved.append(slot)
    return resolved


def all_available(slots) -> bool:
    return bool(slots) and all(s.is_available for s in slots)


def range_price(slots) -> int:
    return sum(s.price for s in slots)


def range_from_selected(times):
    """(start, end) for a list of selected slot start times; must be contiguous."""
    if not times:
        raise InvalidRange("No slots selected")
    minutes = sorted(time_to_minutes(t) for t in times)
    for prev, cur in zip(minutes, minutes[1:]):
        if cur - prev != SLOT_MINUTES:
            raise InvalidRange("Selected slots must be consecutive hours")
    return minutes_to_time(minutes[0]), minutes_to_time(minutes[-1] + SLOT_MINUTES)
