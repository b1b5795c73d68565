import logging

from services import slot_store
from services.slot_range import time_to_minutes
from utils import clock

logger = logging.getLogger(__name__)


def list_bookable_slots(venue_id=None, court_id=None, date=None, cleanup=False, now=None):
    """
    Slots for a court and date that can still be booked.

    Past dates yield nothing; for today, slots starting before the current
    minute are hidden. With ``cleanup`` the hidden slots are deleted: every
    slot before today for a past date, only today's elapsed ones otherwise.
    This is advisory; the confirmation workflow re-checks at commit.
    """
    if date is None:
        return slot_store.find_slots(venue_id=venue_id, court_id=court_id)

    now = now or clock.local_now()
    today = clock.today_str(now)

    if date < today:
        if cleanup:
            removed = slot_store.delete_slots_before(today)
            logger.info("Purged %d slots dated before %s", removed, today)
        return []

    slots = slot_store.find_slots(venue_id=venue_id, court_id=court_id, date=date)
    if date > today:
        return slots

    current = clock.minute_of_day(now)
    upcoming = [s for s in slots if time_to_minutes(s.time) >= current]
    if cleanup:
        elapsed = [s for s in slots if time_to_minutes(s.time) < current]
        if elapsed:
            removed = slot_store.delete_slots(elapsed)
            logger.info("Purged %d elapsed slots for %s", removed, date)
    return upcoming


def purge_past_slots(now=None) -> int:
    """Retention sweep: drop every slot dated before today."""
    now = now or clock.local_now()
    return slot_store.delete_slots_before(clock.today_str(now))
