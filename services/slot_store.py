import logging

from sqlalchemy import and_, or_, update
from sqlalchemy.exc import IntegrityError

from models import db
from models.booking import Booking, BookingSlot, CONFIRMED
from models.slot import TimeSlot
from services.errors import DuplicateSlot, NotFound, SlotUnavailable

logger = logging.getLogger(__name__)


def create_slot(venue_id, court_id, date, time, price, is_available=True):
    slot = TimeSlot(
        venue_id=venue_id,
        court_id=court_id,
        date=date,
        time=time,
        price=price,
        is_available=is_available,
    )
    db.session.add(slot)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise DuplicateSlot()
    return slot


def find_slots(venue_id=None, court_id=None, date=None):
    q = TimeSlot.query
    if venue_id is not None:
        q = q.filter_by(venue_id=venue_id)
    if court_id is not None:
        q = q.filter_by(court_id=court_id)
    if date is not None:
        q = q.filter_by(date=date)
    return q.order_by(TimeSlot.time.asc()).all()


def get_slot(court_id, date, time):
    return TimeSlot.query.filter_by(court_id=court_id, date=date, time=time).first()


def set_availability(court_id, date, time, value: bool) -> bool:
    slot = get_slot(court_id, date, time)
    if slot is None:
        # Slot may have been purged by the retention sweep
        logger.warning("Slot %s %s %s not found, availability left unchanged", court_id, date, time)
        return False
    slot.is_available = value
    db.session.commit()
    return True


def delete_slots_before(date) -> int:
    count = TimeSlot.query.filter(TimeSlot.date < date).delete(synchronize_session=False)
    db.session.commit()
    return count


def delete_slots(slots) -> int:
    ids = [s.id for s in slots]
    if not ids:
        return 0
    count = TimeSlot.query.filter(TimeSlot.id.in_(ids)).delete(synchronize_session=False)
    db.session.commit()
    return count


def claim_slots(slots) -> bool:
    """
    Flip every slot in ``slots`` from available to unavailable in one
    conditional UPDATE. Returns False if any of them was already taken.
    Does not commit; the caller rolls back on False.
    """
    ids = [s.id for s in slots]
    if not ids:
        return False
    result = db.session.execute(
        update(TimeSlot)
        .where(TimeSlot.id.in_(ids), TimeSlot.is_available.is_(True))
        .values(is_available=False)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != len(ids):
        return False
    for s in slots:
        s.is_available = False
    return True


def release_slots(keys) -> int:
    """
    Restore availability for claimed keys ``(court_id, date, time)``.
    Keys held by a confirmed booking are skipped, so the releasing
    booking must already be cancelled. Does not commit. Returns how many
    slots were restored.
    """
    keys = list(keys)
    if not keys:
        return 0
    match = or_(*[
        and_(TimeSlot.court_id == court_id, TimeSlot.date == date, TimeSlot.time == time)
        for court_id, date, time in keys
    ])
    slots = TimeSlot.query.filter(match).all()
    if len(slots) != len(keys):
        logger.warning("Only %d of %d claimed slots still exist", len(slots), len(keys))

    restored = 0
    for s in slots:
        # Reclaimed by another booking since (slot deleted and recreated)
        if is_held_by_confirmed_booking(s):
            logger.warning("Slot %s %s %s is held by another booking, left claimed", s.court_id, s.date, s.time)
            continue
        s.is_available = True
        restored += 1
    return restored


def is_held_by_confirmed_booking(slot) -> bool:
    return (
        db.session.query(BookingSlot.id)
        .join(Booking, BookingSlot.booking_id == Booking.id)
        .filter(
            Booking.status == CONFIRMED,
            BookingSlot.court_id == slot.court_id,
            BookingSlot.date == slot.date,
            BookingSlot.time == slot.time,
        )
        .first()
        is not None
    )


def update_slot(slot_id, price=None, is_available=None):
    slot = db.session.get(TimeSlot, slot_id)
    if not slot:
        raise NotFound("TimeSlot not found")

    if is_available is True and not slot.is_available and is_held_by_confirmed_booking(slot):
        raise SlotUnavailable("Slot is held by a confirmed booking")

    if price is not None:
        slot.price = price
    if is_available is not None:
        slot.is_available = is_available
    db.session.commit()
    return slot


def delete_slot(slot_id):
    slot = db.session.get(TimeSlot, slot_id)
    if not slot:
        raise NotFound("TimeSlot not found")
    if is_held_by_confirmed_booking(slot):
        raise SlotUnavailable("Slot is held by a confirmed booking")
    db.session.delete(slot)
    db.session.commit()
    return slot
