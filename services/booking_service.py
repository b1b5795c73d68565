"""
Booking confirmation: the only path that claims slots.

Validation runs before any write. The booking row, its claimed slot keys
and the slot flips go out in one transaction; the flip is a conditional
update, so a slot taken by a concurrent request aborts the whole booking.
"""
import logging
from collections import namedtuple

from sqlalchemy.exc import IntegrityError

from models import db
from models.booking import Booking, BookingSlot, CONFIRMED
from models.court import Court
from models.user import User
from models.venue import Venue
from services import notifications, slot_store
from services.errors import BookingError, InvalidRange, MissingFields, NotFound, SlotUnavailable
from services.reminder_scheduler import schedule_booking_reminders
from services.slot_range import (
    all_available,
    end_time_for,
    range_from_selected,
    range_price,
    resolve_range,
)
from utils import clock
from utils.audit import log_event
from utils.fields import as_int, as_text, first_present, missing_fields

logger = logging.getLogger(__name__)

BookingResult = namedtuple("BookingResult", "booking total_amount email_sent")


def _requested_range(data, start_time):
    """(start, end) from endTime, selectedSlots or duration, in that order."""
    end_time = data.get("endTime")
    if end_time:
        if not (clock.is_valid_time(end_time) or end_time == "24:00"):
            raise InvalidRange("Invalid endTime. Use HH:MM")
        return start_time, end_time

    selected = data.get("selectedSlots") or []
    if not isinstance(selected, list):
        raise InvalidRange("selectedSlots must be a list")
    if selected:
        times = [s.get("time") if isinstance(s, dict) else s for s in selected]
        if not all(clock.is_valid_time(t) for t in times):
            raise InvalidRange("Invalid selected slot time. Use HH:MM")
        start, end = range_from_selected(times)
        if start != start_time:
            raise InvalidRange("Selected slots do not begin at the start time")
        return start, end

    duration = as_int(data.get("duration") or 1)
    if duration is None or duration < 1:
        raise InvalidRange("Duration must be a positive number of hours")
    return start_time, end_time_for(start_time, duration)


def _load_parties(user_id, venue_id, court_id):
    user = db.session.get(User, user_id) if user_id is not None else None
    if not user:
        raise NotFound("User not found")
    venue = db.session.get(Venue, venue_id) if venue_id is not None else None
    if not venue:
        raise NotFound("Venue not found")
    court = db.session.get(Court, court_id) if court_id is not None else None
    if not court or court.venue_id != venue.id or not court.is_active:
        raise NotFound("Court not found")
    return user, venue, court


def confirm_booking(data, now=None):
    if not isinstance(data, dict):
        raise BookingError("Request body must be a JSON object")
    court_ref = first_present(data, "courtId", "court")
    start_time = first_present(data, "startTime", "time")

    missing = missing_fields([
        (data.get("userId"), "userId"),
        (data.get("venueId"), "venueId"),
        (court_ref, "courtId"),
        (data.get("date"), "date"),
        (start_time, "startTime/time"),
        (data.get("totalAmount"), "totalAmount"),
    ])
    if missing:
        logger.info("Booking rejected, missing fields: %s", ", ".join(missing))
        raise MissingFields(missing)

    date = data["date"]
    if not clock.is_valid_date(date):
        raise BookingError("Invalid date. Use YYYY-MM-DD")
    if not clock.is_valid_time(start_time):
        raise InvalidRange("Invalid start time. Use HH:MM")

    user, venue, court = _load_parties(
        as_int(data.get("userId")), as_int(data.get("venueId")), as_int(court_ref)
    )

    start_time, end_time = _requested_range(data, start_time)

    now = now or clock.local_now()
    if clock.slot_datetime(date, start_time) <= now:
        raise InvalidRange("Cannot book past/started slots")

    offered = slot_store.find_slots(venue_id=venue.id, court_id=court.id, date=date)
    claimed = resolve_range(offered, start_time, end_time)
    if not claimed:
        raise InvalidRange("Selected time range is not fully offered for this court")
    if not all_available(claimed):
        taken = next(s for s in claimed if not s.is_available)
        raise SlotUnavailable(f"Time slot {taken.time} is no longer available")

    total = range_price(claimed)
    requested_total = as_int(data.get("totalAmount"))
    if requested_total != total:
        logger.warning(
            "Client total %s differs from slot total %s for court %s on %s",
            data.get("totalAmount"), total, court.id, date,
        )

    booking = Booking(
        user_id=user.id,
        venue_id=venue.id,
        court_id=court.id,
        date=date,
        time=start_time,
        end_time=end_time,
        duration=len(claimed),
        total_amount=total,
        status=CONFIRMED,
        customer_name=as_text(data.get("customerName")) or user.name,
        customer_email=as_text(data.get("customerEmail")) or user.email,
        venue_name=as_text(data.get("venueName")) or venue.name,
        venue_location=as_text(data.get("venueLocation")) or venue.location,
        court_name=as_text(data.get("courtName")) or court.name,
        sport=as_text(data.get("sport")) or court.sport,
    )
    booking.slots = [
        BookingSlot(court_id=s.court_id, date=s.date, time=s.time, price=s.price)
        for s in claimed
    ]
    db.session.add(booking)
    db.session.flush()

    if not slot_store.claim_slots(claimed):
        db.session.rollback()
        logger.info("Slot claim lost for court %s %s %s-%s", court.id, date, start_time, end_time)
        raise SlotUnavailable()

    schedule_booking_reminders(booking, now=now, commit=False)
    log_event(
        "BOOKING_CONFIRM",
        user_id=user.id,
        entity="booking",
        entity_id=booking.id,
        metadata={"court_id": court.id, "date": date, "slots": [s.time for s in claimed]},
        commit=False,
    )
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise SlotUnavailable()

    logger.info("Booking %s confirmed: court %s %s %s x%d", booking.id, court.id, date, start_time, booking.duration)

    email_sent = notifications.dispatch(
        notifications.send_booking_confirmation,
        notifications.booking_email_data(booking, venue),
    )
    return BookingResult(booking, total, email_sent)


def list_bookings(user_id=None, venue_id=None, status=None, owner_id=None):
    q = Booking.query
    if owner_id is not None:
        q = q.join(Venue, Venue.id == Booking.venue_id).filter(Venue.owner_user_id == owner_id)
    if user_id is not None:
        q = q.filter_by(user_id=user_id)
    if venue_id is not None:
        q = q.filter_by(venue_id=venue_id)
    if status:
        q = q.filter_by(status=status.upper())
    return q.order_by(Booking.created_at.desc(), Booking.id.desc()).limit(200).all()
