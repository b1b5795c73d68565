import logging
from collections import namedtuple
from decimal import Decimal, ROUND_HALF_UP

from flask import current_app
from sqlalchemy import update

from models import db
from models.booking import Booking, CANCELLED, CONFIRMED
from models.venue import Venue
from services import notifications, slot_store
from services.errors import AlreadyCancelled, NotFound
from services.reminder_scheduler import cancel_booking_reminders
from utils import clock
from utils.audit import log_event

logger = logging.getLogger(__name__)

CancellationResult = namedtuple("CancellationResult", "booking refund_amount email_sent")

DEFAULT_REFUND_RATE = Decimal("0.9")  # 10% cancellation fee


def refund_amount(total_amount, rate=DEFAULT_REFUND_RATE) -> int:
    """Flat share of the total, rounded half-up to whole units."""
    refund = Decimal(total_amount) * Decimal(str(rate))
    return int(refund.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def cancel_booking(booking_id, reason=None, now=None):
    """
    Cancel a confirmed booking and give its slots back.

    Cancelling twice raises AlreadyCancelled; the refund is computed once.
    """
    booking = db.session.get(Booking, booking_id) if booking_id is not None else None
    if not booking:
        raise NotFound("Booking not found")
    if not booking.is_confirmed:
        raise AlreadyCancelled()

    now = now or clock.local_now()
    rate = current_app.config.get("REFUND_RATE", DEFAULT_REFUND_RATE)

    refund = refund_amount(booking.total_amount, rate)

    # Conditional on CONFIRMED so two racing cancels cannot both succeed
    result = db.session.execute(
        update(Booking)
        .where(Booking.id == booking.id, Booking.status == CONFIRMED)
        .values(status=CANCELLED, cancelled_at=now, cancel_reason=reason, refund_amount=refund)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        db.session.rollback()
        raise AlreadyCancelled()
    db.session.refresh(booking)

    keys = [(s.court_id, s.date, s.time) for s in booking.slots]
    restored = slot_store.release_slots(keys)
    cancelled_reminders = cancel_booking_reminders(booking.id, commit=False)

    log_event(
        "BOOKING_CANCEL",
        user_id=booking.user_id,
        entity="booking",
        entity_id=booking.id,
        metadata={"reason": reason, "refund": booking.refund_amount, "slots_restored": restored},
        commit=False,
    )
    db.session.commit()
    logger.info(
        "Booking %s cancelled: %d slots restored, %d reminders dropped",
        booking.id, restored, cancelled_reminders,
    )

    data = notifications.booking_email_data(booking, db.session.get(Venue, booking.venue_id))
    data.update(
        refundAmount=booking.refund_amount,
        cancellationId=f"CN{booking.id}{now.strftime('%Y%m%d%H%M%S')}",
        reason=reason,
    )
    email_sent = notifications.dispatch(notifications.send_booking_cancellation, data)
    return CancellationResult(booking, booking.refund_amount, email_sent)
