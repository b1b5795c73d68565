"""
Persisted booking reminders.

Each confirmed booking gets up to three rows in ``scheduled_reminders``
(24h, 2h and 30m before start). A worker polls for due rows; restarts
lose nothing and cancelling a booking flags its pending rows.
"""
import logging
from datetime import timedelta

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError

from models import db
from models.booking import Booking
from models.venue import Venue
from models.reminder import ScheduledReminder, PENDING, SENDING, SENT, FAILED, CANCELLED
from services import notifications
from services.errors import InvalidRange, NotFound
from utils import clock

logger = logging.getLogger(__name__)

REMINDER_WINDOWS = (
    ("24h", timedelta(hours=24), "tomorrow"),
    ("2h", timedelta(hours=2), "in 2 hours"),
    ("30m", timedelta(minutes=30), "in 30 minutes"),
)
WINDOW_LABELS = {label: phrase for label, _, phrase in REMINDER_WINDOWS}
CANCELLABLE_WINDOWS = {"24h", "2h"}


def reminder_key(booking_id, window):
    return f"{booking_id}-{window}"


def schedule_booking_reminders(booking, now=None, commit=True):
    if not booking.is_confirmed:
        return []

    now = now or clock.local_now()
    starts_at = clock.slot_datetime(booking.date, booking.time)

    existing = {
        r.window for r in ScheduledReminder.query.filter_by(booking_id=booking.id)
    }
    created = []
    for window, offset, _ in REMINDER_WINDOWS:
        due_at = starts_at - offset
        if due_at <= now or window in existing:
            continue
        row = ScheduledReminder(
            booking_id=booking.id,
            window=window,
            key=reminder_key(booking.id, window),
            due_at=due_at,
            status=PENDING,
        )
        db.session.add(row)
        created.append(row)

    if commit:
        try:
            db.session.commit()
        except IntegrityError:
            # Another worker scheduled the same keys first
            db.session.rollback()
            return []
    logger.info("Scheduled %d reminders for booking %s", len(created), booking.id)
    return created


def cancel_booking_reminders(booking_id, commit=True) -> int:
    result = db.session.execute(
        update(ScheduledReminder)
        .where(
            ScheduledReminder.booking_id == booking_id,
            ScheduledReminder.key.startswith(f"{booking_id}-"),
            ScheduledReminder.status == PENDING,
        )
        .values(status=CANCELLED, processed_at=clock.local_now())
        .execution_options(synchronize_session=False)
    )
    if commit:
        db.session.commit()
    logger.info("Cancelled %d reminders for booking %s", result.rowcount, booking_id)
    return result.rowcount


def _claim(reminder_id) -> bool:
    result = db.session.execute(
        update(ScheduledReminder)
        .where(ScheduledReminder.id == reminder_id, ScheduledReminder.status == PENDING)
        .values(status=SENDING)
        .execution_options(synchronize_session=False)
    )
    db.session.commit()
    return result.rowcount == 1


def reminder_email_data(booking, window):
    venue = db.session.get(Venue, booking.venue_id)
    data = notifications.booking_email_data(booking, venue)
    data["reminderTime"] = WINDOW_LABELS.get(window, "soon")
    data["canCancel"] = window in CANCELLABLE_WINDOWS
    return data


def _finish(reminder_id, status, now):
    reminder = db.session.get(ScheduledReminder, reminder_id)
    reminder.status = status
    reminder.processed_at = now
    db.session.commit()


def dispatch_due_reminders(now=None, limit=100):
    """
    Send every pending reminder whose due time has passed.

    Rows are claimed PENDING -> SENDING with a conditional update so two
    workers never send the same reminder. There is no retry: a failed send
    ends as FAILED.
    """
    now = now or clock.local_now()
    due_ids = [
        r.id for r in (
            ScheduledReminder.query
            .filter(ScheduledReminder.status == PENDING, ScheduledReminder.due_at <= now)
            .order_by(ScheduledReminder.due_at.asc())
            .limit(limit)
            .all()
        )
    ]

    counts = {"sent": 0, "failed": 0, "skipped": 0}
    for reminder_id in due_ids:
        if not _claim(reminder_id):
            continue

        reminder = db.session.get(ScheduledReminder, reminder_id)
        booking = db.session.get(Booking, reminder.booking_id)
        if booking is None or not booking.is_confirmed:
            _finish(reminder_id, CANCELLED, now)
            counts["skipped"] += 1
            continue

        try:
            ok = notifications.send_booking_reminder(reminder_email_data(booking, reminder.window))
        except Exception:
            logger.exception("Reminder %s crashed", reminder.key)
            ok = False

        if ok:
            logger.info("Sent %s reminder for booking %s", reminder.window, booking.id)
            counts["sent"] += 1
        else:
            logger.error("Failed to send %s reminder for booking %s", reminder.window, booking.id)
            counts["failed"] += 1
        _finish(reminder_id, SENT if ok else FAILED, now)

    return counts


def send_reminder_now(booking_id, window) -> bool:
    """Send a reminder immediately, outside the schedule."""
    if not isinstance(window, str) or window not in WINDOW_LABELS:
        raise InvalidRange(f"Unknown reminder type: {window}")
    booking = db.session.get(Booking, booking_id)
    if not booking:
        raise NotFound("Booking not found")
    return notifications.dispatch(
        notifications.send_booking_reminder, reminder_email_data(booking, window)
    )


def pending_count() -> int:
    return ScheduledReminder.query.filter_by(status=PENDING).count()
