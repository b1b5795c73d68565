"""
Best-effort booking emails.

Every ``send_*`` returns a bool and never raises; ``dispatch`` runs a send
off the request thread and waits a bounded time for its outcome so the
caller can report ``emailSent`` without depending on it.
"""
import logging
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeout
from datetime import datetime

from flask import current_app, render_template

from utils.clock import DATE_FMT
from utils.emailer import send_email

logger = logging.getLogger(__name__)

_executor = ThreadPoolExecutor(max_workers=4, thread_name_prefix="notify")


def _pretty_date(date_str):
    try:
        return datetime.strptime(date_str, DATE_FMT).strftime("%A, %B %d, %Y")
    except (TypeError, ValueError):
        return date_str


def _app_url(path):
    base = (current_app.config.get("APP_BASE_URL") or "").rstrip("/")
    return f"{base}{path}"


def booking_email_data(booking, venue=None):
    return {
        "customerName": booking.customer_name,
        "customerEmail": booking.customer_email,
        "bookingId": str(booking.id),
        "venueName": booking.venue_name,
        "venueLocation": booking.venue_location,
        "venueAddress": venue.address if venue else None,
        "venuePhone": venue.phone if venue else None,
        "courtName": booking.court_name,
        "sport": booking.sport,
        "bookingDate": _pretty_date(booking.date),
        "bookingTime": booking.time,
        "endTime": booking.end_time,
        "duration": booking.duration,
        "totalAmount": booking.total_amount,
        "bookingUrl": _app_url("/bookings"),
        "venuesUrl": _app_url("/venues"),
    }


def _send(template, subject, data):
    try:
        body = render_template(template, **data)
        ok, err = send_email(data.get("customerEmail"), subject, body)
    except Exception:
        logger.exception("Rendering or sending %s failed", template)
        return False
    if not ok:
        logger.warning("Email %r to %s not sent: %s", subject, data.get("customerEmail"), err)
    return ok


def send_booking_confirmation(data) -> bool:
    subject = f"Booking Confirmed - {data.get('venueName')}"
    return _send("emails/confirmation.txt", subject, data)


def send_booking_cancellation(data) -> bool:
    subject = f"Booking Cancelled - {data.get('venueName')}"
    return _send("emails/cancellation.txt", subject, data)


def send_booking_reminder(data) -> bool:
    data = dict(data)
    data.setdefault("cancelUrl", _app_url(f"/bookings/cancel/{data.get('bookingId')}"))
    subject = f"Reminder: Your booking {data.get('reminderTime')}"
    return _send("emails/reminder.txt", subject, data)


def dispatch(send_fn, data) -> bool:
    """Run ``send_fn(data)`` in the pool; False on failure or timeout."""
    app = current_app._get_current_object()
    wait = app.config.get("NOTIFICATION_WAIT_SECONDS", 5)

    def _run():
        with app.app_context():
            return send_fn(data)

    future = _executor.submit(_run)
    try:
        return bool(future.result(timeout=wait))
    except FutureTimeout:
        logger.warning("%s still running after %ss, not waiting", send_fn.__name__, wait)
        return False
    except Exception:
        logger.exception("%s failed", send_fn.__name__)
        return False
