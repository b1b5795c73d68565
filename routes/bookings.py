from flask import Blueprint, request, jsonify

from services.booking_service import confirm_booking, list_bookings
from services.cancellation_service import cancel_booking
from services.errors import BookingError
from services.reminder_scheduler import send_reminder_now
from utils.fields import as_int, as_text

bookings_bp = Blueprint("bookings", __name__, url_prefix="/bookings")


# ---------- PLAYERS: confirm a booking ----------
@bookings_bp.post("/confirm")
def confirm():
    data = request.get_json(silent=True) or {}
    if not isinstance(data, dict):
        return jsonify(error="Request body must be a JSON object"), 400
    try:
        result = confirm_booking(data)
    except BookingError as e:
        return jsonify(error=e.message), e.status_code

    return jsonify(
        success=True,
        booking=result.booking.to_dict(),
        bookingId=str(result.booking.id),
        totalAmount=result.total_amount,
        emailSent=result.email_sent,
        message="Booking confirmed successfully",
    ), 200


# ---------- PLAYERS: cancel a booking ----------
@bookings_bp.post("/cancel")
def cancel():
    data = request.get_json(silent=True) or {}
    if not isinstance(data, dict):
        return jsonify(error="Request body must be a JSON object"), 400
    booking_id = as_int(data.get("bookingId"))
    reason = data.get("reason")
    if reason is not None and not isinstance(reason, str):
        return jsonify(error="reason must be text"), 400
    reason = as_text(reason)
    if booking_id is None:
        return jsonify(error="Booking not found"), 404

    try:
        result = cancel_booking(booking_id, reason=reason)
    except BookingError as e:
        return jsonify(error=e.message), e.status_code

    return jsonify(
        success=True,
        booking=result.booking.to_dict(),
        refundAmount=result.refund_amount,
        emailSent=result.email_sent,
        message="Booking cancelled successfully",
    ), 200


# ---------- PLAYERS/OWNERS: list bookings ----------
@bookings_bp.get("")
def index():
    rows = list_bookings(
        user_id=request.args.get("user", type=int),
        venue_id=request.args.get("venue", type=int),
        status=request.args.get("status"),
        owner_id=request.args.get("owner", type=int),
    )
    return jsonify([b.to_dict() for b in rows]), 200


# ---------- manual reminder ----------
@bookings_bp.post("/reminder")
def reminder():
    data = request.get_json(silent=True) or {}
    if not isinstance(data, dict):
        return jsonify(error="Request body must be a JSON object"), 400
    booking_id = as_int(data.get("bookingId"))
    if booking_id is None:
        return jsonify(error="Booking not found"), 404

    try:
        email_sent = send_reminder_now(booking_id, data.get("reminderType") or "24h")
    except BookingError as e:
        return jsonify(error=e.message), e.status_code

    return jsonify(success=True, emailSent=email_sent), 200
