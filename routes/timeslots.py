import logging

from flask import Blueprint, request, jsonify

from models import db
from models.court import Court
from models.venue import Venue
from services import slot_store
from services.errors import BookingError
from services.slot_query import list_bookable_slots
from utils.audit import log_event
from utils.clock import is_valid_date, is_valid_time
from utils.fields import as_bool, as_int, missing_fields

logger = logging.getLogger(__name__)

timeslots_bp = Blueprint("timeslots", __name__, url_prefix="/timeslots")


# ---------- PLAYERS: bookable slots for a court/date ----------
@timeslots_bp.get("")
def list_timeslots():
    venue_id = request.args.get("venue", type=int)
    court_id = request.args.get("court", type=int)
    date = request.args.get("date")  # YYYY-MM-DD
    cleanup = as_bool(request.args.get("cleanup"))

    if date and not is_valid_date(date):
        return jsonify(error="Invalid date. Use YYYY-MM-DD"), 400

    slots = list_bookable_slots(venue_id=venue_id, court_id=court_id, date=date, cleanup=cleanup)
    return jsonify([s.to_dict() for s in slots]), 200


# ---------- OWNERS: create a slot ----------
@timeslots_bp.post("")
def create_timeslot():
    data = request.get_json(silent=True) or {}
    if not isinstance(data, dict):
        return jsonify(error="Request body must be a JSON object"), 400
    missing = missing_fields([
        (data.get("venue"), "venue"),
        (data.get("court"), "court"),
        (data.get("date"), "date"),
        (data.get("time"), "time"),
        (data.get("price"), "price"),
    ])
    if missing:
        return jsonify(error=f"Missing required fields: {', '.join(missing)}"), 400

    if not is_valid_date(data["date"]):
        return jsonify(error="Invalid date. Use YYYY-MM-DD"), 400
    if not is_valid_time(data["time"]) or not data["time"].endswith(":00"):
        return jsonify(error="Invalid time. Use whole hours as HH:00"), 400

    price = as_int(data.get("price"))
    if price is None or price <= 0:
        return jsonify(error="price must be a positive whole number"), 400

    venue_id = as_int(data["venue"])
    venue = db.session.get(Venue, venue_id) if venue_id is not None else None
    if not venue:
        return jsonify(error="Venue not found"), 404
    court_id = as_int(data["court"])
    court = db.session.get(Court, court_id) if court_id is not None else None
    if not court or court.venue_id != venue.id:
        return jsonify(error="Court not found"), 404

    try:
        slot = slot_store.create_slot(
            venue_id=venue.id,
            court_id=court.id,
            date=data["date"],
            time=data["time"],
            price=price,
            is_available=as_bool(data.get("isAvailable"), default=True),
        )
    except BookingError as e:
        return jsonify(error=e.message), e.status_code

    log_event("SLOT_CREATE", user_id=venue.owner_user_id, entity="timeslot", entity_id=slot.id)
    return jsonify(slot.to_dict()), 201


# ---------- OWNERS: edit / remove a slot ----------
@timeslots_bp.put("/<int:slot_id>")
def update_timeslot(slot_id: int):
    data = request.get_json(silent=True) or {}
    if not isinstance(data, dict):
        return jsonify(error="Request body must be a JSON object"), 400

    price = None
    if "price" in data:
        price = as_int(data.get("price"))
        if price is None or price <= 0:
            return jsonify(error="price must be a positive whole number"), 400
    is_available = as_bool(data["isAvailable"]) if "isAvailable" in data else None

    try:
        slot = slot_store.update_slot(slot_id, price=price, is_available=is_available)
    except BookingError as e:
        return jsonify(error=e.message), e.status_code

    log_event("SLOT_UPDATE", entity="timeslot", entity_id=slot.id, metadata={"price": price, "isAvailable": is_available})
    return jsonify(slot.to_dict()), 200


@timeslots_bp.delete("/<int:slot_id>")
def delete_timeslot(slot_id: int):
    try:
        slot_store.delete_slot(slot_id)
    except BookingError as e:
        return jsonify(error=e.message), e.status_code

    log_event("SLOT_DELETE", entity="timeslot", entity_id=slot_id)
    return jsonify(message="TimeSlot deleted"), 200
