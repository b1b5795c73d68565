from models.slot import TimeSlot
from tests.conftest import BOOKING_DATE


def _slot_body(seed, **overrides):
    body = {
        "venue": seed.venue_id,
        "court": seed.court_id,
        "date": BOOKING_DATE,
        "time": "18:00",
        "price": 500,
        "isAvailable": True,
    }
    body.update(overrides)
    return body


def test_create_slot(client, seed):
    resp = client.post("/timeslots", json=_slot_body(seed))
    assert resp.status_code == 201
    data = resp.get_json()
    assert data["time"] == "18:00"
    assert data["isAvailable"] is True
    assert TimeSlot.query.count() == 1


def test_duplicate_slot_is_rejected(client, seed):
    assert client.post("/timeslots", json=_slot_body(seed)).status_code == 201
    resp = client.post("/timeslots", json=_slot_body(seed, price=700))
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "Duplicate slot for this court/date/time"
    assert TimeSlot.query.count() == 1


def test_same_time_on_another_court_is_allowed(client, seed):
    assert client.post("/timeslots", json=_slot_body(seed)).status_code == 201
    resp = client.post("/timeslots", json=_slot_body(seed, court=seed.other_court_id))
    assert resp.status_code == 201


def test_missing_fields(client, seed):
    resp = client.post("/timeslots", json={"venue": seed.venue_id, "date": BOOKING_DATE})
    assert resp.status_code == 400
    error = resp.get_json()["error"]
    assert "court" in error and "time" in error and "price" in error


def test_rejects_non_positive_price(client, seed):
    resp = client.post("/timeslots", json=_slot_body(seed, price=0))
    assert resp.status_code == 400


def test_rejects_off_hour_time(client, seed):
    resp = client.post("/timeslots", json=_slot_body(seed, time="18:30"))
    assert resp.status_code == 400


def test_unknown_court(client, seed):
    resp = client.post("/timeslots", json=_slot_body(seed, court=9999))
    assert resp.status_code == 404


def test_update_and_delete_slot(client, seed):
    slot_id = client.post("/timeslots", json=_slot_body(seed)).get_json()["id"]

    resp = client.put(f"/timeslots/{slot_id}", json={"price": 650})
    assert resp.status_code == 200
    assert resp.get_json()["price"] == 650

    assert client.delete(f"/timeslots/{slot_id}").status_code == 200
    assert client.delete(f"/timeslots/{slot_id}").status_code == 404


def test_cannot_reopen_slot_held_by_booking(client, seed, make_slots, confirm_payload):
    make_slots(["18:00"])
    assert client.post("/bookings/confirm", json=confirm_payload(endTime="19:00", totalAmount=500)).status_code == 200
    slot = TimeSlot.query.filter_by(court_id=seed.court_id, time="18:00").one()

    resp = client.put(f"/timeslots/{slot.id}", json={"isAvailable": True})
    assert resp.status_code == 409


def test_cannot_delete_slot_held_by_booking(client, seed, make_slots, confirm_payload):
    make_slots(["18:00"])
    resp = client.post("/bookings/confirm", json=confirm_payload(endTime="19:00", totalAmount=500))
    booking_id = resp.get_json()["booking"]["id"]
    slot = TimeSlot.query.filter_by(court_id=seed.court_id, time="18:00").one()

    resp = client.delete(f"/timeslots/{slot.id}")
    assert resp.status_code == 409
    assert TimeSlot.query.count() == 1

    client.post("/bookings/cancel", json={"bookingId": booking_id})
    assert client.delete(f"/timeslots/{slot.id}").status_code == 200
