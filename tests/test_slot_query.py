from datetime import datetime

from sqlalchemy.exc import OperationalError

from models.slot import TimeSlot
from services.slot_query import list_bookable_slots, purge_past_slots
from services.slot_store import set_availability
from tests.conftest import BOOKING_DATE, FIXED_NOW

TODAY = "2025-01-09"
YESTERDAY = "2025-01-08"


def test_past_date_is_always_empty(seed, make_slots):
    make_slots(["18:00", "19:00"], date=YESTERDAY)
    assert list_bookable_slots(seed.venue_id, seed.court_id, YESTERDAY) == []
    # without cleanup nothing is removed
    assert TimeSlot.query.filter_by(date=YESTERDAY).count() == 2


def test_past_date_cleanup_removes_everything_before_today(seed, make_slots):
    make_slots(["18:00"], date="2025-01-01")
    make_slots(["18:00", "19:00"], date=YESTERDAY)
    make_slots(["08:00", "18:00"], date=TODAY)

    assert list_bookable_slots(seed.venue_id, seed.court_id, YESTERDAY, cleanup=True) == []
    assert TimeSlot.query.filter(TimeSlot.date < TODAY).count() == 0
    assert TimeSlot.query.filter_by(date=TODAY).count() == 2


def test_today_hides_elapsed_slots(seed, make_slots):
    make_slots(["08:00", "09:00", "10:00", "11:00", "18:00"], date=TODAY)
    slots = list_bookable_slots(seed.venue_id, seed.court_id, TODAY)
    # 10:00 starts at the current minute, so it is still listed
    assert [s.time for s in slots] == ["10:00", "11:00", "18:00"]


def test_today_filtering_uses_minute_precision(seed, make_slots):
    make_slots(["10:00", "11:00"], date=TODAY)
    now = datetime(2025, 1, 9, 10, 1)
    slots = list_bookable_slots(seed.venue_id, seed.court_id, TODAY, now=now)
    assert [s.time for s in slots] == ["11:00"]


def test_today_filtering_is_idempotent(seed, make_slots):
    make_slots(["08:00", "12:00", "15:00"], date=TODAY)
    first = [s.id for s in list_bookable_slots(seed.venue_id, seed.court_id, TODAY, now=FIXED_NOW)]
    second = [s.id for s in list_bookable_slots(seed.venue_id, seed.court_id, TODAY, now=FIXED_NOW)]
    assert first == second


def test_today_cleanup_deletes_only_elapsed_slots(seed, make_slots):
    make_slots(["08:00", "09:00", "12:00"], date=TODAY)
    make_slots(["07:00"], date=YESTERDAY)

    slots = list_bookable_slots(seed.venue_id, seed.court_id, TODAY, cleanup=True)

    assert [s.time for s in slots] == ["12:00"]
    assert [s.time for s in TimeSlot.query.filter_by(date=TODAY)] == ["12:00"]
    # other days are left to the retention sweep
    assert TimeSlot.query.filter_by(date=YESTERDAY).count() == 1


def test_future_date_is_unfiltered_and_ordered(seed, make_slots):
    make_slots(["20:00", "06:00", "13:00"])
    slots = list_bookable_slots(seed.venue_id, seed.court_id, BOOKING_DATE)
    assert [s.time for s in slots] == ["06:00", "13:00", "20:00"]


def test_query_is_scoped_to_court(seed, make_slots):
    make_slots(["18:00"])
    make_slots(["19:00"], court_id=seed.other_court_id)
    slots = list_bookable_slots(seed.venue_id, seed.court_id, BOOKING_DATE)
    assert [s.time for s in slots] == ["18:00"]


def test_purge_past_slots(seed, make_slots):
    make_slots(["18:00"], date=YESTERDAY)
    make_slots(["18:00"])
    assert purge_past_slots() == 1
    assert TimeSlot.query.count() == 1


def test_list_endpoint(client, seed, make_slots):
    make_slots(["18:00", "19:00"])
    resp = client.get(f"/timeslots?venue={seed.venue_id}&court={seed.court_id}&date={BOOKING_DATE}")
    assert resp.status_code == 200
    body = resp.get_json()
    assert [s["time"] for s in body] == ["18:00", "19:00"]
    assert body[0]["isAvailable"] is True
    assert body[0]["price"] == 500


def test_list_endpoint_past_date_with_cleanup(client, seed, make_slots):
    make_slots(["18:00"], date=YESTERDAY)
    resp = client.get(f"/timeslots?court={seed.court_id}&date={YESTERDAY}&cleanup=1")
    assert resp.status_code == 200
    assert resp.get_json() == []
    assert TimeSlot.query.count() == 0


def test_list_endpoint_rejects_bad_date(client, seed):
    resp = client.get(f"/timeslots?court={seed.court_id}&date=10-01-2025")
    assert resp.status_code == 400


def test_store_failure_is_a_generic_500(client, seed, monkeypatch):
    def broken(**kwargs):
        raise OperationalError("SELECT", {}, Exception("database is locked"))

    monkeypatch.setattr("services.slot_store.find_slots", broken)
    resp = client.get(f"/timeslots?court={seed.court_id}&date={BOOKING_DATE}")
    assert resp.status_code == 500
    assert resp.get_json() == {"error": "Internal server error"}


def test_set_availability_is_idempotent_and_soft(seed, make_slots, slot_states):
    make_slots(["18:00"])
    assert set_availability(seed.court_id, BOOKING_DATE, "18:00", False) is True
    assert set_availability(seed.court_id, BOOKING_DATE, "18:00", False) is True
    assert slot_states() == {"18:00": False}
    # purged or never offered: reported, not raised
    assert set_availability(seed.court_id, BOOKING_DATE, "05:00", True) is False
