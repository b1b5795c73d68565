from datetime import datetime
from types import SimpleNamespace

import pytest

from app import create_app
from config import TestConfig
from models import db
from models.court import Court
from models.slot import TimeSlot
from models.user import User
from models.venue import Venue

# 2025-01-09 10:00 local; the scenario day 2025-01-10 is tomorrow.
FIXED_NOW = datetime(2025, 1, 9, 10, 0)
BOOKING_DATE = "2025-01-10"


@pytest.fixture
def app(monkeypatch):
    monkeypatch.setattr("utils.clock.local_now", lambda: FIXED_NOW)
    app = create_app(TestConfig)
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def seed(app):
    user = User(name="Asha Rao", email="asha@example.com")
    venue = Venue(
        name="SportZone Arena",
        location="Downtown, City Center",
        address="123 Sports Street",
        phone="+91 98765 43210",
    )
    db.session.add_all([user, venue])
    db.session.flush()
    court = Court(venue_id=venue.id, name="Badminton Court 1", sport="Badminton", base_price_per_hour=500)
    other_court = Court(venue_id=venue.id, name="Badminton Court 2", sport="Badminton", base_price_per_hour=500)
    db.session.add_all([court, other_court])
    db.session.commit()
    return SimpleNamespace(
        user_id=user.id,
        venue_id=venue.id,
        court_id=court.id,
        other_court_id=other_court.id,
    )


@pytest.fixture
def make_slots(seed):
    def _make(times, date=BOOKING_DATE, price=500, court_id=None, available=True):
        court_id = court_id or seed.court_id
        for t in times:
            db.session.add(TimeSlot(
                venue_id=seed.venue_id,
                court_id=court_id,
                date=date,
                time=t,
                price=price[t] if isinstance(price, dict) else price,
                is_available=available,
            ))
        db.session.commit()
    return _make


@pytest.fixture
def slot_states(seed):
    def _states(date=BOOKING_DATE, court_id=None):
        db.session.expire_all()
        rows = TimeSlot.query.filter_by(court_id=court_id or seed.court_id, date=date).order_by(TimeSlot.time).all()
        return {s.time: s.is_available for s in rows}
    return _states


@pytest.fixture
def confirm_payload(seed):
    def _payload(**overrides):
        payload = {
            "userId": seed.user_id,
            "venueId": seed.venue_id,
            "courtId": seed.court_id,
            "date": BOOKING_DATE,
            "startTime": "18:00",
            "endTime": "21:00",
            "totalAmount": 1500,
        }
        payload.update(overrides)
        return {k: v for k, v in payload.items() if v is not None}
    return _payload


@pytest.fixture
def sent_emails(monkeypatch):
    sent = []

    def fake_send(to_email, subject, body, html=None):
        sent.append(SimpleNamespace(to=to_email, subject=subject, body=body))
        return True, None

    monkeypatch.setattr("services.notifications.send_email", fake_send)
    return sent
