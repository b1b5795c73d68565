from datetime import timedelta

from models import db
from models.user import User
from models.venue import Venue
from models.court import Court
from models.slot import TimeSlot
from utils import clock

DEMO_COURTS = [
    ("Court 1", "Tennis", 800),
    ("Court 2", "Badminton", 500),
    ("Court 3", "Basketball", 1200),
]
OPENING_HOURS = range(6, 22)  # 06:00 .. 21:00 starts
PEAK_HOURS = range(17, 21)
PEAK_MARKUP = 200


def seed_demo_data(days=7):
    """Create a demo customer, venue, courts and hourly slots (idempotent)."""
    user = User.query.filter_by(email="test@example.com").first()
    if not user:
        user = User(name="Test User", email="test@example.com")
        db.session.add(user)

    venue = Venue.query.filter_by(name="Test Sports Arena").first()
    if not venue:
        venue = Venue(
            name="Test Sports Arena",
            location="123 Sports Street, Test City",
            address="123 Sports Street, Test City",
        )
        db.session.add(venue)
        db.session.flush()

    courts = venue.courts.all()
    if not courts:
        courts = [
            Court(venue_id=venue.id, name=name, sport=sport, base_price_per_hour=price)
            for name, sport, price in DEMO_COURTS
        ]
        db.session.add_all(courts)
        db.session.flush()

    created = 0
    start_day = clock.local_now().date()
    for offset in range(days):
        day = (start_day + timedelta(days=offset)).strftime(clock.DATE_FMT)
        for court in courts:
            existing = {s.time for s in TimeSlot.query.filter_by(court_id=court.id, date=day)}
            for hour in OPENING_HOURS:
                time = f"{hour:02d}:00"
                if time in existing:
                    continue
                price = court.base_price_per_hour + (PEAK_MARKUP if hour in PEAK_HOURS else 0)
                db.session.add(TimeSlot(
                    venue_id=venue.id, court_id=court.id, date=day, time=time, price=price,
                ))
                created += 1

    db.session.commit()
    return user, venue, created
