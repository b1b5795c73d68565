from datetime import datetime
from models.db import db

class TimeSlot(db.Model):
    __tablename__ = "time_slots"

    id = db.Column(db.Integer, primary_key=True)

    venue_id = db.Column(db.Integer, db.ForeignKey("venues.id"), nullable=False, index=True)
    court_id = db.Column(db.Integer, db.ForeignKey("courts.id"), nullable=False, index=True)
    date = db.Column(db.String(10), nullable=False, index=True)  # YYYY-MM-DD, naive local day
    time = db.Column(db.String(5), nullable=False)               # HH:MM, hour granular

    price = db.Column(db.Integer, nullable=False)  # whole currency units
    is_available = db.Column(db.Boolean, default=True, nullable=False)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = (
        # One slot per court per date/time
        db.UniqueConstraint("court_id", "date", "time", name="uq_court_date_time"),
    )

    def to_dict(self):
        return {
            "id": self.id,
            "venue": self.venue_id,
            "court": self.court_id,
            "date": self.date,
            "time": self.time,
            "price": self.price,
            "isAvailable": self.is_available,
        }
