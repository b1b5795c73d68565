from datetime import datetime
from models.db import db

CONFIRMED = "CONFIRMED"
CANCELLED = "CANCELLED"


class Booking(db.Model):
    __tablename__ = "bookings"

    id = db.Column(db.Integer, primary_key=True)

    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    venue_id = db.Column(db.Integer, db.ForeignKey("venues.id"), nullable=False, index=True)
    court_id = db.Column(db.Integer, db.ForeignKey("courts.id"), nullable=False, index=True)

    date = db.Column(db.String(10), nullable=False)
    time = db.Column(db.String(5), nullable=False)      # start
    end_time = db.Column(db.String(5), nullable=False)
    duration = db.Column(db.Integer, nullable=False, default=1)  # hours
    total_amount = db.Column(db.Integer, nullable=False)

    status = db.Column(db.String(20), nullable=False, default=CONFIRMED)
    # status values: CONFIRMED, CANCELLED

    # captured at creation for notifications and audit
    customer_name = db.Column(db.String(120), nullable=True)
    customer_email = db.Column(db.String(255), nullable=True)
    venue_name = db.Column(db.String(120), nullable=True)
    venue_location = db.Column(db.String(160), nullable=True)
    court_name = db.Column(db.String(120), nullable=True)
    sport = db.Column(db.String(60), nullable=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    cancelled_at = db.Column(db.DateTime, nullable=True)
    cancel_reason = db.Column(db.String(255), nullable=True)
    refund_amount = db.Column(db.Integer, nullable=True)

    user = db.relationship("User", back_populates="bookings")
    slots = db.relationship(
        "BookingSlot",
        back_populates="booking",
        cascade="all, delete-orphan",
        order_by="BookingSlot.time",
    )

    @property
    def is_confirmed(self):
        return self.status == CONFIRMED

    def to_dict(self):
        return {
            "id": self.id,
            "user": self.user_id,
            "venue": self.venue_id,
            "court": self.court_id,
            "date": self.date,
            "time": self.time,
            "startTime": self.time,
            "endTime": self.end_time,
            "duration": self.duration,
            "totalAmount": self.total_amount,
            "status": self.status.lower(),
            "selectedSlots": [{"time": s.time, "price": s.price} for s in self.slots],
            "customerName": self.customer_name,
            "customerEmail": self.customer_email,
            "venueName": self.venue_name,
            "venueLocation": self.venue_location,
            "courtName": self.court_name,
            "sport": self.sport,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "cancelledAt": self.cancelled_at.isoformat() if self.cancelled_at else None,
            "cancellationReason": self.cancel_reason,
            "refundAmount": self.refund_amount,
        }


class BookingSlot(db.Model):
    """Slot key claimed by a booking. Cancellation restores exactly these."""
    __tablename__ = "booking_slots"

    id = db.Column(db.Integer, primary_key=True)
    booking_id = db.Column(db.Integer, db.ForeignKey("bookings.id"), nullable=False, index=True)

    court_id = db.Column(db.Integer, nullable=False)
    date = db.Column(db.String(10), nullable=False)
    time = db.Column(db.String(5), nullable=False)
    price = db.Column(db.Integer, nullable=False)

    booking = db.relationship("Booking", back_populates="slots")

    __table_args__ = (
        db.UniqueConstraint("booking_id", "time", name="uq_booking_slot_time"),
    )
