from datetime import datetime
from models.db import db

PENDING = "PENDING"
SENDING = "SENDING"
SENT = "SENT"
FAILED = "FAILED"
CANCELLED = "CANCELLED"


class ScheduledReminder(db.Model):
    __tablename__ = "scheduled_reminders"

    id = db.Column(db.Integer, primary_key=True)
    booking_id = db.Column(db.Integer, db.ForeignKey("bookings.id"), nullable=False, index=True)

    window = db.Column(db.String(8), nullable=False)  # 24h, 2h, 30m
    key = db.Column(db.String(64), nullable=False, unique=True)  # "<booking_id>-<window>"
    due_at = db.Column(db.DateTime, nullable=False, index=True)  # naive local time

    status = db.Column(db.String(20), nullable=False, default=PENDING, index=True)
    # status values: PENDING, SENDING, SENT, FAILED, CANCELLED

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    processed_at = db.Column(db.DateTime, nullable=True)

    booking = db.relationship("Booking")
