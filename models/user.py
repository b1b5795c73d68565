from datetime import datetime
from models.db import db

class User(db.Model):
    """Booking customer. Accounts are owned by the identity provider; only
    the fields needed for booking notifications are mirrored here."""
    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)

    name = db.Column(db.String(120), nullable=False)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    role = db.Column(db.String(20), nullable=False, default="user")  # user, owner, admin

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    bookings = db.relationship("Booking", back_populates="user", lazy="dynamic")
