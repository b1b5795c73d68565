from datetime import datetime
from models.db import db

class AuditLog(db.Model):
    __tablename__ = "audit_logs"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, nullable=True)  # null for owner/system events
    action = db.Column(db.String(80), nullable=False, index=True)  # e.g. BOOKING_CONFIRM, SLOT_PURGE
    entity = db.Column(db.String(80), nullable=True)   # e.g. booking, timeslot
    entity_id = db.Column(db.String(80), nullable=True)

    # request origin; "cli" when written by a worker command
    ip = db.Column(db.String(64), nullable=True)
    user_agent = db.Column(db.String(255), nullable=True)
    metadata_json = db.Column(db.Text, nullable=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
