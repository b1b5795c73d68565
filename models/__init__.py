from .db import db
from .user import User
from .venue import Venue
from .court import Court
from .slot import TimeSlot
from .booking import Booking, BookingSlot
from .reminder import ScheduledReminder
from .audit_log import AuditLog
