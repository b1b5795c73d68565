from .health import health_bp
from .timeslots import timeslots_bp
from .bookings import bookings_bp
