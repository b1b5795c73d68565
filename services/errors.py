class BookingError(Exception):
    """Base for failures surfaced to the client as ``{"error": message}``."""

    status_code = 400

    def __init__(self, message=None, status_code=None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code

    default_message = "Booking request failed"


class MissingFields(BookingError):
    status_code = 400
    default_message = "Missing required fields"

    def __init__(self, fields):
        self.fields = list(fields)
        super().__init__(f"Missing required fields: {', '.join(self.fields)}")


class InvalidRange(BookingError):
    status_code = 400
    default_message = "Invalid time range"


class DuplicateSlot(BookingError):
    status_code = 400
    default_message = "Duplicate slot for this court/date/time"


class NotFound(BookingError):
    status_code = 404
    default_message = "Not found"


class SlotUnavailable(BookingError):
    status_code = 409
    default_message = "Selected time slot is no longer available"


class AlreadyCancelled(BookingError):
    status_code = 409
    default_message = "Booking is already cancelled"
