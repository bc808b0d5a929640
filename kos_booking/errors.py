"""
Error taxonomy for the booking core

Every error carries the HTTP status the boundary maps it to. Handlers in
kos_booking.main turn them into the {"status": false, "message": ...} envelope.
"""
from typing import Optional


class BookingError(Exception):
    """Base class for all caller-visible failures"""

    status_code = 400
    default_message = "Request failed"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(BookingError):
    """Malformed, missing or contradictory input"""

    status_code = 400
    default_message = "Invalid request"


class AuthenticationError(BookingError):
    """Missing or invalid identity"""

    status_code = 401
    default_message = "Unauthorized: No user ID provided"


class ForbiddenError(BookingError):
    """Authenticated but not allowed to touch this resource"""

    status_code = 403
    default_message = "Not authorized"


class NotFoundError(BookingError):
    status_code = 404
    default_message = "Not found"


class InvalidStateError(BookingError):
    """Transition rejected because of the current stored state"""

    status_code = 409
    default_message = "Only PENDING bookings may transition"


class DuplicateRequestError(BookingError):
    status_code = 409
    default_message = "Request already processed"


class InternalError(BookingError):
    """Unexpected store failure"""

    status_code = 500
    default_message = "Internal server error"
