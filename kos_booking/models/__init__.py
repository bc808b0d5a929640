# Entity Models
from kos_booking.models.entities import (
    User, Kos, Booking, IdempotencyKey,
    UserRole, BookingStatus, KosGender
)

__all__ = [
    'User', 'Kos', 'Booking', 'IdempotencyKey',
    'UserRole', 'BookingStatus', 'KosGender'
]
