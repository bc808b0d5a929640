# API Routers
from kos_booking.routers import bookings, kos

__all__ = ['bookings', 'kos']
