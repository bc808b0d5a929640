# Business Services
from kos_booking.services.booking_service import BookingService
from kos_booking.services.kos_service import KosService
from kos_booking.services.nota_service import NotaService
from kos_booking.services.idempotency_service import IdempotencyService

__all__ = [
    'BookingService', 'KosService', 'NotaService', 'IdempotencyService'
]
