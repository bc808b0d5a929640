"""
Nota service
Renders a booking into a printable HTML receipt
"""
import logging
from datetime import date, datetime
from decimal import Decimal
from typing import Optional
from jinja2 import Environment, PackageLoader, select_autoescape
from sqlalchemy.orm import Session
from kos_booking.config import settings
from kos_booking.models.entities import Booking, utcnow
from kos_booking.security.auth import Identity
from kos_booking.services.booking_service import BookingService

logger = logging.getLogger(__name__)

_env = Environment(
    loader=PackageLoader("kos_booking", "templates"),
    autoescape=select_autoescape(["html"]),
)


def format_price(amount, prefix: Optional[str] = None) -> str:
    """1500000 -> 'Rp 1.500.000'"""
    prefix = settings.CURRENCY_PREFIX if prefix is None else prefix
    value = Decimal(amount).quantize(Decimal("1"))
    grouped = f"{value:,}".replace(",", ".")
    return f"{prefix} {grouped}"


def format_date(value: date) -> str:
    return value.strftime("%d %B %Y")


def nota_rows(booking: Booking, generated_at: datetime):
    """Key/value pairs printed on the nota, in display order"""
    return [
        ("Booking ID", str(booking.id)),
        ("Booking Reference", booking.uuid),
        ("Kos Name", booking.kos.name),
        ("Kos Address", booking.kos.address),
        ("Tenant Name", booking.user.name),
        ("Tenant Email", booking.user.email),
        ("Start Date", format_date(booking.start_date)),
        ("End Date", format_date(booking.end_date)),
        ("Status", booking.status.value),
        ("Price per Month", format_price(booking.kos.price_per_month)),
        ("Generated At", generated_at.strftime("%d %B %Y %H:%M:%S UTC")),
    ]


class NotaService:
    """Nota service"""

    def __init__(self, db: Session):
        self.db = db
        self.booking_service = BookingService(db)

    def render(self, identity: Identity, booking_id: int,
               generated_at: Optional[datetime] = None) -> str:
        """Render the nota; only the tenant who owns the booking may ask for it"""
        booking = self.booking_service.get_booking_detail(identity, booking_id)
        generated_at = generated_at or utcnow()

        html = _env.get_template("nota.html").render(
            title=settings.NOTA_TITLE,
            rows=nota_rows(booking, generated_at),
        )
        logger.info(f"Nota generated for booking ID {booking_id} by user ID {identity.id}")
        return html
