"""
Booking service - lifecycle engine
Creates, transitions, deletes and lists Booking aggregates
"""
import logging
from datetime import date
from typing import List, Optional, Union
from uuid import uuid4
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload
from sqlalchemy.orm.exc import StaleDataError
from kos_booking.errors import (
    AuthenticationError, ForbiddenError, InternalError, InvalidStateError,
    NotFoundError, ValidationError
)
from kos_booking.models.entities import Booking, BookingStatus, Kos, User, UserRole
from kos_booking.security.auth import Identity
from kos_booking.security.policy import can_access_booking, can_read_booking_detail
from kos_booking.services.booking_query import resolve_time_window

logger = logging.getLogger(__name__)


class BookingService:
    """Booking service"""

    def __init__(self, db: Session):
        self.db = db

    # ============== Helpers ==============

    def _commit(self, action: str) -> None:
        try:
            self.db.commit()
        except StaleDataError:
            self.db.rollback()
            logger.warning(f"Concurrent modification while trying to {action} booking")
            raise InvalidStateError("Booking was modified by another request")
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to {action} booking: {e}")
            raise InternalError(f"Failed to {action} booking")

    def _load(self, booking_id: int) -> Booking:
        booking = self.db.query(Booking).options(
            joinedload(Booking.kos)
        ).filter(Booking.id == booking_id).first()
        if not booking:
            raise NotFoundError("Booking not found")
        return booking

    def _authorize(self, identity: Identity, booking: Booking, action: str) -> None:
        decision = can_access_booking(identity, booking, booking.kos)
        if not decision:
            logger.warning(
                f"User {identity.id} ({identity.role}) denied {action} on booking {booking.id}: {decision.reason}"
            )
            raise ForbiddenError(f"Not authorized to {action} this booking")

    @staticmethod
    def _coerce_status(status: Union[BookingStatus, str]) -> BookingStatus:
        try:
            return BookingStatus(status)
        except ValueError:
            raise ValidationError("Status must be PENDING, ACCEPTED, REJECTED, or CANCELLED")

    # ============== Queries ==============

    def get_booking(self, booking_id: int) -> Optional[Booking]:
        """Fetch a booking without any access check"""
        return self.db.query(Booking).filter(Booking.id == booking_id).first()

    def get_booking_detail(self, identity: Identity, booking_id: int) -> Booking:
        """Booking with kos/owner/tenant loaded, visible only to the tenant who made it.

        Absent and not-yours give the same NotFoundError so existence is not leaked.
        """
        booking = self.db.query(Booking).options(
            joinedload(Booking.kos).joinedload(Kos.owner),
            joinedload(Booking.user),
        ).filter(Booking.id == booking_id).first()
        if not booking or not can_read_booking_detail(identity, booking, booking.kos):
            raise NotFoundError("Booking not found or not authorized")
        logger.info(f"Booking details retrieved for booking ID {booking_id} by user ID {identity.id}")
        return booking

    def list_bookings(self, identity: Identity, scope: Optional[UserRole] = None,
                      month: Optional[int] = None, year: Optional[int] = None,
                      start_date: Optional[date] = None,
                      end_date: Optional[date] = None) -> List[Booking]:
        """Booking history for an owner (via their kos) or a tenant, newest first"""
        if scope is None:
            try:
                scope = UserRole(identity.role)
            except ValueError:
                raise ForbiddenError("Access denied: insufficient role")
        query = self.db.query(Booking).options(
            joinedload(Booking.kos), joinedload(Booking.user)
        )

        if scope == UserRole.OWNER:
            query = query.join(Kos, Booking.kos_id == Kos.id).filter(Kos.owner_id == identity.id)
        else:
            query = query.filter(Booking.user_id == identity.id)

        window = resolve_time_window(month, year, start_date, end_date)
        if window is not None:
            query = window.apply(query, Booking.start_date)

        bookings = query.order_by(Booking.created_at.desc(), Booking.id.desc()).all()
        logger.info(f"Booking history retrieved for {scope.value.lower()} ID {identity.id} ({len(bookings)} rows)")
        return bookings

    # ============== Mutations ==============

    def create_booking(self, identity: Identity, kos_id: int,
                       start_date: date, end_date: date) -> Booking:
        """Create a PENDING booking for the calling tenant"""
        if not identity.has_role(UserRole.SOCIETY):
            raise ForbiddenError("Only SOCIETY users can create bookings")

        if not isinstance(kos_id, int) or isinstance(kos_id, bool) or kos_id <= 0:
            raise ValidationError("Kos ID must be a positive integer")
        if start_date is None or end_date is None:
            raise ValidationError("Start date and end date are required")
        if end_date <= start_date:
            raise ValidationError("End date must be after start date")

        if self.db.get(Kos, kos_id) is None:
            raise NotFoundError("Kos not found")
        if self.db.get(User, identity.id) is None:
            raise AuthenticationError("User not found")

        booking = Booking(
            uuid=str(uuid4()),
            kos_id=kos_id,
            user_id=identity.id,
            start_date=start_date,
            end_date=end_date,
            status=BookingStatus.PENDING,
        )
        self.db.add(booking)
        self._commit("create")
        self.db.refresh(booking)

        logger.info(f"Booking created for kos ID {kos_id} by user ID {identity.id}")
        return booking

    def update_booking(self, identity: Identity, booking_id: int,
                       start_date: Optional[date] = None,
                       end_date: Optional[date] = None,
                       status: Optional[Union[BookingStatus, str]] = None,
                       version: Optional[int] = None) -> Booking:
        """Apply date and status changes permitted for the caller's role.

        Owners may move status only out of PENDING. Tenants may always cancel;
        any other status they send is dropped.
        """
        booking = self._load(booking_id)
        self._authorize(identity, booking, "update")

        if version is not None and version != booking.version:
            raise InvalidStateError("Booking was modified by another request")

        changes = {}
        if status is not None:
            status = self._coerce_status(status)
            if identity.has_role(UserRole.OWNER):
                if booking.status != BookingStatus.PENDING:
                    logger.warning(
                        f"Owner {identity.id} tried to move booking {booking.id} "
                        f"from {booking.status.value} to {status.value}"
                    )
                    raise InvalidStateError(
                        f"Only PENDING bookings may transition (current status: {booking.status.value})"
                    )
                changes["status"] = status
            elif status == BookingStatus.CANCELLED:
                changes["status"] = status
            else:
                logger.info(f"Ignoring status {status.value} from tenant {identity.id} on booking {booking.id}")

        if start_date is not None:
            changes["start_date"] = start_date
        if end_date is not None:
            changes["end_date"] = end_date

        if not changes:
            raise ValidationError("No valid fields provided for update")

        new_start = changes.get("start_date", booking.start_date)
        new_end = changes.get("end_date", booking.end_date)
        if new_end <= new_start:
            raise ValidationError("End date must be after start date")

        for key, value in changes.items():
            setattr(booking, key, value)

        self._commit("update")
        self.db.refresh(booking)

        applied = {k: getattr(v, "value", str(v)) for k, v in changes.items()}
        logger.info(f"Booking updated for booking ID {booking.id} by user ID {identity.id}: {applied}")
        return booking

    def delete_booking(self, identity: Identity, booking_id: int) -> None:
        """Hard-delete a booking"""
        booking = self._load(booking_id)
        self._authorize(identity, booking, "delete")

        self.db.delete(booking)
        self._commit("delete")
        logger.info(f"Booking deleted for booking ID {booking_id} by user ID {identity.id}")
