"""
Booking routes
"""
from typing import Optional
from fastapi import APIRouter, Depends, Path, Query, status
from fastapi.responses import HTMLResponse
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.orm import Session
from kos_booking.database import get_db
from kos_booking.errors import ValidationError
from kos_booking.models.entities import UserRole
from kos_booking.models.schemas import (
    BookingCreate, BookingUpdate, BookingHistoryQuery,
    BookingResponse, BookingListItem, BookingDetailResponse, validation_message
)
from kos_booking.responses import success
from kos_booking.security.auth import Identity, require_owner, require_society, require_owner_or_society
from kos_booking.services.booking_service import BookingService
from kos_booking.services.idempotency_service import enforce_idempotency
from kos_booking.services.nota_service import NotaService

router = APIRouter(prefix="/bookings", tags=["Bookings"])


def history_query(
    month: Optional[int] = Query(None),
    year: Optional[int] = Query(None),
    start_date: Optional[str] = Query(None, description="YYYY-MM-DD"),
    end_date: Optional[str] = Query(None, description="YYYY-MM-DD"),
) -> BookingHistoryQuery:
    """Validate the time filter of a history request"""
    try:
        return BookingHistoryQuery(month=month, year=year, start_date=start_date, end_date=end_date)
    except PydanticValidationError as e:
        raise ValidationError(validation_message(e))


def _history(service: BookingService, identity: Identity, scope: UserRole, q: BookingHistoryQuery):
    bookings = service.list_bookings(
        identity, scope, month=q.month, year=q.year,
        start_date=q.start_date, end_date=q.end_date
    )
    return [BookingListItem.model_validate(b) for b in bookings]


@router.post("", status_code=status.HTTP_201_CREATED)
def create_booking(
    data: BookingCreate,
    db: Session = Depends(get_db),
    identity: Identity = Depends(require_society),
    _key: Optional[str] = Depends(enforce_idempotency),
):
    """Create a booking (SOCIETY)"""
    service = BookingService(db)
    booking = service.create_booking(identity, data.kos_id, data.start_date, data.end_date)
    return success(BookingResponse.model_validate(booking), "Booking has been created")


@router.get("")
def list_owner_bookings(
    q: BookingHistoryQuery = Depends(history_query),
    db: Session = Depends(get_db),
    identity: Identity = Depends(require_owner),
):
    """Booking history across the owner's kos"""
    items = _history(BookingService(db), identity, UserRole.OWNER, q)
    return success(items, "Booking history retrieved successfully")


@router.get("/my-bookings")
def list_my_bookings(
    q: BookingHistoryQuery = Depends(history_query),
    db: Session = Depends(get_db),
    identity: Identity = Depends(require_society),
):
    """Booking history of the calling tenant"""
    items = _history(BookingService(db), identity, UserRole.SOCIETY, q)
    return success(items, "Booking history retrieved successfully")


@router.get("/{booking_id}")
def get_booking(
    booking_id: int = Path(..., gt=0),
    db: Session = Depends(get_db),
    identity: Identity = Depends(require_society),
):
    """Booking detail (tenant only)"""
    booking = BookingService(db).get_booking_detail(identity, booking_id)
    return success(BookingDetailResponse.model_validate(booking), "Booking details retrieved successfully")


@router.get("/{booking_id}/nota", response_class=HTMLResponse)
def get_booking_nota(
    booking_id: int = Path(..., gt=0),
    db: Session = Depends(get_db),
    identity: Identity = Depends(require_society),
):
    """Printable nota (tenant only)"""
    html = NotaService(db).render(identity, booking_id)
    return HTMLResponse(
        content=html,
        headers={"Content-Disposition": f'inline; filename="nota-{booking_id}.html"'},
    )


@router.put("/{booking_id}")
def update_booking(
    data: BookingUpdate,
    booking_id: int = Path(..., gt=0),
    db: Session = Depends(get_db),
    identity: Identity = Depends(require_owner_or_society),
):
    """Update dates and/or status"""
    booking = BookingService(db).update_booking(
        identity, booking_id,
        start_date=data.start_date, end_date=data.end_date,
        status=data.status, version=data.version,
    )
    return success(BookingResponse.model_validate(booking), "Booking has been updated")


@router.delete("/{booking_id}")
def delete_booking(
    booking_id: int = Path(..., gt=0),
    db: Session = Depends(get_db),
    identity: Identity = Depends(require_owner_or_society),
):
    """Delete a booking"""
    BookingService(db).delete_booking(identity, booking_id)
    return success({"booking_id": booking_id}, "Booking has been deleted")
