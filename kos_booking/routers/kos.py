"""
Kos routes
"""
from typing import Optional
from fastapi import APIRouter, Depends, Path, Query, status
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.orm import Session
from kos_booking.database import get_db
from kos_booking.errors import ValidationError
from kos_booking.models.schemas import KosCreate, KosUpdate, KosListQuery, KosResponse, validation_message
from kos_booking.responses import success
from kos_booking.security.auth import Identity, get_current_identity, require_owner
from kos_booking.services.idempotency_service import enforce_idempotency
from kos_booking.services.kos_service import KosService

router = APIRouter(prefix="/kos", tags=["Kos"])


def kos_list_query(
    search: Optional[str] = Query(None),
    address: Optional[str] = Query(None),
    min_price: Optional[str] = Query(None),
    max_price: Optional[str] = Query(None),
    gender: Optional[str] = Query(None, description="Comma list of MALE, FEMALE, ALL"),
) -> KosListQuery:
    try:
        return KosListQuery(search=search, address=address, min_price=min_price,
                            max_price=max_price, gender=gender)
    except PydanticValidationError as e:
        raise ValidationError(validation_message(e))


@router.post("", status_code=status.HTTP_201_CREATED)
def create_kos(
    data: KosCreate,
    db: Session = Depends(get_db),
    identity: Identity = Depends(require_owner),
    _key: Optional[str] = Depends(enforce_idempotency),
):
    kos = KosService(db).create_kos(identity, data)
    return success(KosResponse.model_validate(kos), "Kos has been created")


@router.get("")
def list_kos(
    filters: KosListQuery = Depends(kos_list_query),
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
):
    """Browse listings (any authenticated user)"""
    items = [KosResponse.model_validate(k) for k in KosService(db).list_kos(filters)]
    return success(items, "Kos list retrieved successfully")


@router.get("/mine")
def list_my_kos(
    db: Session = Depends(get_db),
    identity: Identity = Depends(require_owner),
):
    items = [KosResponse.model_validate(k) for k in KosService(db).list_owner_kos(identity)]
    return success(items, "Kos list retrieved successfully")


@router.get("/{kos_id}")
def get_kos(
    kos_id: int = Path(..., gt=0),
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
):
    kos = KosService(db).get_kos(kos_id)
    return success(KosResponse.model_validate(kos), "Kos retrieved successfully")


@router.put("/{kos_id}")
def update_kos(
    data: KosUpdate,
    kos_id: int = Path(..., gt=0),
    db: Session = Depends(get_db),
    identity: Identity = Depends(require_owner),
):
    kos = KosService(db).update_kos(identity, kos_id, data)
    return success(KosResponse.model_validate(kos), "Kos has been updated")


@router.delete("/{kos_id}")
def delete_kos(
    kos_id: int = Path(..., gt=0),
    db: Session = Depends(get_db),
    identity: Identity = Depends(require_owner),
):
    KosService(db).delete_kos(identity, kos_id)
    return success({"kos_id": kos_id}, "Kos has been deleted")
