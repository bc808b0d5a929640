"""
Kos service
Minimal listing management backing the booking core
"""
import logging
from typing import List, Optional
from uuid import uuid4
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from kos_booking.errors import ForbiddenError, InternalError, NotFoundError, ValidationError
from kos_booking.models.entities import Kos, UserRole
from kos_booking.models.schemas import KosCreate, KosListQuery, KosUpdate
from kos_booking.security.auth import Identity

logger = logging.getLogger(__name__)


class KosService:
    """Kos service"""

    def __init__(self, db: Session):
        self.db = db

    def _commit(self, action: str) -> None:
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to {action} kos: {e}")
            raise InternalError(f"Failed to {action} kos")

    def get_kos(self, kos_id: int) -> Kos:
        kos = self.db.query(Kos).filter(Kos.id == kos_id).first()
        if not kos:
            raise NotFoundError("Kos not found")
        return kos

    def list_kos(self, filters: Optional[KosListQuery] = None) -> List[Kos]:
        """Public listing with optional name/address/price/gender filters"""
        filters = filters or KosListQuery()
        query = self.db.query(Kos)

        if filters.search:
            query = query.filter(Kos.name.ilike(f"%{filters.search}%"))
        if filters.address:
            query = query.filter(Kos.address.ilike(f"%{filters.address}%"))
        if filters.min_price is not None:
            query = query.filter(Kos.price_per_month >= filters.min_price)
        if filters.max_price is not None:
            query = query.filter(Kos.price_per_month <= filters.max_price)
        if filters.gender:
            query = query.filter(Kos.gender.in_(filters.gender))

        return query.order_by(Kos.created_at.desc(), Kos.id.desc()).all()

    def list_owner_kos(self, identity: Identity) -> List[Kos]:
        """Listings owned by the caller, newest first"""
        return self.db.query(Kos).filter(
            Kos.owner_id == identity.id
        ).order_by(Kos.created_at.desc(), Kos.id.desc()).all()

    def create_kos(self, identity: Identity, data: KosCreate) -> Kos:
        if not identity.has_role(UserRole.OWNER):
            raise ForbiddenError("Only OWNER users can create kos")

        kos = Kos(
            uuid=str(uuid4()),
            name=data.name,
            address=data.address,
            description=data.description,
            price_per_month=data.price_per_month,
            gender=data.gender,
            owner_id=identity.id,
        )
        self.db.add(kos)
        self._commit("create")
        self.db.refresh(kos)

        logger.info(f"Kos created: {kos.name} by user ID {identity.id}")
        return kos

    def delete_kos(self, identity: Identity, kos_id: int) -> None:
        """Delete a listing together with its bookings"""
        kos = self.get_kos(kos_id)
        if kos.owner_id != identity.id:
            logger.warning(f"User {identity.id} denied delete on kos {kos_id}")
            raise ForbiddenError("Not authorized to delete this kos")

        self.db.delete(kos)
        self._commit("delete")
        logger.info(f"Kos deleted: ID {kos_id} by user ID {identity.id}")

    def update_kos(self, identity: Identity, kos_id: int, data: KosUpdate) -> Kos:
        """Apply a partial edit to one of the caller's listings"""
        kos = self.get_kos(kos_id)
        if kos.owner_id != identity.id:
            logger.warning(f"User {identity.id} denied update on kos {kos_id}")
            raise ForbiddenError("Not authorized to update this kos")

        changes = data.model_dump(exclude_unset=True)
        # only description may be cleared; a null elsewhere means "leave as is"
        changes = {k: v for k, v in changes.items() if v is not None or k == "description"}
        if not changes:
            raise ValidationError("No valid fields provided for update")

        for key, value in changes.items():
            setattr(kos, key, value)
        self._commit("update")
        self.db.refresh(kos)

        logger.info(f"Kos updated: ID {kos_id} by user ID {identity.id}: {sorted(changes)}")
        return kos
