"""
Idempotency service
Suppresses replayed POST requests carrying the same Idempotency-Key header.
Keys live in the idempotency_keys table until their TTL runs out.
"""
import logging
from datetime import datetime, timedelta
from typing import Optional
from fastapi import Depends, Header, Request
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from kos_booking.config import settings
from kos_booking.database import get_db
from kos_booking.errors import DuplicateRequestError
from kos_booking.models.entities import IdempotencyKey, utcnow

logger = logging.getLogger(__name__)


class IdempotencyService:
    """Idempotency key store"""

    def __init__(self, db: Session, ttl_seconds: Optional[int] = None):
        self.db = db
        self.ttl = timedelta(seconds=ttl_seconds if ttl_seconds is not None else settings.IDEMPOTENCY_TTL_SECONDS)

    def purge_expired(self, now: Optional[datetime] = None) -> int:
        now = now or utcnow()
        removed = self.db.query(IdempotencyKey).filter(
            IdempotencyKey.expires_at <= now
        ).delete()
        self.db.commit()
        return removed

    def is_processed(self, key: str, now: Optional[datetime] = None) -> bool:
        now = now or utcnow()
        return self.db.query(IdempotencyKey).filter(
            IdempotencyKey.key == key,
            IdempotencyKey.expires_at > now,
        ).first() is not None

    def check_and_record(self, key: str, method: str, path: str,
                         now: Optional[datetime] = None) -> None:
        """Record key, or raise DuplicateRequestError if it is still live"""
        now = now or utcnow()
        self.purge_expired(now)

        if self.is_processed(key, now):
            logger.warning(f"Duplicate request suppressed: {method} {path} key={key}")
            raise DuplicateRequestError()

        self.db.add(IdempotencyKey(key=key, method=method, path=path, expires_at=now + self.ttl))
        try:
            self.db.commit()
        except IntegrityError:
            # another request recorded the same key first
            self.db.rollback()
            logger.warning(f"Duplicate request suppressed: {method} {path} key={key}")
            raise DuplicateRequestError()


def enforce_idempotency(
    request: Request,
    idempotency_key: Optional[str] = Header(None),
    db: Session = Depends(get_db),
) -> Optional[str]:
    """Route dependency; requests without the header pass through"""
    if idempotency_key:
        IdempotencyService(db).check_and_record(idempotency_key, request.method, request.url.path)
    return idempotency_key
