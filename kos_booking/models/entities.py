"""
Entity definitions
Booking is the aggregate root; Kos and User are read by the booking core for
ownership and display fields.
"""
from datetime import datetime, UTC
from enum import Enum
from sqlalchemy import (
    Column, Integer, String, DateTime, Date,
    ForeignKey, Text, Enum as SQLEnum, Numeric
)
from sqlalchemy.orm import relationship
from kos_booking.database import Base


def utcnow() -> datetime:
    """Naive UTC timestamp (SQLite drops tzinfo)"""
    return datetime.now(UTC).replace(tzinfo=None)


# ============== Enums ==============

class UserRole(str, Enum):
    """Identity roles"""
    OWNER = "OWNER"        # lists kos units, accepts/rejects bookings
    SOCIETY = "SOCIETY"    # prospective tenant


class BookingStatus(str, Enum):
    """Booking status"""
    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"
    CANCELLED = "CANCELLED"


class KosGender(str, Enum):
    """Tenant gender restriction of a kos"""
    MALE = "MALE"
    FEMALE = "FEMALE"
    ALL = "ALL"


# ============== Entities ==============

class User(Base):
    """
    User record, provisioned by the identity service.
    Only id/role/name/email matter to the booking core.
    """
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    email = Column(String(100), unique=True, nullable=False)
    phone = Column(String(20))
    role = Column(SQLEnum(UserRole), nullable=False, default=UserRole.SOCIETY)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    kos_list = relationship("Kos", back_populates="owner")
    bookings = relationship("Booking", back_populates="user")


class Kos(Base):
    """Kos listing"""
    __tablename__ = "kos"

    id = Column(Integer, primary_key=True, index=True)
    uuid = Column(String(36), unique=True, nullable=False)
    name = Column(String(150), nullable=False)
    address = Column(String(255), nullable=False)
    description = Column(Text)
    price_per_month = Column(Numeric(12, 2), nullable=False)
    gender = Column(SQLEnum(KosGender), nullable=False, default=KosGender.ALL)
    owner_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    owner = relationship("User", back_populates="kos_list")
    bookings = relationship("Booking", back_populates="kos", cascade="all, delete-orphan")


class Booking(Base):
    """
    Booking - aggregate root of the reservation workflow

    `id` is the store-assigned key; `uuid` is the client-facing reference.
    `version` is bumped by the mapper on every UPDATE, so a concurrent write
    against a stale row raises StaleDataError instead of overwriting.
    """
    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True, index=True)
    uuid = Column(String(36), unique=True, nullable=False)
    kos_id = Column(Integer, ForeignKey("kos.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    start_date = Column(Date, nullable=False, index=True)
    end_date = Column(Date, nullable=False)
    status = Column(SQLEnum(BookingStatus), nullable=False, default=BookingStatus.PENDING)
    version = Column(Integer, nullable=False, default=1)
    created_at = Column(DateTime, default=utcnow, index=True)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    kos = relationship("Kos", back_populates="bookings")
    user = relationship("User", back_populates="bookings")

    __mapper_args__ = {"version_id_col": version}


class IdempotencyKey(Base):
    """Processed request key, kept until expires_at"""
    __tablename__ = "idempotency_keys"

    id = Column(Integer, primary_key=True, index=True)
    key = Column(String(255), unique=True, nullable=False, index=True)
    method = Column(String(10), nullable=False)
    path = Column(String(255), nullable=False)
    expires_at = Column(DateTime, nullable=False, index=True)
    created_at = Column(DateTime, default=utcnow)
