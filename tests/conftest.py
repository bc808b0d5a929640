"""
Pytest configuration and shared fixtures
"""
import os

# keep the app's own engine off the filesystem
os.environ["DATABASE_URL"] = "sqlite://"

import pytest
from datetime import date
from decimal import Decimal
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient

from kos_booking.database import Base, get_db
from kos_booking.models import entities  # noqa
from kos_booking.models.entities import User, UserRole, Kos, KosGender, Booking, BookingStatus
from kos_booking.security.auth import Identity, create_access_token
from kos_booking.main import app


@pytest.fixture(scope="function")
def db_engine():
    """In-memory database engine"""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def db_session(db_engine):
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture(scope="function")
def client(db_session):
    """Test client bound to the in-memory session"""
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


# ============== Users ==============

def make_user(db, user_id, role, name, email):
    user = User(id=user_id, name=name, email=email, phone="081234567890", role=role)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def tenant(db_session):
    """SOCIETY user 5"""
    return make_user(db_session, 5, UserRole.SOCIETY, "Budi Santoso", "budi@example.com")


@pytest.fixture
def other_tenant(db_session):
    return make_user(db_session, 8, UserRole.SOCIETY, "Siti Aminah", "siti@example.com")


@pytest.fixture
def owner(db_session):
    """OWNER user 7"""
    return make_user(db_session, 7, UserRole.OWNER, "Pak Harjo", "harjo@example.com")


@pytest.fixture
def other_owner(db_session):
    return make_user(db_session, 9, UserRole.OWNER, "Bu Wati", "wati@example.com")


@pytest.fixture
def tenant_identity(tenant):
    return Identity(id=tenant.id, role=UserRole.SOCIETY.value)


@pytest.fixture
def other_tenant_identity(other_tenant):
    return Identity(id=other_tenant.id, role=UserRole.SOCIETY.value)


@pytest.fixture
def owner_identity(owner):
    return Identity(id=owner.id, role=UserRole.OWNER.value)


@pytest.fixture
def other_owner_identity(other_owner):
    return Identity(id=other_owner.id, role=UserRole.OWNER.value)


# ============== Tokens ==============

@pytest.fixture
def tenant_headers(tenant):
    return {"Authorization": f"Bearer {create_access_token(tenant.id, tenant.role, tenant.email)}"}


@pytest.fixture
def other_tenant_headers(other_tenant):
    return {"Authorization": f"Bearer {create_access_token(other_tenant.id, other_tenant.role)}"}


@pytest.fixture
def owner_headers(owner):
    return {"Authorization": f"Bearer {create_access_token(owner.id, owner.role, owner.email)}"}


@pytest.fixture
def other_owner_headers(other_owner):
    return {"Authorization": f"Bearer {create_access_token(other_owner.id, other_owner.role)}"}


# ============== Kos / Bookings ==============

@pytest.fixture
def sample_kos(db_session, owner):
    """Kos 10, owned by user 7"""
    kos = Kos(
        id=10,
        uuid="0b6c1f0e-5d0a-4c52-9d3e-0a4f7c1e2b10",
        name="Kos Melati",
        address="Jl. Melati No. 5, Malang",
        description="Dekat kampus",
        price_per_month=Decimal("1500000"),
        gender=KosGender.ALL,
        owner_id=owner.id,
    )
    db_session.add(kos)
    db_session.commit()
    db_session.refresh(kos)
    return kos


@pytest.fixture
def other_kos(db_session, other_owner):
    kos = Kos(
        id=11,
        uuid="6f2a9e55-1c1b-4f0e-8a53-7d1c9b0e2a11",
        name="Kos Mawar",
        address="Jl. Mawar No. 12, Malang",
        price_per_month=Decimal("900000"),
        gender=KosGender.FEMALE,
        owner_id=other_owner.id,
    )
    db_session.add(kos)
    db_session.commit()
    db_session.refresh(kos)
    return kos


def make_booking(db, kos, user, start=date(2024, 5, 1), end=date(2024, 5, 10),
                 status=BookingStatus.PENDING, uuid=None):
    booking = Booking(
        uuid=uuid or f"test-{kos.id}-{user.id}-{start.isoformat()}-{status.value}",
        kos_id=kos.id,
        user_id=user.id,
        start_date=start,
        end_date=end,
        status=status,
    )
    db.add(booking)
    db.commit()
    db.refresh(booking)
    return booking


@pytest.fixture
def sample_booking(db_session, sample_kos, tenant):
    """PENDING booking of tenant 5 on kos 10"""
    return make_booking(db_session, sample_kos, tenant)


@pytest.fixture
def booking_factory(db_session):
    """make_booking bound to the test session"""
    def _make(kos, user, **kwargs):
        return make_booking(db_session, kos, user, **kwargs)
    return _make
