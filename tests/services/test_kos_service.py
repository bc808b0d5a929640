"""
Tests for kos_booking/services/kos_service.py
"""
import pytest
from datetime import date
from decimal import Decimal

from kos_booking.errors import ForbiddenError, NotFoundError, ValidationError
from kos_booking.models.entities import Booking, Kos, KosGender
from kos_booking.models.schemas import KosCreate, KosListQuery, KosUpdate
from kos_booking.services.kos_service import KosService


def _payload(**overrides):
    data = dict(name="  Kos Anggrek ", address="Jl. Anggrek 3", price_per_month=Decimal("1200000"),
                gender=KosGender.MALE)
    data.update(overrides)
    return KosCreate(**data)


class TestKosService:

    def test_owner_creates_kos(self, db_session, owner_identity):
        kos = KosService(db_session).create_kos(owner_identity, _payload())
        assert kos.owner_id == owner_identity.id
        assert kos.name == "Kos Anggrek"
        assert kos.gender == KosGender.MALE
        assert len(kos.uuid) == 36

    def test_tenant_cannot_create(self, db_session, tenant_identity):
        with pytest.raises(ForbiddenError):
            KosService(db_session).create_kos(tenant_identity, _payload())

    def test_list_owner_kos(self, db_session, sample_kos, other_kos, owner_identity):
        result = KosService(db_session).list_owner_kos(owner_identity)
        assert [k.id for k in result] == [sample_kos.id]

    def test_get_missing(self, db_session):
        with pytest.raises(NotFoundError):
            KosService(db_session).get_kos(404)

    def test_delete_cascades_bookings(self, db_session, sample_booking, owner_identity):
        KosService(db_session).delete_kos(owner_identity, sample_booking.kos_id)
        assert db_session.query(Kos).count() == 0
        assert db_session.query(Booking).count() == 0

    def test_other_owner_cannot_delete(self, db_session, sample_kos, other_owner_identity):
        with pytest.raises(ForbiddenError):
            KosService(db_session).delete_kos(other_owner_identity, sample_kos.id)
        assert db_session.query(Kos).count() == 1


class TestKosListing:

    def test_no_filters_returns_everything(self, db_session, sample_kos, other_kos):
        result = KosService(db_session).list_kos()
        assert {k.id for k in result} == {sample_kos.id, other_kos.id}

    def test_search_is_case_insensitive(self, db_session, sample_kos, other_kos):
        result = KosService(db_session).list_kos(KosListQuery(search="melati"))
        assert [k.id for k in result] == [sample_kos.id]

    def test_address_filter(self, db_session, sample_kos, other_kos):
        result = KosService(db_session).list_kos(KosListQuery(address="MAWAR"))
        assert [k.id for k in result] == [other_kos.id]

    def test_price_range(self, db_session, sample_kos, other_kos):
        service = KosService(db_session)
        assert [k.id for k in service.list_kos(KosListQuery(max_price="1000000"))] == [other_kos.id]
        assert [k.id for k in service.list_kos(KosListQuery(min_price="1000000"))] == [sample_kos.id]
        assert service.list_kos(KosListQuery(min_price="950000", max_price="1000000")) == []

    def test_gender_comma_list(self, db_session, sample_kos, other_kos):
        result = KosService(db_session).list_kos(KosListQuery(gender="female, all"))
        assert {k.id for k in result} == {sample_kos.id, other_kos.id}

        result = KosService(db_session).list_kos(KosListQuery(gender="FEMALE,unknown"))
        assert [k.id for k in result] == [other_kos.id]


class TestKosUpdate:

    def test_owner_updates_listed_fields(self, db_session, sample_kos, owner_identity):
        kos = KosService(db_session).update_kos(
            owner_identity, sample_kos.id, KosUpdate(name=" Kos Melati Baru ", price_per_month="1750000"))
        assert kos.name == "Kos Melati Baru"
        assert kos.price_per_month == Decimal("1750000")
        assert kos.address == "Jl. Melati No. 5, Malang"
        assert kos.description == "Dekat kampus"

    def test_description_can_be_cleared(self, db_session, sample_kos, owner_identity):
        kos = KosService(db_session).update_kos(owner_identity, sample_kos.id, KosUpdate(description=""))
        assert kos.description is None

    def test_null_name_leaves_it_alone(self, db_session, sample_kos, owner_identity):
        with pytest.raises(ValidationError, match="No valid fields"):
            KosService(db_session).update_kos(owner_identity, sample_kos.id, KosUpdate(name=None))

    def test_empty_update_rejected(self, db_session, sample_kos, owner_identity):
        with pytest.raises(ValidationError):
            KosService(db_session).update_kos(owner_identity, sample_kos.id, KosUpdate())

    def test_other_owner_forbidden(self, db_session, sample_kos, other_owner_identity):
        with pytest.raises(ForbiddenError):
            KosService(db_session).update_kos(other_owner_identity, sample_kos.id, KosUpdate(name="Hijacked"))
        db_session.expire_all()
        assert db_session.get(Kos, sample_kos.id).name == "Kos Melati"

    def test_missing_kos(self, db_session, owner_identity):
        with pytest.raises(NotFoundError):
            KosService(db_session).update_kos(owner_identity, 404, KosUpdate(name="X"))


class TestKosCreateSchema:

    def test_blank_name_rejected(self):
        with pytest.raises(ValueError):
            _payload(name="   ")

    def test_non_positive_price_rejected(self):
        with pytest.raises(ValueError):
            _payload(price_per_month=Decimal("0"))

    def test_blank_description_becomes_none(self):
        assert _payload(description="  ").description is None


class TestKosListQuerySchema:

    def test_invalid_gender_rejected(self):
        with pytest.raises(ValueError, match="Invalid gender value"):
            KosListQuery(gender="OTHER")

    def test_blank_gender_means_no_filter(self):
        assert KosListQuery(gender=" ").gender is None

    def test_min_above_max_rejected(self):
        with pytest.raises(ValueError):
            KosListQuery(min_price="2000000", max_price="1000000")
