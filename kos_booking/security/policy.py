"""
Booking authorization policy

Ownership of a booking is dual-rooted: the tenant owns it directly and the
kos owner owns it through the kos it targets. Each role maps to one pure
check over (identity, booking, kos); nothing here touches the store.
"""
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from kos_booking.models.entities import Booking, Kos, UserRole
from kos_booking.security.auth import Identity


@dataclass(frozen=True)
class AccessDecision:
    allowed: bool
    reason: str

    def __bool__(self) -> bool:
        return self.allowed


def _tenant_owns(identity: Identity, booking: Booking, kos: Optional[Kos]) -> AccessDecision:
    if booking.user_id == identity.id:
        return AccessDecision(True, "tenant owns booking")
    return AccessDecision(False, "booking belongs to another tenant")


def _owner_owns(identity: Identity, booking: Booking, kos: Optional[Kos]) -> AccessDecision:
    if kos is None:
        return AccessDecision(False, "kos not loaded")
    if kos.owner_id == identity.id:
        return AccessDecision(True, "owner owns kos")
    return AccessDecision(False, "kos belongs to another owner")


BOOKING_RULES: Dict[str, Callable[[Identity, Booking, Optional[Kos]], AccessDecision]] = {
    UserRole.SOCIETY.value: _tenant_owns,
    UserRole.OWNER.value: _owner_owns,
}

# detail reads and the nota are tenant-only
DETAIL_RULES: Dict[str, Callable[[Identity, Booking, Optional[Kos]], AccessDecision]] = {
    UserRole.SOCIETY.value: _tenant_owns,
}


def _decide(rules, identity: Optional[Identity], booking: Booking, kos: Optional[Kos]) -> AccessDecision:
    if identity is None:
        return AccessDecision(False, "no identity")
    rule = rules.get(identity.role)
    if rule is None:
        return AccessDecision(False, f"role {identity.role!r} may not access bookings")
    return rule(identity, booking, kos)


def can_access_booking(identity: Optional[Identity], booking: Booking, kos: Optional[Kos]) -> AccessDecision:
    """Whether identity may update, delete or read the booking"""
    return _decide(BOOKING_RULES, identity, booking, kos)


def can_read_booking_detail(identity: Optional[Identity], booking: Booking,
                            kos: Optional[Kos] = None) -> AccessDecision:
    """Whether identity may read the booking detail or its nota"""
    return _decide(DETAIL_RULES, identity, booking, kos)
