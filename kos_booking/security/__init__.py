# Security module
from kos_booking.security.auth import (
    Identity, create_access_token, get_current_identity, require_role
)
from kos_booking.security.policy import AccessDecision, can_access_booking, can_read_booking_detail

__all__ = [
    'Identity', 'create_access_token', 'get_current_identity', 'require_role',
    'AccessDecision', 'can_access_booking', 'can_read_booking_detail'
]
