"""
Identity context
Bearer tokens are issued by the identity service; this module only decodes
them into an Identity {id, role} and gates routes by role.
"""
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, UTC
from typing import Optional, List
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError, jwt
from kos_booking.config import settings
from kos_booking.errors import AuthenticationError, ForbiddenError
from kos_booking.models.entities import UserRole

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class Identity:
    """Authenticated caller; role is kept as the raw claim value"""
    id: int
    role: str
    email: Optional[str] = None

    def has_role(self, role: UserRole) -> bool:
        return self.role == role.value


def create_access_token(user_id: int, role, email: Optional[str] = None,
                        expires_minutes: Optional[int] = None) -> str:
    """Create a JWT (used by tests and the identity service)"""
    minutes = expires_minutes if expires_minutes is not None else settings.ACCESS_TOKEN_EXPIRE_MINUTES
    expire = datetime.now(UTC) + timedelta(minutes=minutes)
    to_encode = {
        "sub": str(user_id),
        "role": role.value if isinstance(role, UserRole) else str(role),
        "exp": expire,
    }
    if email is not None:
        to_encode["email"] = email
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_token(token: str) -> dict:
    """Decode a JWT"""
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError as e:
        logger.warning(f"Token verification failed: {e}")
        raise AuthenticationError(f"Token verification failed: {e}")


def identity_from_payload(payload: dict) -> Identity:
    try:
        user_id = int(payload.get("sub"))
    except (TypeError, ValueError):
        raise AuthenticationError("Unauthorized: No user ID provided")
    role = payload.get("role")
    if not role:
        raise AuthenticationError("Unauthorized: No role provided")
    return Identity(id=user_id, role=str(role), email=payload.get("email"))


async def get_current_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Identity:
    """Resolve the caller from the Authorization header"""
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("No token provided")
    identity = identity_from_payload(decode_token(credentials.credentials))
    logger.debug(f"Token verified for user id {identity.id} ({identity.role})")
    return identity


def require_role(allowed_roles: List[UserRole]):
    """Route-level role gate"""
    allowed = {role.value for role in allowed_roles}

    async def role_checker(identity: Identity = Depends(get_current_identity)) -> Identity:
        if identity.role not in allowed:
            logger.warning(f"User {identity.id} with role {identity.role} denied; requires {sorted(allowed)}")
            raise ForbiddenError("Access denied: insufficient role")
        return identity
    return role_checker


require_owner = require_role([UserRole.OWNER])
require_society = require_role([UserRole.SOCIETY])
require_owner_or_society = require_role([UserRole.OWNER, UserRole.SOCIETY])
