"""Bearer-token authentication.

Issues and verifies HS256 JWT access tokens and turns the ``Authorization``
header of a request into an ``Identity`` value. Routes receive that value as a
FastAPI dependency and pass it explicitly to the operations they call.
"""

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

import jwt
import structlog
from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from passlib.context import CryptContext
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from identity.domain import identity
from identity.user.user import Role, User
from shared.config import settings

logger = structlog.get_logger(__name__)

pwd_ctx = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

security = HTTPBearer(auto_error=False)

_UNAUTHENTICATED = "Please authenticate"


@dataclass(frozen=True)
class Identity:
    """The authenticated caller of an operation."""

    user_id: str
    email: str
    role: str = Role.CUSTOMER.value

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN.value


def hash_password(password: str) -> str:
    return pwd_ctx.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    return pwd_ctx.verify(password, password_hash)


def create_access_token(user_id: str, role: str) -> tuple[str, datetime]:
    expires_at = datetime.now(UTC) + timedelta(seconds=settings.ACCESS_TOKEN_EXPIRES_SECONDS)
    payload = {"sub": user_id, "role": role, "exp": expires_at, "type": "access"}
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM), expires_at


def decode_token(token: str) -> dict:
    return jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])


def authenticate(email: str, password: str) -> User | None:
    """Return the user owning these credentials, or None."""
    user = current_domain.repository_for(User).find_by_email(email)
    if user is None or not verify_password(password, user.password_hash):
        return None
    return user


def identity_from_token(token: str) -> Identity:
    """Resolve a bearer token to an Identity or raise a 401."""
    try:
        payload = decode_token(token)
    except jwt.InvalidTokenError as exc:
        logger.info("rejected_token", reason=type(exc).__name__)
        raise HTTPException(status_code=401, detail=_UNAUTHENTICATED) from exc

    if payload.get("type") != "access" or not payload.get("sub"):
        raise HTTPException(status_code=401, detail=_UNAUTHENTICATED)

    with identity.domain_context():
        try:
            user = current_domain.repository_for(User).get(payload["sub"])
        except ObjectNotFoundError as exc:
            logger.info("token_for_unknown_user", user_id=payload["sub"])
            raise HTTPException(status_code=401, detail=_UNAUTHENTICATED) from exc

    return Identity(user_id=str(user.id), email=user.email, role=user.role)


async def get_current_identity(
    creds: HTTPAuthorizationCredentials | None = Depends(security),
) -> Identity:
    if not creds or creds.scheme.lower() != "bearer":
        raise HTTPException(status_code=401, detail=_UNAUTHENTICATED)
    return identity_from_token(creds.credentials)


async def require_admin(caller: Identity = Depends(get_current_identity)) -> Identity:
    if not caller.is_admin:
        raise HTTPException(status_code=403, detail="Admin access required")
    return caller
