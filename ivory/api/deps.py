# ivory/api/deps.py
import jwt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from ivory.data.database import get_db
from ivory.domain.errors import AccessDeniedError, AuthenticationError
from ivory.domain.principal import ADMIN, ANONYMOUS, USER, Principal
from ivory.services.lock_service import LockService
from ivory.services.media_client import MediaClient
from ivory.services.order_service import OrderService
from ivory.services.payment_gateway import PaystackClient
from ivory.utils.security import decode_token

bearer = HTTPBearer(auto_error=False)


# external clients; tests replace these through app.dependency_overrides
def get_payment_gateway():
    return PaystackClient()


def get_lock_service():
    return LockService()


def get_media_client():
    return MediaClient()


def get_principal(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer),
) -> Principal:
    """Parse the bearer credential once: guest, user or admin."""
    if credentials is None:
        return ANONYMOUS

    try:
        claims = decode_token(credentials.credentials)
    except jwt.ExpiredSignatureError:
        raise AuthenticationError("Token expired")
    except jwt.InvalidTokenError:
        raise AuthenticationError("Invalid token")

    if claims.get("adminId") is not None:
        return Principal(kind=ADMIN, subject=int(claims["adminId"]))
    if claims.get("userId") is not None:
        return Principal(kind=USER, subject=int(claims["userId"]))
    raise AuthenticationError("Invalid token")


def get_optional_principal(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer),
) -> Principal:
    # unreadable or expired tokens browse as a guest
    try:
        return get_principal(credentials)
    except AuthenticationError:
        return ANONYMOUS


def require_user(principal: Principal = Depends(get_principal)) -> int:
    if principal.is_user:
        return principal.subject
    if principal.is_admin:
        raise AccessDeniedError("User account required")
    raise AuthenticationError("No token provided")


def require_admin(principal: Principal = Depends(get_principal)) -> int:
    if principal.is_admin:
        return principal.subject
    if principal.is_user:
        raise AccessDeniedError("Admin access required")
    raise AuthenticationError("No token provided")


def get_order_service(
    db: Session = Depends(get_db),
    gateway=Depends(get_payment_gateway),
    lock_service=Depends(get_lock_service),
) -> OrderService:
    return OrderService(db=db, gateway=gateway, lock_service=lock_service)
