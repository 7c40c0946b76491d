"""FastAPI dependencies: DB session, current user from the session cookie, role checks.

The session token is read from the httpOnly cookie set at login. API clients
may send the same token as a Bearer header instead; the header wins.
"""
from typing import Callable, Generator, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from medbill.core.audit import AuditLog
from medbill.core.config import settings
from medbill.core.exceptions import BusinessError
from medbill.core.security import decode_access_token
from medbill.db.session import SessionLocal
from medbill.models.user import User

security = HTTPBearer(auto_error=False)


def get_db() -> Generator[Session, None, None]:
    """Get database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_current_user_id(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> int:
    token = None
    if credentials:
        token = credentials.credentials
    elif settings.AUTH_COOKIE_NAME in request.cookies:
        token = request.cookies[settings.AUTH_COOKIE_NAME]

    if not token:
        raise BusinessError.unauthorized()

    claims = decode_access_token(token)
    if not claims:
        raise BusinessError.unauthorized("Invalid or expired token")

    try:
        return int(claims["sub"])
    except ValueError:
        raise BusinessError.unauthorized("Malformed token subject")


def get_current_user(
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
) -> User:
    """Load current user from DB."""
    user = db.get(User, user_id)
    if not user:
        raise BusinessError.unauthorized(f"Token for deleted user {user_id}")
    return user


def require_role(*roles: str) -> Callable[..., User]:
    """
    Dependency factory restricting an endpoint to the given roles.

    Usage:
        @router.get("", dependencies=[Depends(require_role("admin"))])
    """
    def checker(request: Request, current_user: User = Depends(get_current_user)) -> User:
        if current_user.role not in roles:
            AuditLog.log_access_denied(
                request.method, request.url.path, current_user.id, f"role {current_user.role} not in {roles}"
            )
            raise BusinessError.forbidden(f"user {current_user.id} ({current_user.role}) on {request.url.path}")
        return current_user

    return checker
