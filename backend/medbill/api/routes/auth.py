"""Auth: login, logout, current user.

- Passwords checked against bcrypt hashes
- Session token kept in an httpOnly, SameSite cookie
- Generic error message for any credential failure
"""
from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy.orm import Session

from medbill.api.deps import get_db, get_current_user
from medbill.core.audit import AuditLog
from medbill.core.config import settings
from medbill.core.exceptions import BusinessError
from medbill.core.security import create_access_token
from medbill.models.user import User
from medbill.schemas.user import UserLogin, UserResponse
from medbill.services import user_service

router = APIRouter()


def _client_ip(request: Request) -> str:
    return request.client.host if request.client else "unknown"


@router.post("/login", response_model=UserResponse)
def login(data: UserLogin, request: Request, response: Response, db: Session = Depends(get_db)):
    """Check credentials, set the session cookie and return the user (without password)."""
    if not data.username or not data.password:
        raise BusinessError.bad_request("Username and password are required")

    user = user_service.authenticate(db, data.username, data.password)
    if not user:
        AuditLog.log_authentication("failed_login", data.username, _client_ip(request), False, reason="Invalid credentials")
        raise BusinessError.unauthorized()

    token = create_access_token(subject=str(user.id), role=user.role)
    response.set_cookie(
        key=settings.AUTH_COOKIE_NAME,
        value=token,
        max_age=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        secure=settings.SECURE_COOKIES,
        httponly=True,
        samesite=settings.SAME_SITE_COOKIE,
    )
    AuditLog.log_authentication("login", user.username, _client_ip(request), True)
    return user


@router.post("/logout")
def logout(request: Request, response: Response):
    """Clear the session cookie. Safe to call when already logged out."""
    response.delete_cookie(
        key=settings.AUTH_COOKIE_NAME,
        secure=settings.SECURE_COOKIES,
        httponly=True,
        samesite=settings.SAME_SITE_COOKIE,
    )
    AuditLog.log_authentication("logout", "-", _client_ip(request), True)
    return {"message": "Logged out successfully"}


@router.get("/me", response_model=UserResponse)
def me(current_user: User = Depends(get_current_user)):
    """Get current authenticated user."""
    return current_user
