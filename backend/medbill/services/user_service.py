"""User accounts and credential checks."""
import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from medbill.core.exceptions import ConflictError
from medbill.core.security import get_password_hash, verify_password
from medbill.models.user import User
from medbill.schemas.user import UserCreate

logger = logging.getLogger(__name__)


def get_user(db: Session, user_id: int) -> Optional[User]:
    return db.get(User, user_id)


def get_user_by_username(db: Session, username: str) -> Optional[User]:
    return db.query(User).filter(User.username == username).first()


def list_users(db: Session) -> List[User]:
    return db.query(User).order_by(User.id).all()


def create_user(db: Session, data: UserCreate) -> User:
    if get_user_by_username(db, data.username):
        raise ConflictError(f"Username '{data.username}' already exists")

    user = User(
        username=data.username,
        hashed_password=get_password_hash(data.password),
        name=data.name,
        role=data.role,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info(f"[USERS] Created user {user.id} ({user.username}, role={user.role})")
    return user


def authenticate(db: Session, username: str, password: str) -> Optional[User]:
    """Return the user when the password matches, else None (no hint which part was wrong)."""
    user = get_user_by_username(db, username)
    if not user or not verify_password(password, user.hashed_password):
        return None
    return user
