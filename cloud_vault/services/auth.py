"""Registration, login and the admin gate."""
import logging
import re
from typing import Optional

from fastapi import Depends, Header
from sqlalchemy.orm import Session
from werkzeug.security import generate_password_hash, check_password_hash

from cloud_vault.core.errors import (
    AuthError,
    ConflictError,
    DuplicateRecordError,
    ForbiddenError,
    ValidationError,
)
from cloud_vault.crud import users as users_crud
from cloud_vault.models.database import get_db
from cloud_vault.models.user import User, ROLE_ADMIN, ROLE_USER

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid username or password"
_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def register(db: Session, username: str, password: str, hash_method: str = "scrypt") -> User:
    if not username or not password:
        raise ValidationError("Username and password required")

    # Check if user exists
    if users_crud.find_by_username(db, username):
        raise ConflictError("Username already exists")

    # Hash password
    hashed_pw = generate_password_hash(password, method=hash_method)

    try:
        user = users_crud.create(db, username, hashed_pw, ROLE_USER)
    except DuplicateRecordError as e:
        # lost a race with a concurrent registration
        raise ConflictError("Username already exists") from e

    logger.info("Registered user %s (id=%s)", user.username, user.id)
    return user


def login(db: Session, username: str, password: str) -> User:
    """Unknown usernames and wrong passwords fail with the same AuthError."""
    user = users_crud.find_by_username(db, username) if username else None
    if not user or not check_password_hash(user.password, password or ""):
        raise AuthError(INVALID_CREDENTIALS)
    return user


def parse_user_id(value: str) -> Optional[int]:
    """Leading integer of the header value, so "12abc" reads as 12."""
    match = _LEADING_INT.match(value)
    return int(match.group(1)) if match else None


def require_admin(db: Session, user_id_header: Optional[str]) -> User:
    # NOTE: the header is an unauthenticated claim made by the client
    if not user_id_header:
        raise AuthError("Authentication required")

    user_id = parse_user_id(user_id_header)
    user = users_crud.find_by_id(db, user_id) if user_id is not None else None

    if not user or not user.is_admin:
        raise ForbiddenError("Only administrators can access this")
    return user


# FastAPI dependency for admin-only routes
def admin_user(
    x_user_id: Optional[str] = Header(default=None),
    db: Session = Depends(get_db),
) -> User:
    return require_admin(db, x_user_id)


def seed_default_admin(db: Session, username: str, password: str, hash_method: str = "scrypt") -> Optional[User]:
    """Create the default admin unless some admin already exists."""
    if users_crud.find_first_admin(db):
        return None
    hashed_pw = generate_password_hash(password, method=hash_method)
    return users_crud.create(db, username, hashed_pw, ROLE_ADMIN)
