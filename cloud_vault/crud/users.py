"""CRUD operations for the users table."""
from typing import Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from cloud_vault.core.errors import DuplicateRecordError, StoreError
from cloud_vault.models.user import User, ROLE_ADMIN, ROLE_USER


def find_by_username(db: Session, username: str) -> Optional[User]:
    try:
        return db.query(User).filter(User.username == username).first()
    except SQLAlchemyError as e:
        raise StoreError(f"Could not look up user: {e}") from e


def find_by_id(db: Session, user_id: int) -> Optional[User]:
    try:
        return db.query(User).filter(User.id == user_id).first()
    except SQLAlchemyError as e:
        raise StoreError(f"Could not look up user: {e}") from e


def find_first_admin(db: Session) -> Optional[User]:
    try:
        return db.query(User).filter(User.role == ROLE_ADMIN).order_by(User.id).first()
    except SQLAlchemyError as e:
        raise StoreError(f"Could not look up admin: {e}") from e


def count(db: Session) -> int:
    try:
        return db.query(func.count(User.id)).scalar() or 0
    except SQLAlchemyError as e:
        raise StoreError(f"Could not count users: {e}") from e


def create(db: Session, username: str, password_hash: str, role: str = ROLE_USER) -> User:
    """Insert a user; a taken username raises DuplicateRecordError."""
    user = User(username=username, password=password_hash, role=role)
    db.add(user)
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise DuplicateRecordError(f"User {username!r} already exists") from e
    except SQLAlchemyError as e:
        db.rollback()
        raise StoreError(f"Could not create user: {e}") from e
    db.refresh(user)
    return user
