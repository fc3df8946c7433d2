"""CRUD operations for the files table."""
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from cloud_vault.core.errors import StoreError
from cloud_vault.models.file import FileMeta, DEFAULT_CATEGORY


def create(
    db: Session,
    *,
    name: str,
    url: str,
    type: str,
    size: int,
    description: Optional[str] = None,
    tags: Optional[List[str]] = None,
    category: str = DEFAULT_CATEGORY,
) -> FileMeta:
    meta = FileMeta(
        name=name,
        url=url,
        type=type,
        size=size,
        description=description,
        tags=tags,
        category=category,
    )
    db.add(meta)
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise StoreError(f"Could not save file metadata: {e}") from e
    db.refresh(meta)
    return meta


def list_all(db: Session) -> List[FileMeta]:
    try:
        return db.query(FileMeta).order_by(FileMeta.id).all()
    except SQLAlchemyError as e:
        raise StoreError(f"Could not list files: {e}") from e
