# cloud_vault/models/file.py
from sqlalchemy import Column, Integer, String, Text, DateTime, JSON
from datetime import datetime

from cloud_vault.models.database import Base

TYPE_PHOTO = "photo"
TYPE_DOCUMENT = "document"
DEFAULT_CATEGORY = "Uncategorized"


class FileMeta(Base):
    __tablename__ = "files"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)            # Name user uploaded
    url = Column(String, nullable=False)             # Public URL in object storage
    type = Column(String(20), nullable=False)        # "photo" or "document"
    size = Column(Integer, nullable=False)           # Size in bytes
    description = Column(Text, nullable=True)
    tags = Column(JSON, nullable=True)               # list of strings
    category = Column(String, nullable=False, default=DEFAULT_CATEGORY)
    created_at = Column(DateTime, default=datetime.utcnow)


def file_type_for(mime_type: str | None) -> str:
    if mime_type and mime_type.startswith("image/"):
        return TYPE_PHOTO
    return TYPE_DOCUMENT
