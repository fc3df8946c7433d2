"""Pydantic schemas for request bodies and JSON responses."""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class Credentials(BaseModel):
    # missing fields are checked by the auth service, not rejected with 422
    username: str = ""
    password: str = ""


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    role: str


class FileOut(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: int
    name: str
    url: str
    type: str
    size: int
    description: Optional[str] = None
    tags: Optional[List[str]] = None
    category: str
    created_at: Optional[datetime] = Field(default=None, serialization_alias="createdAt")


class UploadOut(BaseModel):
    id: int
    url: str
    name: str
    type: str
    size: int
    warning: Optional[str] = None


class StatsOut(BaseModel):
    totalFiles: int
    totalUsers: int
    totalSizeUsed: int
