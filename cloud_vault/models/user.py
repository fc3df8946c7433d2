from datetime import datetime

from sqlalchemy import Column, Integer, String, DateTime

from cloud_vault.models.database import Base

ROLE_USER = "user"
ROLE_ADMIN = "admin"


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(50), unique=True, index=True, nullable=False)
    password = Column(String(255), nullable=False, default="")  # one-way hash
    role = Column(String(20), nullable=False, default=ROLE_USER)
    created_at = Column(DateTime, default=datetime.utcnow)

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN
