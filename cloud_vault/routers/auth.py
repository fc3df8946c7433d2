from typing import Optional

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from cloud_vault.models.database import get_db
from cloud_vault.schemas import Credentials, UserOut
from cloud_vault.services import auth as auth_service

router = APIRouter(prefix="/api", tags=["auth"])


# a missing body goes through the service checks like an empty one
@router.post("/register", response_model=UserOut, status_code=status.HTTP_201_CREATED)
def register(request: Request, body: Optional[Credentials] = None, db: Session = Depends(get_db)):
    body = body or Credentials()
    settings = request.app.state.settings
    return auth_service.register(db, body.username, body.password, settings.password_hash_method)


@router.post("/login", response_model=UserOut)
def login(body: Optional[Credentials] = None, db: Session = Depends(get_db)):
    body = body or Credentials()
    return auth_service.login(db, body.username, body.password)
