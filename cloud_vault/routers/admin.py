from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from cloud_vault.models.database import get_db
from cloud_vault.models.user import User
from cloud_vault.schemas import StatsOut
from cloud_vault.services.auth import admin_user
from cloud_vault.services.files import collect_stats

router = APIRouter(prefix="/api/admin", tags=["admin"])


@router.get("/stats", response_model=StatsOut)
def stats(_admin: User = Depends(admin_user), db: Session = Depends(get_db)):
    return collect_stats(db)
