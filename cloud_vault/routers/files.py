from typing import List, Optional

from fastapi import APIRouter, Request, Depends, UploadFile, File as FastAPIFile
from sqlalchemy.orm import Session

from cloud_vault.models.database import get_db
from cloud_vault.schemas import FileOut, UploadOut
from cloud_vault.services import files as files_service
from cloud_vault.services.storage import ObjectStorage, get_storage

router = APIRouter(prefix="/api", tags=["files"])


# --- upload a new file ---
@router.post("/upload", response_model=UploadOut, response_model_exclude_none=True)
def upload_file(
    request: Request,
    file: Optional[UploadFile] = FastAPIFile(default=None),
    db: Session = Depends(get_db),
    storage: ObjectStorage = Depends(get_storage),
):
    settings = request.app.state.settings

    # Read file content, stopping once it exceeds the limit
    content = None
    if file is not None:
        content = files_service.read_upload(file.file, settings.max_upload_bytes, file.size)

    meta, result = files_service.upload_file(
        db,
        storage,
        content,
        file.filename if file is not None else None,
        file.content_type if file is not None else None,
        max_bytes=settings.max_upload_bytes,
    )

    return UploadOut(
        id=meta.id,
        url=result.url,
        name=meta.name,
        type=meta.type,
        size=meta.size,
        warning=result.warning,
    )


# --- list files, optionally filtered ---
@router.get("/files", response_model=List[FileOut])
def list_files(
    search: Optional[str] = None,
    category: Optional[str] = None,
    type: Optional[str] = None,
    db: Session = Depends(get_db),
):
    return files_service.list_files(db, search=search, category=category, file_type=type)
