"""Upload orchestration, filtered listing and usage stats."""
import logging
from typing import BinaryIO, Callable, Iterable, List, Optional, Tuple

from sqlalchemy.orm import Session

from cloud_vault.core.errors import ValidationError
from cloud_vault.crud import files as files_crud
from cloud_vault.crud import users as users_crud
from cloud_vault.models.file import FileMeta, DEFAULT_CATEGORY, file_type_for
from cloud_vault.services.storage import ObjectStorage, UploadResult

logger = logging.getLogger(__name__)

FilePredicate = Callable[[FileMeta], bool]


def read_upload(stream: BinaryIO, max_bytes: int, declared_size: Optional[int] = None) -> bytes:
    """Read an upload, never holding more than ``max_bytes + 1`` bytes."""
    if declared_size is not None and declared_size > max_bytes:
        raise ValidationError("File too large")
    data = stream.read(max_bytes + 1)
    if len(data) > max_bytes:
        raise ValidationError("File too large")
    return data


def upload_file(
    db: Session,
    storage: ObjectStorage,
    data: Optional[bytes],
    original_name: Optional[str],
    mime_type: Optional[str],
    max_bytes: Optional[int] = None,
) -> Tuple[FileMeta, UploadResult]:
    """Push the payload to object storage, then record its metadata.

    The metadata row is written even when the storage upload degraded; the
    returned ``UploadResult`` carries the warning. If the insert fails after a
    successful upload the stored object is left orphaned.
    """
    if data is None or not original_name:
        raise ValidationError("No file uploaded")
    if max_bytes is not None and len(data) > max_bytes:
        raise ValidationError("File too large")

    mime_type = mime_type or "application/octet-stream"
    result = storage.upload(data, original_name, mime_type)
    if not result.succeeded:
        logger.warning("Recording %s with a degraded upload: %s", original_name, result.warning)

    meta = files_crud.create(
        db,
        name=original_name,
        url=result.url,
        type=file_type_for(mime_type),
        size=len(data),
        category=DEFAULT_CATEGORY,
    )
    return meta, result


# --- filter predicates ---
def name_contains(search: str) -> FilePredicate:
    return lambda f: search in f.name


def category_is(category: str) -> FilePredicate:
    return lambda f: f.category == category


def type_is(file_type: str) -> FilePredicate:
    return lambda f: f.type == file_type


def build_predicates(
    search: Optional[str] = None,
    category: Optional[str] = None,
    file_type: Optional[str] = None,
) -> List[FilePredicate]:
    predicates = []
    if search:
        predicates.append(name_contains(search))
    if category:
        predicates.append(category_is(category))
    if file_type:
        predicates.append(type_is(file_type))
    return predicates


def apply_filters(files: Iterable[FileMeta], predicates: List[FilePredicate]) -> List[FileMeta]:
    return [f for f in files if all(p(f) for p in predicates)]


def list_files(
    db: Session,
    search: Optional[str] = None,
    category: Optional[str] = None,
    file_type: Optional[str] = None,
) -> List[FileMeta]:
    return apply_filters(files_crud.list_all(db), build_predicates(search, category, file_type))


def _as_size(value) -> int:
    if isinstance(value, bool):
        return 0
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


def collect_stats(db: Session) -> dict:
    all_files = files_crud.list_all(db)
    return {
        "totalFiles": len(all_files),
        "totalUsers": users_crud.count(db),
        "totalSizeUsed": sum(_as_size(f.size) for f in all_files),
    }
