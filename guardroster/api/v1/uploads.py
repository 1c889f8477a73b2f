"""Upload endpoints: any signed-in user uploads (multipart), admins review the list."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request, UploadFile
from sqlalchemy.orm import Session

from guardroster.api.v1.auth import CurrentSession
from guardroster.core.config import get_settings
from guardroster.core.database import get_db
from guardroster.core.errors import InvalidInput
from guardroster.models import Upload
from guardroster.schemas.error import ErrorResponse
from guardroster.schemas.upload import UploadRead
from guardroster.services.storage import ObjectStorage
from guardroster.services.uploads import UploadManager

router = APIRouter(
    responses={
        401: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
    }
)


def get_object_storage() -> ObjectStorage:
    return ObjectStorage.from_settings(get_settings())


def get_upload_manager(
    db: Annotated[Session, Depends(get_db)],
    storage: Annotated[ObjectStorage, Depends(get_object_storage)],
) -> UploadManager:
    return UploadManager(db, storage, get_settings().MAX_UPLOAD_FILE_BYTES)


Uploads = Annotated[UploadManager, Depends(get_upload_manager)]


def _is_upload_file(obj: object) -> bool:
    """True if obj is an uploaded file (UploadFile or file-like with filename and read)."""
    if isinstance(obj, UploadFile):
        return True
    return (
        hasattr(obj, "read")
        and callable(getattr(obj, "read", None))
        and hasattr(obj, "filename")
    )


def _to_read(upload: Upload) -> UploadRead:
    return UploadRead(
        id=upload.id,
        user_id=upload.user_id,
        user_name=upload.user.name if upload.user is not None else None,
        filename=upload.filename,
        url=upload.storage_url,
        content_type=upload.content_type,
        size_bytes=upload.size_bytes,
        created_at=upload.created_at,
    )


@router.get("", response_model=list[UploadRead])
def list_uploads(session: CurrentSession, uploads: Uploads) -> list[UploadRead]:
    """All stored uploads with the owner's name (admin only)."""
    return [_to_read(u) for u in uploads.list(session)]


@router.post(
    "",
    response_model=UploadRead,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def create_upload(
    request: Request, session: CurrentSession, uploads: Uploads
) -> UploadRead:
    """
    Upload a file as `multipart/form-data` with a field named `file`.
    Admins may add a `userId` field to upload on behalf of another user.
    """
    content_type = request.headers.get("content-type", "").split(";")[0].strip().lower()
    if content_type != "multipart/form-data":
        raise InvalidInput("Content-Type must be multipart/form-data.", fields=["file"])
    form = await request.form()
    file = form.get("file")
    if file is None or not _is_upload_file(file):
        raise InvalidInput("No file uploaded.", fields=["file"])
    user_id = form.get("userId") or form.get("user_id")
    if user_id is not None and not isinstance(user_id, str):
        raise InvalidInput("userId must be a plain form field.", fields=["userId"])

    data = await file.read()
    upload = await uploads.create(
        session,
        filename=getattr(file, "filename", None) or "",
        data=data,
        content_type=getattr(file, "content_type", None),
        user_id=user_id or None,
    )
    return _to_read(upload)
