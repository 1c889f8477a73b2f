"""
Upload lifecycle: file bytes go to object storage, metadata to the database.

Creation is two-phase so a failed metadata write never leaves an untracked blob:
a "pending" row is committed first, then the blob is PUT, then the row is marked
"stored". Pending rows that outlive the grace period are swept by
reconcile_pending_uploads (run from the maintenance job).
"""

import logging
from datetime import datetime

from sqlalchemy.orm import Session

from guardroster.core.errors import DependencyFailure, InvalidInput
from guardroster.models import Upload, User
from guardroster.models.upload import UPLOAD_STATUS_PENDING, UPLOAD_STATUS_STORED
from guardroster.services.policy import Operation, ResourceType, enforce
from guardroster.services.sessions import AuthSession
from guardroster.services.storage import (
    ObjectStorage,
    StorageError,
    StorageNotConfiguredError,
    build_storage_key,
)
from guardroster.services.store import store_call

logger = logging.getLogger(__name__)

MAX_FILENAME_LEN = 512


class UploadManager:
    def __init__(self, db: Session, storage: ObjectStorage, max_bytes: int) -> None:
        self.db = db
        self.storage = storage
        self.max_bytes = max_bytes

    async def create(
        self,
        session: AuthSession,
        *,
        filename: str,
        data: bytes,
        content_type: str | None = None,
        user_id: str | None = None,
    ) -> Upload:
        """Store a file for the caller, or for user_id when the caller is an admin."""
        filename = (filename or "").strip()
        if not filename or len(filename) > MAX_FILENAME_LEN:
            raise InvalidInput("A file with a name is required.", fields=["file"])
        if len(data) > self.max_bytes:
            raise InvalidInput(
                f"File size must not exceed {self.max_bytes} bytes.", fields=["file"]
            )
        owner_id = user_id or session.principal_id
        enforce(session.principal, Operation.CREATE, ResourceType.UPLOAD, owner_id)

        if owner_id != session.principal_id:
            with store_call(self.db, "look up user"):
                owner = self.db.get(User, owner_id)
            if owner is None:
                raise InvalidInput("Referenced user does not exist.", fields=["userId"])

        key = build_storage_key(filename)
        try:
            url = self.storage.url_for(key)
        except StorageNotConfiguredError as e:
            raise DependencyFailure(e.message) from e

        upload = Upload(
            user_id=owner_id,
            filename=filename,
            storage_key=key,
            storage_url=url,
            content_type=content_type,
            size_bytes=len(data),
            status=UPLOAD_STATUS_PENDING,
        )
        with store_call(self.db, "record upload", commit=True):
            self.db.add(upload)

        try:
            await self.storage.put(key, data, content_type)
        except StorageError as e:
            logger.error(
                "Blob upload failed",
                extra={"upload_id": upload.id, "storage_key": key, "reason": e.message[:200]},
            )
            self._discard_pending(upload)
            raise DependencyFailure("File could not be stored.") from e

        upload.status = UPLOAD_STATUS_STORED
        with store_call(self.db, "finalize upload", commit=True, refresh=upload):
            self.db.add(upload)
        logger.info(
            "Upload stored",
            extra={"upload_id": upload.id, "user_id": owner_id, "size_bytes": len(data)},
        )
        return upload

    def _discard_pending(self, upload: Upload) -> None:
        # Left pending on failure; the maintenance sweep removes it later.
        try:
            with store_call(self.db, "discard pending upload", commit=True):
                self.db.delete(upload)
        except DependencyFailure:
            logger.warning("Pending upload left for reconciliation", extra={"upload_id": upload.id})

    def list(self, session: AuthSession) -> list[Upload]:
        """All stored uploads, newest first (admin only)."""
        enforce(session.principal, Operation.READ, ResourceType.UPLOAD)
        with store_call(self.db, "list uploads"):
            return (
                self.db.query(Upload)
                .filter(Upload.status == UPLOAD_STATUS_STORED)
                .order_by(Upload.created_at.desc(), Upload.id)
                .all()
            )


async def reconcile_pending_uploads(
    db: Session, storage: ObjectStorage, older_than: datetime
) -> int:
    """
    Delete pending uploads created before older_than, blob first, then row.
    Rows whose blob cannot be deleted are kept for the next run. Returns rows removed.
    """
    stale = (
        db.query(Upload)
        .filter(Upload.status == UPLOAD_STATUS_PENDING, Upload.created_at < older_than)
        .all()
    )
    removed = 0
    for upload in stale:
        try:
            await storage.delete(upload.storage_key)
        except (StorageError, StorageNotConfiguredError) as e:
            logger.warning(
                "Could not delete orphaned blob",
                extra={"upload_id": upload.id, "reason": e.message[:200]},
            )
            continue
        db.delete(upload)
        removed += 1
    db.commit()
    return removed
