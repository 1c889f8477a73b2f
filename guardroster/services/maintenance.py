"""Maintenance: purge expired session revocations and sweep orphaned pending uploads."""

import logging
from datetime import datetime, timezone, timedelta
from typing import TYPE_CHECKING

from sqlalchemy.orm import Session

from guardroster.services.sessions import purge_expired_revocations
from guardroster.services.storage import ObjectStorage
from guardroster.services.uploads import reconcile_pending_uploads

if TYPE_CHECKING:
    from guardroster.core.config import Settings

logger = logging.getLogger(__name__)


async def run_maintenance(
    session: Session, settings: "Settings", storage: ObjectStorage
) -> tuple[int, int]:
    """
    Delete revocations of already-expired tokens and pending uploads older than
    PENDING_UPLOAD_GRACE_MINUTES (with their blobs).

    Returns (revocations_purged, uploads_reconciled). Idempotent: safe to run repeatedly.
    """
    if not settings.MAINTENANCE_ENABLED:
        logger.info("Maintenance is disabled (MAINTENANCE_ENABLED=false); skipping.")
        return (0, 0)

    now = datetime.now(timezone.utc)
    revocations_purged = purge_expired_revocations(session, now)

    cutoff = now - timedelta(minutes=settings.PENDING_UPLOAD_GRACE_MINUTES)
    uploads_reconciled = 0
    if storage.is_configured:
        uploads_reconciled = await reconcile_pending_uploads(session, storage, cutoff)
    else:
        logger.info("Object storage not configured; skipping pending upload sweep.")

    if revocations_purged or uploads_reconciled:
        logger.info(
            "Maintenance run: cutoff=%s, revocations_purged=%s, uploads_reconciled=%s",
            cutoff.isoformat(),
            revocations_purged,
            uploads_reconciled,
        )
    return (revocations_purged, uploads_reconciled)
