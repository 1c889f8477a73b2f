"""
CLI entrypoint for the maintenance job. Run from cron, e.g.:

  python -m guardroster.maintenance

Or hourly: 0 * * * * cd /path/to/guardroster && .venv/bin/python -m guardroster.maintenance
"""

import asyncio
import logging
import sys

from guardroster.core.config import get_settings
from guardroster.core.database import SessionLocal
from guardroster.services.maintenance import run_maintenance
from guardroster.services.storage import ObjectStorage

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)


def main() -> int:
    """Run maintenance: purge expired revocations, reconcile stale pending uploads."""
    settings = get_settings()
    storage = ObjectStorage.from_settings(settings)
    db = SessionLocal()
    try:
        purged, reconciled = asyncio.run(run_maintenance(db, settings, storage))
        logger.info(
            "Maintenance completed: revocations_purged=%s uploads_reconciled=%s",
            purged,
            reconciled,
        )
        return 0
    except Exception as e:
        logger.exception("Maintenance job failed: %s", e)
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
