"""
Expired session cleanup job.

Deletes session rows whose expiresAt has passed. Purely housekeeping:
every session read already treats expired rows as absent, so skipping
this job never reopens access.

Usage:
    Run via CRON:
        30 3 * * * cd /path/to/project && python -m jobs.session_cleanup

    Or run directly:
        python -m jobs.session_cleanup
"""

import asyncio
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

from common.logging import configure_logging
from schoolflow.config import settings
from schoolflow.services.auth.session_store import SessionStore

logger = logging.getLogger(__name__)


class SessionCleanupJob:
    """
    Removes expired sessions from the sessions collection.
    """

    def __init__(self, db: AsyncIOMotorDatabase):
        """
        Initialize the cleanup job.

        Args:
            db: Database holding the sessions collection
        """
        self._store = SessionStore(db=db)

    async def run(self) -> Dict[str, Any]:
        """
        Execute the cleanup.

        Returns:
            Dict with job results including the number of rows removed
        """
        logger.info("Starting session cleanup job")
        start_time = datetime.now(timezone.utc)

        results: Dict[str, Any] = {
            "startTime": start_time.isoformat(),
            "sessionsDeleted": 0,
            "errors": [],
        }

        try:
            results["sessionsDeleted"] = await self._store.cleanup_expired()
        except Exception as e:
            logger.error(f"Session cleanup failed: {e}")
            results["errors"].append(str(e))

        end_time = datetime.now(timezone.utc)
        results["endTime"] = end_time.isoformat()
        results["durationSeconds"] = (end_time - start_time).total_seconds()

        logger.info(f"Session cleanup job completed: {results['sessionsDeleted']} removed")
        return results


async def main():
    """Main entry point for the session cleanup job."""
    configure_logging(settings.get_log_level())

    client = AsyncIOMotorClient(
        settings.MONGODB_URI,
        serverSelectionTimeoutMS=settings.MONGODB_SERVER_SELECTION_TIMEOUT_MS,
    )
    job = SessionCleanupJob(db=client[settings.MONGODB_DATABASE])

    try:
        results = await job.run()

        print("\n=== Session Cleanup Job Results ===")
        print(f"Start Time: {results['startTime']}")
        print(f"End Time: {results['endTime']}")
        print(f"Duration: {results['durationSeconds']:.2f} seconds")
        print(f"Sessions Deleted: {results['sessionsDeleted']}")

        if results["errors"]:
            print(f"\nErrors ({len(results['errors'])}):")
            for error in results["errors"]:
                print(f"  - {error}")

        exit_code = 1 if results["errors"] else 0
        sys.exit(exit_code)

    finally:
        client.close()


if __name__ == "__main__":
    asyncio.run(main())
