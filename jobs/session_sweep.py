"""
Session sweep background job.

Deletes session rows whose expiry has passed (revoked rows included, once
they have also expired). Expired sessions can never be used again, so this
only reclaims storage; the retention window keeps them around for auditing.
This job should be run hourly via CRON.

Usage:
    Run via CRON:
        0 * * * * cd /path/to/project && python -m jobs.session_sweep

    Or run directly:
        python -m jobs.session_sweep
"""

import asyncio
import logging
import sys
from datetime import datetime, timedelta
from typing import Any, Dict

from common.database import MongoDB
from inkwell.auth.repositories import AuthRepository
from inkwell.auth.services.session_manager import Clock, utcnow
from inkwell.config import settings
from inkwell.repositories.mongo import MongoAuthRepository

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


class SessionSweepJob:
    """
    Purges expired device sessions.

    Actions performed:
    1. Lists sessions that expired before now minus the retention window
    2. Deletes each of them, recording failures without stopping the sweep
    """

    def __init__(
        self,
        auth_repository: AuthRepository,
        retention: timedelta = timedelta(0),
        clock: Clock = utcnow
    ):
        """
        Initialize the session sweep job.

        Args:
            auth_repository: Session store to sweep
            retention: How long expired sessions are kept
            clock: Source of the current time
        """
        self._sessions = auth_repository
        self._retention = retention
        self._clock = clock

    async def run(self) -> Dict[str, Any]:
        """
        Execute the session sweep.

        Returns:
            Dict with job results including counts and any errors
        """
        logger.info("Starting session sweep job")
        start_time: datetime = self._clock()
        cutoff = start_time - self._retention

        results: Dict[str, Any] = {
            "startTime": start_time.isoformat(),
            "cutoff": cutoff.isoformat(),
            "sessionsFound": 0,
            "sessionsDeleted": 0,
            "errors": [],
        }

        try:
            expired = await self._sessions.list_expired(cutoff)
            results["sessionsFound"] = len(expired)
            logger.info(f"Found {len(expired)} sessions expired before {cutoff.isoformat()}")

            for session in expired:
                try:
                    await self._sessions.delete_item(session.id)
                    results["sessionsDeleted"] += 1
                except Exception as e:
                    error_msg = f"Failed to delete session {session.id}: {e}"
                    logger.error(error_msg)
                    results["errors"].append(error_msg)

        except Exception as e:
            error_msg = f"Job failed: {e}"
            logger.error(error_msg)
            results["errors"].append(error_msg)

        end_time = self._clock()
        results["endTime"] = end_time.isoformat()
        results["durationSeconds"] = (end_time - start_time).total_seconds()

        logger.info(
            f"Session sweep finished: {results['sessionsDeleted']} deleted, "
            f"{len(results['errors'])} errors"
        )

        return results


async def main():
    """Main entry point for the session sweep job."""
    db = MongoDB()
    await db.connect(
        uri=settings.MONGODB_URI,
        database_name=settings.MONGODB_DATABASE,
        timeout_ms=settings.MONGODB_TIMEOUT_MS,
    )

    job = SessionSweepJob(
        auth_repository=MongoAuthRepository(db.db),
        retention=settings.get_sweep_retention()
    )

    try:
        results = await job.run()

        print("\n=== Session Sweep Job Results ===")
        print(f"Start Time: {results['startTime']}")
        print(f"End Time: {results['endTime']}")
        print(f"Duration: {results['durationSeconds']:.2f} seconds")
        print(f"Cutoff: {results['cutoff']}")
        print(f"Sessions Found: {results['sessionsFound']}")
        print(f"Sessions Deleted: {results['sessionsDeleted']}")

        if results["errors"]:
            print(f"\nErrors ({len(results['errors'])}):")
            for error in results["errors"]:
                print(f"  - {error}")

        exit_code = 1 if results["errors"] else 0
        sys.exit(exit_code)

    finally:
        await db.disconnect()


if __name__ == "__main__":
    asyncio.run(main())
