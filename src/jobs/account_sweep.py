"""
Account housekeeping, meant to be run periodically (cron, k8s CronJob).

    quiz-account-sweep [--limit N]

Completes account deletions whose grace period is over and removes expired
email-change verifications.
"""
import argparse
import sys

from src.adapters.db.base import SessionLocal
from src.core.config import settings
from src.services.account_deletion_service import AccountDeletionService
from src.services.email_change_service import EmailChangeService
from src.util.logger import logger
from src.util.time import utcnow


def run_sweep(db, limit: int | None = None) -> dict[str, int]:
    now = utcnow()
    deleted = AccountDeletionService(db).process_due_deletions(now=now, limit=limit)
    expired = EmailChangeService(db).cleanup_expired(now=now)
    return {"accounts_deleted": deleted, "verifications_removed": expired}


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__.strip().splitlines()[0])
    parser.add_argument("--limit", type=int, default=settings.sweep_batch_limit)
    args = parser.parse_args(argv)

    with SessionLocal() as db:
        result = run_sweep(db, limit=max(1, args.limit))

    logger.info(
        "Sweep finished: %d accounts deleted, %d verifications removed",
        result["accounts_deleted"],
        result["verifications_removed"],
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
