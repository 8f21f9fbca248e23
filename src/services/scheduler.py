"""Daily trigger for rent generation.

Wraps an APScheduler BackgroundScheduler. The job itself is any zero-argument
callable (normally run_generation_job), so the scheduler holds no ledger
logic and the job can be invoked directly in tests and by the admin endpoint.
"""

import logging
from datetime import datetime
from typing import Any, Callable

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger

from src.services.config import LedgerConfig

logger = logging.getLogger(__name__)

JOB_ID = "generate-monthly-rent"


class RentScheduler:
    """Runs the generation job once a day at the configured local time."""

    def __init__(
        self,
        job: Callable[[], Any],
        config: LedgerConfig | None = None,
        scheduler: BackgroundScheduler | None = None,
    ):
        """Initialize the scheduler.

        Args:
            job: Zero-argument callable to run daily
            config: Schedule time and billing timezone
            scheduler: APScheduler instance (injected in tests)
        """
        self.job = job
        self.config = config or LedgerConfig()
        self.scheduler = scheduler or BackgroundScheduler(timezone=self.config.billing_timezone)

    @property
    def trigger(self) -> CronTrigger:
        return CronTrigger(
            hour=self.config.generation_hour,
            minute=self.config.generation_minute,
            timezone=self.config.billing_timezone,
        )

    def start(self, run_now: bool = True) -> None:
        """Register the daily job and start the scheduler.

        Args:
            run_now: Also run once immediately, to catch a month missed while down
        """
        self.scheduler.add_job(
            self.job,
            trigger=self.trigger,
            id=JOB_ID,
            name="Generate monthly rent",
            replace_existing=True,
            max_instances=1,
            coalesce=True,
            misfire_grace_time=3600,
        )
        if run_now:
            self.scheduler.add_job(
                self.job,
                id=f"{JOB_ID}-startup",
                name="Generate monthly rent (startup)",
                replace_existing=True,
                next_run_time=datetime.now(self.config.tz),
            )
        self.scheduler.start()
        logger.info(
            "Rent scheduler started (daily at %02d:%02d %s)",
            self.config.generation_hour,
            self.config.generation_minute,
            self.config.billing_timezone,
        )

    def shutdown(self) -> None:
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)
            logger.info("Rent scheduler stopped")

    @property
    def running(self) -> bool:
        return bool(self.scheduler.running)


__all__ = ["RentScheduler", "JOB_ID"]
