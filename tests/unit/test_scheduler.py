"""Tests for the daily rent generation scheduler."""

from unittest.mock import MagicMock

from apscheduler.schedulers.background import BackgroundScheduler

from src.services.config import LedgerConfig
from src.services.scheduler import JOB_ID, RentScheduler


def trigger_fields(trigger) -> dict[str, str]:
    return {field.name: str(field) for field in trigger.fields}


class TestRentScheduler:
    def test_trigger_uses_configured_time_and_zone(self):
        config = LedgerConfig(generation_hour=2, generation_minute=15, billing_timezone="Africa/Nairobi")
        trigger = RentScheduler(lambda: None, config, scheduler=MagicMock()).trigger

        fields = trigger_fields(trigger)
        assert fields["hour"] == "2"
        assert fields["minute"] == "15"
        assert str(trigger.timezone) == "Africa/Nairobi"

    def test_start_registers_daily_and_startup_jobs(self):
        backend = MagicMock()
        job = MagicMock()
        scheduler = RentScheduler(job, LedgerConfig(), scheduler=backend)

        scheduler.start()

        assert backend.add_job.call_count == 2
        daily = backend.add_job.call_args_list[0]
        assert daily.kwargs["id"] == JOB_ID
        assert daily.kwargs["max_instances"] == 1
        assert daily.kwargs["coalesce"] is True
        startup = backend.add_job.call_args_list[1]
        assert startup.kwargs["id"] == f"{JOB_ID}-startup"
        assert "next_run_time" in startup.kwargs
        backend.start.assert_called_once()

    def test_start_without_immediate_run(self):
        backend = MagicMock()
        RentScheduler(MagicMock(), LedgerConfig(), scheduler=backend).start(run_now=False)
        assert backend.add_job.call_count == 1

    def test_shutdown_only_when_running(self):
        backend = MagicMock()
        backend.running = False
        RentScheduler(MagicMock(), LedgerConfig(), scheduler=backend).shutdown()
        backend.shutdown.assert_not_called()

        backend.running = True
        RentScheduler(MagicMock(), LedgerConfig(), scheduler=backend).shutdown()
        backend.shutdown.assert_called_once_with(wait=False)

    def test_real_background_scheduler(self):
        """Job is registered on a real APScheduler and the scheduler stops cleanly."""
        scheduler = RentScheduler(lambda: None, LedgerConfig())
        assert isinstance(scheduler.scheduler, BackgroundScheduler)

        scheduler.start(run_now=False)
        try:
            assert scheduler.running
            job = scheduler.scheduler.get_job(JOB_ID)
            assert job is not None
            assert job.next_run_time is not None
        finally:
            scheduler.shutdown()
        assert not scheduler.running
