"""Monthly rent generation job.

Run once a day (and on demand). For every active tenant it makes sure a rent
record exists for the current billing month, carrying forward the previous
month's arrears or credit, then marks past-due records as overdue.

Each tenant is its own unit of work: a failure is logged, rolled back and
reported without stopping the batch. Re-running the job is a no-op for
tenants that already have this month's record.
"""

import logging
import time
from dataclasses import dataclass, field
from datetime import date

from sqlalchemy import select
from sqlalchemy.orm import Session, sessionmaker

from src.models.notification import NotificationType
from src.models.rent_record import RentRecord, RentStatus
from src.models.tenant import Tenant, TenantPaymentStatus
from src.services.billing_calendar import Clock, utc_now
from src.services.config import LedgerConfig
from src.services.notification_service import NotificationService
from src.services.rent_ledger import RentLedgerService
from src.services.tenant_locks import TenantLockRegistry

logger = logging.getLogger(__name__)


@dataclass
class TenantOutcome:
    """Result of one tenant's generation step."""

    tenant_id: int
    created: bool = False
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class GenerationReport:
    """Summary of one generation run."""

    month: str
    generated: list[int] = field(default_factory=list)
    skipped: list[int] = field(default_factory=list)
    failed: dict[int, str] = field(default_factory=dict)
    overdue_marked: int = 0
    timed_out: bool = False

    def add(self, outcome: TenantOutcome) -> None:
        if not outcome.ok:
            self.failed[outcome.tenant_id] = outcome.error
        elif outcome.created:
            self.generated.append(outcome.tenant_id)
        else:
            self.skipped.append(outcome.tenant_id)


class RentGenerationService:
    """Creates the current month's rent records for all active tenants."""

    def __init__(
        self,
        db: Session,
        config: LedgerConfig | None = None,
        clock: Clock = utc_now,
        locks: TenantLockRegistry | None = None,
    ):
        self.db = db
        self.ledger = RentLedgerService(db, config, clock, locks)
        self.config = self.ledger.config
        self.notifications = NotificationService(db)

    def generate_monthly_rent(self, actor: str = "system") -> GenerationReport:
        """Generate rent records for the current billing month.

        Args:
            actor: Who triggered the run, for the audit log

        Returns:
            GenerationReport listing generated, skipped and failed tenants
        """
        month = self.ledger.current_month()
        report = GenerationReport(month=month)
        deadline = time.monotonic() + self.config.generation_time_limit_seconds

        tenant_ids = self.ledger.get_active_tenant_ids()
        logger.info("Running monthly rent generation for %s (%d active tenants)", month, len(tenant_ids))

        for tenant_id in tenant_ids:
            if time.monotonic() > deadline:
                report.timed_out = True
                logger.warning(
                    "Rent generation for %s hit the %ds time limit; %d tenants left for next run",
                    month,
                    self.config.generation_time_limit_seconds,
                    len(tenant_ids) - len(report.generated) - len(report.skipped) - len(report.failed),
                )
                break
            report.add(self._generate_for_tenant(tenant_id, month, actor))

        report.overdue_marked = self.mark_overdue(self.ledger.today())

        logger.info(
            "Rent generation complete for %s: generated=%d skipped=%d failed=%d overdue=%d",
            month,
            len(report.generated),
            len(report.skipped),
            len(report.failed),
            report.overdue_marked,
        )
        return report

    def _generate_for_tenant(self, tenant_id: int, month: str, actor: str) -> TenantOutcome:
        try:
            with self.ledger.locks.hold(tenant_id):
                tenant = self.ledger.get_tenant(tenant_id)
                record, created = self.ledger.open_month(tenant, month, actor)
                self.ledger.commit()
        except Exception as e:
            self.db.rollback()
            logger.error("Rent generation failed for tenant %d (%s): %s", tenant_id, month, e, exc_info=True)
            return TenantOutcome(tenant_id=tenant_id, error=str(e) or type(e).__name__)

        if created:
            logger.info(
                "Generated rent for tenant %d %s: due=%s (arrears=%s, credit=%s)",
                tenant_id,
                month,
                record.carried_forward_amount,
                record.previous_balance,
                record.credit_balance,
            )
        return TenantOutcome(tenant_id=tenant_id, created=created)

    def mark_overdue(self, today: date) -> int:
        """Flag unpaid records whose due date has passed.

        Args:
            today: Current date in the billing timezone

        Returns:
            Number of records newly marked overdue
        """
        stmt = select(RentRecord.id, RentRecord.tenant_id).where(
            RentRecord.due_date < today,
            RentRecord.status.in_([RentStatus.PENDING.value, RentStatus.PARTIAL.value]),
            RentRecord.amount_paid < RentRecord.carried_forward_amount,
        )
        marked = 0
        for record_id, tenant_id in self.db.execute(stmt).all():
            try:
                with self.ledger.locks.hold(tenant_id):
                    record = self.db.get(RentRecord, record_id)
                    tenant = self.db.get(Tenant, tenant_id)
                    record.status = RentStatus.OVERDUE
                    if tenant is not None and tenant.balance > 0:
                        tenant.payment_status = TenantPaymentStatus.OVERDUE
                    self.notifications.notify(
                        tenant_id,
                        "Rent overdue",
                        f"Your rent for {record.month} was due on {record.due_date.isoformat()}. "
                        f"Outstanding: {record.carried_forward_amount - record.amount_paid}.",
                        NotificationType.URGENT,
                    )
                    self.ledger.commit()
                marked += 1
            except Exception as e:
                self.db.rollback()
                logger.error("Failed to mark record %d overdue: %s", record_id, e, exc_info=True)
        return marked


def run_generation_job(
    session_factory: sessionmaker | None = None,
    config: LedgerConfig | None = None,
    clock: Clock = utc_now,
) -> GenerationReport | None:
    """Entry point for the scheduler: never raises.

    Returns:
        The run's report, or None if the run could not start at all
    """
    if session_factory is None:
        from src.services import SessionLocal

        session_factory = SessionLocal

    db = None
    try:
        db = session_factory()
        return RentGenerationService(db, config, clock).generate_monthly_rent()
    except Exception as e:
        logger.error("Rent generation job failed: %s", e, exc_info=True)
        return None
    finally:
        if db is not None:
            db.close()


__all__ = ["RentGenerationService", "GenerationReport", "TenantOutcome", "run_generation_job"]
