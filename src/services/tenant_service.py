"""Tenant-level ledger operations: history, summary, lease extension, reconciliation."""

import logging
from dataclasses import dataclass
from decimal import Decimal

from dateutil.relativedelta import relativedelta
from sqlalchemy.orm import Session

from src.models.rent_record import ZERO, RentRecord
from src.models.tenant import Tenant, TenantPaymentStatus
from src.services.audit_service import AuditService
from src.services.billing_calendar import Clock, utc_now
from src.services.config import LedgerConfig
from src.services.errors import LedgerValidationError, RentRecordNotFoundError
from src.services.rent_ledger import RentLedgerService, money, tenant_payment_status
from src.services.tenant_locks import TenantLockRegistry

logger = logging.getLogger(__name__)

MIN_EXTENSION_MONTHS = 1
MAX_EXTENSION_MONTHS = 60


@dataclass
class RentSummary:
    """Snapshot of a tenant's standing."""

    tenant_id: int
    current_month: str | None
    balance: Decimal
    payment_status: TenantPaymentStatus
    current_record: RentRecord | None
    total_billed: Decimal
    total_paid: Decimal
    months_billed: int


class TenantService:
    """Tenant operations that read or adjust the ledger."""

    def __init__(
        self,
        db: Session,
        config: LedgerConfig | None = None,
        clock: Clock = utc_now,
        locks: TenantLockRegistry | None = None,
    ):
        self.db = db
        self.ledger = RentLedgerService(db, config, clock, locks)

    def get_rent_history(self, tenant_id: int) -> list[RentRecord]:
        """All rent records for a tenant, most recent month first.

        Raises:
            TenantNotFoundError: If tenant does not exist
        """
        self.ledger.get_tenant(tenant_id)
        return self.ledger.get_history(tenant_id)

    def get_rent_summary(self, tenant_id: int) -> RentSummary:
        tenant = self.ledger.get_tenant(tenant_id)
        history = self.ledger.get_history(tenant_id)
        current = next((r for r in history if r.month == tenant.current_month), None)
        return RentSummary(
            tenant_id=tenant.id,
            current_month=tenant.current_month,
            balance=money(tenant.balance),
            payment_status=TenantPaymentStatus(tenant.payment_status),
            current_record=current,
            # Only the month's own charges: arrears are already counted in the month they arose
            total_billed=money(sum((r.amount for r in history), ZERO)),
            total_paid=money(sum((r.amount_paid for r in history), ZERO)),
            months_billed=len(history),
        )

    def extend_lease(self, tenant_id: int, months: int, actor: str = "system") -> Tenant:
        """Push the lease end date forward by whole calendar months.

        Args:
            tenant_id: Tenant whose lease to extend
            months: Number of months, 1-60

        Raises:
            LedgerValidationError: If months is out of range
            TenantNotFoundError: If tenant does not exist
        """
        if isinstance(months, bool) or not isinstance(months, int):
            raise LedgerValidationError(f"months must be an integer, got {months!r}")
        if not MIN_EXTENSION_MONTHS <= months <= MAX_EXTENSION_MONTHS:
            raise LedgerValidationError(
                f"months must be between {MIN_EXTENSION_MONTHS} and {MAX_EXTENSION_MONTHS}, got {months}"
            )

        tenant = self.ledger.get_tenant(tenant_id)
        old_end = tenant.lease_end
        tenant.lease_end = old_end + relativedelta(months=months)
        AuditService.log(
            self.db,
            "tenant",
            tenant.id,
            "extend_lease",
            actor,
            {"lease_end_from": old_end, "lease_end_to": tenant.lease_end, "months": months},
        )
        self.ledger.commit()
        logger.info("Extended lease for tenant %d by %d months: %s -> %s", tenant.id, months, old_end, tenant.lease_end)
        return tenant

    def reconcile_balance(self, tenant_id: int, actor: str = "system") -> Tenant:
        """Reset the tenant balance from their current-month record.

        The record already carries prior arrears or credit, so its
        outstanding amount is the tenant's whole position.

        Raises:
            TenantNotFoundError: If tenant does not exist
            RentRecordNotFoundError: If the tenant has no record for their current month
        """
        with self.ledger.locks.hold(tenant_id):
            tenant = self.ledger.get_tenant(tenant_id)
            record = self.ledger.get_record(tenant.id, tenant.current_month) if tenant.current_month else None
            if record is None:
                raise RentRecordNotFoundError(tenant.id, tenant.current_month or "current month")

            old_balance = money(tenant.balance)
            tenant.balance = money(record.outstanding)
            tenant.payment_status = tenant_payment_status(tenant.balance, money(tenant.monthly_rent))
            if old_balance != tenant.balance:
                AuditService.log(
                    self.db,
                    "tenant",
                    tenant.id,
                    "reconcile",
                    actor,
                    {"balance_from": old_balance, "balance_to": tenant.balance, "month": record.month},
                )
                logger.info("Reconciled tenant %d balance: %s -> %s", tenant.id, old_balance, tenant.balance)
            self.ledger.commit()
        return tenant


__all__ = ["TenantService", "RentSummary", "MIN_EXTENSION_MONTHS", "MAX_EXTENSION_MONTHS"]
