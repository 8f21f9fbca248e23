"""Utility charges (water, electricity, garbage, security) on rent records."""

import logging
from decimal import Decimal

from sqlalchemy.orm import Session

from src.models.rent_record import UTILITY_FIELDS, ZERO, RentRecord
from src.services.audit_service import AuditService
from src.services.billing_calendar import Clock, utc_now
from src.services.config import LedgerConfig
from src.services.errors import LedgerValidationError
from src.services.rent_ledger import RentLedgerService, money, tenant_payment_status
from src.services.tenant_locks import TenantLockRegistry

logger = logging.getLogger(__name__)


class UtilityService:
    """Sets utility line items on a tenant's current-month record."""

    def __init__(
        self,
        db: Session,
        config: LedgerConfig | None = None,
        clock: Clock = utc_now,
        locks: TenantLockRegistry | None = None,
    ):
        self.db = db
        self.ledger = RentLedgerService(db, config, clock, locks)

    def update_utilities(
        self,
        tenant_id: int,
        actor: str = "system",
        **charges: Decimal | None,
    ) -> RentRecord:
        """Replace one or more utility charges for the current billing month.

        The record is created first if the generation job has not reached
        this tenant yet. amount and carried_forward_amount are recomputed;
        amount_paid and the carried-over arrears/credit are left alone. When
        the record is the tenant's current month, the tenant balance moves by
        the change in its outstanding amount, so a charge also eats into
        spare credit.

        Args:
            tenant_id: Tenant whose record to update
            actor: Who made the change, for the audit log
            **charges: Any of water, electricity, garbage, security (each >= 0)

        Returns:
            Updated RentRecord

        Raises:
            LedgerValidationError: Unknown field, negative value, or no charges given
            TenantNotFoundError: If tenant does not exist
        """
        unknown = set(charges) - set(UTILITY_FIELDS)
        if unknown:
            raise LedgerValidationError(f"Unknown utility fields: {', '.join(sorted(unknown))}")

        updates = {name: money(value) for name, value in charges.items() if value is not None}
        if not updates:
            raise LedgerValidationError("At least one utility charge is required")
        negative = [name for name, value in updates.items() if value < ZERO]
        if negative:
            raise LedgerValidationError(f"Utility charges must be >= 0: {', '.join(negative)}")

        with self.ledger.locks.hold(tenant_id):
            tenant = self.ledger.get_tenant(tenant_id)
            month = self.ledger.current_month()
            record, created = self.ledger.open_month(tenant, month, actor)

            outstanding_before = record.outstanding
            for name, value in updates.items():
                setattr(record, name, value)
            self.ledger.recalculate(record)
            delta = record.outstanding - outstanding_before

            if delta and tenant.current_month == month:
                tenant.balance = money(tenant.balance + delta)
                tenant.payment_status = tenant_payment_status(tenant.balance, money(tenant.monthly_rent))

            AuditService.log(
                self.db,
                "rent_record",
                record.id,
                "utilities",
                actor,
                {**updates, "amount": record.amount, "carried_forward_amount": record.carried_forward_amount},
            )
            self.ledger.commit()

        logger.info(
            "Updated utilities for tenant %d %s%s: %s -> amount=%s due=%s",
            tenant_id,
            month,
            " (record created)" if created else "",
            ", ".join(f"{k}={v}" for k, v in updates.items()),
            record.amount,
            record.carried_forward_amount,
        )
        return record


__all__ = ["UtilityService"]
