"""Rent ledger: monthly rent records with arrears/credit carry-forward.

Formulas:
- amount = base_rent + water + electricity + garbage + security
- carried_forward_amount = max(0, amount + previous_balance - credit_balance)
- carry-over into the next month = amount + previous_balance - credit_balance - amount_paid
  (positive -> next month's previous_balance, negative -> next month's credit_balance)

The carry-over is taken from the unclamped net, so credit larger than one
month's obligation keeps rolling forward until it is used up.
"""

import logging
from datetime import date
from decimal import ROUND_HALF_UP, Decimal

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from src.models.rent_record import UTILITY_FIELDS, ZERO, RentRecord, RentStatus
from src.models.tenant import Tenant, TenantPaymentStatus, TenantStatus
from src.services.audit_service import AuditService
from src.services.billing_calendar import (
    Clock,
    billing_month,
    due_date_for,
    local_date,
    parse_month,
    previous_month,
    utc_now,
)
from src.services.config import LedgerConfig
from src.services.errors import ConcurrentUpdateError, TenantNotFoundError
from src.services.tenant_locks import TenantLockRegistry, tenant_locks

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")


def money(value) -> Decimal:
    """Coerce int/float/str/Decimal to a two-place Decimal."""
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def carried_forward(amount: Decimal, previous_balance: Decimal, credit_balance: Decimal) -> Decimal:
    """Amount due for a month; credit never drives it below zero."""
    return max(ZERO, money(amount + previous_balance - credit_balance))


def carry_over(prior: RentRecord | None) -> tuple[Decimal, Decimal]:
    """Split a prior month's unsettled net into (arrears, credit).

    At most one of the two is positive.
    """
    if prior is None:
        return ZERO, ZERO
    net = money(prior.outstanding)
    if net > ZERO:
        return net, ZERO
    if net < ZERO:
        return ZERO, -net
    return ZERO, ZERO


def record_status(amount_paid: Decimal, carried_forward_amount: Decimal) -> RentStatus:
    if amount_paid >= carried_forward_amount:
        return RentStatus.PAID
    if amount_paid > ZERO:
        return RentStatus.PARTIAL
    return RentStatus.PENDING


def tenant_payment_status(balance: Decimal, monthly_rent: Decimal) -> TenantPaymentStatus:
    if balance <= ZERO:
        return TenantPaymentStatus.PAID
    if balance < monthly_rent:
        return TenantPaymentStatus.PARTIAL
    return TenantPaymentStatus.PENDING


class RentLedgerService:
    """Reads and opens monthly rent records for tenants.

    Methods here add changes to the session but do not commit, except
    commit() itself; operations built on top of the ledger decide where
    their unit of work ends.
    """

    def __init__(
        self,
        db: Session,
        config: LedgerConfig | None = None,
        clock: Clock = utc_now,
        locks: TenantLockRegistry | None = None,
    ):
        """Initialize with database session.

        Args:
            db: SQLAlchemy database session
            config: Ledger configuration (defaults to LedgerConfig())
            clock: Callable returning the current aware datetime
            locks: Per-tenant lock registry (defaults to the process-wide one)
        """
        self.db = db
        self.config = config or LedgerConfig()
        self.clock = clock
        self.locks = locks or tenant_locks

    # ------------------------------------------------------------------
    # Time
    # ------------------------------------------------------------------

    def today(self) -> date:
        return local_date(self.clock(), self.config.tz)

    def current_month(self) -> str:
        return billing_month(self.clock(), self.config.tz)

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def get_tenant(self, tenant_id: int) -> Tenant:
        """Get tenant by ID.

        Raises:
            TenantNotFoundError: If no tenant has this ID
        """
        tenant = self.db.get(Tenant, tenant_id)
        if tenant is None:
            raise TenantNotFoundError(tenant_id)
        return tenant

    def get_active_tenant_ids(self) -> list[int]:
        stmt = (
            select(Tenant.id)
            .where(Tenant.status == TenantStatus.ACTIVE.value)
            .order_by(Tenant.id)
        )
        return list(self.db.scalars(stmt))

    def get_record(self, tenant_id: int, month: str) -> RentRecord | None:
        stmt = select(RentRecord).where(
            RentRecord.tenant_id == tenant_id,
            RentRecord.month == month,
        )
        return self.db.scalars(stmt).first()

    def get_history(self, tenant_id: int) -> list[RentRecord]:
        """All rent records for a tenant, most recent month first."""
        stmt = (
            select(RentRecord)
            .where(RentRecord.tenant_id == tenant_id)
            .order_by(RentRecord.month.desc())
        )
        return list(self.db.scalars(stmt))

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def open_month(self, tenant: Tenant, month: str, actor: str = "system") -> tuple[RentRecord, bool]:
        """Ensure the tenant has a rent record for month.

        When the record is missing it is created with arrears or credit
        carried over from the immediately preceding month, and the tenant's
        balance is charged one month's rent.

        Args:
            tenant: Tenant to bill
            month: Billing month (YYYY-MM)
            actor: Who triggered the creation, for the audit log

        Returns:
            (record, created) - created is False when the record already existed
        """
        parse_month(month)

        existing = self.get_record(tenant.id, month)
        if existing is not None:
            return existing, False

        prior = self.get_record(tenant.id, previous_month(month))
        arrears, credit = carry_over(prior)
        base_rent = money(tenant.monthly_rent)

        record = RentRecord(
            tenant_id=tenant.id,
            property_id=tenant.property_id,
            month=month,
            base_rent=base_rent,
            amount=base_rent,
            previous_balance=arrears,
            credit_balance=credit,
            carried_forward_amount=carried_forward(base_rent, arrears, credit),
            amount_paid=ZERO,
            status=RentStatus.PENDING,
            due_date=due_date_for(month, self.today(), self.config.rent_due_day),
        )
        self.db.add(record)
        try:
            self.db.flush()
        except IntegrityError:
            # Another writer created (tenant, month) between our check and insert
            self.db.rollback()
            logger.info(
                "Rent record for tenant %d month %s already created concurrently",
                tenant.id,
                month,
            )
            return self.get_record(tenant.id, month), False

        tenant.balance = money(tenant.balance + base_rent)
        tenant.current_month = month
        tenant.payment_status = TenantPaymentStatus.PENDING

        AuditService.log(
            self.db,
            "rent_record",
            record.id,
            "generate",
            actor,
            {
                "tenant_id": tenant.id,
                "month": month,
                "amount": record.amount,
                "previous_balance": arrears,
                "credit_balance": credit,
                "carried_forward_amount": record.carried_forward_amount,
            },
        )

        if arrears:
            logger.info(
                "Tenant %d: carrying forward arrears of %s from %s",
                tenant.id,
                arrears,
                prior.month,
            )
        elif credit:
            logger.info(
                "Tenant %d: applying credit of %s from %s",
                tenant.id,
                credit,
                prior.month,
            )
        return record, True

    def recalculate(self, record: RentRecord) -> None:
        """Recompute amount, carried_forward_amount and status from the line items."""
        record.amount = money(record.base_rent + record.utilities_total)
        record.carried_forward_amount = carried_forward(
            record.amount, record.previous_balance, record.credit_balance
        )
        if record.status != RentStatus.OVERDUE or record.amount_paid >= record.carried_forward_amount:
            record.status = record_status(record.amount_paid, record.carried_forward_amount)

    def commit(self) -> None:
        """Commit the unit of work, translating version conflicts.

        Raises:
            ConcurrentUpdateError: If a row was modified by another writer
        """
        try:
            self.db.commit()
        except StaleDataError as e:
            self.db.rollback()
            raise ConcurrentUpdateError(str(e)) from e


__all__ = [
    "RentLedgerService",
    "money",
    "carried_forward",
    "carry_over",
    "record_status",
    "tenant_payment_status",
    "UTILITY_FIELDS",
]
