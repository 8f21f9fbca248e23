"""Payment service: applies confirmed payments to the rent ledger.

A payment is applied to the rent record of the billing month its date falls
in. The record's amount_paid only ever grows; its status and the tenant's
balance and payment status are recomputed after every payment.

Two entry points:
- apply_payment(): manual entry by a manager; errors propagate to the caller
- record_gateway_payment(): mobile-money confirmation; never raises, so the
  gateway always gets its acknowledgment
"""

import logging
import re
from datetime import date
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from src.models.notification import NotificationType
from src.models.payment import Payment, PaymentMethod, PaymentStatus
from src.models.rent_record import ZERO
from src.models.tenant import Tenant, TenantStatus
from src.services.audit_service import AuditService
from src.services.billing_calendar import Clock, month_of, utc_now
from src.services.config import LedgerConfig
from src.services.errors import LedgerValidationError, TenantNotFoundError
from src.services.notification_service import NotificationService
from src.services.rent_ledger import (
    RentLedgerService,
    money,
    record_status,
    tenant_payment_status,
)
from src.services.tenant_locks import TenantLockRegistry

logger = logging.getLogger(__name__)

# Kenyan subscriber numbers: the last 9 digits identify the line
# regardless of 0 / 254 / +254 prefix
PHONE_SUFFIX_DIGITS = 9


def phone_suffix(phone: str) -> str:
    digits = re.sub(r"\D", "", str(phone or ""))
    return digits[-PHONE_SUFFIX_DIGITS:]


class PaymentService:
    """Core payment operations over the rent ledger."""

    def __init__(
        self,
        db: Session,
        config: LedgerConfig | None = None,
        clock: Clock = utc_now,
        locks: TenantLockRegistry | None = None,
    ):
        """Initialize payment service.

        Args:
            db: SQLAlchemy database session
            config: Ledger configuration
            clock: Callable returning the current aware datetime
            locks: Per-tenant lock registry
        """
        self.db = db
        self.ledger = RentLedgerService(db, config, clock, locks)
        self.notifications = NotificationService(db)

    def apply_payment(
        self,
        tenant_id: int,
        amount: Decimal,
        payment_date: date,
        method: PaymentMethod = PaymentMethod.CASH,
        reference: str | None = None,
        comment: str | None = None,
        actor: str = "system",
    ) -> Payment:
        """Record a confirmed payment and apply it to the tenant's ledger.

        Args:
            tenant_id: Paying tenant
            amount: Amount paid (must be > 0)
            payment_date: Date of payment; selects the billing month
            method: Payment method
            reference: Optional external reference; a repeated reference
                returns the already-recorded payment without re-applying it
            comment: Optional notes
            actor: Who recorded the payment, for the audit log

        Returns:
            Payment row (rent_record_id is None if no record existed for the month)

        Raises:
            LedgerValidationError: If amount is not positive
            TenantNotFoundError: If tenant does not exist
            ConcurrentUpdateError: If the tenant or record changed concurrently
        """
        amount = money(amount)
        if amount <= ZERO:
            raise LedgerValidationError(f"Payment amount must be positive, got {amount}")

        if reference:
            existing = self.get_by_reference(reference)
            if existing is not None:
                logger.info("Payment %s already recorded (id=%d), not re-applying", reference, existing.id)
                return existing

        with self.ledger.locks.hold(tenant_id):
            tenant = self.ledger.get_tenant(tenant_id)
            month = month_of(payment_date)

            payment = Payment(
                tenant_id=tenant.id,
                amount=amount,
                payment_date=payment_date,
                method=method,
                status=PaymentStatus.COMPLETED,
                reference=reference,
                comment=comment,
            )
            self.db.add(payment)

            record = self.ledger.get_record(tenant.id, month)
            if record is None:
                logger.warning(
                    "No rent record for tenant %d in %s; payment of %s recorded but not applied",
                    tenant.id,
                    month,
                    amount,
                )
            else:
                self._apply_to_record(tenant, record, amount, month)
                payment.rent_record = record

            try:
                self.db.flush()
            except IntegrityError as e:
                self.db.rollback()
                raise LedgerValidationError(f"Payment reference {reference!r} already used") from e

            AuditService.log(
                self.db,
                "payment",
                payment.id,
                "payment",
                actor,
                {
                    "tenant_id": tenant.id,
                    "month": month,
                    "amount": amount,
                    "applied": record is not None,
                    "balance": tenant.balance,
                },
            )
            if record is not None:
                self.notifications.notify(
                    tenant.id,
                    "Payment received",
                    f"We received {amount} for {month}. Remaining balance: {tenant.balance}.",
                )
            self.ledger.commit()

        logger.info(
            "Applied payment %d: tenant=%d month=%s amount=%s balance=%s status=%s",
            payment.id,
            tenant.id,
            month,
            amount,
            tenant.balance,
            tenant.payment_status,
        )
        return payment

    def _apply_to_record(self, tenant: Tenant, record, amount: Decimal, month: str) -> None:
        record.amount_paid = money(record.amount_paid + amount)
        record.status = record_status(record.amount_paid, record.carried_forward_amount)

        if tenant.current_month is None or month > tenant.current_month:
            # Payment month becomes the current month; its record holds the whole position
            tenant.current_month = month
            tenant.balance = money(record.outstanding)
        elif month < tenant.current_month:
            # Catching up on an old month: restart from the current month's full obligation
            current = self.ledger.get_record(tenant.id, tenant.current_month)
            if current is not None:
                tenant.balance = money(current.outstanding - amount)
            else:
                tenant.balance = money(tenant.balance - amount)
        else:
            tenant.balance = money(tenant.balance - amount)

        tenant.payment_status = tenant_payment_status(tenant.balance, money(tenant.monthly_rent))

    def record_gateway_payment(
        self,
        phone: str,
        amount: Decimal,
        payment_date: date,
        reference: str | None = None,
    ) -> Payment | None:
        """Apply a mobile-money confirmation. Never raises.

        The tenant is resolved by phone-number suffix. Any failure is logged
        and the event dropped.

        Returns:
            The Payment, or None if the event was dropped
        """
        try:
            tenant = self.find_tenant_by_phone(phone)
            if tenant is None:
                raise TenantNotFoundError(f"with phone {phone}")
            return self.apply_payment(
                tenant.id,
                amount,
                payment_date,
                method=PaymentMethod.MPESA,
                reference=reference,
                comment="M-Pesa STK push",
                actor="mpesa",
            )
        except Exception as e:
            self.db.rollback()
            logger.error(
                "Dropped mobile-money payment (phone=%s amount=%s ref=%s): %s",
                phone,
                amount,
                reference,
                e,
                exc_info=not isinstance(e, TenantNotFoundError),
            )
            return None

    def find_tenant_by_phone(self, phone: str) -> Tenant | None:
        """Find a tenant whose phone ends with the same subscriber digits.

        Active tenants are preferred when more than one matches.
        """
        suffix = phone_suffix(phone)
        if len(suffix) < PHONE_SUFFIX_DIGITS:
            return None
        candidates = self.db.scalars(select(Tenant).order_by(Tenant.id)).all()
        matches = [t for t in candidates if phone_suffix(t.phone) == suffix]
        if not matches:
            return None
        active = [t for t in matches if t.status == TenantStatus.ACTIVE]
        return (active or matches)[0]

    def get_by_reference(self, reference: str) -> Payment | None:
        return self.db.scalars(select(Payment).where(Payment.reference == reference)).first()

    def list_payments(self, tenant_id: int | None = None) -> list[Payment]:
        """List payments, newest first.

        Args:
            tenant_id: Restrict to one tenant (optional)
        """
        stmt = select(Payment)
        if tenant_id is not None:
            stmt = stmt.where(Payment.tenant_id == tenant_id)
        stmt = stmt.order_by(Payment.payment_date.desc(), Payment.id.desc())
        return list(self.db.scalars(stmt))


__all__ = ["PaymentService", "phone_suffix"]
