"""Tests for utility charge updates."""

from decimal import Decimal

import pytest
from sqlalchemy import select

from src.models import AuditLog, RentStatus, TenantPaymentStatus
from src.services.errors import LedgerValidationError, TenantNotFoundError
from src.services.rent_generation import RentGenerationService
from src.services.rent_ledger import RentLedgerService
from src.services.utility_service import UtilityService


def D(value) -> Decimal:
    return Decimal(str(value))


@pytest.fixture
def utilities(services):
    return services(UtilityService)


class TestUpdateUtilities:
    def test_amount_includes_all_utilities(self, services, utilities, make_tenant, db_session):
        """Rent 12000 + water 500 + electricity 1200 + garbage 300 + security 0 -> 14000."""
        tenant = make_tenant(monthly_rent="12000")
        services(RentGenerationService).generate_monthly_rent()

        record = utilities.update_utilities(
            tenant.id, water=D(500), electricity=D(1200), garbage=D(300), security=D(0)
        )

        assert record.amount == D(14000)
        assert record.carried_forward_amount == D(14000)
        assert record.amount_paid == D(0)
        db_session.refresh(tenant)
        assert tenant.balance == D(14000)

    def test_replaces_rather_than_adds(self, services, utilities, make_tenant):
        tenant = make_tenant(monthly_rent="12000")
        services(RentGenerationService).generate_monthly_rent()

        utilities.update_utilities(tenant.id, water=D(500), electricity=D(1200))
        record = utilities.update_utilities(tenant.id, water=D(800))

        assert record.water == D(800)
        assert record.electricity == D(1200)
        assert record.amount == D(14000)

    def test_keeps_carried_balances_and_payments(self, utilities, make_tenant, make_record, db_session):
        tenant = make_tenant(balance="9000", current_month="2025-03")
        make_record(tenant, "2025-03", previous_balance="3000", amount_paid="4000", status=RentStatus.PARTIAL)

        record = utilities.update_utilities(tenant.id, garbage=D(300))

        assert record.previous_balance == D(3000)
        assert record.amount_paid == D(4000)
        assert record.carried_forward_amount == D(13300)
        assert record.status == RentStatus.PARTIAL
        db_session.refresh(tenant)
        assert tenant.balance == D(9300)

    def test_charge_reduces_spare_credit(self, utilities, make_tenant, make_record, db_session):
        """Rent 10000 against 15000 credit leaves -5000; water 500 brings it to -4500."""
        tenant = make_tenant(balance="-5000", current_month="2025-03")
        make_record(tenant, "2025-03", credit_balance="15000", status=RentStatus.PAID)

        record = utilities.update_utilities(tenant.id, water=D(500))

        assert record.carried_forward_amount == D(0)
        assert record.outstanding == D(-4500)
        db_session.refresh(tenant)
        assert tenant.balance == D(-4500)
        assert tenant.payment_status == TenantPaymentStatus.PAID

    def test_charge_can_turn_paid_record_partial(self, utilities, make_tenant, make_record, db_session):
        tenant = make_tenant(balance="0", current_month="2025-03")
        make_record(tenant, "2025-03", amount_paid="10000", status=RentStatus.PAID)

        record = utilities.update_utilities(tenant.id, water=D(450))

        assert record.status == RentStatus.PARTIAL
        db_session.refresh(tenant)
        assert tenant.balance == D(450)
        assert tenant.payment_status == TenantPaymentStatus.PARTIAL

    def test_creates_record_before_generation(self, services, utilities, make_tenant, make_record, db_session):
        """Updating before the job ran opens the month with its carry-forward."""
        tenant = make_tenant(balance="2000", current_month="2025-02")
        make_record(tenant, "2025-02", amount_paid="8000", status=RentStatus.PARTIAL)

        record = utilities.update_utilities(tenant.id, water=D(500))

        assert record.month == "2025-03"
        assert record.previous_balance == D(2000)
        assert record.carried_forward_amount == D(12500)
        db_session.refresh(tenant)
        assert tenant.current_month == "2025-03"
        assert tenant.balance == D(12500)

        report = services(RentGenerationService).generate_monthly_rent()
        assert report.skipped == [tenant.id]

    def test_audited(self, utilities, make_tenant, db_session):
        tenant = make_tenant()
        record = utilities.update_utilities(tenant.id, actor="admin", electricity=D(1200))
        audit = db_session.scalars(select(AuditLog).where(AuditLog.action == "utilities")).one()
        assert audit.entity_id == record.id
        assert audit.actor == "admin"
        assert audit.changes["electricity"] == "1200.00"

    def test_negative_charge_rejected(self, services, utilities, make_tenant):
        tenant = make_tenant()
        with pytest.raises(LedgerValidationError, match="water"):
            utilities.update_utilities(tenant.id, water=D(-1))
        assert services(RentLedgerService).get_record(tenant.id, "2025-03") is None

    def test_unknown_field_rejected(self, utilities, make_tenant):
        tenant = make_tenant()
        with pytest.raises(LedgerValidationError, match="Unknown utility fields: internet"):
            utilities.update_utilities(tenant.id, internet=D(100))

    def test_empty_update_rejected(self, utilities, make_tenant):
        tenant = make_tenant()
        with pytest.raises(LedgerValidationError, match="At least one"):
            utilities.update_utilities(tenant.id, water=None)

    def test_unknown_tenant(self, utilities):
        with pytest.raises(TenantNotFoundError):
            utilities.update_utilities(999, water=D(100))
