"""Tests for tenant-level ledger operations."""

from datetime import date
from decimal import Decimal

import pytest

from src.models import RentStatus, TenantPaymentStatus
from src.services.errors import LedgerValidationError, RentRecordNotFoundError, TenantNotFoundError
from src.services.tenant_service import TenantService


def D(value) -> Decimal:
    return Decimal(str(value))


@pytest.fixture
def tenants(services):
    return services(TenantService)


class TestExtendLease:
    def test_extends_by_whole_months(self, tenants, make_tenant):
        tenant = make_tenant(lease_end=date(2025, 12, 31))
        updated = tenants.extend_lease(tenant.id, 12)
        assert updated.lease_end == date(2026, 12, 31)

    def test_clamps_to_month_end(self, tenants, make_tenant):
        """31 January + 1 month lands on the last day of February."""
        tenant = make_tenant(lease_end=date(2025, 1, 31))
        assert tenants.extend_lease(tenant.id, 1).lease_end == date(2025, 2, 28)

    def test_upper_bound_accepted(self, tenants, make_tenant):
        tenant = make_tenant(lease_end=date(2025, 6, 30))
        assert tenants.extend_lease(tenant.id, 60).lease_end == date(2030, 6, 30)

    @pytest.mark.parametrize("months", [0, -1, 61])
    def test_out_of_range_rejected(self, tenants, make_tenant, db_session, months):
        tenant = make_tenant(lease_end=date(2025, 12, 31))
        with pytest.raises(LedgerValidationError, match="between 1 and 60"):
            tenants.extend_lease(tenant.id, months)
        db_session.refresh(tenant)
        assert tenant.lease_end == date(2025, 12, 31)

    @pytest.mark.parametrize("months", [True, 1.5, "3"])
    def test_non_integer_rejected(self, tenants, make_tenant, months):
        tenant = make_tenant()
        with pytest.raises(LedgerValidationError, match="must be an integer"):
            tenants.extend_lease(tenant.id, months)

    def test_unknown_tenant(self, tenants):
        with pytest.raises(TenantNotFoundError):
            tenants.extend_lease(999, 3)


class TestRentHistory:
    def test_most_recent_first(self, tenants, make_tenant, make_record):
        tenant = make_tenant()
        for month in ("2025-01", "2025-03", "2025-02"):
            make_record(tenant, month)
        assert [r.month for r in tenants.get_rent_history(tenant.id)] == ["2025-03", "2025-02", "2025-01"]

    def test_only_own_records(self, tenants, make_tenant, make_record):
        tenant, neighbour = make_tenant(), make_tenant()
        make_record(neighbour, "2025-03")
        assert tenants.get_rent_history(tenant.id) == []

    def test_unknown_tenant(self, tenants):
        with pytest.raises(TenantNotFoundError):
            tenants.get_rent_history(999)


class TestRentSummary:
    def test_totals(self, tenants, make_tenant, make_record):
        tenant = make_tenant(balance="6000", current_month="2025-03")
        make_record(tenant, "2025-02", amount="10000", amount_paid="10000", status=RentStatus.PAID)
        make_record(tenant, "2025-03", amount="10500", amount_paid="4500", status=RentStatus.PARTIAL)

        summary = tenants.get_rent_summary(tenant.id)

        assert summary.current_month == "2025-03"
        assert summary.current_record.month == "2025-03"
        assert summary.total_billed == D(20500)
        assert summary.total_paid == D(14500)
        assert summary.months_billed == 2
        assert summary.balance == D(6000)

    def test_new_tenant(self, tenants, make_tenant):
        summary = tenants.get_rent_summary(make_tenant().id)
        assert summary.current_record is None
        assert summary.total_billed == D(0)
        assert summary.payment_status == TenantPaymentStatus.PENDING


class TestReconcileBalance:
    def test_resets_drifted_balance(self, tenants, make_tenant, make_record):
        tenant = make_tenant(balance="99999", current_month="2025-03")
        make_record(tenant, "2025-03", previous_balance="2000", amount_paid="5000", status=RentStatus.PARTIAL)

        updated = tenants.reconcile_balance(tenant.id)

        assert updated.balance == D(7000)
        assert updated.payment_status == TenantPaymentStatus.PARTIAL

    def test_credit_shows_as_negative_balance(self, tenants, make_tenant, make_record):
        tenant = make_tenant(balance="0", current_month="2025-03")
        make_record(tenant, "2025-03", credit_balance="15000", status=RentStatus.PENDING)
        assert tenants.reconcile_balance(tenant.id).balance == D(-5000)

    def test_requires_current_record(self, tenants, make_tenant):
        tenant = make_tenant()
        with pytest.raises(RentRecordNotFoundError):
            tenants.reconcile_balance(tenant.id)
