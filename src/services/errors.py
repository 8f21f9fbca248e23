"""Exceptions raised by the rent ledger services."""


class LedgerError(Exception):
    """Base class for rent ledger errors."""


class TenantNotFoundError(LedgerError, LookupError):
    """No tenant matches the given identifier."""

    def __init__(self, tenant_ref):
        self.tenant_ref = tenant_ref
        super().__init__(f"Tenant {tenant_ref} not found")


class RentRecordNotFoundError(LedgerError, LookupError):
    """No rent record exists for the tenant and month."""

    def __init__(self, tenant_id: int, month: str):
        self.tenant_id = tenant_id
        self.month = month
        super().__init__(f"No rent record for tenant {tenant_id} in {month}")


class LedgerValidationError(LedgerError, ValueError):
    """Input rejected before any state was mutated."""


class ConcurrentUpdateError(LedgerError):
    """A tenant or rent record changed between read and write."""


__all__ = [
    "LedgerError",
    "TenantNotFoundError",
    "RentRecordNotFoundError",
    "LedgerValidationError",
    "ConcurrentUpdateError",
]
