"""Per-tenant serialization of ledger mutations within one process."""

import threading
from contextlib import contextmanager
from typing import Iterator


class TenantLockRegistry:
    """Hands out one re-entrant lock per tenant id.

    The generation job, payment application and utility updates all take the
    tenant's lock around their read-modify-write, so two of them cannot
    interleave on the same tenant. Cross-process races are caught by the
    version columns on Tenant and RentRecord instead.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[int, threading.RLock] = {}

    def _lock_for(self, tenant_id: int) -> threading.RLock:
        with self._guard:
            lock = self._locks.get(tenant_id)
            if lock is None:
                lock = self._locks[tenant_id] = threading.RLock()
            return lock

    @contextmanager
    def hold(self, tenant_id: int) -> Iterator[None]:
        lock = self._lock_for(tenant_id)
        with lock:
            yield

    def __len__(self) -> int:
        return len(self._locks)


# Shared by every service in the process
tenant_locks = TenantLockRegistry()

__all__ = ["TenantLockRegistry", "tenant_locks"]
