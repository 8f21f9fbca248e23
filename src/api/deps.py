"""Shared FastAPI dependencies."""

from functools import lru_cache

from fastapi import HTTPException

from src.services.billing_calendar import Clock, utc_now
from src.services.config import LedgerConfig, load_config
from src.services.errors import (
    ConcurrentUpdateError,
    LedgerError,
    LedgerValidationError,
    RentRecordNotFoundError,
    TenantNotFoundError,
)


@lru_cache
def get_config() -> LedgerConfig:
    """Configuration loaded once per process."""
    return load_config()


def get_clock() -> Clock:
    return utc_now


def to_http_error(error: LedgerError) -> HTTPException:
    """Map a ledger error to the HTTP status the admin UI expects."""
    if isinstance(error, (TenantNotFoundError, RentRecordNotFoundError)):
        return HTTPException(status_code=404, detail=str(error))
    if isinstance(error, LedgerValidationError):
        return HTTPException(status_code=400, detail=str(error))
    if isinstance(error, ConcurrentUpdateError):
        return HTTPException(status_code=409, detail="Tenant was updated concurrently, retry")
    return HTTPException(status_code=500, detail="Internal server error")


__all__ = ["get_config", "get_clock", "to_http_error"]
