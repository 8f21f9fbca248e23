"""Rent ledger API endpoints.

Administrative endpoints surface ledger errors to the caller. The M-Pesa
callback always acknowledges, whatever happens internally, so the gateway
does not retry.
"""

import logging
from typing import Any

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from src.api.deps import get_clock, get_config, to_http_error
from src.api.schemas import (
    ExtendLeaseRequest,
    GenerationReportResponse,
    NotificationResponse,
    PaymentCreateRequest,
    PaymentResponse,
    RentRecordResponse,
    RentSummaryResponse,
    TenantResponse,
    UtilityUpdateRequest,
)
from src.services import get_db
from src.services.billing_calendar import Clock
from src.services.config import LedgerConfig
from src.services.errors import LedgerError
from src.services.mpesa import ACKNOWLEDGEMENT, parse_stk_callback
from src.services.notification_service import NotificationService
from src.services.payment_service import PaymentService
from src.services.rent_generation import RentGenerationService
from src.services.tenant_service import TenantService
from src.services.utility_service import UtilityService

logger = logging.getLogger(__name__)

ADMIN_ACTOR = "admin"

router = APIRouter(prefix="/api", tags=["rent"])


async def read_json_body(request: Request) -> dict[str, Any]:
    """JSON body as a dict; anything unparseable becomes {}."""
    try:
        payload = await request.json()
    except ValueError:
        logger.warning("Callback body is not valid JSON")
        return {}
    return payload if isinstance(payload, dict) else {}


@router.post("/rent/generate", response_model=GenerationReportResponse)
def generate_rent(
    db: Session = Depends(get_db),
    config: LedgerConfig = Depends(get_config),
    clock: Clock = Depends(get_clock),
) -> GenerationReportResponse:
    """Run rent generation now. Safe to call repeatedly."""
    report = RentGenerationService(db, config, clock).generate_monthly_rent(actor=ADMIN_ACTOR)
    return GenerationReportResponse.model_validate(report)


@router.get("/tenants/{tenant_id}/rent-history", response_model=list[RentRecordResponse])
def get_rent_history(
    tenant_id: int,
    db: Session = Depends(get_db),
    config: LedgerConfig = Depends(get_config),
    clock: Clock = Depends(get_clock),
) -> list[RentRecordResponse]:
    try:
        records = TenantService(db, config, clock).get_rent_history(tenant_id)
    except LedgerError as e:
        raise to_http_error(e) from e
    return [RentRecordResponse.model_validate(r) for r in records]


@router.get("/tenants/{tenant_id}/rent-summary", response_model=RentSummaryResponse)
def get_rent_summary(
    tenant_id: int,
    db: Session = Depends(get_db),
    config: LedgerConfig = Depends(get_config),
    clock: Clock = Depends(get_clock),
) -> RentSummaryResponse:
    try:
        summary = TenantService(db, config, clock).get_rent_summary(tenant_id)
    except LedgerError as e:
        raise to_http_error(e) from e
    return RentSummaryResponse.model_validate(summary)


@router.put("/tenants/{tenant_id}/utilities", response_model=RentRecordResponse)
def update_utilities(
    tenant_id: int,
    request: UtilityUpdateRequest,
    db: Session = Depends(get_db),
    config: LedgerConfig = Depends(get_config),
    clock: Clock = Depends(get_clock),
) -> RentRecordResponse:
    try:
        record = UtilityService(db, config, clock).update_utilities(
            tenant_id,
            actor=ADMIN_ACTOR,
            **request.model_dump(exclude_none=True),
        )
    except LedgerError as e:
        raise to_http_error(e) from e
    return RentRecordResponse.model_validate(record)


@router.post("/tenants/{tenant_id}/extend-lease", response_model=TenantResponse)
def extend_lease(
    tenant_id: int,
    request: ExtendLeaseRequest,
    db: Session = Depends(get_db),
    config: LedgerConfig = Depends(get_config),
    clock: Clock = Depends(get_clock),
) -> TenantResponse:
    try:
        tenant = TenantService(db, config, clock).extend_lease(tenant_id, request.months, actor=ADMIN_ACTOR)
    except LedgerError as e:
        raise to_http_error(e) from e
    return TenantResponse.model_validate(tenant)


@router.post("/tenants/{tenant_id}/reconcile", response_model=TenantResponse)
def reconcile_balance(
    tenant_id: int,
    db: Session = Depends(get_db),
    config: LedgerConfig = Depends(get_config),
    clock: Clock = Depends(get_clock),
) -> TenantResponse:
    try:
        tenant = TenantService(db, config, clock).reconcile_balance(tenant_id, actor=ADMIN_ACTOR)
    except LedgerError as e:
        raise to_http_error(e) from e
    return TenantResponse.model_validate(tenant)


@router.get("/tenants/{tenant_id}/notifications", response_model=list[NotificationResponse])
def list_notifications(
    tenant_id: int,
    unread_only: bool = False,
    db: Session = Depends(get_db),
) -> list[NotificationResponse]:
    notifications = NotificationService(db).list_for_tenant(tenant_id, unread_only=unread_only)
    return [NotificationResponse.model_validate(n) for n in notifications]


@router.post("/payments", response_model=PaymentResponse, status_code=201)
def create_payment(
    request: PaymentCreateRequest,
    db: Session = Depends(get_db),
    config: LedgerConfig = Depends(get_config),
    clock: Clock = Depends(get_clock),
) -> PaymentResponse:
    """Record a confirmed payment entered by a manager."""
    try:
        payment = PaymentService(db, config, clock).apply_payment(
            request.tenant_id,
            request.amount,
            request.payment_date,
            method=request.method,
            reference=request.reference,
            comment=request.comment,
            actor=ADMIN_ACTOR,
        )
    except LedgerError as e:
        raise to_http_error(e) from e
    return PaymentResponse.model_validate(payment)


@router.get("/payments", response_model=list[PaymentResponse])
def list_payments(
    tenant_id: int | None = None,
    db: Session = Depends(get_db),
) -> list[PaymentResponse]:
    payments = PaymentService(db).list_payments(tenant_id)
    return [PaymentResponse.model_validate(p) for p in payments]


@router.post("/mpesa/callback")
def mpesa_callback(
    payload: dict[str, Any] = Depends(read_json_body),
    db: Session = Depends(get_db),
    config: LedgerConfig = Depends(get_config),
    clock: Clock = Depends(get_clock),
) -> dict:
    """Receive an STK Push result from M-Pesa. Always acknowledges."""
    try:
        callback = parse_stk_callback(payload)
        if callback is None:
            logger.warning("M-Pesa callback without stkCallback body ignored")
        elif not callback.succeeded:
            logger.info(
                "M-Pesa payment not completed (checkout=%s): %s",
                callback.checkout_request_id,
                callback.result_desc,
            )
        elif not callback.is_complete:
            logger.warning(
                "M-Pesa success callback missing amount or phone (checkout=%s)",
                callback.checkout_request_id,
            )
        else:
            service = PaymentService(db, config, clock)
            payment_date = callback.transaction_date or service.ledger.today()
            service.record_gateway_payment(
                callback.phone,
                callback.amount,
                payment_date,
                reference=callback.receipt_number,
            )
    except Exception as e:
        logger.error("M-Pesa callback processing failed: %s", e, exc_info=True)
    return ACKNOWLEDGEMENT


__all__ = ["router"]
