"""Request and response schemas for the rent ledger API."""

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from src.models.notification import NotificationType
from src.models.payment import PaymentMethod, PaymentStatus
from src.models.rent_record import RentStatus
from src.models.tenant import TenantPaymentStatus, TenantStatus


class RentRecordResponse(BaseModel):
    """One month of a tenant's rent ledger."""

    id: int
    tenant_id: int
    month: str
    base_rent: Decimal
    amount: Decimal
    water: Decimal
    electricity: Decimal
    garbage: Decimal
    security: Decimal
    previous_balance: Decimal
    credit_balance: Decimal
    carried_forward_amount: Decimal
    amount_paid: Decimal
    status: RentStatus
    due_date: date

    model_config = ConfigDict(from_attributes=True)


class GenerationReportResponse(BaseModel):
    """Outcome of a rent generation run."""

    month: str
    generated: list[int]
    skipped: list[int]
    failed: dict[int, str]
    overdue_marked: int
    timed_out: bool

    model_config = ConfigDict(from_attributes=True)


class UtilityUpdateRequest(BaseModel):
    """Utility charges to set on the current month (omitted fields are unchanged)."""

    water: Decimal | None = Field(default=None, ge=0)
    electricity: Decimal | None = Field(default=None, ge=0)
    garbage: Decimal | None = Field(default=None, ge=0)
    security: Decimal | None = Field(default=None, ge=0)


class ExtendLeaseRequest(BaseModel):
    months: int = Field(ge=1, le=60)


class TenantResponse(BaseModel):
    id: int
    name: str
    phone: str
    lease_start: date
    lease_end: date
    monthly_rent: Decimal
    balance: Decimal
    current_month: str | None
    status: TenantStatus
    payment_status: TenantPaymentStatus

    model_config = ConfigDict(from_attributes=True)


class RentSummaryResponse(BaseModel):
    tenant_id: int
    current_month: str | None
    balance: Decimal
    payment_status: TenantPaymentStatus
    current_record: RentRecordResponse | None
    total_billed: Decimal
    total_paid: Decimal
    months_billed: int

    model_config = ConfigDict(from_attributes=True)


class PaymentCreateRequest(BaseModel):
    """Manual payment entry. Only confirmed payments are entered."""

    tenant_id: int
    amount: Decimal = Field(gt=0)
    payment_date: date = Field(alias="date")
    method: PaymentMethod = PaymentMethod.CASH
    reference: str | None = Field(default=None, max_length=64)
    comment: str | None = None

    model_config = ConfigDict(populate_by_name=True)


class PaymentResponse(BaseModel):
    id: int
    tenant_id: int
    rent_record_id: int | None
    amount: Decimal
    payment_date: date
    method: PaymentMethod
    status: PaymentStatus
    reference: str | None
    comment: str | None

    model_config = ConfigDict(from_attributes=True)


class NotificationResponse(BaseModel):
    id: int
    title: str
    message: str
    type: NotificationType
    read: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
