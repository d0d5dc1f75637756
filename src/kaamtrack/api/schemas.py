"""Pydantic schemas for API request/response models."""

import datetime as dt
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from kaamtrack.calculators.types import AttendanceStatus, MarkedVia, PaymentType, WorkType


# ============================================================================
# Errors
# ============================================================================


class ErrorResponse(BaseModel):
    """Error body returned for every rejected request."""

    detail: str
    code: str


# ============================================================================
# Worker schemas
# ============================================================================


class WorkerCreate(BaseModel):
    """Schema for registering a worker."""

    name: str
    work_type: str = "other"
    daily_rate: Decimal | None = None
    phone: str | None = None


class WorkerUpdate(BaseModel):
    """Partial update; omitted fields stay as they are."""

    name: str | None = None
    work_type: str | None = None
    daily_rate: Decimal | None = None
    phone: str | None = None
    is_active: bool | None = None


class WorkerResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    worker_id: UUID
    owner_id: UUID
    name: str
    work_type: WorkType
    daily_rate: Decimal
    qr_id: str
    phone: str | None = None
    is_active: bool
    created_at: dt.datetime


class WorkerListResponse(BaseModel):
    items: list[WorkerResponse]
    total: int


# ============================================================================
# Attendance schemas
# ============================================================================


class AttendanceMark(BaseModel):
    """Manual attendance mark. `date` defaults to today."""

    worker_id: UUID
    status: str
    date: dt.date | None = None
    check_in_at: dt.datetime | None = None
    check_out_at: dt.datetime | None = None
    note: str | None = None


class AttendanceResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    record_id: UUID | None = None
    worker_id: UUID
    date: dt.date
    status: AttendanceStatus
    marked_via: MarkedVia
    marked_at: dt.datetime
    check_in_at: dt.datetime | None = None
    check_out_at: dt.datetime | None = None
    note: str | None = None


class AttendanceMarkResponse(BaseModel):
    record: AttendanceResponse
    is_new: bool


class AttendanceListResponse(BaseModel):
    items: list[AttendanceResponse]
    total: int


# ============================================================================
# Payment schemas
# ============================================================================


class PaymentCreate(BaseModel):
    worker_id: UUID
    amount: Decimal
    payment_type: str = Field(default="payment")
    date: dt.date | None = None
    note: str | None = None


class PaymentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    payment_id: UUID | None = None
    worker_id: UUID
    amount: Decimal
    payment_type: PaymentType
    date: dt.date
    note: str | None = None
    created_at: dt.datetime | None = None


class PaymentListResponse(BaseModel):
    items: list[PaymentResponse]
    total: int


# ============================================================================
# QR schemas
# ============================================================================


class QRCodeResponse(BaseModel):
    """The owner's current daily code. Fields are null when none exists."""

    state: str
    code: str | None = None
    date: dt.date | None = None
    valid_from: dt.datetime | None = None
    valid_until: dt.datetime | None = None


class QRValidateRequest(BaseModel):
    code: str | None = None


class QRValidateResponse(BaseModel):
    valid: bool
    code: str | None = None
    message: str


class CheckInRequest(BaseModel):
    """Payload decoded from the worker's QR card."""

    token: str


class CheckInResponse(BaseModel):
    worker_id: UUID
    worker_name: str
    already_marked: bool
    message: str
    record: AttendanceResponse


# ============================================================================
# Report schemas
# ============================================================================


class WorkerStatsResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    worker_id: UUID
    worker_name: str | None = None
    present_days: int
    half_days: int
    absent_days: int
    total_earnings: Decimal
    total_advances: Decimal
    total_paid: Decimal
    balance: Decimal


class TodayRollupResponse(BaseModel):
    date: dt.date
    present: int
    half_day: int
    absent: int
    explicit_absent: int
    marked: int
    total: int


class DashboardResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    total_workers: int
    present_today: int
    month_earnings: Decimal
    month_payments: Decimal


class PeriodTotalsResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    present_days: int
    half_days: int
    total_earnings: Decimal
    total_advances: Decimal
    total_paid: Decimal
    balance: Decimal


class PeriodReportResponse(BaseModel):
    start: dt.date
    end: dt.date
    workers: list[WorkerStatsResponse]
    totals: PeriodTotalsResponse


class MeResponse(BaseModel):
    """Worker self-service view."""

    worker: WorkerResponse
    stats: WorkerStatsResponse
    recent_attendance: list[AttendanceResponse]
