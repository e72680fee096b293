"""Pydantic schemas for the HTTP API layer."""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Annotated, Any, Dict, List, Literal, Optional

from pydantic import AfterValidator, AliasChoices, BaseModel, ConfigDict, Field, computed_field
from pydantic.alias_generators import to_camel

from models.records import (
    BatchStatus,
    ContainerTransactionType,
    DecisionType,
    EmployeeRole,
    InvoiceStatus,
    OilGrade,
    PaymentMethod,
    TicketStatus,
    UserRole,
)


def _ensure_utc(value: datetime) -> datetime:
    # SQLite hands back naive values; everything is stored in UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


UtcDateTime = Annotated[datetime, AfterValidator(_ensure_utc)]


class RequestModel(BaseModel):
    """Request bodies accept both snake_case and camelCase keys."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )


class ReadModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)


class Pagination(BaseModel):
    total: int = Field(..., ge=0)
    page: int = Field(..., ge=1)
    pages: int = Field(..., ge=0)


# --- auth -----------------------------------------------------------------


class RegisterRequest(RequestModel):
    email: Optional[str] = None
    password: Optional[str] = None
    role: str = Field(default=UserRole.employee.value, description="English or Arabic role name.")
    firstname: Optional[str] = None
    lastname: Optional[str] = None


class LoginRequest(RequestModel):
    email: Optional[str] = None
    password: Optional[str] = None


class UserRead(ReadModel):
    id: int
    email: str
    role: UserRole
    firstname: Optional[str] = None
    lastname: Optional[str] = None
    created_at: UtcDateTime

    @computed_field  # type: ignore[prop-decorator]
    @property
    def role_ar(self) -> str:
        return self.role.arabic_label


class RegisterResponse(BaseModel):
    message: str
    user: UserRead


class LoginResponse(BaseModel):
    token: str
    user: UserRead


# --- clients ----------------------------------------------------------------


class ClientCreate(RequestModel):
    firstname: str = Field(..., min_length=1)
    lastname: str = Field(..., min_length=1)
    phone: str = Field(..., min_length=1)
    address: Optional[str] = None


class ClientUpdate(RequestModel):
    firstname: Optional[str] = Field(default=None, min_length=1)
    lastname: Optional[str] = Field(default=None, min_length=1)
    phone: Optional[str] = Field(default=None, min_length=1)
    address: Optional[str] = None


class ClientSummary(ReadModel):
    id: int
    firstname: str
    lastname: str


class ClientRead(ClientSummary):
    phone: str
    address: Optional[str] = None
    created_at: UtcDateTime
    updated_at: UtcDateTime


# --- prices -----------------------------------------------------------------


class PriceCreate(RequestModel):
    date: date
    milling_price_per_kg: int = Field(..., ge=0)
    oil_client_selling_price_per_kg: int = Field(..., ge=0)
    oil_export_selling_price_per_kg: int = Field(..., ge=0)
    olive_buying_price_per_kg: int = Field(..., ge=0)


class PriceRead(ReadModel):
    id: int
    date: date
    milling_price_per_kg: int
    oil_client_selling_price_per_kg: int
    oil_export_selling_price_per_kg: int
    olive_buying_price_per_kg: int


# --- batches (tickets) ------------------------------------------------------


class BatchCreate(RequestModel):
    client_id: int
    weight_in: Optional[int] = Field(default=None, ge=0)
    weight_out: Optional[int] = Field(default=None, ge=0)
    net_weight: int = Field(..., ge=1)
    number_of_boxes: int = Field(..., ge=1)
    unit_price: Optional[float] = Field(default=None, ge=0)


class BatchUpdate(RequestModel):
    client_id: Optional[int] = None
    weight_in: Optional[int] = Field(default=None, ge=0)
    weight_out: Optional[int] = Field(default=None, ge=0)
    net_weight: Optional[int] = Field(default=None, ge=0)
    number_of_boxes: Optional[int] = Field(default=None, ge=0)
    status: Optional[BatchStatus] = None
    unit_price: Optional[float] = Field(default=None, ge=0)
    total_amount: Optional[float] = Field(default=None, ge=0)
    amount_paid: Optional[float] = Field(default=None, ge=0)
    is_paid: Optional[bool] = None
    date_paid: Optional[datetime] = None


class BatchStatusUpdate(RequestModel):
    status: BatchStatus


class BatchSummary(ReadModel):
    id: int
    date_received: UtcDateTime
    status: BatchStatus


class ProcessingDecisionRead(ReadModel):
    id: int
    batch_id: int
    type: DecisionType
    date: UtcDateTime
    unit_price: Optional[int] = None
    price_id: Optional[int] = None


class OilBatchRead(ReadModel):
    id: int
    weight: int
    residue: Optional[int] = None
    batch_id: Optional[int] = None
    pressing_session_id: Optional[int] = None
    created_at: UtcDateTime


class BatchRead(BatchSummary):
    client_id: int
    weight_in: Optional[int] = None
    weight_out: Optional[int] = None
    net_weight: int
    number_of_boxes: int
    unit_price: Optional[float] = None
    total_amount: Optional[float] = None
    amount_paid: Optional[float] = None
    is_paid: bool = False
    date_paid: Optional[UtcDateTime] = None
    created_at: UtcDateTime
    updated_at: UtcDateTime
    client: Optional[ClientSummary] = None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def ticket_code(self) -> str:
        return f"TKT{self.id:06d}"

    @computed_field  # type: ignore[prop-decorator]
    @property
    def ticket_status(self) -> TicketStatus:
        return TicketStatus.from_batch_status(self.status)


class BatchDetail(BatchRead):
    processing_decisions: List[ProcessingDecisionRead] = Field(default_factory=list)
    oil_batches: List[OilBatchRead] = Field(default_factory=list)


class BatchPage(BaseModel):
    batches: List[BatchRead]
    pagination: Pagination


class BatchDeleted(BaseModel):
    success: bool = True
    id: int


class ProcessingDecisionCreate(RequestModel):
    batch_id: int
    type: DecisionType
    unit_price: Optional[int] = Field(default=None, ge=0)
    price_id: Optional[int] = None


class ProcessingDecisionDetail(ProcessingDecisionRead):
    batch: BatchRead
    price: Optional[PriceRead] = None


# --- invoices & payments ----------------------------------------------------


class PaymentRead(ReadModel):
    id: int
    invoice_id: int
    amount: int
    payment_date: date
    payment_method: Optional[PaymentMethod] = None
    reference: Optional[str] = None


class InvoiceSummary(ReadModel):
    id: int
    client_id: int
    amount: int
    status: InvoiceStatus
    issue_date: date
    due_date: date


class InvoiceRead(InvoiceSummary):
    batch_id: Optional[int] = None
    processing_decision_id: Optional[int] = None
    notes: Optional[str] = None
    amount_paid: int = 0
    client: Optional[ClientSummary] = None
    payments: List[PaymentRead] = Field(default_factory=list)


class InvoiceCreate(RequestModel):
    client_id: int
    batch_id: Optional[int] = None
    processing_decision_id: Optional[int] = None
    amount: int = Field(..., ge=0)
    due_date: date
    notes: Optional[str] = None


class InvoiceStatusUpdate(RequestModel):
    status: InvoiceStatus


class InvoicePage(BaseModel):
    invoices: List[InvoiceRead]
    pagination: Pagination


class PaymentCreate(RequestModel):
    invoice_id: int
    amount: int = Field(..., gt=0)
    payment_method: Optional[PaymentMethod] = None
    reference: Optional[str] = None


class PaymentDetail(PaymentRead):
    invoice: InvoiceSummary


# --- clients (nested views) -------------------------------------------------


class ClientListItem(ClientRead):
    batches: List[BatchSummary] = Field(default_factory=list)


class ClientPage(BaseModel):
    clients: List[ClientListItem]
    pagination: Pagination


class ClientBatch(BatchSummary):
    net_weight: int
    number_of_boxes: int
    processing_decisions: List[ProcessingDecisionRead] = Field(default_factory=list)


class ClientDetail(ClientRead):
    batches: List[ClientBatch] = Field(default_factory=list)
    invoices: List[InvoiceSummary] = Field(default_factory=list)


# --- pressing rooms & sessions ----------------------------------------------


class PressingRoomCreate(RequestModel):
    name: str = Field(..., min_length=1)
    capacity: Optional[int] = Field(default=None, ge=0)


class PressingRoomUpdate(RequestModel):
    name: Optional[str] = Field(default=None, min_length=1)
    capacity: Optional[int] = Field(default=None, ge=0)


class PressingRoomRead(ReadModel):
    id: int
    name: str
    capacity: Optional[int] = None
    status: Literal["active", "inactive"]
    created_at: UtcDateTime


class PressingSessionCreate(RequestModel):
    pressing_room_id: int = Field(
        ...,
        validation_alias=AliasChoices("pressing_room_id", "pressingRoomId", "pressing_roomID"),
    )
    number_of_boxes: int = Field(..., ge=0)


class PressingSessionRead(ReadModel):
    id: int
    start: UtcDateTime
    finish: Optional[UtcDateTime] = None
    number_of_boxes: int
    pressing_room_id: Optional[int] = None
    is_active: bool


class PressingSessionWithRoom(PressingSessionRead):
    room: Optional[PressingRoomRead] = None
    oil_batches: List[OilBatchRead] = Field(default_factory=list)


class SessionOilBatch(OilBatchRead):
    batch: Optional[BatchSummary] = None


class PressingSessionDetail(PressingSessionRead):
    room: Optional[PressingRoomRead] = None
    oil_batches: List[SessionOilBatch] = Field(default_factory=list)


# --- employees --------------------------------------------------------------


class EmployeeCreate(RequestModel):
    firstname: str = Field(..., min_length=1)
    lastname: str = Field(..., min_length=1)
    role: EmployeeRole
    hire_date: date
    phone: Optional[str] = None


class EmployeeUpdate(RequestModel):
    firstname: Optional[str] = Field(default=None, min_length=1)
    lastname: Optional[str] = Field(default=None, min_length=1)
    role: Optional[EmployeeRole] = None
    hire_date: Optional[date] = None
    phone: Optional[str] = None
    active: Optional[bool] = None


class EmployeeRead(ReadModel):
    id: int
    firstname: str
    lastname: str
    role: EmployeeRole
    hire_date: date
    phone: Optional[str] = None
    active: bool


# --- oil batches, quality tests & containers --------------------------------


class OilBatchCreate(RequestModel):
    weight: int = Field(..., ge=1)
    residue: Optional[int] = Field(default=None, ge=0)
    batch_id: Optional[int] = None
    pressing_session_id: Optional[int] = None


class QualityTestCreate(RequestModel):
    oil_batch_id: int
    grade: OilGrade
    acidity_level: Optional[float] = Field(default=None, ge=0)
    tested_by_employee_id: Optional[int] = None


class QualityTestRead(ReadModel):
    id: int
    oil_batch_id: int
    acidity_level: Optional[float] = None
    grade: OilGrade
    test_date: date
    tested_by_employee_id: Optional[int] = None


class QualityTestListItem(QualityTestRead):
    oil_batch: OilBatchRead
    tested_by: Optional[EmployeeRead] = None


class TestedOilBatch(OilBatchRead):
    batch: Optional[BatchRead] = None


class QualityTestDetail(QualityTestRead):
    oil_batch: TestedOilBatch
    tested_by: Optional[EmployeeRead] = None


class QualityStatistics(BaseModel):
    total_tests: int
    grade_distribution: Dict[OilGrade, int]
    average_acidity: float
    total_oil_tested: int


class ContainerContentRead(ReadModel):
    id: int
    container_id: int
    total_weight: int
    recorded_at: UtcDateTime
    value: Optional[float] = None
    currency: Optional[str] = None


class ContainerLinkRead(ReadModel):
    id: int
    container_content_id: int
    oil_batch_id: int
    weight: int
    container_content: Optional[ContainerContentRead] = None


class OilBatchDetail(OilBatchRead):
    batch: Optional[BatchRead] = None
    pressing_session: Optional[PressingSessionRead] = None
    quality_tests: List[QualityTestRead] = Field(default_factory=list)
    container_links: List[ContainerLinkRead] = Field(default_factory=list)


class TraceabilityOrigin(BaseModel):
    client: Optional[ClientRead] = None
    original_batch: Optional[BatchSummary] = None
    net_weight: Optional[int] = None
    number_of_boxes: Optional[int] = None


class TraceabilityProcessing(BaseModel):
    pressing_session: Optional[PressingSessionWithRoom] = None
    decisions: List[ProcessingDecisionRead] = Field(default_factory=list)


class Traceability(BaseModel):
    oil_batch: OilBatchRead
    origin: TraceabilityOrigin
    processing: TraceabilityProcessing
    quality: List[QualityTestRead]
    storage: List[ContainerLinkRead]


class ContainerCreate(RequestModel):
    label: str = Field(..., min_length=1)
    capacity: int = Field(..., ge=1)


class ContainerTransaction(RequestModel):
    type: ContainerTransactionType
    weight: float = Field(..., gt=0)
    price_per_kg: Optional[float] = Field(default=None, ge=0)
    oil_batch_id: Optional[int] = None


class ContainerRead(BaseModel):
    id: int
    label: str
    capacity: int
    current_weight: int
    last_updated: UtcDateTime


# --- dashboard --------------------------------------------------------------


class OverviewMetrics(BaseModel):
    total_clients: int
    active_batches: int
    total_oil_produced: int
    pending_invoices: int
    recent_quality_tests: int
    total_revenue: int
    today_tickets: int
    active_rooms: int
    current_boxes: int


class Overview(BaseModel):
    metrics: OverviewMetrics


class ProductionDay(BaseModel):
    date: date
    batches_processed: int
    total_oil_produced: int


class GradeCount(BaseModel):
    grade: OilGrade
    count: int


class ProductionSummary(BaseModel):
    production_data: List[ProductionDay]
    quality_distribution: List[GradeCount]
    period: str


class ProcessingBreakdown(BaseModel):
    type: DecisionType
    count: int
    avg_price: Optional[float] = None


class FinancialSummary(BaseModel):
    monthly_revenue: int
    outstanding_amount: int
    processing_breakdown: List[ProcessingBreakdown]
    period: str


class ActivityEvent(BaseModel):
    id: str
    type: Literal["ticket", "room", "client"]
    action: str
    description: str
    user: str = "system"
    timestamp: UtcDateTime
    details: Dict[str, Any] = Field(default_factory=dict)


class OperationalDayRead(BaseModel):
    """Current operational day as seen from the mill's configured time zone."""

    timezone: str
    current_day: date
    day_start: datetime
    day_end: datetime
    is_night_shift: bool
    minutes_since_start: int = Field(..., ge=0)
    progress_percent: float = Field(..., ge=0, le=100)
    shift_label: str
