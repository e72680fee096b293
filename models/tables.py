"""ORM models for the mill's relational schema."""

from __future__ import annotations

import datetime as dt
from typing import List, Optional

from sqlalchemy import Boolean, Date, DateTime, Enum, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from datastore.database import Base
from models.records import (
    BatchStatus,
    DecisionType,
    EmployeeRole,
    InvoiceStatus,
    OilGrade,
    PaymentMethod,
    UserRole,
)


def utcnow() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


def as_utc(value: dt.datetime) -> dt.datetime:
    """Attach UTC to naive values read back from backends without zone support."""
    if value.tzinfo is None:
        return value.replace(tzinfo=dt.timezone.utc)
    return value.astimezone(dt.timezone.utc)


def _enum(enum_cls: type) -> Enum:
    return Enum(enum_cls, native_enum=False, validate_strings=True, length=32)


class TimestampMixin:
    created_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    updated_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )


class User(TimestampMixin, Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[UserRole] = mapped_column(_enum(UserRole), nullable=False, default=UserRole.employee)
    firstname: Mapped[Optional[str]] = mapped_column(String(120))
    lastname: Mapped[Optional[str]] = mapped_column(String(120))


class Client(TimestampMixin, Base):
    __tablename__ = "clients"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    firstname: Mapped[str] = mapped_column(String(120), nullable=False)
    lastname: Mapped[str] = mapped_column(String(120), nullable=False)
    phone: Mapped[str] = mapped_column(String(40), nullable=False)
    address: Mapped[Optional[str]] = mapped_column(String(255))

    batches: Mapped[List["Batch"]] = relationship(back_populates="client")
    invoices: Mapped[List["Invoice"]] = relationship(back_populates="client")

    @property
    def full_name(self) -> str:
        return f"{self.firstname} {self.lastname}".strip()


class Batch(TimestampMixin, Base):
    """An olive delivery; its printed form is the weigh ticket."""

    __tablename__ = "batches"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    client_id: Mapped[int] = mapped_column(ForeignKey("clients.id"), nullable=False, index=True)
    date_received: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    weight_in: Mapped[Optional[int]] = mapped_column(Integer)
    weight_out: Mapped[Optional[int]] = mapped_column(Integer)
    net_weight: Mapped[int] = mapped_column(Integer, nullable=False)
    number_of_boxes: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[BatchStatus] = mapped_column(
        _enum(BatchStatus), nullable=False, default=BatchStatus.received
    )
    unit_price: Mapped[Optional[float]] = mapped_column(Float)
    total_amount: Mapped[Optional[float]] = mapped_column(Float)
    amount_paid: Mapped[Optional[float]] = mapped_column(Float)
    is_paid: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    date_paid: Mapped[Optional[dt.datetime]] = mapped_column(DateTime(timezone=True))

    client: Mapped[Client] = relationship(back_populates="batches")
    processing_decisions: Mapped[List["ProcessingDecision"]] = relationship(
        back_populates="batch", cascade="all, delete-orphan"
    )
    oil_batches: Mapped[List["OilBatch"]] = relationship(back_populates="batch")
    invoices: Mapped[List["Invoice"]] = relationship(back_populates="batch")


class Price(TimestampMixin, Base):
    __tablename__ = "prices"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    date: Mapped[dt.date] = mapped_column(Date, unique=True, nullable=False)
    milling_price_per_kg: Mapped[int] = mapped_column(Integer, nullable=False)
    oil_client_selling_price_per_kg: Mapped[int] = mapped_column(Integer, nullable=False)
    oil_export_selling_price_per_kg: Mapped[int] = mapped_column(Integer, nullable=False)
    olive_buying_price_per_kg: Mapped[int] = mapped_column(Integer, nullable=False)

    processing_decisions: Mapped[List["ProcessingDecision"]] = relationship(back_populates="price")


class ProcessingDecision(TimestampMixin, Base):
    __tablename__ = "processing_decisions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    batch_id: Mapped[int] = mapped_column(ForeignKey("batches.id"), nullable=False, index=True)
    type: Mapped[DecisionType] = mapped_column(_enum(DecisionType), nullable=False)
    date: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    unit_price: Mapped[Optional[int]] = mapped_column(Integer)
    price_id: Mapped[Optional[int]] = mapped_column(ForeignKey("prices.id"))

    batch: Mapped[Batch] = relationship(back_populates="processing_decisions")
    price: Mapped[Optional[Price]] = relationship(back_populates="processing_decisions")
    invoices: Mapped[List["Invoice"]] = relationship(back_populates="processing_decision")


class PressingRoom(TimestampMixin, Base):
    __tablename__ = "pressing_rooms"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    capacity: Mapped[Optional[int]] = mapped_column(Integer)

    sessions: Mapped[List["PressingSession"]] = relationship(back_populates="room")

    @property
    def status(self) -> str:
        # A room is busy while any of its sessions has no finish time.
        return "active" if any(session.finish is None for session in self.sessions) else "inactive"


class PressingSession(TimestampMixin, Base):
    __tablename__ = "pressing_sessions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    start: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    finish: Mapped[Optional[dt.datetime]] = mapped_column(DateTime(timezone=True))
    number_of_boxes: Mapped[int] = mapped_column(Integer, nullable=False)
    pressing_room_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("pressing_rooms.id"), index=True
    )

    room: Mapped[Optional[PressingRoom]] = relationship(back_populates="sessions")
    oil_batches: Mapped[List["OilBatch"]] = relationship(back_populates="pressing_session")

    @property
    def is_active(self) -> bool:
        return self.finish is None


class Employee(TimestampMixin, Base):
    __tablename__ = "employees"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    firstname: Mapped[str] = mapped_column(String(120), nullable=False)
    lastname: Mapped[str] = mapped_column(String(120), nullable=False)
    role: Mapped[EmployeeRole] = mapped_column(_enum(EmployeeRole), nullable=False)
    hire_date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    phone: Mapped[Optional[str]] = mapped_column(String(40))
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    quality_tests: Mapped[List["QualityTest"]] = relationship(back_populates="tested_by")


class OilBatch(TimestampMixin, Base):
    __tablename__ = "oil_batches"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    weight: Mapped[int] = mapped_column(Integer, nullable=False)
    residue: Mapped[Optional[int]] = mapped_column(Integer)
    batch_id: Mapped[Optional[int]] = mapped_column(ForeignKey("batches.id"), index=True)
    pressing_session_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("pressing_sessions.id"), index=True
    )

    batch: Mapped[Optional[Batch]] = relationship(back_populates="oil_batches")
    pressing_session: Mapped[Optional[PressingSession]] = relationship(back_populates="oil_batches")
    quality_tests: Mapped[List["QualityTest"]] = relationship(back_populates="oil_batch")
    container_links: Mapped[List["ContainerOilBatch"]] = relationship(back_populates="oil_batch")


class QualityTest(TimestampMixin, Base):
    __tablename__ = "quality_tests"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    oil_batch_id: Mapped[int] = mapped_column(ForeignKey("oil_batches.id"), nullable=False, index=True)
    acidity_level: Mapped[Optional[float]] = mapped_column(Float)
    grade: Mapped[OilGrade] = mapped_column(_enum(OilGrade), nullable=False)
    test_date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    tested_by_employee_id: Mapped[Optional[int]] = mapped_column(ForeignKey("employees.id"))

    oil_batch: Mapped[OilBatch] = relationship(back_populates="quality_tests")
    tested_by: Mapped[Optional[Employee]] = relationship(back_populates="quality_tests")


class Container(TimestampMixin, Base):
    __tablename__ = "containers"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    label: Mapped[str] = mapped_column(String(120), nullable=False)
    capacity: Mapped[int] = mapped_column(Integer, nullable=False)

    contents: Mapped[List["ContainerContent"]] = relationship(
        back_populates="container", order_by="ContainerContent.recorded_at"
    )


class ContainerContent(TimestampMixin, Base):
    """A snapshot of a container's fill level after one transaction."""

    __tablename__ = "container_contents"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    container_id: Mapped[int] = mapped_column(ForeignKey("containers.id"), nullable=False, index=True)
    total_weight: Mapped[int] = mapped_column(Integer, nullable=False)
    recorded_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    value: Mapped[Optional[float]] = mapped_column(Float)
    currency: Mapped[Optional[str]] = mapped_column(String(8))

    container: Mapped[Container] = relationship(back_populates="contents")
    oil_links: Mapped[List["ContainerOilBatch"]] = relationship(back_populates="container_content")


class ContainerOilBatch(TimestampMixin, Base):
    __tablename__ = "container_oil_batches"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    container_content_id: Mapped[int] = mapped_column(
        ForeignKey("container_contents.id"), nullable=False
    )
    oil_batch_id: Mapped[int] = mapped_column(ForeignKey("oil_batches.id"), nullable=False)
    weight: Mapped[int] = mapped_column(Integer, nullable=False)

    container_content: Mapped[ContainerContent] = relationship(back_populates="oil_links")
    oil_batch: Mapped[OilBatch] = relationship(back_populates="container_links")


class Invoice(TimestampMixin, Base):
    __tablename__ = "invoices"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    client_id: Mapped[int] = mapped_column(ForeignKey("clients.id"), nullable=False, index=True)
    batch_id: Mapped[Optional[int]] = mapped_column(ForeignKey("batches.id"))
    processing_decision_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("processing_decisions.id")
    )
    amount: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[InvoiceStatus] = mapped_column(
        _enum(InvoiceStatus), nullable=False, default=InvoiceStatus.draft
    )
    issue_date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    due_date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    notes: Mapped[Optional[str]] = mapped_column(Text)

    client: Mapped[Client] = relationship(back_populates="invoices")
    batch: Mapped[Optional[Batch]] = relationship(back_populates="invoices")
    processing_decision: Mapped[Optional[ProcessingDecision]] = relationship(
        back_populates="invoices"
    )
    payments: Mapped[List["Payment"]] = relationship(back_populates="invoice")

    @property
    def amount_paid(self) -> int:
        return sum(payment.amount for payment in self.payments)


class Payment(TimestampMixin, Base):
    __tablename__ = "payments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    invoice_id: Mapped[int] = mapped_column(ForeignKey("invoices.id"), nullable=False, index=True)
    amount: Mapped[int] = mapped_column(Integer, nullable=False)
    payment_date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    payment_method: Mapped[Optional[PaymentMethod]] = mapped_column(_enum(PaymentMethod))
    reference: Mapped[Optional[str]] = mapped_column(String(120))

    invoice: Mapped[Invoice] = relationship(back_populates="payments")
