"""Daily price sheets, client invoices and the payments settling them."""

from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session, selectinload

from models.records import InvoiceStatus, PaymentMethod
from models.tables import Batch, Client, Invoice, Payment, Price, ProcessingDecision
from services.errors import NotFoundError, ValidationError
from services.pagination import DEFAULT_PAGE_SIZE, Page, paginate

logger = logging.getLogger(__name__)


class PriceService:
    def __init__(self, session: Session) -> None:
        self._session = session

    def list_prices(self) -> List[Price]:
        return list(self._session.scalars(select(Price).order_by(Price.date.desc())))

    def latest_price(self) -> Price:
        price = self._session.scalars(select(Price).order_by(Price.date.desc()).limit(1)).first()
        if price is None:
            raise NotFoundError("No prices recorded")
        return price

    def price_for_date(self, day: date) -> Price:
        price = self._session.scalars(select(Price).where(Price.date == day)).first()
        if price is None:
            raise NotFoundError("Price not found for this date")
        return price

    def create_price(
        self,
        *,
        date: date,
        milling_price_per_kg: int,
        oil_client_selling_price_per_kg: int,
        oil_export_selling_price_per_kg: int,
        olive_buying_price_per_kg: int,
    ) -> Price:
        if self._session.scalars(select(Price.id).where(Price.date == date)).first() is not None:
            raise ValidationError("Prices already set for this date")
        price = Price(
            date=date,
            milling_price_per_kg=milling_price_per_kg,
            oil_client_selling_price_per_kg=oil_client_selling_price_per_kg,
            oil_export_selling_price_per_kg=oil_export_selling_price_per_kg,
            olive_buying_price_per_kg=olive_buying_price_per_kg,
        )
        self._session.add(price)
        self._session.commit()
        logger.info("Published price sheet", extra={"reason": date.isoformat()})
        return price


class InvoiceService:
    def __init__(self, session: Session) -> None:
        self._session = session

    def list_invoices(
        self,
        *,
        page: int = 1,
        limit: int = DEFAULT_PAGE_SIZE,
        status: Optional[InvoiceStatus] = None,
        client_id: Optional[int] = None,
    ) -> Page[Invoice]:
        statement = (
            select(Invoice)
            .options(selectinload(Invoice.client), selectinload(Invoice.payments))
            .order_by(Invoice.issue_date.desc(), Invoice.id.desc())
        )
        if status is not None:
            statement = statement.where(Invoice.status == status)
        if client_id is not None:
            statement = statement.where(Invoice.client_id == client_id)
        return paginate(self._session, statement, page=page, limit=limit)

    def get_invoice(self, invoice_id: int) -> Invoice:
        invoice = self._session.scalars(
            select(Invoice)
            .where(Invoice.id == invoice_id)
            .options(selectinload(Invoice.client), selectinload(Invoice.payments))
        ).first()
        if invoice is None:
            raise NotFoundError("Invoice not found")
        return invoice

    def create_invoice(
        self,
        *,
        client_id: int,
        amount: int,
        due_date: date,
        batch_id: Optional[int] = None,
        processing_decision_id: Optional[int] = None,
        notes: Optional[str] = None,
    ) -> Invoice:
        if self._session.get(Client, client_id) is None:
            raise NotFoundError("Client not found")
        if batch_id is not None and self._session.get(Batch, batch_id) is None:
            raise NotFoundError("Batch not found")
        if (
            processing_decision_id is not None
            and self._session.get(ProcessingDecision, processing_decision_id) is None
        ):
            raise NotFoundError("Processing decision not found")

        issue_date = datetime.now(timezone.utc).date()
        if due_date < issue_date:
            raise ValidationError("due_date must not be before the issue date")

        invoice = Invoice(
            client_id=client_id,
            batch_id=batch_id,
            processing_decision_id=processing_decision_id,
            amount=amount,
            issue_date=issue_date,
            due_date=due_date,
            notes=notes,
            status=InvoiceStatus.draft,
        )
        self._session.add(invoice)
        self._session.commit()
        logger.info("Issued invoice", extra={"invoice_id": invoice.id, "client_id": client_id})
        return self.get_invoice(invoice.id)

    def update_status(self, invoice_id: int, status: InvoiceStatus) -> Invoice:
        invoice = self.get_invoice(invoice_id)
        invoice.status = status
        self._session.commit()
        logger.info("Changed invoice status", extra={"invoice_id": invoice.id, "reason": status.value})
        return invoice


class PaymentService:
    def __init__(self, session: Session) -> None:
        self._session = session

    def list_payments(self, *, invoice_id: Optional[int] = None) -> List[Payment]:
        statement = (
            select(Payment)
            .options(selectinload(Payment.invoice))
            .order_by(Payment.payment_date.desc(), Payment.id.desc())
        )
        if invoice_id is not None:
            statement = statement.where(Payment.invoice_id == invoice_id)
        return list(self._session.scalars(statement))

    def record_payment(
        self,
        *,
        invoice_id: int,
        amount: int,
        payment_method: Optional[PaymentMethod] = None,
        reference: Optional[str] = None,
    ) -> Payment:
        """Record a payment; the invoice flips to paid once payments cover its amount."""
        invoice = self._session.get(Invoice, invoice_id)
        if invoice is None:
            raise NotFoundError("Invoice not found")

        payment = Payment(
            invoice_id=invoice.id,
            amount=amount,
            payment_date=datetime.now(timezone.utc).date(),
            payment_method=payment_method,
            reference=reference,
        )
        self._session.add(payment)
        self._session.flush()

        total_paid = self._session.scalar(
            select(func.coalesce(func.sum(Payment.amount), 0)).where(Payment.invoice_id == invoice.id)
        )
        if total_paid >= invoice.amount:
            invoice.status = InvoiceStatus.paid
        self._session.commit()
        logger.info("Recorded payment", extra={"invoice_id": invoice.id})
        return payment
