"""Price sheet, invoice and payment routes."""

from __future__ import annotations

from datetime import date
from typing import List, Optional, Union

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.dependencies import get_current_user, get_session, require_roles
from app.schemas import (
    InvoiceCreate,
    InvoicePage,
    InvoiceRead,
    InvoiceStatusUpdate,
    Pagination,
    PaymentCreate,
    PaymentDetail,
    PriceCreate,
    PriceRead,
)
from models.records import InvoiceStatus, UserRole
from services.billing import InvoiceService, PaymentService, PriceService
from services.pagination import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE

prices_router = APIRouter(prefix="/prices", tags=["prices"], dependencies=[Depends(get_current_user)])
invoices_router = APIRouter(prefix="/invoices", tags=["invoices"], dependencies=[Depends(get_current_user)])
payments_router = APIRouter(prefix="/payments", tags=["payments"], dependencies=[Depends(get_current_user)])


def get_price_service(session: Session = Depends(get_session)) -> PriceService:
    return PriceService(session)


def get_invoice_service(session: Session = Depends(get_session)) -> InvoiceService:
    return InvoiceService(session)


def get_payment_service(session: Session = Depends(get_session)) -> PaymentService:
    return PaymentService(session)


@prices_router.get(
    "",
    response_model=Union[PriceRead, List[PriceRead]],
    summary="All price sheets, newest first; latest=true returns only the newest.",
)
def list_prices(
    latest: bool = Query(False),
    service: PriceService = Depends(get_price_service),
) -> Union[PriceRead, List[PriceRead]]:
    if latest:
        return PriceRead.model_validate(service.latest_price())
    return [PriceRead.model_validate(price) for price in service.list_prices()]


@prices_router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=PriceRead,
    dependencies=[Depends(require_roles(UserRole.manager))],
)
def create_price(
    payload: PriceCreate,
    service: PriceService = Depends(get_price_service),
) -> PriceRead:
    return PriceRead.model_validate(service.create_price(**payload.model_dump()))


@prices_router.get("/{day}", response_model=PriceRead)
def get_price_for_date(
    day: date,
    service: PriceService = Depends(get_price_service),
) -> PriceRead:
    return PriceRead.model_validate(service.price_for_date(day))


@invoices_router.get("", response_model=InvoicePage)
def list_invoices(
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    status_filter: Optional[InvoiceStatus] = Query(None, alias="status"),
    client_id: Optional[int] = Query(None, alias="clientId"),
    service: InvoiceService = Depends(get_invoice_service),
) -> InvoicePage:
    result = service.list_invoices(page=page, limit=limit, status=status_filter, client_id=client_id)
    return InvoicePage(
        invoices=[InvoiceRead.model_validate(invoice) for invoice in result.items],
        pagination=Pagination(total=result.total, page=result.page, pages=result.pages),
    )


@invoices_router.post("", status_code=status.HTTP_201_CREATED, response_model=InvoiceRead)
def create_invoice(
    payload: InvoiceCreate,
    service: InvoiceService = Depends(get_invoice_service),
) -> InvoiceRead:
    return InvoiceRead.model_validate(service.create_invoice(**payload.model_dump()))


@invoices_router.get("/{invoice_id}", response_model=InvoiceRead)
def get_invoice(
    invoice_id: int,
    service: InvoiceService = Depends(get_invoice_service),
) -> InvoiceRead:
    return InvoiceRead.model_validate(service.get_invoice(invoice_id))


@invoices_router.put("/{invoice_id}/status", response_model=InvoiceRead)
def update_invoice_status(
    invoice_id: int,
    payload: InvoiceStatusUpdate,
    service: InvoiceService = Depends(get_invoice_service),
) -> InvoiceRead:
    return InvoiceRead.model_validate(service.update_status(invoice_id, payload.status))


@payments_router.get("", response_model=List[PaymentDetail])
def list_payments(
    invoice_id: Optional[int] = Query(None, alias="invoiceId"),
    service: PaymentService = Depends(get_payment_service),
) -> List[PaymentDetail]:
    return [PaymentDetail.model_validate(payment) for payment in service.list_payments(invoice_id=invoice_id)]


@payments_router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=PaymentDetail,
    summary="Record a payment; the invoice becomes paid once fully covered.",
)
def record_payment(
    payload: PaymentCreate,
    service: PaymentService = Depends(get_payment_service),
) -> PaymentDetail:
    return PaymentDetail.model_validate(service.record_payment(**payload.model_dump()))
