from datetime import date, datetime, time
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.core.auth import get_current_user
from app.core.config import settings
from app.db.mongo import get_db
from app.models.invoice import InvoiceCreate, InvoiceUpdate, InvoiceResponse
from app.models.ledger import END_OF_DAY, DateRange
from app.models.user import UserResponse
from app.repositories.invoice_repo import InvoiceRepository
from app.schemas.common import InvoiceList, MessageResponse, Pagination
from app.services.invoice_service import InvoiceService

router = APIRouter()


def _day_range(from_date: Optional[date], to_date: Optional[date]) -> DateRange:
    return DateRange(
        start=datetime.combine(from_date, time.min) if from_date else None,
        end=datetime.combine(to_date, END_OF_DAY) if to_date else None,
    )


@router.get("", response_model=InvoiceList)
async def list_invoices(
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    customer_id: str = Query("", alias="customerId"),
    from_date: Optional[date] = Query(None, alias="fromDate"),
    to_date: Optional[date] = Query(None, alias="toDate"),
    current_user: UserResponse = Depends(get_current_user),
    db = Depends(get_db)
):
    """List invoices newest first, optionally for one customer and a date range."""
    repo = InvoiceRepository(db)
    invoices, total = await repo.list_invoices(
        customer_id=customer_id,
        date_range=_day_range(from_date, to_date),
        page=page,
        limit=limit
    )
    return InvoiceList(
        invoices=[InvoiceResponse.model_validate(invoice) for invoice in invoices],
        pagination=Pagination.build(page, limit, total)
    )


@router.post("", response_model=InvoiceResponse, status_code=status.HTTP_201_CREATED)
async def create_invoice(
    invoice_data: InvoiceCreate,
    current_user: UserResponse = Depends(get_current_user),
    db = Depends(get_db)
):
    """Create an invoice, assign its number and decrement product stock."""
    service = InvoiceService(db)
    invoice = await service.create_invoice(invoice_data, current_user.id)
    return InvoiceResponse.model_validate(invoice)


@router.get("/{invoice_id}", response_model=InvoiceResponse)
async def get_invoice(
    invoice_id: str,
    current_user: UserResponse = Depends(get_current_user),
    db = Depends(get_db)
):
    repo = InvoiceRepository(db)
    invoice = await repo.get_invoice(invoice_id)
    if not invoice:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Invoice not found")
    return InvoiceResponse.model_validate(invoice)


@router.put("/{invoice_id}", response_model=InvoiceResponse)
async def update_invoice(
    invoice_id: str,
    invoice_data: InvoiceUpdate,
    current_user: UserResponse = Depends(get_current_user),
    db = Depends(get_db)
):
    service = InvoiceService(db)
    invoice = await service.update_invoice(invoice_id, invoice_data)
    if not invoice:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Invoice not found")
    return InvoiceResponse.model_validate(invoice)


@router.delete("/{invoice_id}", response_model=MessageResponse)
async def delete_invoice(
    invoice_id: str,
    current_user: UserResponse = Depends(get_current_user),
    db = Depends(get_db)
):
    service = InvoiceService(db)
    deleted = await service.delete_invoice(invoice_id)
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Invoice not found")
    return MessageResponse(message="Invoice deleted successfully")
