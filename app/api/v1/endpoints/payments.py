from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.core.auth import get_current_user
from app.core.config import settings
from app.db.mongo import get_db
from app.models.payment import PaymentCreate, PaymentResponse
from app.models.user import UserResponse
from app.repositories.payment_repo import PaymentRepository
from app.schemas.common import Pagination, PaymentList
from app.services.payment_service import PaymentService

router = APIRouter()


@router.get("", response_model=PaymentList)
async def list_payments(
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    invoice_id: str = Query("", alias="invoiceId"),
    current_user: UserResponse = Depends(get_current_user),
    db = Depends(get_db)
):
    repo = PaymentRepository(db)
    payments, total = await repo.list_payments(invoice_id=invoice_id, page=page, limit=limit)
    return PaymentList(
        payments=[PaymentResponse.model_validate(payment) for payment in payments],
        pagination=Pagination.build(page, limit, total)
    )


@router.post("", response_model=PaymentResponse, status_code=status.HTTP_201_CREATED)
async def create_payment(
    payment_data: PaymentCreate,
    current_user: UserResponse = Depends(get_current_user),
    db = Depends(get_db)
):
    """Record a payment. It may not exceed the invoice's due amount."""
    service = PaymentService(db)
    payment = await service.create_payment(payment_data, current_user.id)
    if payment is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Invoice not found")
    return PaymentResponse.model_validate(payment)
