import logging
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorDatabase, AsyncIOMotorClientSession

from app.core.config import settings
from app.core.exceptions import InvoiceValidationError
from app.models.payment import PaymentCreate, PaymentInDB
from app.repositories.invoice_repo import InvoiceRepository
from app.repositories.payment_repo import PaymentRepository
from app.utils.invoice_validation import validate_payment_amount

logger = logging.getLogger(__name__)


class PaymentService:
    """Records payments and keeps the invoice's paid/due amounts in step."""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.invoices = InvoiceRepository(db)
        self.payments = PaymentRepository(db)

    async def create_payment(self, payment_data: PaymentCreate, created_by: str) -> Optional[PaymentInDB]:
        """
        Record a payment against an existing invoice.

        Returns None when the invoice does not exist. Raises
        InvoiceValidationError when the amount exceeds what is due.
        """
        invoice = await self.invoices.get_invoice(str(payment_data.invoice_id))
        if invoice is None:
            return None

        validate_payment_amount(payment_data.amount, invoice.due_amount)

        if settings.MONGODB_TRANSACTIONS:
            async with await self.db.client.start_session() as session:
                async with session.start_transaction():
                    payment = await self._record(payment_data, created_by, session)
        else:
            payment = await self._record(payment_data, created_by)

        logger.info(
            f"Payment {payment.id} of {payment.amount} recorded "
            f"against invoice {invoice.invoice_number}"
        )
        return payment

    async def _record(
        self,
        payment_data: PaymentCreate,
        created_by: str,
        session: Optional[AsyncIOMotorClientSession] = None
    ) -> PaymentInDB:
        """Invoice first: no payment document is written unless the due amount moved."""
        recorded = await self.invoices.record_payment(
            payment_data.invoice_id, payment_data.amount, session=session
        )
        if not recorded:
            logger.warning(
                f"Payment of {payment_data.amount} rejected: invoice {payment_data.invoice_id} "
                f"no longer owes that much"
            )
            raise InvoiceValidationError("Payment amount cannot exceed the due amount")
        return await self.payments.create_payment(payment_data, created_by, session=session)
