import logging
from typing import List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase, AsyncIOMotorClientSession
from pymongo.errors import DuplicateKeyError

from app.core.config import settings
from app.core.exceptions import DuplicateInvoiceNumber, InvoiceValidationError
from app.models.invoice import InvoiceCreate, InvoiceInDB, InvoiceItem, InvoiceUpdate
from app.repositories.customer_repo import CustomerRepository
from app.repositories.invoice_repo import InvoiceRepository
from app.repositories.product_repo import ProductRepository
from app.utils.invoice_validation import validate_invoice
from app.utils.numbering import generate_invoice_number

logger = logging.getLogger(__name__)


class InvoiceService:
    """
    Invoice writes.

    Creating an invoice decrements product stock and inserts the invoice.
    With MONGODB_TRANSACTIONS both writes share one transaction. Without
    it they are two steps, stock first: a failure between them leaves
    stock decremented with no invoice.
    """

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.invoices = InvoiceRepository(db)
        self.products = ProductRepository(db)
        self.customers = CustomerRepository(db)

    async def create_invoice(self, invoice_data: InvoiceCreate, created_by: str) -> InvoiceInDB:
        validate_invoice(invoice_data)
        await self._check_customer(str(invoice_data.customer_id))

        if settings.MONGODB_TRANSACTIONS:
            return await self._insert_with_fresh_number(
                self._create_in_transaction, invoice_data, created_by
            )

        await self._decrement_stock(invoice_data.items)
        return await self._insert_with_fresh_number(
            self.invoices.create_invoice, invoice_data, created_by
        )

    async def update_invoice(self, invoice_id: str, update_data: InvoiceUpdate) -> Optional[InvoiceInDB]:
        """Validate and replace an invoice. Stock is not re-adjusted on edit."""
        validate_invoice(update_data)
        await self._check_customer(str(update_data.customer_id))
        invoice = await self.invoices.update_invoice(invoice_id, update_data)
        if invoice:
            logger.info(f"Invoice {invoice.invoice_number} updated")
        return invoice

    async def delete_invoice(self, invoice_id: str) -> bool:
        deleted = await self.invoices.delete_invoice(invoice_id)
        if deleted:
            logger.info(f"Invoice {invoice_id} deleted")
        return deleted

    async def _check_customer(self, customer_id: str) -> None:
        if await self.customers.get_customer(customer_id) is None:
            raise InvoiceValidationError(f"Customer {customer_id} not found")

    async def _decrement_stock(
        self,
        items: List[InvoiceItem],
        session: Optional[AsyncIOMotorClientSession] = None
    ) -> None:
        for item in items:
            await self.products.adjust_stock(item.product_id, -item.quantity, session=session)

    async def _create_in_transaction(
        self,
        invoice_data: InvoiceCreate,
        invoice_number: str,
        created_by: str
    ) -> InvoiceInDB:
        async with await self.db.client.start_session() as session:
            async with session.start_transaction():
                await self._decrement_stock(invoice_data.items, session=session)
                return await self.invoices.create_invoice(
                    invoice_data, invoice_number, created_by, session=session
                )

    async def _insert_with_fresh_number(self, insert, invoice_data: InvoiceCreate, created_by: str) -> InvoiceInDB:
        """Draw numbers until the unique index accepts one."""
        attempts = settings.INVOICE_NUMBER_ATTEMPTS
        for attempt in range(1, attempts + 1):
            invoice_number = generate_invoice_number()
            try:
                invoice = await insert(invoice_data, invoice_number, created_by)
            except DuplicateKeyError:
                logger.warning(
                    f"Invoice number {invoice_number} already taken (attempt {attempt}/{attempts})"
                )
                continue
            logger.info(
                f"Invoice {invoice.invoice_number} created for customer "
                f"{invoice.customer_id}: total {invoice.total_amount}"
            )
            return invoice
        raise DuplicateInvoiceNumber(f"Could not assign a unique invoice number after {attempts} attempts")
