import logging
from typing import List

from app.models.ledger import InvoiceFilter, LedgerQuery, LedgerReport, PaymentFilter
from app.repositories.ledger_repo import LedgerStore
from app.utils.ledger import build_ledger_entries, summarize

logger = logging.getLogger(__name__)


class LedgerService:
    """
    Builds customer account statements.

    The query is already validated when it reaches generate(); the store
    is the only source of data and every call fetches a fresh snapshot.
    """

    def __init__(self, store: LedgerStore):
        self.store = store

    async def resolve_customers(self, query: LedgerQuery) -> List[str]:
        """A single customer id, or every customer whose area contains the text."""
        if query.customer_id:
            return [query.customer_id]
        customers = await self.store.find_customers_by_area(query.area)
        return [str(customer.id) for customer in customers]

    async def generate(self, query: LedgerQuery) -> LedgerReport:
        customer_ids = await self.resolve_customers(query)
        if not customer_ids:
            logger.info(f"No customers match area '{query.area}'; returning empty ledger")
            return LedgerReport.empty()

        date_range = query.date_range
        invoices = await self.store.find_invoices(
            InvoiceFilter(
                customer_ids=customer_ids,
                created_by=query.created_by,
                date_range=date_range,
            )
        )

        payments = []
        if invoices:
            payments = await self.store.find_payments(
                PaymentFilter(
                    invoice_ids=[str(invoice.id) for invoice in invoices],
                    created_by=query.created_by,
                    date_range=date_range,
                )
            )

        entries = build_ledger_entries(invoices, payments)
        summary = summarize(invoices, entries)
        logger.info(
            f"Ledger built for {len(customer_ids)} customer(s): "
            f"{len(invoices)} invoices, {len(payments)} payments, {len(entries)} entries"
        )
        return LedgerReport(entries=entries, summary=summary)
