"""
Ledger building blocks.

Core algorithm:
1. One debit entry per invoice line item
2. One credit entry per payment record
3. Reconcile stored paid amounts against payment records
4. Stable sort by original date
5. Running balance, left to right
6. Summary from the invoice records

Every function here is pure; fetching belongs to the ledger store.
"""

import logging
from collections import defaultdict
from datetime import datetime
from operator import attrgetter
from typing import Dict, Iterable, List, Sequence, Tuple

from app.models.invoice import InvoiceInDB
from app.models.ledger import LedgerEntry, LedgerSummary
from app.models.payment import PaymentInDB
from app.utils.numbering import payment_voucher

logger = logging.getLogger(__name__)

DISPLAY_DATE_FORMAT = "%d-%m-%Y"


def _money(value: float) -> float:
    return round(value, 2)


def display_date(value: datetime) -> str:
    """DD-MM-YYYY, the form dates take in a statement."""
    return value.strftime(DISPLAY_DATE_FORMAT)


def running_balances(pairs: Iterable[Tuple[float, float]]) -> List[float]:
    """
    Cumulative balance for an ordered sequence of (debit, credit) pairs.

    balance[i] = balance[i-1] + debit[i] - credit[i], starting from 0.
    """
    balance = 0.0
    balances = []
    for debit, credit in pairs:
        balance = _money(balance + debit - credit)
        balances.append(balance)
    return balances


def payment_description(invoice_number: str) -> str:
    return f"Payment for Invoice #{invoice_number}"


def invoice_line_entries(invoice: InvoiceInDB) -> List[LedgerEntry]:
    """Debit entries, one per line item, in item order."""
    if not invoice.items:
        logger.warning(
            f"Invoice {invoice.invoice_number} has no line items; "
            f"its totals count in the summary without ledger rows"
        )
    return [
        LedgerEntry(
            voucher_no=invoice.invoice_number,
            date=display_date(invoice.invoice_date),
            sort_date=invoice.invoice_date,
            product_name=item.name_snapshot,
            quantity=item.quantity,
            rate=item.rate,
            amount=item.amount,
            debit=item.amount,
            credit=0,
            customer_id=str(invoice.customer_id),
            created_by=str(invoice.created_by),
        )
        for item in invoice.items
    ]


def payment_entry(payment: PaymentInDB, invoice: InvoiceInDB) -> LedgerEntry:
    """Credit entry for one recorded payment."""
    return LedgerEntry(
        voucher_no=payment_voucher(str(payment.id)),
        date=display_date(payment.payment_date),
        sort_date=payment.payment_date,
        product_name=payment_description(invoice.invoice_number),
        debit=0,
        credit=payment.amount,
        customer_id=str(invoice.customer_id),
        created_by=str(payment.created_by),
    )


def reconcile_invoice_payments(
    invoices: Sequence[InvoiceInDB],
    payments: Sequence[PaymentInDB],
) -> List[LedgerEntry]:
    """
    Credit entries for paid amounts that no payment record explains.

    An invoice may carry a paid_amount recorded at creation time, or
    recorded before payments were tracked separately. For each invoice
    whose stored paid_amount exceeds the sum of its payment records, emit
    one credit for the shortfall, dated on the invoice date.
    """
    recorded: Dict[str, float] = defaultdict(float)
    for payment in payments:
        recorded[str(payment.invoice_id)] += payment.amount

    entries = []
    for invoice in invoices:
        shortfall = _money(invoice.paid_amount - recorded.get(str(invoice.id), 0.0))
        if shortfall <= 0:
            continue
        logger.debug(
            f"Reconciling invoice {invoice.invoice_number}: "
            f"{shortfall} paid without a payment record"
        )
        entries.append(
            LedgerEntry(
                voucher_no=payment_voucher(invoice.invoice_number),
                date=display_date(invoice.invoice_date),
                sort_date=invoice.invoice_date,
                product_name=payment_description(invoice.invoice_number),
                debit=0,
                credit=shortfall,
                customer_id=str(invoice.customer_id),
                created_by=str(invoice.created_by),
            )
        )
    return entries


def sort_entries(entries: Iterable[LedgerEntry]) -> List[LedgerEntry]:
    """Ascending by original date; ties keep insertion order."""
    return sorted(entries, key=attrgetter("sort_date"))


def apply_running_balance(entries: List[LedgerEntry]) -> List[LedgerEntry]:
    """Write the running balance onto each (already ordered) entry."""
    balances = running_balances((entry.debit, entry.credit) for entry in entries)
    for entry, balance in zip(entries, balances):
        entry.balance = balance
    return entries


def summarize(invoices: Sequence[InvoiceInDB], entries: Sequence[LedgerEntry]) -> LedgerSummary:
    """
    Totals from the invoice records, not from the entries.

    total_paid trusts each invoice's stored paid_amount. Reconciliation
    keeps the entries in step with it whenever payment records fall
    short; records that exceed paid_amount make the two disagree.
    """
    total_credit = _money(sum(invoice.total_amount for invoice in invoices))
    total_paid = _money(sum(invoice.paid_amount for invoice in invoices))
    return LedgerSummary(
        total_credit=total_credit,
        total_paid=total_paid,
        current_balance=_money(total_credit - total_paid),
        total_entries=len(entries),
    )


def build_ledger_entries(
    invoices: Sequence[InvoiceInDB],
    payments: Sequence[PaymentInDB],
) -> List[LedgerEntry]:
    """Merge invoices and payments into ordered entries with running balances."""
    invoices_by_id = {str(invoice.id): invoice for invoice in invoices}

    entries: List[LedgerEntry] = []
    for invoice in invoices:
        entries.extend(invoice_line_entries(invoice))

    for payment in payments:
        invoice = invoices_by_id.get(str(payment.invoice_id))
        if invoice is None:
            # The payment filter only admits fetched invoices
            logger.warning(f"Payment {payment.id} references an unfetched invoice; skipped")
            continue
        entries.append(payment_entry(payment, invoice))

    entries.extend(reconcile_invoice_payments(invoices, payments))

    return apply_running_balance(sort_entries(entries))
