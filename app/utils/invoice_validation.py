"""Invoice validation utilities."""
from typing import List

from app.core.exceptions import InvoiceValidationError
from app.models.invoice import InvoiceCreate, InvoiceItem

# Amounts are floats; compare to the cent
MONEY_TOLERANCE = 0.005


def validate_items(items: List[InvoiceItem]) -> None:
    """
    Validate invoice line items.

    Rules:
    - at least one item
    - amount must equal quantity x rate
    """
    if not items:
        raise InvoiceValidationError("At least one item is required")

    for item in items:
        expected = item.quantity * item.rate
        if abs(item.amount - expected) > MONEY_TOLERANCE:
            raise InvoiceValidationError(
                f"Item '{item.name_snapshot}': amount {item.amount} "
                f"does not equal quantity x rate ({expected})"
            )


def calculate_total(items: List[InvoiceItem]) -> float:
    """Sum of line amounts."""
    return round(sum(item.amount for item in items), 2)


def validate_totals(invoice: InvoiceCreate) -> None:
    """
    Validate invoice totals.

    Rules:
    - total_amount must equal the sum of line amounts
    - paid_amount + due_amount must equal total_amount
    """
    total = calculate_total(invoice.items)
    if abs(invoice.total_amount - total) > MONEY_TOLERANCE:
        raise InvoiceValidationError(
            f"Total amount {invoice.total_amount} does not equal the sum of items ({total})"
        )

    if abs(invoice.paid_amount + invoice.due_amount - invoice.total_amount) > MONEY_TOLERANCE:
        raise InvoiceValidationError(
            f"Paid ({invoice.paid_amount}) plus due ({invoice.due_amount}) "
            f"does not equal total ({invoice.total_amount})"
        )


def validate_invoice(invoice: InvoiceCreate) -> None:
    validate_items(invoice.items)
    validate_totals(invoice)


def validate_payment_amount(amount: float, due_amount: float) -> None:
    """A payment may not exceed what is still due on its invoice."""
    if amount > due_amount + MONEY_TOLERANCE:
        raise InvoiceValidationError("Payment amount cannot exceed the due amount")
