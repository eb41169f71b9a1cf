"""Invoice numbers and voucher labels."""
import random
from datetime import datetime
from typing import Optional

from app.core.config import settings


def generate_invoice_number(
    now: Optional[datetime] = None,
    rng: Optional[random.Random] = None,
    prefix: Optional[str] = None,
) -> str:
    """
    Build an invoice number: prefix + YYMMDD + 4 random digits.

    Not unique by construction: two invoices created on the same day can
    draw the same suffix. The unique index on invoice_number catches that
    and the caller retries with a fresh draw.
    """
    now = now or datetime.now()
    rng = rng or random
    prefix = settings.INVOICE_NUMBER_PREFIX if prefix is None else prefix
    suffix = rng.randrange(10000)
    return f"{prefix}{now:%y%m%d}{suffix:04d}"


def payment_voucher(identifier: str, prefix: Optional[str] = None) -> str:
    """Display label for a payment row: prefix + last 4 chars of an id or number."""
    prefix = settings.PAYMENT_VOUCHER_PREFIX if prefix is None else prefix
    return f"{prefix}{str(identifier)[-4:]}"
