"""CSV renderings of ledgers, customers and products."""
import csv
import io
from datetime import date, datetime
from typing import Iterable, List, Optional, Sequence

from app.models.customer import CustomerInDB
from app.models.ledger import LedgerEntry
from app.models.product import ProductInDB

LEDGER_COLUMNS = ["V No", "Date", "Product Name", "Qty", "Rate", "Amount", "Debit", "Credit", "Balance"]
CUSTOMER_COLUMNS = ["name", "area", "role", "createdBy", "createdAt"]
PRODUCT_COLUMNS = [
    "name",
    "description",
    "unitPrice",
    "stockQuantity",
    "unit",
    "minStockAlert",
    "registrationNumber",
    "registrationValidUpto",
    "createdBy",
    "createdAt",
]


def _iso_day(value: Optional[datetime]) -> str:
    return value.date().isoformat() if value else ""


def _optional(value) -> str:
    return "" if value is None else str(value)


def export_filename(kind: str, today: Optional[date] = None) -> str:
    today = today or date.today()
    return f"{kind}_export_{today.isoformat()}.csv"


def render_csv(header: Sequence[str], rows: Iterable[Sequence]) -> str:
    """Every cell quoted, rows separated by \\n."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(header)
    writer.writerows(rows)
    return buffer.getvalue()


def ledger_csv(entries: List[LedgerEntry]) -> str:
    return render_csv(
        LEDGER_COLUMNS,
        (
            [
                entry.voucher_no,
                entry.date,
                entry.product_name,
                entry.quantity,
                entry.rate,
                entry.amount,
                entry.debit,
                entry.credit,
                entry.balance,
            ]
            for entry in entries
        ),
    )


def customers_csv(customers: List[CustomerInDB]) -> str:
    return render_csv(
        CUSTOMER_COLUMNS,
        (
            [c.name, c.area, c.role, str(c.created_by), _iso_day(c.created_at)]
            for c in customers
        ),
    )


def products_csv(products: List[ProductInDB]) -> str:
    return render_csv(
        PRODUCT_COLUMNS,
        (
            [
                p.name,
                p.description or "",
                p.unit_price,
                _optional(p.stock_quantity),
                p.unit,
                _optional(p.min_stock_alert),
                p.registration_number or "",
                _iso_day(p.registration_valid_upto),
                str(p.created_by),
                _iso_day(p.created_at),
            ]
            for p in products
        ),
    )
