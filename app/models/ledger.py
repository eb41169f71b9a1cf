"""
Ledger models - customer account statements derived from invoices and payments.

Nothing here is persisted. A LedgerQuery is validated once, when it is
built; a LedgerReport is produced fresh for every request.

Design principles:
- A query must name a customer or an area
- Date filters are inclusive calendar days
- Entries keep their original datetime for ordering; only the
  DD-MM-YYYY display string is serialized
"""

from datetime import date, datetime, time
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from app.core.exceptions import InvalidQuery

END_OF_DAY = time(23, 59, 59, 999000)


class DateRange(BaseModel):
    """Inclusive datetime bounds; either side may be open."""
    model_config = ConfigDict(frozen=True)

    start: Optional[datetime] = None
    end: Optional[datetime] = None

    @property
    def is_open(self) -> bool:
        return self.start is None and self.end is None

    def contains(self, value: datetime) -> bool:
        if self.start is not None and value < self.start:
            return False
        if self.end is not None and value > self.end:
            return False
        return True


class LedgerQuery(BaseModel):
    """
    Filters for one ledger request.

    Invariants:
    - customer_id or area is set (InvalidQuery otherwise)
    - area is only used when customer_id is absent
    - blank strings are treated as absent
    """
    model_config = ConfigDict(frozen=True)

    customer_id: Optional[str] = None
    area: Optional[str] = None
    created_by: Optional[str] = None
    from_date: Optional[date] = None
    to_date: Optional[date] = None

    @field_validator("customer_id", "area", "created_by", mode="before")
    @classmethod
    def _blank_to_none(cls, value):
        if isinstance(value, str):
            return value.strip() or None
        return value

    @model_validator(mode="after")
    def _require_customer_or_area(self) -> "LedgerQuery":
        if not self.customer_id and not self.area:
            raise InvalidQuery("Either customerId or area must be provided")
        return self

    @property
    def date_range(self) -> DateRange:
        """from_date floors to 00:00:00.000, to_date ceils to 23:59:59.999."""
        return DateRange(
            start=datetime.combine(self.from_date, time.min) if self.from_date else None,
            end=datetime.combine(self.to_date, END_OF_DAY) if self.to_date else None,
        )


class InvoiceFilter(BaseModel):
    model_config = ConfigDict(frozen=True)

    customer_ids: List[str]
    created_by: Optional[str] = None
    date_range: DateRange = DateRange()


class PaymentFilter(BaseModel):
    model_config = ConfigDict(frozen=True)

    invoice_ids: List[str]
    created_by: Optional[str] = None
    date_range: DateRange = DateRange()


class LedgerEntry(BaseModel):
    """
    One ledger row: either a debit (invoice line) or a credit (payment).

    Invariants:
    - debit and credit are never both nonzero
    - balance is written once, after ordering
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    voucher_no: str
    date: str
    sort_date: datetime = Field(exclude=True)
    product_name: str
    quantity: int = 0
    rate: float = 0
    amount: float = 0
    debit: float = 0
    credit: float = 0
    balance: float = 0
    customer_id: Optional[str] = None
    created_by: Optional[str] = None


class LedgerSummary(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    total_credit: float = 0
    total_paid: float = 0
    current_balance: float = 0
    total_entries: int = 0


class LedgerReport(BaseModel):
    """Ordered entries plus their summary."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    entries: List[LedgerEntry] = []
    summary: LedgerSummary = LedgerSummary()

    @classmethod
    def empty(cls) -> "LedgerReport":
        return cls(entries=[], summary=LedgerSummary())
