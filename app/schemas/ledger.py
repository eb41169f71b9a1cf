from typing import List, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from app.models.ledger import LedgerReport, LedgerSummary


class LedgerEntryResponse(BaseModel):
    """One statement row as returned to clients; the internal sort key is not exposed."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    voucher_no: str
    date: str
    product_name: str
    quantity: int
    rate: float
    amount: float
    debit: float
    credit: float
    balance: float
    customer_id: Optional[str] = None
    created_by: Optional[str] = None


class LedgerResponse(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    entries: List[LedgerEntryResponse]
    summary: LedgerSummary

    @classmethod
    def from_report(cls, report: LedgerReport) -> "LedgerResponse":
        return cls(
            entries=[LedgerEntryResponse(**entry.model_dump()) for entry in report.entries],
            summary=report.summary,
        )
