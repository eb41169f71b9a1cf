from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response

from app.core.auth import get_current_user
from app.db.mongo import get_db
from app.models.ledger import LedgerQuery
from app.models.user import UserResponse
from app.repositories.ledger_repo import LedgerStore, MongoLedgerStore
from app.schemas.ledger import LedgerResponse
from app.services.ledger_service import LedgerService
from app.utils.csv_export import export_filename, ledger_csv

router = APIRouter()


def get_ledger_store(db = Depends(get_db)) -> LedgerStore:
    return MongoLedgerStore(db)


def ledger_query(
    customer_id: Optional[str] = Query(None, alias="customerId"),
    area: Optional[str] = Query(None, description="Used only when customerId is absent"),
    created_by: Optional[str] = Query(None, alias="createdBy"),
    from_date: Optional[date] = Query(None, alias="fromDate"),
    to_date: Optional[date] = Query(None, alias="toDate"),
) -> LedgerQuery:
    """Validated once here; raises InvalidQuery without touching the store."""
    return LedgerQuery(
        customer_id=customer_id,
        area=area,
        created_by=created_by,
        from_date=from_date,
        to_date=to_date,
    )


@router.get("", response_model=LedgerResponse)
async def get_ledger(
    current_user: UserResponse = Depends(get_current_user),
    query: LedgerQuery = Depends(ledger_query),
    store: LedgerStore = Depends(get_ledger_store)
):
    """Customer (or area) statement with running balances."""
    report = await LedgerService(store).generate(query)
    return LedgerResponse.from_report(report)


@router.get("/export-csv")
async def export_ledger_csv(
    current_user: UserResponse = Depends(get_current_user),
    query: LedgerQuery = Depends(ledger_query),
    store: LedgerStore = Depends(get_ledger_store)
):
    report = await LedgerService(store).generate(query)
    return Response(
        content=ledger_csv(report.entries),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{export_filename("ledger")}"'}
    )
