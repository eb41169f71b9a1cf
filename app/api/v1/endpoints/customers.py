import logging

from fastapi import APIRouter, Depends, File, HTTPException, Query, Response, UploadFile, status

from app.core.auth import get_current_user
from app.core.config import settings
from app.db.mongo import get_db
from app.models.customer import CustomerCreate, CustomerUpdate, CustomerResponse
from app.models.user import UserResponse
from app.repositories.customer_repo import CustomerRepository
from app.schemas.common import CustomerList, ImportResult, MessageResponse, Pagination
from app.utils.csv_export import customers_csv, export_filename
from app.utils.importers import parse_rows, validate_rows

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=CustomerList)
async def list_customers(
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    search: str = Query("", description="Case-insensitive match on name"),
    area: str = Query("", description="Case-insensitive match on area"),
    current_user: UserResponse = Depends(get_current_user),
    db = Depends(get_db)
):
    repo = CustomerRepository(db)
    customers, total = await repo.list_customers(search=search, area=area, page=page, limit=limit)
    return CustomerList(
        customers=[CustomerResponse.model_validate(customer) for customer in customers],
        pagination=Pagination.build(page, limit, total)
    )


@router.post("", response_model=CustomerResponse, status_code=status.HTTP_201_CREATED)
async def create_customer(
    customer_data: CustomerCreate,
    current_user: UserResponse = Depends(get_current_user),
    db = Depends(get_db)
):
    repo = CustomerRepository(db)
    customer = await repo.create_customer(customer_data, current_user.id)
    return CustomerResponse.model_validate(customer)


@router.get("/export")
async def export_customers(
    current_user: UserResponse = Depends(get_current_user),
    db = Depends(get_db)
):
    """All customers as a CSV attachment."""
    repo = CustomerRepository(db)
    customers = await repo.list_all()
    return Response(
        content=customers_csv(customers),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{export_filename("customers")}"'}
    )


@router.post("/import", response_model=ImportResult)
async def import_customers(
    file: UploadFile = File(...),
    current_user: UserResponse = Depends(get_current_user),
    db = Depends(get_db)
):
    """Import customers from CSV or JSON. Any invalid row rejects the whole file."""
    content = (await file.read()).decode("utf-8-sig")
    customers = validate_rows(parse_rows(file.filename or "", content), CustomerCreate)

    repo = CustomerRepository(db)
    imported = await repo.insert_many(customers, current_user.id)
    logger.info(f"Imported {imported} customers from {file.filename}")
    return ImportResult(message="Customers imported successfully", imported=imported)


@router.get("/{customer_id}", response_model=CustomerResponse)
async def get_customer(
    customer_id: str,
    current_user: UserResponse = Depends(get_current_user),
    db = Depends(get_db)
):
    repo = CustomerRepository(db)
    customer = await repo.get_customer(customer_id)
    if not customer:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Customer not found")
    return CustomerResponse.model_validate(customer)


@router.put("/{customer_id}", response_model=CustomerResponse)
async def update_customer(
    customer_id: str,
    customer_data: CustomerUpdate,
    current_user: UserResponse = Depends(get_current_user),
    db = Depends(get_db)
):
    repo = CustomerRepository(db)
    customer = await repo.update_customer(customer_id, customer_data)
    if not customer:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Customer not found")
    return CustomerResponse.model_validate(customer)


@router.delete("/{customer_id}", response_model=MessageResponse)
async def delete_customer(
    customer_id: str,
    current_user: UserResponse = Depends(get_current_user),
    db = Depends(get_db)
):
    repo = CustomerRepository(db)
    deleted = await repo.delete_customer(customer_id)
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Customer not found")
    return MessageResponse(message="Customer deleted successfully")
