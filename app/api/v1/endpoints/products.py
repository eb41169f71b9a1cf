import logging

from fastapi import APIRouter, Depends, File, HTTPException, Query, Response, UploadFile, status

from app.core.auth import get_current_user
from app.core.config import settings
from app.db.mongo import get_db
from app.models.product import ProductCreate, ProductUpdate, ProductResponse
from app.models.user import UserResponse
from app.repositories.product_repo import ProductRepository
from app.schemas.common import ImportResult, MessageResponse, Pagination, ProductList
from app.utils.csv_export import export_filename, products_csv
from app.utils.importers import parse_rows, validate_rows

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=ProductList)
async def list_products(
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    search: str = Query(""),
    current_user: UserResponse = Depends(get_current_user),
    db = Depends(get_db)
):
    repo = ProductRepository(db)
    products, total = await repo.list_products(search=search, page=page, limit=limit)
    return ProductList(
        products=[ProductResponse.model_validate(product) for product in products],
        pagination=Pagination.build(page, limit, total)
    )


@router.post("", response_model=ProductResponse, status_code=status.HTTP_201_CREATED)
async def create_product(
    product_data: ProductCreate,
    current_user: UserResponse = Depends(get_current_user),
    db = Depends(get_db)
):
    repo = ProductRepository(db)
    product = await repo.create_product(product_data, current_user.id)
    return ProductResponse.model_validate(product)


@router.get("/export")
async def export_products(
    current_user: UserResponse = Depends(get_current_user),
    db = Depends(get_db)
):
    repo = ProductRepository(db)
    products = await repo.list_all()
    return Response(
        content=products_csv(products),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{export_filename("products")}"'}
    )


@router.post("/import", response_model=ImportResult)
async def import_products(
    file: UploadFile = File(...),
    current_user: UserResponse = Depends(get_current_user),
    db = Depends(get_db)
):
    """Import products from CSV or JSON. Any invalid row rejects the whole file."""
    content = (await file.read()).decode("utf-8-sig")
    products = validate_rows(parse_rows(file.filename or "", content), ProductCreate)

    repo = ProductRepository(db)
    imported = await repo.insert_many(products, current_user.id)
    logger.info(f"Imported {imported} products from {file.filename}")
    return ImportResult(message="Products imported successfully", imported=imported)


@router.get("/{product_id}", response_model=ProductResponse)
async def get_product(
    product_id: str,
    current_user: UserResponse = Depends(get_current_user),
    db = Depends(get_db)
):
    repo = ProductRepository(db)
    product = await repo.get_product(product_id)
    if not product:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found")
    return ProductResponse.model_validate(product)


@router.put("/{product_id}", response_model=ProductResponse)
async def update_product(
    product_id: str,
    product_data: ProductUpdate,
    current_user: UserResponse = Depends(get_current_user),
    db = Depends(get_db)
):
    repo = ProductRepository(db)
    product = await repo.update_product(product_id, product_data)
    if not product:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found")
    return ProductResponse.model_validate(product)


@router.delete("/{product_id}", response_model=MessageResponse)
async def delete_product(
    product_id: str,
    current_user: UserResponse = Depends(get_current_user),
    db = Depends(get_db)
):
    repo = ProductRepository(db)
    deleted = await repo.delete_product(product_id)
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found")
    return MessageResponse(message="Product deleted successfully")
