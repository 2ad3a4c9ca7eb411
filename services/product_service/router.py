from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from shared.config.database import get_db
from shared.config.settings import ADMIN_ROLE_ID
from shared.security.dependencies import require_role
from .schemas import ProductCreate, ProductResponse
from .service import ProductService

# Catalog management is an admin-only surface
router = APIRouter(
    prefix="/api/products",
    tags=["Products"],
    dependencies=[Depends(require_role(ADMIN_ROLE_ID))],
)


@router.get("", response_model=list[ProductResponse])
async def list_products(db: AsyncSession = Depends(get_db)):
    return await ProductService.list_products(db)


@router.get("/{product_id}", response_model=ProductResponse)
async def get_product(product_id: int, db: AsyncSession = Depends(get_db)):
    return await ProductService.get_product_by_id(db, product_id)


@router.post("", response_model=ProductResponse, status_code=status.HTTP_201_CREATED)
async def create_product(product: ProductCreate, db: AsyncSession = Depends(get_db)):
    return await ProductService.create_product(db, product)


@router.put("/{product_id}", response_model=ProductResponse)
async def update_product(
    product_id: int,
    product: ProductCreate,
    db: AsyncSession = Depends(get_db)
):
    return await ProductService.update_product(db, product_id, product)


@router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
async def deactivate_product(product_id: int, db: AsyncSession = Depends(get_db)):
    """Soft delete: the product stays referenced by past invoices."""
    await ProductService.deactivate_product(db, product_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
