from typing import Any

from fastapi import APIRouter, Body, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from shared.config.database import get_db
from shared.config.settings import INVOICING_ROLE_ID
from shared.security.dependencies import Principal, get_current_principal, require_role

from .schemas import InvoiceDetailResponse, InvoiceWithDetails
from .service import InvoiceService

router = APIRouter(prefix="/api/invoices", tags=["Invoices"])
details_router = APIRouter(
    prefix="/api/invoice-details",
    tags=["Invoice details"],
    dependencies=[Depends(require_role(INVOICING_ROLE_ID))],
)


@router.post(
    "",
    response_model=InvoiceWithDetails,
    status_code=status.HTTP_201_CREATED,
    summary="Submit an order and create its invoice",
)
async def create_invoice(
    payload: Any = Body(...),
    principal: Principal = Depends(require_role(INVOICING_ROLE_ID)),
    db: AsyncSession = Depends(get_db),
):
    # Body is validated by the intake itself so every line violation is reported
    return await InvoiceService.submit_order(db, principal, payload)


@router.get("", response_model=list[InvoiceWithDetails], dependencies=[Depends(get_current_principal)])
async def list_invoices(db: AsyncSession = Depends(get_db)):
    return await InvoiceService.list_invoices(db)


@router.get("/{invoice_id}", response_model=InvoiceWithDetails, dependencies=[Depends(get_current_principal)])
async def get_invoice(invoice_id: int, db: AsyncSession = Depends(get_db)):
    return await InvoiceService.get_invoice(db, invoice_id)


@details_router.get("", response_model=list[InvoiceDetailResponse])
async def list_invoice_details(db: AsyncSession = Depends(get_db)):
    return await InvoiceService.list_details(db)


@details_router.get("/{product_id}", response_model=list[InvoiceDetailResponse])
async def get_product_history(product_id: int, db: AsyncSession = Depends(get_db)):
    """Every sale line recorded against one product."""
    return await InvoiceService.product_history(db, product_id)
