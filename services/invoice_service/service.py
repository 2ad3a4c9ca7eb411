"""
Order intake: turns a multi-line order into an invoice while reserving stock.

Checks run in a fixed order and the first failure wins:

1. header and line shapes (no store access; every violation is reported)
2. the referenced user exists and is active
3. every line references an existing, active product
4. line by line, in caller order, stock covers the amount and is decremented

Steps 2-4 and the ledger write form one unit of work: any failure rolls
back every decrement already made for earlier lines.
"""
import time
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Sequence

import structlog
from fastapi import HTTPException, status
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from services.product_service.repository import ProductRepository
from services.product_service.service import ProductService
from services.user_service.repository import UserRepository
from shared.errors import OrderError, OrderValidationError, UnknownReferenceError, violations_from_errors
from shared.observability.metrics import invoicing_intake_duration_seconds, invoicing_intake_total
from shared.security.dependencies import Principal
from shared.transactions import run_in_transaction

from .models import Invoice, InvoiceDetail
from .repository import InvoiceRepository, ResolvedLine
from .schemas import InvoiceCreate, InvoiceDetailResponse, InvoiceResponse, InvoiceWithDetails

logger = structlog.get_logger(__name__)

CENTS = Decimal("0.01")


def parse_order(payload: Any) -> InvoiceCreate:
    """Validate a raw order body, reporting every header and line violation at once."""
    try:
        return InvoiceCreate.model_validate(payload)
    except ValidationError as exc:
        raise OrderValidationError(violations_from_errors(exc.errors())) from exc


def compute_total(lines: Sequence[ResolvedLine]) -> Decimal:
    total = sum((Decimal(line.price) * line.amount for line in lines), Decimal("0"))
    return total.quantize(CENTS, rounding=ROUND_HALF_UP)


def materialize(invoice: Invoice) -> InvoiceWithDetails:
    return InvoiceWithDetails(
        invoice=InvoiceResponse.model_validate(invoice),
        products=[InvoiceDetailResponse.model_validate(detail) for detail in invoice.details],
    )


class InvoiceService:

    @staticmethod
    async def _resolve_and_record(db: AsyncSession, order: InvoiceCreate) -> Invoice:
        user = await UserRepository.get_active_by_id(db, order.user_id)
        if user is None:
            raise UnknownReferenceError("user", order.user_id)

        for line in order.products:
            if await ProductRepository.get_active_product(db, line.product_id) is None:
                raise UnknownReferenceError("product", line.product_id)

        resolved = []
        for line in order.products:
            # Repeated product ids are decremented once per occurrence
            product = await ProductService.decrement_stock(db, line.product_id, line.amount)
            resolved.append(
                ResolvedLine(
                    product_id=product.id,
                    description=line.description,
                    amount=line.amount,
                    price=Decimal(product.price),
                )
            )

        return await InvoiceRepository.record_invoice(db, order, compute_total(resolved), resolved)

    @staticmethod
    async def submit_order(db: AsyncSession, principal: Principal, payload: Any) -> InvoiceWithDetails:
        """
        Validate, reserve stock and write the invoice. Not idempotent: every
        accepted call creates a new invoice.

        Raises an OrderError subclass on any failure; nothing is persisted then.
        """
        started = time.perf_counter()
        log = logger.bind(principal_id=principal.user_id)

        try:
            order = payload if isinstance(payload, InvoiceCreate) else parse_order(payload)
            log = log.bind(user_id=order.user_id, lines=len(order.products))

            async def _intake() -> Invoice:
                return await InvoiceService._resolve_and_record(db, order)

            invoice = await run_in_transaction(db, _intake, name="invoice_intake")
        except OrderError as exc:
            invoicing_intake_total.labels(outcome=exc.code).inc()
            log.info("invoice.rejected", code=exc.code, reason=exc.message)
            raise
        finally:
            invoicing_intake_duration_seconds.observe(time.perf_counter() - started)

        invoicing_intake_total.labels(outcome="accepted").inc()
        log.info("invoice.accepted", invoice_id=invoice.id, total=str(invoice.total))
        return materialize(invoice)

    @staticmethod
    async def list_invoices(db: AsyncSession) -> list[InvoiceWithDetails]:
        return [materialize(invoice) for invoice in await InvoiceRepository.get_invoices(db)]

    @staticmethod
    async def get_invoice(db: AsyncSession, invoice_id: int) -> InvoiceWithDetails:
        invoice = await InvoiceRepository.get_invoice(db, invoice_id)
        if not invoice:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Invoice not found")
        return materialize(invoice)

    @staticmethod
    async def list_details(db: AsyncSession) -> Sequence[InvoiceDetail]:
        return await InvoiceRepository.get_details(db)

    @staticmethod
    async def product_history(db: AsyncSession, product_id: int) -> Sequence[InvoiceDetail]:
        details = await InvoiceRepository.get_details(db, product_id)
        if not details:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product history not found")
        return details
