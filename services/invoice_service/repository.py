from dataclasses import dataclass
from decimal import Decimal
from typing import Optional, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from .models import Invoice, InvoiceDetail
from .schemas import OrderHeader


@dataclass(frozen=True)
class ResolvedLine:
    """An order line after catalog resolution: price is the catalog price."""

    product_id: int
    description: str
    amount: int
    price: Decimal


class InvoiceRepository:

    @staticmethod
    async def record_invoice(
        db: AsyncSession,
        header: OrderHeader,
        total: Decimal,
        lines: Sequence[ResolvedLine],
    ) -> Invoice:
        """
        Write the invoice header and one detail row per resolved line.

        Pure persistence: prices and stock were settled by the caller. Only
        flushes, so the rows share the caller's transaction with the stock
        decrements and disappear with it on rollback.
        """
        invoice = Invoice(user_id=header.user_id, username=header.username, total=total)
        invoice.details = [
            InvoiceDetail(
                product_id=line.product_id,
                description=line.description,
                amount=line.amount,
                price=line.price,
            )
            for line in lines
        ]
        db.add(invoice)
        await db.flush()
        return invoice

    @staticmethod
    async def get_invoices(db: AsyncSession) -> Sequence[Invoice]:
        result = await db.execute(select(Invoice).order_by(Invoice.id))
        return result.scalars().all()

    @staticmethod
    async def get_invoice(db: AsyncSession, invoice_id: int) -> Optional[Invoice]:
        result = await db.execute(select(Invoice).where(Invoice.id == invoice_id))
        return result.scalars().first()

    @staticmethod
    async def get_details(db: AsyncSession, product_id: Optional[int] = None) -> Sequence[InvoiceDetail]:
        stmt = select(InvoiceDetail).order_by(InvoiceDetail.id)
        if product_id is not None:
            stmt = stmt.where(InvoiceDetail.product_id == product_id)
        result = await db.execute(stmt)
        return result.scalars().all()
