from typing import Sequence

import structlog
from fastapi import HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from shared.errors import InsufficientStockError, UnknownReferenceError
from shared.observability.metrics import invoicing_stock_guard_rejections_total

from .models import Product
from .repository import ProductRepository
from .schemas import ProductCreate

logger = structlog.get_logger(__name__)


class ProductService:

    @staticmethod
    async def create_product(db: AsyncSession, data: ProductCreate) -> Product:
        product = Product(
            description=data.description,
            lot_number=data.lot_number,
            price=data.price,
            stock=data.stock,
            entry_date=data.entry_date,
        )
        try:
            return await ProductRepository.create_product(db, product)
        except IntegrityError:
            await db.rollback()
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="A product with this description already exists",
            )

    @staticmethod
    async def list_products(db: AsyncSession) -> Sequence[Product]:
        return await ProductRepository.get_active_products(db)

    @staticmethod
    async def get_product_by_id(db: AsyncSession, product_id: int) -> Product:
        product = await ProductRepository.get_active_product(db, product_id)
        if not product:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found")
        return product

    @staticmethod
    async def update_product(db: AsyncSession, product_id: int, data: ProductCreate) -> Product:
        product = await ProductService.get_product_by_id(db, product_id)
        product.description = data.description
        product.lot_number = data.lot_number
        product.price = data.price
        product.stock = data.stock
        product.entry_date = data.entry_date
        try:
            return await ProductRepository.update_product(db, product)
        except IntegrityError:
            await db.rollback()
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="A product with this description already exists",
            )

    @staticmethod
    async def deactivate_product(db: AsyncSession, product_id: int) -> None:
        product = await ProductService.get_product_by_id(db, product_id)
        product.active = False
        await ProductRepository.update_product(db, product)
        logger.info("product.deactivated", product_id=product_id)

    @staticmethod
    async def decrement_stock(db: AsyncSession, product_id: int, amount: int) -> Product:
        """
        Reserve ``amount`` units inside the caller's transaction.

        Raises InsufficientStockError with the stock observed after the guard
        failed, or UnknownReferenceError if the product is gone or inactive.
        """
        product = await ProductRepository.decrement_stock(db, product_id, amount)
        if product is not None:
            return product

        invoicing_stock_guard_rejections_total.inc()
        available = await ProductRepository.get_active_stock(db, product_id)
        if available is None:
            raise UnknownReferenceError("product", product_id)
        logger.info(
            "stock.guard_rejected",
            product_id=product_id,
            available=available,
            requested=amount,
        )
        raise InsufficientStockError(product_id, available, amount)
