from typing import Optional, Sequence

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from .models import Product


class ProductRepository:

    @staticmethod
    async def create_product(db: AsyncSession, product: Product):
        db.add(product)
        await db.commit()
        await db.refresh(product)
        return product

    @staticmethod
    async def get_active_products(db: AsyncSession) -> Sequence[Product]:
        result = await db.execute(
            select(Product).where(Product.active.is_(True)).order_by(Product.id)
        )
        return result.scalars().all()

    @staticmethod
    async def get_active_product(db: AsyncSession, product_id: int) -> Optional[Product]:
        result = await db.execute(
            select(Product).where(Product.id == product_id, Product.active.is_(True))
        )
        return result.scalars().first()

    @staticmethod
    async def get_active_stock(db: AsyncSession, product_id: int) -> Optional[int]:
        result = await db.execute(
            select(Product.stock).where(Product.id == product_id, Product.active.is_(True))
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def update_product(db: AsyncSession, product: Product):
        db.add(product)
        await db.commit()
        await db.refresh(product)
        return product

    @staticmethod
    async def decrement_stock(db: AsyncSession, product_id: int, amount: int) -> Optional[Product]:
        """
        Conditional decrement: a single UPDATE guarded by ``stock >= amount``.

        The database evaluates the guard and the write together, so two
        concurrent decrements can never both pass when their sum exceeds the
        stock. Returns the refreshed product, or None if the guard matched no
        row. Does not commit.
        """
        result = await db.execute(
            update(Product)
            .where(
                Product.id == product_id,
                Product.active.is_(True),
                Product.stock >= amount,
            )
            .values(stock=Product.stock - amount)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            return None
        return await db.get(Product, product_id, populate_existing=True)
