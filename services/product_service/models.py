from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, Integer, Numeric, String

from shared.config.database import Base, utcnow


class Product(Base):
    __tablename__ = "products"
    __table_args__ = (
        CheckConstraint("stock >= 0", name="ck_products_stock_non_negative"),
        CheckConstraint("price >= 0", name="ck_products_price_non_negative"),
    )

    id = Column(Integer, primary_key=True, index=True)
    description = Column(String(255), unique=True, nullable=False)
    lot_number = Column(String(100), nullable=False)
    price = Column(Numeric(12, 2), nullable=False)
    stock = Column(Integer, nullable=False)
    entry_date = Column(DateTime(timezone=True), nullable=False)
    active = Column(Boolean, default=True, nullable=False)  # soft delete flag
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)
