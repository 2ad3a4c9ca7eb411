from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import relationship

from shared.config.database import Base, utcnow


class Invoice(Base):
    __tablename__ = "invoices"
    __table_args__ = (
        CheckConstraint("total >= 0", name="ck_invoices_total_non_negative"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    username = Column(String(50), nullable=False)  # snapshot taken at intake
    total = Column(Numeric(12, 2), nullable=False)  # snapshot, never recomputed
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    details = relationship(
        "InvoiceDetail",
        back_populates="invoice",
        lazy="selectin",
        order_by="InvoiceDetail.id",
    )


class InvoiceDetail(Base):
    __tablename__ = "invoice_details"
    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_invoice_details_amount_positive"),
        CheckConstraint("price >= 0", name="ck_invoice_details_price_non_negative"),
    )

    id = Column(Integer, primary_key=True, index=True)
    invoice_id = Column(Integer, ForeignKey("invoices.id"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False, index=True)
    description = Column(String(255), nullable=False)
    amount = Column(Integer, nullable=False)
    price = Column(Numeric(12, 2), nullable=False)  # unit price frozen at sale time
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    invoice = relationship("Invoice", back_populates="details")
