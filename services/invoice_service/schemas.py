from datetime import datetime

from pydantic import Field

from shared.schemas import MAX_INT32, APIModel, Money


# --- Order intake request ---

class OrderLine(APIModel):
    product_id: int = Field(gt=0, le=10)
    description: str = Field(min_length=3, max_length=255)
    amount: int = Field(gt=0, le=MAX_INT32)


class OrderHeader(APIModel):
    user_id: int = Field(gt=0, le=MAX_INT32)
    username: str = Field(min_length=3, max_length=10)


class InvoiceCreate(OrderHeader):
    products: list[OrderLine] = Field(min_length=1)


# --- Responses ---

class InvoiceDetailResponse(APIModel):
    id: int
    invoice_id: int
    product_id: int
    description: str
    amount: int
    price: Money


class InvoiceResponse(APIModel):
    id: int
    user_id: int
    username: str
    total: Money
    created_at: datetime
    updated_at: datetime


class InvoiceWithDetails(APIModel):
    invoice: InvoiceResponse
    products: list[InvoiceDetailResponse]
