from datetime import datetime
from decimal import Decimal

from pydantic import AliasChoices, Field

from shared.schemas import MAX_INT32, APIModel, Money


class ProductCreate(APIModel):
    description: str = Field(min_length=3, max_length=20)
    # lotnumber/entrydate are the field names older clients send
    lot_number: str = Field(
        min_length=1, max_length=100, validation_alias=AliasChoices("lotNumber", "lotnumber", "lot_number")
    )
    price: Decimal = Field(ge=0, max_digits=12, decimal_places=2)
    stock: int = Field(ge=0, le=MAX_INT32)
    entry_date: datetime = Field(validation_alias=AliasChoices("entryDate", "entrydate", "entry_date"))


class ProductResponse(APIModel):
    id: int
    description: str
    lot_number: str
    price: Money
    stock: int
    entry_date: datetime
    active: bool
