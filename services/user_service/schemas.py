from datetime import datetime
from typing import Optional

from pydantic import Field

from shared.schemas import APIModel


class UserCreate(APIModel):
    username: str = Field(min_length=3, max_length=10)
    password: str = Field(pattern=r"^[a-zA-Z0-9]{3,30}$")
    role_id: int = Field(ge=1, le=10)


class UserUpdate(APIModel):
    username: Optional[str] = Field(default=None, min_length=3, max_length=10)
    password: Optional[str] = Field(default=None, pattern=r"^[a-zA-Z0-9]{3,30}$")
    role_id: Optional[int] = Field(default=None, ge=1, le=10)


class UserResponse(APIModel):
    id: int
    username: str
    role_id: int
    is_active: bool
    created_at: datetime


class RoleCreate(APIModel):
    name: str = Field(min_length=3, max_length=10)


class RoleResponse(APIModel):
    id: int
    name: str
    created_at: datetime
