from pydantic import BaseModel

from shared.schemas import APIModel


class UserLogin(BaseModel):
    username: str
    password: str


class TokenUser(APIModel):
    id: int
    username: str
    role_id: int


class TokenResponse(APIModel):
    access_token: str
    token_type: str = "bearer"
    user: TokenUser
