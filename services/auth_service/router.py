from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from services.user_service.schemas import UserResponse
from shared.config.database import get_db
from shared.config.settings import LOGIN_RATE_LIMIT
from shared.security import Principal, get_current_principal, limiter

from .schemas import TokenResponse, UserLogin
from .service import AuthService

router = APIRouter(prefix="/api/auth", tags=["Authentication"])


@router.post(
    "",
    response_model=TokenResponse,
    summary="Authenticate and receive a JWT access token",
)
@limiter.limit(LOGIN_RATE_LIMIT)
async def login(request: Request, payload: UserLogin, db: AsyncSession = Depends(get_db)):
    # slowapi needs the raw request to key the limit on the caller
    return await AuthService.login(db, payload)


@router.get(
    "/me",
    response_model=UserResponse,
    summary="Get the current authenticated user's profile",
)
async def get_me(
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    return await AuthService.get_user_by_id(db, principal.user_id)
