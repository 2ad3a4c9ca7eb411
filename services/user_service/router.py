from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from shared.config.database import get_db
from shared.config.settings import ADMIN_ROLE_ID
from shared.security.dependencies import get_current_principal, require_role

from .schemas import RoleCreate, RoleResponse, UserCreate, UserResponse, UserUpdate
from .service import RoleService, UserService

router = APIRouter(prefix="/api/users", tags=["Users"])
roles_router = APIRouter(prefix="/api/roles", tags=["Roles"])


@router.post(
    "",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new user account",
)
async def register_user(payload: UserCreate, db: AsyncSession = Depends(get_db)):
    return await UserService.register(db, payload)


@router.get("", response_model=list[UserResponse], dependencies=[Depends(require_role(ADMIN_ROLE_ID))])
async def list_users(db: AsyncSession = Depends(get_db)):
    return await UserService.list_users(db)


@router.get("/{user_id}", response_model=UserResponse, dependencies=[Depends(require_role(ADMIN_ROLE_ID))])
async def get_user(user_id: int, db: AsyncSession = Depends(get_db)):
    return await UserService.get_user(db, user_id)


@router.put("/{user_id}", response_model=UserResponse, dependencies=[Depends(require_role(ADMIN_ROLE_ID))])
async def update_user(user_id: int, payload: UserUpdate, db: AsyncSession = Depends(get_db)):
    return await UserService.update_user(db, user_id, payload)


@router.delete("/{user_id}", response_model=UserResponse, dependencies=[Depends(require_role(ADMIN_ROLE_ID))])
async def deactivate_user(user_id: int, db: AsyncSession = Depends(get_db)):
    return await UserService.deactivate_user(db, user_id)


@roles_router.get("", response_model=list[RoleResponse], dependencies=[Depends(get_current_principal)])
async def list_roles(db: AsyncSession = Depends(get_db)):
    return await RoleService.list_roles(db)


@roles_router.post("", response_model=RoleResponse, status_code=status.HTTP_201_CREATED)
async def create_role(payload: RoleCreate, db: AsyncSession = Depends(get_db)):
    return await RoleService.create_role(db, payload)
