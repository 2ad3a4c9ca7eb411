from typing import Sequence

import structlog
from fastapi import HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from shared.security.passwords import hash_password

from .models import Role, User
from .repository import RoleRepository, UserRepository
from .schemas import RoleCreate, UserCreate, UserUpdate

logger = structlog.get_logger(__name__)


class UserService:

    @staticmethod
    async def _ensure_role(db: AsyncSession, role_id: int) -> None:
        if not await RoleRepository.get_by_id(db, role_id):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Invalid roleId, does not exist",
            )

    @staticmethod
    async def _ensure_username_free(db: AsyncSession, username: str) -> None:
        if await UserRepository.get_by_username(db, username):
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Username already registered",
            )

    @staticmethod
    async def register(db: AsyncSession, data: UserCreate) -> User:
        await UserService._ensure_role(db, data.role_id)
        await UserService._ensure_username_free(db, data.username)
        user = User(
            username=data.username,
            hashed_password=hash_password(data.password),
            role_id=data.role_id,
        )
        try:
            user = await UserRepository.create(db, user)
        except IntegrityError:
            # Lost a race against another registration with the same username
            await db.rollback()
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Username already registered",
            )
        logger.info("user.registered", user_id=user.id, role_id=user.role_id)
        return user

    @staticmethod
    async def list_users(db: AsyncSession) -> Sequence[User]:
        return await UserRepository.list_all(db)

    @staticmethod
    async def get_user(db: AsyncSession, user_id: int) -> User:
        user = await UserRepository.get_by_id(db, user_id)
        if not user:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
        return user

    @staticmethod
    async def update_user(db: AsyncSession, user_id: int, data: UserUpdate) -> User:
        user = await UserService.get_user(db, user_id)

        if data.username is not None and data.username != user.username:
            await UserService._ensure_username_free(db, data.username)
            user.username = data.username
        if data.password is not None:
            user.hashed_password = hash_password(data.password)
        if data.role_id is not None and data.role_id != user.role_id:
            await UserService._ensure_role(db, data.role_id)
            user.role_id = data.role_id

        try:
            return await UserRepository.update(db, user)
        except IntegrityError:
            await db.rollback()
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Username already registered",
            )

    @staticmethod
    async def deactivate_user(db: AsyncSession, user_id: int) -> User:
        """Soft delete. Invoices keep pointing at the row, so it is never removed."""
        user = await UserService.get_user(db, user_id)
        user.is_active = False
        user = await UserRepository.update(db, user)
        logger.info("user.deactivated", user_id=user.id)
        return user


class RoleService:

    @staticmethod
    async def create_role(db: AsyncSession, data: RoleCreate) -> Role:
        if await RoleRepository.get_by_name(db, data.name):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid role name")
        try:
            return await RoleRepository.create(db, Role(name=data.name))
        except IntegrityError:
            await db.rollback()
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid role name")

    @staticmethod
    async def list_roles(db: AsyncSession) -> Sequence[Role]:
        return await RoleRepository.list_all(db)
