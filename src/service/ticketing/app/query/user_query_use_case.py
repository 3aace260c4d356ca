"""
User Management Use Cases (Use Case Layer)
"""

from typing import Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from pydantic import SecretStr

from src.platform.config.di import Container
from src.platform.logging.loguru_io import Logger
from src.service.ticketing.app.interface.i_password_hasher import IPasswordHasher
from src.service.ticketing.app.interface.i_user_command_repo import IUserCommandRepo
from src.service.ticketing.domain.entity.user_entity import UserEntity, UserRole


class UserUseCase:
    """Account registration; lookups for authentication live in JwtAuth"""

    def __init__(
        self,
        *,
        user_command_repo: IUserCommandRepo,
        password_hasher: IPasswordHasher,
    ) -> None:
        self.user_command_repo = user_command_repo
        self.password_hasher = password_hasher

    @classmethod
    @inject
    def depends(
        cls,
        user_command_repo: IUserCommandRepo = Depends(Provide[Container.user_command_repo]),
        password_hasher: IPasswordHasher = Depends(Provide[Container.password_hasher]),
    ) -> Self:
        return cls(user_command_repo=user_command_repo, password_hasher=password_hasher)

    @Logger.io
    async def create_user(
        self,
        *,
        email: str,
        password: SecretStr,
        name: str,
        role: UserRole = UserRole.BUYER,
    ) -> UserEntity:
        user_entity = UserEntity.register(
            email=email,
            name=name,
            role=role,
            plain_password=password,
            password_hasher=self.password_hasher,
        )
        return await self.user_command_repo.create(user_entity=user_entity)
