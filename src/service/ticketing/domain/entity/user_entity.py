from datetime import datetime
from enum import StrEnum
from typing import TYPE_CHECKING, Optional

import attrs
from pydantic import SecretStr

from src.platform.exception.exceptions import DomainError, ForbiddenError, LoginError


if TYPE_CHECKING:
    from src.service.ticketing.app.interface.i_password_hasher import IPasswordHasher


class UserRole(StrEnum):
    BUYER = 'buyer'
    ORGANIZER = 'organizer'
    ADMIN = 'admin'


@attrs.define
class UserEntity:
    email: str = ''
    name: str = ''
    hashed_password: str = attrs.field(default='', repr=False)
    id: Optional[int] = None
    role: UserRole = UserRole.BUYER
    is_active: bool = True
    created_at: Optional[datetime] = None

    @classmethod
    def register(
        cls,
        *,
        email: str,
        name: str,
        role: UserRole,
        plain_password: SecretStr,
        password_hasher: 'IPasswordHasher',
    ) -> 'UserEntity':
        if not name.strip():
            raise DomainError('Name cannot be empty')
        if len(plain_password.get_secret_value()) < 8:
            raise DomainError('Password must be at least 8 characters')
        cls.validate_role(role)
        return cls(
            email=email.strip().lower(),
            name=name.strip(),
            role=UserRole(role),
            hashed_password=password_hasher.hash_password(plain_password=plain_password),
        )

    def validate_active(self) -> None:
        if not self.is_active:
            raise ForbiddenError('User is inactive')

    @property
    def is_organizer(self) -> bool:
        return self.role in (UserRole.ORGANIZER, UserRole.ADMIN)

    @staticmethod
    def validate_user_exists(user_entity: Optional['UserEntity']) -> 'UserEntity':
        if not user_entity:
            raise LoginError('LOGIN_BAD_CREDENTIALS')
        return user_entity

    @staticmethod
    def validate_role(role: str) -> None:
        valid_roles = [r.value for r in UserRole]
        if role not in valid_roles:
            raise DomainError(f'Invalid role: {role}. Must be one of: {", ".join(valid_roles)}')
