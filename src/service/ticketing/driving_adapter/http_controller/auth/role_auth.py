from typing import Optional

from dependency_injector.wiring import Provide, inject
from fastapi import Cookie, Depends
from opentelemetry import trace

from src.platform.config.core_setting import settings
from src.platform.config.di import Container
from src.platform.exception.exceptions import ForbiddenError
from src.service.ticketing.domain.entity.user_entity import UserEntity, UserRole
from src.service.ticketing.driving_adapter.http_controller.auth.jwt_auth import JwtAuth


class RoleAuthStrategy:
    @staticmethod
    def can_manage_events(user: UserEntity) -> bool:
        return user.is_organizer

    @staticmethod
    def can_buy(user: UserEntity) -> bool:
        return user.role == UserRole.BUYER


@inject
async def get_current_user(
    jwt_auth: JwtAuth = Depends(Provide[Container.jwt_auth]),
    token: Optional[str] = Cookie(None, alias=settings.AUTH_COOKIE_NAME),
) -> UserEntity:
    return await jwt_auth.get_current_user(token)


async def require_buyer(current_user: UserEntity = Depends(get_current_user)) -> UserEntity:
    tracer = trace.get_tracer(__name__)
    with tracer.start_as_current_span(
        'auth.require_buyer',
        attributes={
            'user.id': current_user.id or 0,
            'user.role': current_user.role.value,
        },
    ):
        if not RoleAuthStrategy.can_buy(current_user):
            raise ForbiddenError('Only buyers can perform this action')
        return current_user


async def require_organizer(
    current_user: UserEntity = Depends(get_current_user),
) -> UserEntity:
    if not RoleAuthStrategy.can_manage_events(current_user):
        raise ForbiddenError('Only organizers can perform this action')
    return current_user
