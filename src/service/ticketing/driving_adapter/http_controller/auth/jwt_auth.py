"""
Cookie JWT authentication

The token only carries the user id. The current user is resolved with an
in-process lookup through IUserQueryRepo, so role changes and deactivation
take effect on the next request instead of at token expiry.
"""

from datetime import datetime, timedelta, timezone
from typing import Dict, Optional

import jwt

from src.platform.config.core_setting import settings
from src.platform.exception.exceptions import AuthenticationError
from src.service.ticketing.app.interface.i_user_query_repo import IUserQueryRepo
from src.service.ticketing.domain.entity.user_entity import UserEntity


class JwtAuth:
    def __init__(self, *, user_query_repo: IUserQueryRepo) -> None:
        self.user_query_repo = user_query_repo
        self.secret = settings.SECRET_KEY.get_secret_value()
        self.algorithm = settings.ALGORITHM
        self.token_expire_days = settings.ACCESS_TOKEN_EXPIRE_DAYS

    @property
    def max_age_seconds(self) -> int:
        return self.token_expire_days * 24 * 60 * 60

    def create_jwt_token(self, user_entity: UserEntity) -> str:
        now = datetime.now(timezone.utc)
        payload = {
            'sub': str(user_entity.id),
            'exp': now + timedelta(days=self.token_expire_days),
            'iat': now,
            'role': user_entity.role,
        }
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def decode_jwt_token(self, token: str) -> Dict:
        try:
            return jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except jwt.PyJWTError as e:
            raise AuthenticationError('Invalid token') from e

    async def authenticate_user(self, *, email: str, password: str) -> UserEntity:
        user_entity = await self.user_query_repo.verify_password(
            email=email, plain_password=password
        )
        validated_user = UserEntity.validate_user_exists(user_entity)
        validated_user.validate_active()
        return validated_user

    async def get_current_user(self, token: Optional[str]) -> UserEntity:
        if not token:
            raise AuthenticationError('Not authenticated')

        payload = self.decode_jwt_token(token)
        try:
            user_id = int(payload['sub'])
        except (KeyError, TypeError, ValueError) as e:
            raise AuthenticationError('Invalid token') from e

        user_entity = await self.user_query_repo.get_by_id(user_id=user_id)
        if user_entity is None:
            raise AuthenticationError('User no longer exists')
        user_entity.validate_active()
        return user_entity
