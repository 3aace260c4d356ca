"""
Unit tests for JwtAuth

The token carries only the user id and role; the current user is always
re-read so deactivation applies on the next request.
"""

from unittest.mock import AsyncMock

import jwt
import pytest

from src.platform.exception.exceptions import AuthenticationError, ForbiddenError, LoginError
from src.service.ticketing.app.interface.i_user_query_repo import IUserQueryRepo
from src.service.ticketing.domain.entity.user_entity import UserEntity, UserRole
from src.service.ticketing.driving_adapter.http_controller.auth.jwt_auth import JwtAuth


BUYER = UserEntity(id=2, email='buyer@example.com', name='Buyer', role=UserRole.BUYER)


@pytest.fixture
def user_query_repo() -> AsyncMock:
    repo = AsyncMock(spec=IUserQueryRepo)
    repo.get_by_id.return_value = BUYER
    return repo


@pytest.fixture
def jwt_auth(user_query_repo) -> JwtAuth:
    return JwtAuth(user_query_repo=user_query_repo)


@pytest.mark.unit
class TestJwtAuth:
    async def test_token_round_trip(self, jwt_auth, user_query_repo):
        token = jwt_auth.create_jwt_token(BUYER)

        user = await jwt_auth.get_current_user(token)

        assert user == BUYER
        user_query_repo.get_by_id.assert_awaited_once_with(user_id=2)
        assert jwt_auth.decode_jwt_token(token)['role'] == 'buyer'

    async def test_missing_token(self, jwt_auth):
        with pytest.raises(AuthenticationError, match='Not authenticated'):
            await jwt_auth.get_current_user(None)

    async def test_token_signed_with_other_key(self, jwt_auth):
        token = jwt.encode({'sub': '2'}, 'another-key', algorithm=jwt_auth.algorithm)

        with pytest.raises(AuthenticationError, match='Invalid token'):
            await jwt_auth.get_current_user(token)

    async def test_token_without_subject(self, jwt_auth):
        token = jwt.encode({'role': 'buyer'}, jwt_auth.secret, algorithm=jwt_auth.algorithm)

        with pytest.raises(AuthenticationError, match='Invalid token'):
            await jwt_auth.get_current_user(token)

    async def test_deleted_user(self, jwt_auth, user_query_repo):
        token = jwt_auth.create_jwt_token(BUYER)
        user_query_repo.get_by_id.return_value = None

        with pytest.raises(AuthenticationError, match='no longer exists'):
            await jwt_auth.get_current_user(token)

    async def test_deactivated_user(self, jwt_auth, user_query_repo):
        token = jwt_auth.create_jwt_token(BUYER)
        user_query_repo.get_by_id.return_value = UserEntity(
            id=2, email='buyer@example.com', name='Buyer', is_active=False
        )

        with pytest.raises(ForbiddenError):
            await jwt_auth.get_current_user(token)

    async def test_authenticate_with_bad_password(self, jwt_auth, user_query_repo):
        user_query_repo.verify_password.return_value = None

        with pytest.raises(LoginError):
            await jwt_auth.authenticate_user(email='buyer@example.com', password='wrong')
