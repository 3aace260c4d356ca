from pathlib import Path
from typing import Annotated, List, Literal, Optional

from pydantic import SecretStr, TypeAdapter, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


_PROJECT_ROOT = Path(__file__).resolve().parents[3]
_ENV_PATH = _PROJECT_ROOT / '.env'
_ENV_FILE = _ENV_PATH if _ENV_PATH.exists() else (_PROJECT_ROOT / '.env.example')
_ORIGIN_LIST = TypeAdapter(List[str])


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(_ENV_FILE),
        env_ignore_empty=True,
        extra='ignore',
    )

    PROJECT_NAME: str = 'Ticket Marketplace'
    VERSION: str = '0.1.0'
    DEBUG: bool = True  # Set to False in production

    # Security
    SECRET_KEY: SecretStr = SecretStr('test_secret_key_change_in_production')
    ACCESS_TOKEN_EXPIRE_DAYS: int = 7
    ALGORITHM: str = 'HS256'
    AUTH_COOKIE_NAME: str = 'marketplace_auth'
    AUTH_COOKIE_SECURE: bool = False

    # CORS: a JSON list or comma-separated origins
    BACKEND_CORS_ORIGINS: Annotated[List[str], NoDecode] = []  # add your frontend URL here

    @field_validator('BACKEND_CORS_ORIGINS', mode='before')
    @classmethod
    def assemble_cors_origins(cls, v: str | List[str]) -> List[str]:
        if isinstance(v, str) and v.strip().startswith('['):
            return _ORIGIN_LIST.validate_json(v)
        elif isinstance(v, str):
            return [i.strip() for i in v.split(',') if i.strip()]
        elif isinstance(v, list):
            return v
        return []

    # PostgreSQL
    POSTGRES_SERVER: str = 'localhost'
    POSTGRES_PORT: int = 5432
    POSTGRES_USER: str = 'marketplace'
    POSTGRES_PASSWORD: SecretStr = SecretStr('marketplace')
    POSTGRES_DB: str = 'ticket_marketplace'
    POSTGRES_REPLICA_SERVER: Optional[str] = None
    POSTGRES_REPLICA_PORT: Optional[int] = None

    # Connection pool
    DB_POOL_SIZE_WRITE: int = 10
    DB_POOL_SIZE_READ: int = 20
    DB_POOL_MAX_OVERFLOW: int = 10
    DB_POOL_TIMEOUT: int = 30
    DB_POOL_RECYCLE: int = 3600
    DB_POOL_PRE_PING: bool = True
    DB_AUTO_CREATE_TABLES: bool = False  # local development without alembic

    @property
    def DATABASE_URL_ASYNC(self) -> str:
        password = self.POSTGRES_PASSWORD.get_secret_value()
        return (
            f'postgresql+asyncpg://{self.POSTGRES_USER}:{password}'
            f'@{self.POSTGRES_SERVER}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}'
        )

    @property
    def DATABASE_READ_URL_ASYNC(self) -> str:
        """Replica URL, or the primary when no replica is configured"""
        if not self.POSTGRES_REPLICA_SERVER:
            return self.DATABASE_URL_ASYNC
        password = self.POSTGRES_PASSWORD.get_secret_value()
        port = self.POSTGRES_REPLICA_PORT or self.POSTGRES_PORT
        return (
            f'postgresql+asyncpg://{self.POSTGRES_USER}:{password}'
            f'@{self.POSTGRES_REPLICA_SERVER}:{port}/{self.POSTGRES_DB}'
        )

    # Payment processor
    PAYMENT_PROVIDER: Literal['stripe', 'mock'] = 'mock'
    PAYMENT_CURRENCY: str = 'usd'
    PAYMENT_TIMEOUT_SECONDS: float = 10.0
    STRIPE_SECRET_KEY: SecretStr = SecretStr('')
    STRIPE_WEBHOOK_SECRET: SecretStr = SecretStr('')
    MOCK_PAYMENT_WEBHOOK_SECRET: SecretStr = SecretStr('mock_webhook_secret')
    CHECKOUT_SUCCESS_URL: str = (
        'http://localhost:3000/checkout/success?session_id={CHECKOUT_SESSION_ID}'
    )
    CHECKOUT_CANCEL_URL: str = 'http://localhost:3000/events/{event_id}'

    # Ticket credential
    CREDENTIAL_SECRET: SecretStr = SecretStr('test_credential_secret_change_in_production')
    CREDENTIAL_RENDER_URL: str = 'https://api.qrserver.com/v1/create-qr-code/?size=300x300&data='

    # E-mail
    EMAIL_PROVIDER: Literal['resend', 'mock'] = 'mock'
    EMAIL_FROM: str = 'Ticket Marketplace <tickets@example.com>'
    RESEND_API_KEY: SecretStr = SecretStr('')
    RESEND_API_URL: str = 'https://api.resend.com/emails'
    EMAIL_TIMEOUT_SECONDS: float = 5.0

    # Checkout limits
    MAX_TICKETS_PER_TIER: int = 50
    MAX_TICKETS_PER_ORDER: int = 100


settings = Settings()  # type: ignore
