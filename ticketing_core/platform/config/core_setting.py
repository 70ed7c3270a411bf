from pathlib import Path
from typing import Annotated, List, Literal

from pydantic import SecretStr, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


_PROJECT_ROOT = Path(__file__).resolve().parents[3]
_ENV_PATH = _PROJECT_ROOT / '.env'
_ENV_FILE = _ENV_PATH if _ENV_PATH.exists() else (_PROJECT_ROOT / '.env.example')


def _split_comma_separated(v: str | List[str] | None) -> List[str]:
    if isinstance(v, str) and not v.startswith('['):
        return [i.strip() for i in v.split(',') if i.strip()]
    elif isinstance(v, list):
        return v
    return []


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(_ENV_FILE),
        env_ignore_empty=True,
        extra='ignore',
    )

    PROJECT_NAME: str = 'Ticket Reservation Core'
    VERSION: str = '0.1.0'
    DEBUG: bool = False  # Logs @Logger.io args/returns when True
    SERVICE_NAME: str = 'ticketing-core'
    LOG_TO_FILE: bool = False

    # CORS
    BACKEND_CORS_ORIGINS: Annotated[List[str], NoDecode] = []

    @field_validator('BACKEND_CORS_ORIGINS', mode='before')
    @classmethod
    def assemble_cors_origins(cls, v: str | List[str]) -> List[str]:
        return _split_comma_separated(v)

    # Storage
    STORAGE_BACKEND: Literal['postgres', 'memory'] = 'postgres'

    # PostgreSQL Configuration
    POSTGRES_SERVER: str = 'localhost'
    POSTGRES_PORT: int = 5432
    POSTGRES_USER: str = 'postgres'
    POSTGRES_PASSWORD: SecretStr = SecretStr('postgres')
    POSTGRES_DB: str = 'ticketing_core'
    DATABASE_URL: str | None = None  # Overrides the POSTGRES_* fields when set

    # SQLAlchemy pool
    DB_POOL_SIZE: int = 10
    DB_POOL_MAX_OVERFLOW: int = 5
    DB_POOL_TIMEOUT: int = 30  # seconds
    DB_POOL_RECYCLE: int = 3600  # seconds
    DB_POOL_PRE_PING: bool = True

    @property
    def DATABASE_URL_ASYNC(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return (
            f'postgresql+asyncpg://{self.POSTGRES_USER}:'
            f'{self.POSTGRES_PASSWORD.get_secret_value()}@{self.POSTGRES_SERVER}:'
            f'{self.POSTGRES_PORT}/{self.POSTGRES_DB}'
        )

    # Booking reference
    BOOKING_REFERENCE_PREFIX: str = 'BK-'
    BOOKING_REFERENCE_MAX_ATTEMPTS: int = 5

    # Payment gateway
    PAYMENT_GATEWAY: Literal['mock', 'http'] = 'mock'
    PAYMENT_CURRENCY: str = 'usd'
    PAYMENT_GATEWAY_TIMEOUT_SECONDS: float = 10.0
    PAYMENT_GATEWAY_BASE_URL: str = 'https://api.stripe.com'
    PAYMENT_GATEWAY_API_KEY: SecretStr = SecretStr('sk_test_change_me')
    PAYMENT_WEBHOOK_SECRET: SecretStr = SecretStr('whsec_test_change_me')

    # Mock gateway behaviour (local development and tests)
    MOCK_PAYMENT_DECLINE_TOKENS: Annotated[List[str], NoDecode] = [
        'tok_chargeDeclined',
        'tok_chargeDeclinedInsufficientFunds',
    ]
    MOCK_PAYMENT_LATENCY_SECONDS: float = 0.0

    @field_validator('MOCK_PAYMENT_DECLINE_TOKENS', mode='before')
    @classmethod
    def assemble_decline_tokens(cls, v: str | List[str]) -> List[str]:
        return _split_comma_separated(v)


settings = Settings()  # type: ignore
