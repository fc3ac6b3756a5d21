"""Application Configuration - environment-driven settings via pydantic-settings.

Invariants:
    - All secrets come from environment variables (never hardcoded)
    - get_settings() is cached (lru_cache) - single instance per process
    - network_mode is an explicit value handed to components at construction time

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support
    - Defaults provided for all non-secret settings: sandbox network works out-of-the-box
"""

from decimal import Decimal
from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from backstop.core.domain_types import NetworkMode


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Database
    database_url: str = (
        "postgresql+asyncpg://backstop:backstop@db:5432/backstop"
    )

    @field_validator("database_url", mode="before")
    @classmethod
    def convert_postgres_url(cls, v: str) -> str:
        """Hosting providers hand out postgresql:// but asyncpg needs postgresql+asyncpg://."""
        if isinstance(v, str) and v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v

    database_pool_size: int = 20
    database_max_overflow: int = 10

    # Ledger
    network_mode: NetworkMode = NetworkMode.SANDBOX
    horizon_url: str = "https://horizon-testnet.stellar.org"
    ledger_base_fee: int = 100
    ledger_timeout_seconds: int = 30

    @field_validator("horizon_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    # Assets
    sandbox_stablecoin_code: str = "STABLEUSD"
    production_stablecoin_code: str = "USD"
    stablecoin_issuer: str = ""
    fee_reserve: Decimal = Decimal("1")

    # Credential vault
    credential_vault_key: str = ""
    scrypt_n: int = 2**14
    scrypt_r: int = 8
    scrypt_p: int = 1

    # Price oracle
    oracle_ticker_urls: list[str] = [
        "https://api.kraken.com/0/public/Ticker?pair=XLMUSD",
        "https://api.coinbase.com/v2/prices/XLM-USD/spot",
        "https://api.binance.com/api/v3/ticker/price?symbol=XLMUSDT",
    ]
    oracle_timeout_seconds: float = 10.0

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"


@lru_cache
def get_settings() -> Settings:
    return Settings()
