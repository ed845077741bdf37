"""
Process-wide settings for the rematerializer.

Values come from the environment (prefix ``REMAT_``) or a ``.env`` file.
Per-table connection properties are not settings; they are passed to
``Rematerializer.configure``.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from rematerializer.models import ProductTypeEnum


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="REMAT_",
        env_file=".env",
        env_ignore_empty=True,
        extra="ignore",
    )

    APPLICATION_NAME: str = "rematerializer"

    # Seconds to wait for the backing database to accept a connection
    CONNECT_TIMEOUT: int = Field(default=10, ge=1)
    # Per-session statement timeout in seconds; None = driver default (no limit)
    STATEMENT_TIMEOUT: float | None = Field(default=None, gt=0)

    # Percentage of fetches whose latency is reported (100 = every call)
    LATENCY_SAMPLE_PERCENT: int = Field(default=100, ge=1, le=100)

    DEFAULT_PORTS: dict[ProductTypeEnum, int] = {
        ProductTypeEnum.POSTGRES: 5432,
        ProductTypeEnum.MYSQL: 3306,
        ProductTypeEnum.TRINO: 8080,
    }


settings = Settings()  # type: ignore
