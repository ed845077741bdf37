"""
Configuration and result schemas for the rematerializer.

BackingDatabaseConfig is parsed from the loosely-typed properties mapping the
cache hands to ``configure``; unknown keys are ignored.
"""

from collections.abc import Mapping
from enum import Enum
from typing import Any, NamedTuple

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)

from rematerializer.core.config import settings
from rematerializer.core.errors import ConfigurationError
from rematerializer.core.registry import ColumnTypeRegistry
from rematerializer.models import ProductTypeEnum


class BackingDatabaseConfig(BaseModel):
    """Connection properties of the backing database; password omitted from repr."""

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    product_type: ProductTypeEnum = ProductTypeEnum.POSTGRES
    hosts: tuple[str, ...] = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices("hosts", "host", "hostnames"),
        description="Tried in order until one accepts a connection.",
    )
    port: int | None = Field(default=None, ge=1, le=65535)
    database: str = Field(
        ...,
        min_length=1,
        max_length=255,
        validation_alias=AliasChoices("database", "sid", "dbname"),
    )
    username: str = Field(
        ...,
        min_length=1,
        max_length=255,
        validation_alias=AliasChoices("username", "user"),
    )
    password: str = Field(default="", max_length=512, repr=False)
    use_ssl: bool = Field(default=False, description="For Trino: use HTTPS. When True, password is required.")

    @field_validator("hosts", mode="before")
    @classmethod
    def split_hosts(cls, v: Any) -> Any:
        if isinstance(v, str):
            v = v.split(",")
        if isinstance(v, (list, tuple)):
            return tuple(str(h).strip() for h in v if h is not None and str(h).strip())
        return v

    @model_validator(mode="after")
    def trino_ssl_requires_password(self) -> "BackingDatabaseConfig":
        if (
            self.product_type == ProductTypeEnum.TRINO
            and self.use_ssl
            and not (self.password and self.password.strip())
        ):
            raise ValueError("Password is required for Trino when using SSL/HTTPS.")
        return self

    @property
    def resolved_port(self) -> int:
        return self.port or settings.DEFAULT_PORTS[self.product_type]

    @classmethod
    def from_properties(cls, properties: Mapping[str, Any]) -> "BackingDatabaseConfig":
        """Parse a properties mapping. Raises ConfigurationError on invalid input."""
        try:
            return cls.model_validate(dict(properties))
        except ValidationError as e:
            details = "; ".join(
                f"{'.'.join(str(p) for p in err.get('loc', ())) or 'config'}: {err.get('msg')}"
                for err in e.errors()
            )
            raise ConfigurationError(f"Invalid backing database properties: {details}") from e


class RematerializerConfig(BaseModel):
    """Immutable per-instance configuration, set once by ``configure``."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    schema_name: str = Field(..., min_length=1)
    table_name: str = Field(..., min_length=1)
    database: BackingDatabaseConfig
    registry: ColumnTypeRegistry


class FetchStatus(str, Enum):
    FOUND = "found"
    ABSENT = "absent"
    FAILED = "failed"


class FetchResult(NamedTuple):
    status: FetchStatus
    values: tuple[Any, ...] | None = None
    stage: str | None = None
    error: BaseException | None = None

    @property
    def ok(self) -> bool:
        """True unless the fetch failed (a confirmed absent row is ok)."""
        return self.status != FetchStatus.FAILED
