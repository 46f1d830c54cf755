"""Configuration models for the multicast client."""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, PositiveFloat, PositiveInt, ValidationInfo, field_validator

DEFAULT_ENDPOINT = "https://fcm.googleapis.com/fcm/send"


class RetryConfig(BaseModel):
    """Backoff bounds and the attempt limit for a single send."""

    model_config = ConfigDict(frozen=True)

    min_interval_seconds: PositiveFloat = Field(
        default=1.0,
        description="Lower bound for every wait and the starting point of the exponential curve.",
    )
    max_interval_seconds: PositiveFloat = Field(
        default=10.0,
        description="Ceiling for computed waits. Server Retry-After hints may exceed it.",
    )
    max_attempts: PositiveInt = Field(
        default=5,
        description="Maximum number of attempts, the first one included.",
    )

    @field_validator("max_interval_seconds")
    @classmethod
    def _validate_range(cls, value: float, info: ValidationInfo) -> float:
        minimum = info.data.get("min_interval_seconds", 0.0)
        if value < minimum:
            raise ValueError("max_interval_seconds cannot be smaller than min_interval_seconds")
        return value


class TelemetryConfig(BaseModel):
    """Controls emission of structured dispatch events."""

    enabled: bool = False
    sample_rate: float = Field(default=1.0, ge=0.0, le=1.0)
    include_tokens: bool = Field(
        default=False,
        description="Attach registration tokens to retry and failure events.",
    )


class PersistenceBackend(str, Enum):
    """Supported token registry backends."""

    MEMORY = "memory"
    SQLITE = "sqlite"
    REDIS = "redis"


class PersistenceConfig(BaseModel):
    """Token registry configuration."""

    backend: PersistenceBackend = PersistenceBackend.MEMORY
    dsn: Optional[str] = None
    namespace: str = Field(default="fcm_sender")


class ClientConfig(BaseModel):
    """Top-level configuration object for the package."""

    api_key: str = ""
    endpoint: str = DEFAULT_ENDPOINT
    timeout_seconds: PositiveFloat = Field(
        default=30.0,
        description="Per-request HTTP timeout handed to the transport.",
    )
    retry: RetryConfig = Field(default_factory=RetryConfig)
    telemetry: TelemetryConfig = Field(default_factory=TelemetryConfig)
    persistence: PersistenceConfig = Field(default_factory=PersistenceConfig)


__all__ = [
    "ClientConfig",
    "DEFAULT_ENDPOINT",
    "PersistenceBackend",
    "PersistenceConfig",
    "RetryConfig",
    "TelemetryConfig",
]
