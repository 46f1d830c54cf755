"""Public package interface for fcm_sender."""

from .backoff import BackoffController, BackoffState
from .client import AsyncFcmClient, FcmClient
from .config import ClientConfig, PersistenceBackend, PersistenceConfig, RetryConfig, TelemetryConfig
from .config_loader import load_config
from .errors import (
    BadRequestError,
    DeadlineExceededError,
    FcmError,
    MalformedResponseError,
    RetriesExhaustedError,
    TokenNotFoundError,
    TransportError,
    UnauthorizedError,
)
from .persistence import (
    MemoryTokenStore,
    RedisTokenStore,
    SQLiteTokenStore,
    TokenRegistry,
    TokenStore,
    create_token_store,
)
from .reconcile import Reconciliation, classify_response
from .requests_support import RequestsTransport
from .retry_after import parse_retry_after
from .telemetry import DispatchTelemetry, InMemoryTelemetrySink, LoggingTelemetrySink
from .transport import AsyncHttpxTransport, HttpxTransport, TransportResponse
from .types import BatchResponse, Message, Notification, OutcomeKind, Result

__all__ = [
    "AsyncFcmClient",
    "AsyncHttpxTransport",
    "BackoffController",
    "BackoffState",
    "BadRequestError",
    "BatchResponse",
    "ClientConfig",
    "DeadlineExceededError",
    "DispatchTelemetry",
    "FcmClient",
    "FcmError",
    "HttpxTransport",
    "InMemoryTelemetrySink",
    "LoggingTelemetrySink",
    "MalformedResponseError",
    "MemoryTokenStore",
    "Message",
    "Notification",
    "OutcomeKind",
    "PersistenceBackend",
    "PersistenceConfig",
    "Reconciliation",
    "RedisTokenStore",
    "RequestsTransport",
    "Result",
    "RetriesExhaustedError",
    "RetryConfig",
    "SQLiteTokenStore",
    "TelemetryConfig",
    "TokenNotFoundError",
    "TokenRegistry",
    "TokenStore",
    "TransportError",
    "TransportResponse",
    "UnauthorizedError",
    "classify_response",
    "create_token_store",
    "load_config",
    "parse_retry_after",
]
