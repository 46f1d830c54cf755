"""Token registry exports."""

from ..config import PersistenceBackend, PersistenceConfig
from .base import TokenRegistry, TokenStore
from .memory import MemoryTokenStore
from .redis import RedisTokenStore
from .sqlite import SQLiteTokenStore


def create_token_store(config: PersistenceConfig) -> TokenRegistry:
    """Build the registry selected by ``config.backend``."""

    if config.backend is PersistenceBackend.SQLITE:
        return SQLiteTokenStore(config.dsn or ":memory:", namespace=config.namespace)
    if config.backend is PersistenceBackend.REDIS:
        if config.dsn:
            return RedisTokenStore(config.dsn, namespace=config.namespace)
        return RedisTokenStore(namespace=config.namespace)
    return MemoryTokenStore(strict=False)


__all__ = [
    "MemoryTokenStore",
    "RedisTokenStore",
    "SQLiteTokenStore",
    "TokenRegistry",
    "TokenStore",
    "create_token_store",
]
