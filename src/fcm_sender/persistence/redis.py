"""Redis-backed token registry."""

from __future__ import annotations

try:
    import redis
except ImportError:  # pragma: no cover - optional dependency
    redis = None

from ..errors import TokenNotFoundError
from .base import TokenRegistry

# Atomic rename: fails when the source token is not a member.
_RENAME_SCRIPT = """
if redis.call('SREM', KEYS[1], ARGV[1]) == 0 then
    return 0
end
redis.call('SADD', KEYS[1], ARGV[2])
return 1
"""


class RedisTokenStore(TokenRegistry):
    """Token registry stored as one Redis set per namespace."""

    def __init__(
        self,
        dsn: str = "redis://localhost:6379/0",
        *,
        namespace: str = "fcm_sender",
        client: "redis.Redis | None" = None,
    ) -> None:
        if client is None:
            if redis is None:
                raise RuntimeError("redis-py is required for RedisTokenStore")
            client = redis.Redis.from_url(dsn)
        self._client = client
        self._key = f"{namespace}:registration_tokens"
        self._rename = self._client.register_script(_RENAME_SCRIPT)

    def add(self, token: str) -> None:
        self._client.sadd(self._key, token)

    def contains(self, token: str) -> bool:
        return bool(self._client.sismember(self._key, token))

    def list(self) -> list[str]:
        members = self._client.smembers(self._key)
        return sorted(
            member.decode("utf-8") if isinstance(member, bytes) else member for member in members
        )

    def rename(self, old_token: str, new_token: str) -> None:
        if not self._rename(keys=[self._key], args=[old_token, new_token]):
            raise TokenNotFoundError(old_token)

    def delete(self, token: str) -> None:
        if not self._client.srem(self._key, token):
            raise TokenNotFoundError(token)

    def clear(self) -> None:
        self._client.delete(self._key)


__all__ = ["RedisTokenStore"]
