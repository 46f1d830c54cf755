"""Token registry interfaces consumed by the dispatch engine."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Protocol


class TokenStore(Protocol):
    """Narrow capability the engine needs to keep a registry in sync.

    Implementations must be safe to call from concurrent sends. Either method
    may return an awaitable when used with the async client.
    """

    def rename(self, old_token: str, new_token: str) -> None:
        ...

    def delete(self, token: str) -> None:
        ...


class TokenRegistry(ABC):
    """Base class for the bundled registries."""

    @abstractmethod
    def add(self, token: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def contains(self, token: str) -> bool:
        raise NotImplementedError

    @abstractmethod
    def list(self) -> list[str]:
        """Return every registered token, sorted."""

        raise NotImplementedError

    @abstractmethod
    def rename(self, old_token: str, new_token: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def delete(self, token: str) -> None:
        raise NotImplementedError

    def __contains__(self, token: object) -> bool:
        return isinstance(token, str) and self.contains(token)

    def __len__(self) -> int:
        return len(self.list())
