"""In-memory token registry."""

from __future__ import annotations

import threading
from typing import Iterable, Optional

from ..errors import TokenNotFoundError
from .base import TokenRegistry


class MemoryTokenStore(TokenRegistry):
    """Process-local registry.

    With ``strict=False`` renaming or deleting a token the registry never saw
    is accepted: a rename records the new token and a delete is a no-op. The
    client uses that mode for the empty store it builds when none is given.
    """

    def __init__(self, tokens: Optional[Iterable[str]] = None, *, strict: bool = True) -> None:
        self._lock = threading.Lock()
        self._tokens: set[str] = set(tokens or ())
        self.strict = strict

    def add(self, token: str) -> None:
        with self._lock:
            self._tokens.add(token)

    def contains(self, token: str) -> bool:
        with self._lock:
            return token in self._tokens

    def list(self) -> list[str]:
        with self._lock:
            return sorted(self._tokens)

    def rename(self, old_token: str, new_token: str) -> None:
        with self._lock:
            if self.strict and old_token not in self._tokens:
                raise TokenNotFoundError(old_token)
            self._tokens.discard(old_token)
            self._tokens.add(new_token)

    def delete(self, token: str) -> None:
        with self._lock:
            if self.strict and token not in self._tokens:
                raise TokenNotFoundError(token)
            self._tokens.discard(token)


__all__ = ["MemoryTokenStore"]
