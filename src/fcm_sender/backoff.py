"""Exponential backoff that defers to server wait hints."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .config import RetryConfig
from .utils import clamp


@dataclass
class BackoffState:
    """Per-send mutable backoff state. Never shared between sends."""

    current_interval: float
    attempt: int = 1

    @classmethod
    def start(cls, retry: RetryConfig) -> "BackoffState":
        return cls(current_interval=retry.min_interval_seconds)


class BackoffController:
    """Computes the wait before the next attempt of a partially failed batch."""

    def __init__(self, retry: RetryConfig) -> None:
        self._retry = retry

    @property
    def retry(self) -> RetryConfig:
        return self._retry

    def new_state(self) -> BackoffState:
        return BackoffState.start(self._retry)

    def next_delay(self, hint: Optional[float], state: BackoffState) -> float:
        """Return the delay in seconds before the next attempt.

        A server hint is raised to the minimum but never capped by the maximum,
        and leaves ``state`` untouched. Without a hint the current interval is
        doubled, clamped into ``[min, max]`` and stored back into ``state``.
        """

        retry = self._retry
        if hint is not None:
            return max(hint, retry.min_interval_seconds)

        delay = clamp(
            state.current_interval * 2,
            retry.min_interval_seconds,
            retry.max_interval_seconds,
        )
        state.current_interval = delay
        return delay

    def can_retry(self, state: BackoffState) -> bool:
        """Whether another attempt fits within ``max_attempts``."""

        return state.attempt + 1 <= self._retry.max_attempts


__all__ = ["BackoffController", "BackoffState"]
