"""Dispatch telemetry: typed send events fanned out to sinks."""

from __future__ import annotations

import logging
import random
import time
from typing import Any, Callable, Iterable, Optional, Protocol, Sequence

from .config import TelemetryConfig
from .types import OutcomeKind, StoreAction, TelemetryEvent

LOGGER = logging.getLogger(__name__)

SEND_ATTEMPT = "send.attempt"
SEND_RETRY = "send.retry"
SEND_SUCCESS = "send.success"
SEND_FINAL_FAILURE = "send.final_failure"
TOKEN_RENAME = "token.rename"
TOKEN_DELETE = "token.delete"


class TelemetrySink(Protocol):
    def handle(self, event: TelemetryEvent) -> None:  # pragma: no cover - protocol
        ...


class DispatchTelemetry:
    """Build and publish the events of one client's send loop.

    Sampling is decided per event before it is built, so a disabled or
    sink-less publisher costs one attribute check per call.
    """

    def __init__(
        self,
        config: TelemetryConfig,
        sinks: Iterable[TelemetrySink] = (),
        *,
        random_fn: Callable[[], float] = random.random,
    ) -> None:
        self.config = config
        self._sinks = tuple(sinks)
        self._random = random_fn

    @property
    def active(self) -> bool:
        return self.config.enabled and bool(self._sinks)

    def attempt(self, attempt: int, tokens: Sequence[str]) -> None:
        self._publish(SEND_ATTEMPT, attempt=attempt, tokens=tokens)

    def retry(
        self,
        attempt: int,
        status_code: int,
        tokens: Sequence[str],
        *,
        delay: float,
        server_hint: bool,
    ) -> None:
        self._publish(
            SEND_RETRY,
            attempt=attempt,
            status_code=status_code,
            tokens=tokens,
            delay=delay,
            server_hint=server_hint,
        )

    def success(self, attempt: int, status_code: int, tokens: Sequence[str], *, started: float) -> None:
        """``started`` is the :func:`time.perf_counter` reading taken before the request."""

        elapsed_ms = int((time.perf_counter() - started) * 1000.0)
        self._publish(
            SEND_SUCCESS,
            attempt=attempt,
            status_code=status_code,
            tokens=tokens,
            elapsed_ms=elapsed_ms,
        )

    def final_failure(self, attempt: int, status_code: int, tokens: Sequence[str]) -> None:
        self._publish(SEND_FINAL_FAILURE, attempt=attempt, status_code=status_code, tokens=tokens)

    def store_action(self, action: StoreAction) -> None:
        if action.kind is OutcomeKind.RENAMED:
            self._publish(TOKEN_RENAME, old_token=action.token, new_token=action.new_token)
        else:
            self._publish(TOKEN_DELETE, token=action.token, reason=action.reason)

    def _publish(
        self,
        name: str,
        *,
        attempt: Optional[int] = None,
        status_code: Optional[int] = None,
        elapsed_ms: Optional[int] = None,
        tokens: Optional[Sequence[str]] = None,
        **payload: Any,
    ) -> None:
        if not self.active or self._random() > self.config.sample_rate:
            return
        if tokens is not None and self.config.include_tokens:
            payload["tokens"] = list(tokens)
        event = TelemetryEvent(
            event=name,
            attempt=attempt,
            status_code=status_code,
            elapsed_ms=elapsed_ms,
            token_count=len(tokens) if tokens is not None else None,
            payload=payload,
        )
        for sink in self._sinks:
            try:
                sink.handle(event)
            except Exception:
                LOGGER.exception("Telemetry sink %r failed on %s", sink, name)


class LoggingTelemetrySink:
    def __init__(self, logger: Optional[logging.Logger] = None, level: int = logging.INFO) -> None:
        self.logger = logger or LOGGER
        self.level = level

    def handle(self, event: TelemetryEvent) -> None:
        self.logger.log(
            self.level,
            "%s attempt=%s status=%s tokens=%s %s",
            event.event,
            event.attempt,
            event.status_code,
            event.token_count,
            event.payload,
        )


class InMemoryTelemetrySink:
    """Keeps every event it receives; handy in tests."""

    def __init__(self) -> None:
        self.events: list[TelemetryEvent] = []

    def handle(self, event: TelemetryEvent) -> None:
        self.events.append(event)

    def names(self) -> list[str]:
        return [event.event for event in self.events]

    def named(self, name: str) -> list[TelemetryEvent]:
        return [event for event in self.events if event.event == name]


__all__ = [
    "DispatchTelemetry",
    "InMemoryTelemetrySink",
    "LoggingTelemetrySink",
    "SEND_ATTEMPT",
    "SEND_FINAL_FAILURE",
    "SEND_RETRY",
    "SEND_SUCCESS",
    "TOKEN_DELETE",
    "TOKEN_RENAME",
    "TelemetrySink",
]
