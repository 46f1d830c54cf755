"""Multicast clients that retry partially failed batches and reconcile tokens."""

from __future__ import annotations

import logging
import random
import time
from contextlib import AbstractContextManager
from datetime import datetime, timedelta
from typing import Any, Awaitable, Callable, Iterable, Optional, Sequence

import anyio
from pydantic import ValidationError

from .backoff import BackoffController, BackoffState
from .config import ClientConfig
from .errors import (
    BadRequestError,
    DeadlineExceededError,
    MalformedResponseError,
    RetriesExhaustedError,
    UnauthorizedError,
)
from .persistence import TokenStore, create_token_store
from .reconcile import apply_actions, apply_actions_async, classify_response
from .retry_after import parse_retry_after, utcnow
from .telemetry import DispatchTelemetry, TelemetrySink
from .transport import AsyncHttpxTransport, AsyncTransport, HttpxTransport, Transport, TransportResponse
from .types import BatchResponse, Message

LOGGER = logging.getLogger(__name__)

STATUS_OK = 200
STATUS_BAD_REQUEST = 400
STATUS_UNAUTHORIZED = 401


class _DispatchMixin:
    config: ClientConfig
    store: TokenStore
    _backoff: BackoffController
    _clock: Callable[[], datetime]
    _telemetry: DispatchTelemetry

    def _setup(
        self,
        api_key: Optional[str],
        store: Optional[TokenStore],
        config: Optional[ClientConfig],
        clock: Optional[Callable[[], datetime]],
        telemetry_sinks: Optional[Iterable[TelemetrySink]],
        telemetry_random: Optional[Callable[[], float]],
    ) -> None:
        config = config or ClientConfig()
        if api_key is not None:
            config = config.model_copy(update={"api_key": api_key})
        self.config = config
        self.store = store if store is not None else create_token_store(config.persistence)
        self._backoff = BackoffController(config.retry)
        self._clock = clock or utcnow
        self._telemetry = DispatchTelemetry(
            config.telemetry,
            telemetry_sinks or (),
            random_fn=telemetry_random or random.random,
        )

    # ------------------------------------------------------------------
    # Attempt evaluation
    # ------------------------------------------------------------------
    def _request_headers(self) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Authorization": f"key={self.config.api_key}",
        }

    def _raise_for_status(self, response: TransportResponse) -> None:
        if response.status_code == STATUS_BAD_REQUEST:
            raise BadRequestError("Bad Request, invalid json")
        if response.status_code == STATUS_UNAUTHORIZED:
            raise UnauthorizedError("Unauthorized")

    def _decode(self, response: TransportResponse) -> BatchResponse:
        try:
            return BatchResponse.model_validate_json(response.content)
        except ValidationError as exc:
            raise MalformedResponseError(f"could not decode response body: {exc}") from exc

    def _next_delay(
        self,
        response: TransportResponse,
        state: BackoffState,
        tokens: Sequence[str],
        batch: Optional[BatchResponse],
    ) -> float:
        """Return the wait before the next attempt, or raise once attempts run out."""

        retry = self.config.retry
        if not self._backoff.can_retry(state):
            LOGGER.warning(
                "Exhausted %d attempt(s) with %d token(s) unconfirmed",
                state.attempt,
                len(tokens),
            )
            self._telemetry.final_failure(state.attempt, response.status_code, tokens)
            raise RetriesExhaustedError(
                tokens,
                attempts=state.attempt,
                status_code=response.status_code,
                last_response=batch,
            )

        hint = parse_retry_after(response.header("Retry-After"), clock=self._clock)
        delay = self._backoff.next_delay(hint, state)
        LOGGER.info(
            "Retrying %d token(s) in %.2fs (attempt %d of %d)",
            len(tokens),
            delay,
            state.attempt,
            retry.max_attempts,
        )
        self._telemetry.retry(
            state.attempt,
            response.status_code,
            tokens,
            delay=delay,
            server_hint=hint is not None,
        )
        return delay

    # ------------------------------------------------------------------
    # Deadlines
    # ------------------------------------------------------------------
    def _deadline(self, timeout: Optional[float]) -> Optional[datetime]:
        if timeout is None:
            return None
        return self._clock() + timedelta(seconds=timeout)

    def _check_deadline(self, deadline: Optional[datetime], upcoming: float = 0.0) -> None:
        if deadline is None:
            return
        if self._clock() + timedelta(seconds=upcoming) > deadline:
            raise DeadlineExceededError("deadline exceeded before delivery completed")

    def _request_timeout(self, deadline: Optional[datetime]) -> float:
        timeout = self.config.timeout_seconds
        if deadline is None:
            return timeout
        remaining = (deadline - self._clock()).total_seconds()
        if remaining <= 0:
            raise DeadlineExceededError("deadline reached before the request could be sent")
        return min(timeout, remaining)


class FcmClient(_DispatchMixin, AbstractContextManager):
    """Synchronous multicast client."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        store: Optional[TokenStore] = None,
        *,
        config: Optional[ClientConfig] = None,
        transport: Optional[Transport] = None,
        client_options: Optional[dict[str, Any]] = None,
        sleep: Optional[Callable[[float], None]] = None,
        clock: Optional[Callable[[], datetime]] = None,
        telemetry_sinks: Optional[Iterable[TelemetrySink]] = None,
        telemetry_random: Optional[Callable[[], float]] = None,
    ) -> None:
        self._setup(api_key, store, config, clock, telemetry_sinks, telemetry_random)
        self._owns_transport = transport is None
        self._transport = transport or HttpxTransport(client_options=client_options)
        self._sleep = sleep or time.sleep

    def close(self) -> None:
        if self._owns_transport:
            self._transport.close()

    def __exit__(self, exc_type, exc, tb) -> None:  # type: ignore[override]
        self.close()

    def send(self, message: Message, *, timeout: Optional[float] = None) -> BatchResponse:
        """Send ``message``, retrying transient failures and updating the store.

        Returns the response of the final attempt. ``timeout`` bounds the whole
        operation, backoff waits included.
        """

        deadline = self._deadline(timeout)
        tokens = list(message.registration_ids)
        state = self._backoff.new_state()
        while True:
            self._check_deadline(deadline)
            request_timeout = self._request_timeout(deadline)
            outgoing = message.with_tokens(tokens)
            body = outgoing.to_json()
            LOGGER.debug("send json %s", body)
            self._telemetry.attempt(state.attempt, tokens)
            start = time.perf_counter()
            response = self._transport.post(
                self.config.endpoint,
                body,
                self._request_headers(),
                timeout=request_timeout,
            )
            self._raise_for_status(response)

            batch: Optional[BatchResponse] = None
            if response.status_code == STATUS_OK:
                batch = self._decode(response)
                reconciliation = classify_response(tokens, batch)
                apply_actions(
                    reconciliation.actions,
                    self.store,
                    on_applied=self._telemetry.store_action,
                )
                if not reconciliation.retry:
                    self._telemetry.success(state.attempt, response.status_code, tokens, started=start)
                    return batch
                tokens = reconciliation.retry
            else:
                LOGGER.warning("Server returned status %d", response.status_code)

            delay = self._next_delay(response, state, tokens, batch)
            self._check_deadline(deadline, delay)
            state.attempt += 1
            if delay > 0:
                self._sleep(delay)


class AsyncFcmClient(_DispatchMixin):
    """Asynchronous multicast client; cancellable through anyio cancel scopes."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        store: Optional[TokenStore] = None,
        *,
        config: Optional[ClientConfig] = None,
        transport: Optional[AsyncTransport] = None,
        client_options: Optional[dict[str, Any]] = None,
        sleep: Optional[Callable[[float], Awaitable[None]]] = None,
        clock: Optional[Callable[[], datetime]] = None,
        telemetry_sinks: Optional[Iterable[TelemetrySink]] = None,
        telemetry_random: Optional[Callable[[], float]] = None,
    ) -> None:
        self._setup(api_key, store, config, clock, telemetry_sinks, telemetry_random)
        self._owns_transport = transport is None
        self._transport = transport or AsyncHttpxTransport(client_options=client_options)
        self._sleep = sleep or anyio.sleep

    async def aclose(self) -> None:
        if self._owns_transport:
            await self._transport.aclose()

    async def __aenter__(self) -> "AsyncFcmClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def send(self, message: Message, *, timeout: Optional[float] = None) -> BatchResponse:
        """Send ``message``; ``timeout`` raises :class:`TimeoutError` when it elapses."""

        if timeout is None:
            return await self._send(message)
        with anyio.fail_after(timeout):
            return await self._send(message)

    async def _send(self, message: Message) -> BatchResponse:
        tokens = list(message.registration_ids)
        state = self._backoff.new_state()
        while True:
            outgoing = message.with_tokens(tokens)
            body = outgoing.to_json()
            LOGGER.debug("send json %s", body)
            self._telemetry.attempt(state.attempt, tokens)
            start = time.perf_counter()
            response = await self._transport.post(
                self.config.endpoint,
                body,
                self._request_headers(),
                timeout=self.config.timeout_seconds,
            )
            self._raise_for_status(response)

            batch: Optional[BatchResponse] = None
            if response.status_code == STATUS_OK:
                batch = self._decode(response)
                reconciliation = classify_response(tokens, batch)
                await apply_actions_async(
                    reconciliation.actions,
                    self.store,
                    on_applied=self._telemetry.store_action,
                )
                if not reconciliation.retry:
                    self._telemetry.success(state.attempt, response.status_code, tokens, started=start)
                    return batch
                tokens = reconciliation.retry
            else:
                LOGGER.warning("Server returned status %d", response.status_code)

            delay = self._next_delay(response, state, tokens, batch)
            state.attempt += 1
            if delay > 0:
                await self._sleep(delay)


__all__ = ["AsyncFcmClient", "FcmClient"]
