"""Positional reconciliation of per-recipient results against a token store."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Optional, Sequence

from .errors import MalformedResponseError
from .persistence.base import TokenStore
from .types import RETRYABLE_ERRORS, BatchResponse, OutcomeKind, Result, StoreAction
from .utils import maybe_await, reject_awaitable

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class Reconciliation:
    """What a batch response means for the tokens that were sent.

    ``retry`` is an empty list both when nothing needs retrying and when the
    response was fully successful; ``fast_path`` tells the two apart.
    """

    retry: list[str] = field(default_factory=list)
    actions: list[StoreAction] = field(default_factory=list)
    fast_path: bool = False

    @property
    def renames(self) -> list[StoreAction]:
        return [action for action in self.actions if action.kind is OutcomeKind.RENAMED]

    @property
    def deletes(self) -> list[StoreAction]:
        return [action for action in self.actions if action.kind is OutcomeKind.UNREGISTER]


def classify_result(result: Result) -> OutcomeKind:
    """Map one recipient result to its outcome."""

    if result.message_id:
        if result.registration_id:
            return OutcomeKind.RENAMED
        return OutcomeKind.DELIVERED
    if result.error in RETRYABLE_ERRORS:
        return OutcomeKind.RETRY
    return OutcomeKind.UNREGISTER


def classify_response(tokens: Sequence[str], response: BatchResponse) -> Reconciliation:
    """Pair ``tokens`` with ``response.results`` by position.

    Pure: no store is touched, so calling it twice yields identical output.
    """

    if response.failure == 0 and response.canonical_ids == 0:
        return Reconciliation(fast_path=True)

    if len(response.results) != len(tokens):
        raise MalformedResponseError(
            f"response carries {len(response.results)} result(s) for {len(tokens)} token(s)"
        )

    retry: list[str] = []
    actions: list[StoreAction] = []
    for token, result in zip(tokens, response.results):
        kind = classify_result(result)
        if kind is OutcomeKind.DELIVERED:
            continue
        if kind is OutcomeKind.RETRY:
            retry.append(token)
        elif kind is OutcomeKind.RENAMED:
            actions.append(StoreAction(kind=kind, token=token, new_token=result.registration_id))
        else:
            actions.append(StoreAction(kind=kind, token=token, reason=result.error or None))
    return Reconciliation(retry=retry, actions=actions)


def apply_actions(
    actions: Sequence[StoreAction],
    store: TokenStore,
    *,
    on_applied: Optional[Callable[[StoreAction], None]] = None,
) -> None:
    """Apply store mutations in order; the first failure stops the rest and propagates."""

    for action in actions:
        if action.kind is OutcomeKind.RENAMED:
            LOGGER.warning("Renaming registration token %s to %s", action.token, action.new_token)
            reject_awaitable(store.rename(action.token, action.new_token), "rename")
        else:
            LOGGER.warning("Unregistering token %s: %s", action.token, action.reason)
            reject_awaitable(store.delete(action.token), "delete")
        if on_applied is not None:
            on_applied(action)


async def apply_actions_async(
    actions: Sequence[StoreAction],
    store: TokenStore,
    *,
    on_applied: Optional[Callable[[StoreAction], None]] = None,
) -> None:
    """Async twin of :func:`apply_actions`; store methods may be sync or async."""

    for action in actions:
        if action.kind is OutcomeKind.RENAMED:
            LOGGER.warning("Renaming registration token %s to %s", action.token, action.new_token)
            await maybe_await(store.rename(action.token, action.new_token))
        else:
            LOGGER.warning("Unregistering token %s: %s", action.token, action.reason)
            await maybe_await(store.delete(action.token))
        if on_applied is not None:
            on_applied(action)


__all__ = [
    "Reconciliation",
    "apply_actions",
    "apply_actions_async",
    "classify_response",
    "classify_result",
]
