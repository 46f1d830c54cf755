"""Exception hierarchy raised by the dispatch engine and bundled stores."""

from __future__ import annotations

from typing import Optional, Sequence

from .types import BatchResponse


class FcmError(Exception):
    """Base class for every error raised by fcm_sender."""


class BadRequestError(FcmError):
    """The server rejected the request body as malformed (HTTP 400)."""


class UnauthorizedError(FcmError):
    """The server rejected the API key (HTTP 401)."""


class TransportError(FcmError):
    """The HTTP exchange could not be completed; the cause is chained."""


class MalformedResponseError(FcmError):
    """A successful response body could not be reconciled with the batch."""


class DeadlineExceededError(FcmError, TimeoutError):
    """The caller's deadline passed before delivery finished."""


class TokenNotFoundError(FcmError, KeyError):
    """A store was asked to rename or delete a token it does not hold."""

    def __init__(self, token: str) -> None:
        super().__init__(token)
        self.token = token

    def __str__(self) -> str:
        return f"registration token not found: {self.token}"


class RetriesExhaustedError(FcmError):
    """The attempt bound was reached while recipients still needed a retry."""

    def __init__(
        self,
        tokens: Sequence[str],
        *,
        attempts: int,
        status_code: Optional[int] = None,
        last_response: Optional[BatchResponse] = None,
    ) -> None:
        self.tokens = list(tokens)
        self.attempts = attempts
        self.status_code = status_code
        self.last_response = last_response
        super().__init__(
            f"Exhausted retry attempts after {attempts} attempt(s); "
            f"{len(self.tokens)} token(s) never confirmed"
        )


__all__ = [
    "BadRequestError",
    "DeadlineExceededError",
    "FcmError",
    "MalformedResponseError",
    "RetriesExhaustedError",
    "TokenNotFoundError",
    "TransportError",
    "UnauthorizedError",
]
