"""Common data types used across the fcm_sender package."""

from __future__ import annotations

import json
import time
from enum import Enum
from typing import Any, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field, field_validator

RegistrationToken = str

# Per-recipient error reasons the server documents as transient.
RETRYABLE_ERRORS = frozenset({"Unavailable", "InternalServerError"})


class Notification(BaseModel):
    """The notification payload of a multicast message."""

    title: Optional[str] = None
    body: Optional[str] = None
    icon: Optional[str] = None
    sound: Optional[str] = None
    badge: Optional[str] = None
    tag: Optional[str] = None
    color: Optional[str] = None
    click_action: Optional[str] = None
    body_loc_key: Optional[str] = None
    body_loc_args: Optional[str] = None
    title_loc_key: Optional[str] = None
    title_loc_args: Optional[str] = None


class Message(BaseModel):
    """A multicast message addressed to an ordered list of registration tokens."""

    model_config = ConfigDict(frozen=True)

    registration_ids: list[RegistrationToken] = Field(default_factory=list)
    condition: Optional[str] = None
    collapse_key: Optional[str] = None
    priority: Optional[str] = None
    content_available: bool = False
    mutable_content: bool = False
    time_to_live: Optional[int] = Field(default=None, ge=0)
    restricted_package_name: Optional[str] = None
    dry_run: bool = False
    data: Optional[dict[str, Any]] = None
    notification: Optional[Notification] = None

    @classmethod
    def multicast(
        cls,
        tokens: Sequence[RegistrationToken],
        data: Optional[dict[str, Any]] = None,
        notification: Optional[Notification] = None,
    ) -> "Message":
        return cls(registration_ids=list(tokens), data=data, notification=notification)

    def with_tokens(self, tokens: Sequence[RegistrationToken]) -> "Message":
        """Return a copy addressed to ``tokens``, keeping the shared payload."""

        return self.model_copy(update={"registration_ids": list(tokens)})

    def to_wire(self) -> dict[str, Any]:
        """Materialize the JSON body, omitting empty fields."""

        body = self.model_dump(exclude_none=True, exclude_defaults=True)
        if not body.get("data"):
            body.pop("data", None)
        if not body.get("notification"):
            body.pop("notification", None)
        return body

    def to_json(self) -> bytes:
        return json.dumps(self.to_wire(), separators=(",", ":")).encode("utf-8")


class Result(BaseModel):
    """Outcome reported for one recipient of a multicast message."""

    message_id: str = ""
    registration_id: str = ""
    error: str = ""

    @field_validator("message_id", "registration_id", "error", mode="before")
    @classmethod
    def _null_as_empty(cls, value: Any) -> Any:
        return "" if value is None else value


class BatchResponse(BaseModel):
    """Server response to a multicast send request."""

    multicast_id: int = 0
    success: int = 0
    failure: int = 0
    canonical_ids: int = 0
    results: list[Result] = Field(default_factory=list)
    message_id: int = 0
    error: str = ""


class OutcomeKind(str, Enum):
    """Classification of a single recipient result."""

    DELIVERED = "delivered"
    RENAMED = "renamed"
    RETRY = "retry"
    UNREGISTER = "unregister"


class StoreAction(BaseModel):
    """A token registry mutation derived from a recipient result."""

    model_config = ConfigDict(frozen=True)

    kind: OutcomeKind
    token: RegistrationToken
    new_token: Optional[RegistrationToken] = None
    reason: Optional[str] = None


class TelemetryEvent(BaseModel):
    """Structured event emitted while dispatching a batch."""

    event: str
    timestamp: float = Field(default_factory=time.time)
    attempt: Optional[int] = None
    status_code: Optional[int] = None
    elapsed_ms: Optional[int] = None
    token_count: Optional[int] = None
    payload: dict[str, object] = Field(default_factory=dict)


__all__ = [
    "BatchResponse",
    "Message",
    "Notification",
    "OutcomeKind",
    "RETRYABLE_ERRORS",
    "RegistrationToken",
    "Result",
    "StoreAction",
    "TelemetryEvent",
]
