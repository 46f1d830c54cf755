"""Transport for callers that already manage a `requests` session."""

from __future__ import annotations

from typing import Mapping, Optional

import requests

from .errors import TransportError
from .transport import TransportResponse


class RequestsTransport:
    """Send batches through a :class:`requests.Session`.

    A session passed by the caller is left open on :meth:`close`.
    """

    def __init__(self, session: Optional[requests.Session] = None) -> None:
        self._owns_session = session is None
        self._session = session or requests.Session()

    def post(
        self,
        url: str,
        content: bytes,
        headers: Mapping[str, str],
        timeout: Optional[float] = None,
    ) -> TransportResponse:
        try:
            response = self._session.post(url, data=content, headers=dict(headers), timeout=timeout)
        except requests.RequestException as exc:
            raise TransportError(f"error sending request to {url}: {exc}") from exc
        return TransportResponse(
            status_code=response.status_code,
            content=response.content,
            headers=response.headers,
        )

    def close(self) -> None:
        if self._owns_session:
            self._session.close()


__all__ = ["RequestsTransport"]
