import json

import pytest
import requests
from requests.structures import CaseInsensitiveDict

from fcm_sender.client import FcmClient
from fcm_sender.config import ClientConfig
from fcm_sender.errors import TransportError
from fcm_sender.persistence.memory import MemoryTokenStore
from fcm_sender.requests_support import RequestsTransport
from fcm_sender.types import Message


class DummyResponse:
    def __init__(self, status_code, payload=None, headers=None):
        self.status_code = status_code
        self.content = json.dumps(payload).encode("utf-8") if payload is not None else b""
        self.headers = CaseInsensitiveDict(headers or {})


class DummySession(requests.Session):
    def __init__(self, responses) -> None:
        super().__init__()
        self.responses = list(responses)
        self.captured = []

    def post(self, url, data=None, **kwargs):  # pylint: disable=arguments-differ
        self.captured.append({"url": url, "data": data, **kwargs})
        return self.responses.pop(0)


def test_requests_transport_drives_client():
    session = DummySession(
        [
            DummyResponse(200, {"failure": 1, "results": [{"error": "Unavailable"}]}, {"retry-after": "3"}),
            DummyResponse(200, {"success": 1, "results": [{"message_id": "9"}]}),
        ]
    )
    sleeps: list[float] = []
    client = FcmClient(
        store=MemoryTokenStore(["a"]),
        config=ClientConfig(api_key="secret", timeout_seconds=4.0),
        transport=RequestsTransport(session),
        sleep=sleeps.append,
    )

    response = client.send(Message.multicast(["a"]))

    assert response.success == 1
    assert sleeps == [3.0]
    first = session.captured[0]
    assert first["headers"]["Authorization"] == "key=secret"
    assert first["timeout"] == 4.0
    assert json.loads(first["data"]) == {"registration_ids": ["a"]}


def test_requests_transport_wraps_network_errors(monkeypatch):
    session = requests.Session()

    def boom(*args, **kwargs):
        raise requests.ConnectionError("refused")

    monkeypatch.setattr(session, "post", boom)
    transport = RequestsTransport(session)

    with pytest.raises(TransportError) as excinfo:
        transport.post("https://example.com", b"{}", {})

    assert isinstance(excinfo.value.__cause__, requests.ConnectionError)


def test_requests_transport_leaves_caller_session_open():
    closed = []

    class TrackingSession(requests.Session):
        def close(self):
            closed.append(True)
            super().close()

    RequestsTransport(TrackingSession()).close()
    assert closed == []

    transport = RequestsTransport()
    transport.close()
