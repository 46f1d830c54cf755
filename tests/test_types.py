import json

from fcm_sender.types import BatchResponse, Message, Notification


def test_wire_body_omits_empty_fields():
    message = Message.multicast(["a", "b"], data={}, notification=Notification())

    assert message.to_wire() == {"registration_ids": ["a", "b"]}


def test_wire_body_keeps_set_options():
    message = Message(
        registration_ids=["a"],
        collapse_key="news",
        priority="high",
        time_to_live=0,
        dry_run=True,
        notification=Notification(title="t", click_action="OPEN"),
    )

    assert json.loads(message.to_json()) == {
        "registration_ids": ["a"],
        "collapse_key": "news",
        "priority": "high",
        "time_to_live": 0,
        "dry_run": True,
        "notification": {"title": "t", "click_action": "OPEN"},
    }


def test_with_tokens_copies_payload():
    message = Message.multicast(["a", "b"], data={"k": 1})

    narrowed = message.with_tokens(["b"])

    assert narrowed.registration_ids == ["b"]
    assert narrowed.data == {"k": 1}
    assert message.registration_ids == ["a", "b"]


def test_response_defaults_missing_fields():
    response = BatchResponse.model_validate_json(b'{"results": [{"error": "Unavailable"}]}')

    assert response.failure == 0
    assert response.canonical_ids == 0
    assert response.results[0].message_id == ""


def test_null_result_fields_read_as_empty():
    response = BatchResponse.model_validate_json(
        b'{"failure": 1, "results": [{"message_id": null, "registration_id": null, "error": "NotRegistered"}]}'
    )

    result = response.results[0]
    assert result.message_id == ""
    assert result.registration_id == ""
    assert result.error == "NotRegistered"
