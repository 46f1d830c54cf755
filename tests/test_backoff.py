import pytest
from pydantic import ValidationError

from fcm_sender.backoff import BackoffController
from fcm_sender.config import RetryConfig


def _controller(**overrides) -> BackoffController:
    return BackoffController(RetryConfig(**overrides))


def test_computed_backoff_doubles_until_ceiling():
    controller = _controller(min_interval_seconds=1.0, max_interval_seconds=10.0)
    state = controller.new_state()

    delays = [controller.next_delay(None, state) for _ in range(5)]

    assert delays == [2.0, 4.0, 8.0, 10.0, 10.0]
    assert state.current_interval == 10.0


def test_server_hint_is_not_capped_and_keeps_state():
    controller = _controller(min_interval_seconds=1.0, max_interval_seconds=10.0)
    state = controller.new_state()
    controller.next_delay(None, state)
    controller.next_delay(None, state)

    assert controller.next_delay(15.0, state) == 15.0
    assert state.current_interval == 4.0
    assert controller.next_delay(None, state) == 8.0


def test_small_hint_is_raised_to_minimum():
    controller = _controller(min_interval_seconds=2.0, max_interval_seconds=10.0)
    state = controller.new_state()

    assert controller.next_delay(0.5, state) == 2.0
    assert state.current_interval == 2.0


def test_worked_sequence_sums_to_expected_total():
    controller = _controller(min_interval_seconds=1.0, max_interval_seconds=10.0)
    state = controller.new_state()

    total = sum(controller.next_delay(hint, state) for hint in [5.0, None, None, 15.0])

    assert total == 26.0


def test_can_retry_respects_max_attempts():
    controller = _controller(max_attempts=3)
    state = controller.new_state()

    assert controller.can_retry(state)
    state.attempt = 2
    assert controller.can_retry(state)
    state.attempt = 3
    assert not controller.can_retry(state)


def test_single_attempt_never_retries():
    controller = _controller(max_attempts=1)
    assert not controller.can_retry(controller.new_state())


def test_config_rejects_inverted_range():
    with pytest.raises(ValidationError):
        RetryConfig(min_interval_seconds=5.0, max_interval_seconds=1.0)


def test_defaults():
    config = RetryConfig()
    assert config.min_interval_seconds == 1.0
    assert config.max_interval_seconds == 10.0
    assert config.max_attempts == 5
