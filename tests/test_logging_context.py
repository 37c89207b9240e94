"""Tests for logging context propagation."""

import threading

import pytest

from notification_system.logging.context import (
    clear_log_context,
    get_log_context,
    log_context,
    pop_log_context,
    push_log_context,
)


@pytest.fixture(autouse=True)
def clean_context():
    """Clear logging context before and after each test."""
    clear_log_context()
    yield
    clear_log_context()


def test_empty_context():
    assert get_log_context() == {}


def test_push_and_pop():
    token = push_log_context(operation="CREATE", recipient="user@example.com")
    assert get_log_context() == {"operation": "CREATE", "recipient": "user@example.com"}

    pop_log_context(token)
    assert get_log_context() == {}


def test_nested_pushes_restore_in_order():
    token1 = push_log_context(role="consumer")
    token2 = push_log_context(operation="DELETE")
    assert get_log_context() == {"role": "consumer", "operation": "DELETE"}

    pop_log_context(token2)
    assert get_log_context() == {"role": "consumer"}

    pop_log_context(token1)
    assert get_log_context() == {}


def test_same_key_is_overridden_then_restored():
    token1 = push_log_context(recipient="a@example.com")
    token2 = push_log_context(recipient="b@example.com")
    assert get_log_context() == {"recipient": "b@example.com"}

    pop_log_context(token2)
    assert get_log_context() == {"recipient": "a@example.com"}
    pop_log_context(token1)


def test_context_manager_nested():
    with log_context(role="consumer"):
        with log_context(operation="CREATE", recipient="user@example.com"):
            assert get_log_context() == {
                "role": "consumer",
                "operation": "CREATE",
                "recipient": "user@example.com",
            }
        assert get_log_context() == {"role": "consumer"}

    assert get_log_context() == {}


def test_context_manager_restores_on_exception():
    """Test that context is restored even when exception occurs."""
    with pytest.raises(ValueError):
        with log_context(operation="CREATE"):
            raise ValueError("Test exception")

    assert get_log_context() == {}


def test_returned_context_is_a_copy():
    token = push_log_context(operation="CREATE")

    context = get_log_context()
    context["recipient"] = "modified"

    assert get_log_context() == {"operation": "CREATE"}
    pop_log_context(token)


def test_threads_do_not_share_context():
    """Test that a consumer thread never sees another thread's fields."""
    seen = {}

    def worker():
        seen["before"] = get_log_context()
        with log_context(recipient="worker@example.com"):
            seen["inside"] = get_log_context()

    with log_context(recipient="main@example.com"):
        thread = threading.Thread(target=worker)
        thread.start()
        thread.join()

        assert get_log_context() == {"recipient": "main@example.com"}

    assert seen["before"] == {}
    assert seen["inside"] == {"recipient": "worker@example.com"}
