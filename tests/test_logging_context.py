"""Tests for logging context propagation."""

import pytest

from marketplace.logging.context import (
    clear_log_context,
    get_log_context,
    log_context,
    pop_log_context,
    push_log_context,
)


def test_empty_context():
    """Test that context starts empty."""
    assert get_log_context() == {}


def test_push_and_pop():
    """Test pushing fields and restoring the previous context."""
    token = push_log_context(provider="google", callback_id="c-1")
    assert get_log_context() == {"provider": "google", "callback_id": "c-1"}

    pop_log_context(token)
    assert get_log_context() == {}


def test_nested_pushes_merge():
    """Test layered pushes accumulate and unwind in reverse order."""
    outer = push_log_context(provider="facebook")
    inner = push_log_context(user_id="u-1")
    assert get_log_context() == {"provider": "facebook", "user_id": "u-1"}

    pop_log_context(inner)
    assert get_log_context() == {"provider": "facebook"}
    pop_log_context(outer)
    assert get_log_context() == {}


def test_override_is_scoped():
    """Test re-pushing a key shadows it only until popped."""
    outer = push_log_context(provider="google")
    inner = push_log_context(provider="facebook")
    assert get_log_context()["provider"] == "facebook"

    pop_log_context(inner)
    assert get_log_context()["provider"] == "google"
    pop_log_context(outer)


def test_context_manager():
    """Test log_context restores the context on exit."""
    with log_context(provider="google"):
        with log_context(user_id="u-1"):
            assert get_log_context() == {"provider": "google", "user_id": "u-1"}
        assert get_log_context() == {"provider": "google"}

    assert get_log_context() == {}


def test_context_manager_restores_on_exception():
    """Test the context is restored when the block raises."""
    with pytest.raises(ValueError):
        with log_context(provider="twitter"):
            raise ValueError("unsupported")

    assert get_log_context() == {}


def test_clear_context():
    """Test clearing all context."""
    push_log_context(provider="google")
    clear_log_context()
    assert get_log_context() == {}


def test_get_returns_copy():
    """Test mutating the returned dict does not touch the active context."""
    with log_context(provider="google"):
        context = get_log_context()
        context["provider"] = "modified"
        assert get_log_context() == {"provider": "google"}
