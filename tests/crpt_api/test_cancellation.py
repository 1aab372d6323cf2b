"""Tests for the cancellation primitives used by waiting submitters."""

import threading

from CrptApi.cancellation import CancellationToken, CancellationTokenGroup


def test_cancel_all_reaches_registered_and_later_tokens() -> None:
    group = CancellationTokenGroup()
    waiting = CancellationToken()
    group.add_token(waiting)
    assert not waiting.is_cancelled()

    group.cancel_all()

    assert waiting.is_cancelled()
    assert group.cancelled
    late = CancellationToken()
    group.add_token(late)
    assert late.is_cancelled()


def test_removed_token_is_not_cancelled() -> None:
    group = CancellationTokenGroup()
    token = CancellationToken()
    group.add_token(token)
    group.remove_token(token)
    group.remove_token(token)

    group.cancel_all()

    assert not token.is_cancelled()


def test_wait_returns_early_when_cancelled_from_another_thread() -> None:
    token = CancellationToken()
    timer = threading.Timer(0.05, token.cancel)
    timer.start()
    try:
        assert token.wait(5.0) is True
    finally:
        timer.cancel()


def test_wait_times_out_without_cancellation() -> None:
    token = CancellationToken()
    assert token.wait(0.01) is False
    assert not token.is_cancelled()
