from __future__ import annotations

import threading

from treescan.cancellation import CancellationToken


def test_token_starts_unset():
    token = CancellationToken()
    assert not token.is_requested()
    assert token.reason is None
    assert token.wait(0.01) is False


def test_request_is_monotonic_and_keeps_first_reason():
    token = CancellationToken()
    token.request("signal SIGINT")
    token.request("quiescence")
    assert token.is_requested()
    assert token.reason == "signal SIGINT"
    assert token.wait(0) is True


def test_listeners_called_once():
    token = CancellationToken()
    calls = []
    token.add_listener(lambda: calls.append("a"))
    token.add_listener(lambda: calls.append("b"))
    token.request()
    token.request()
    assert calls == ["a", "b"]


def test_listener_added_after_request_runs_immediately():
    token = CancellationToken()
    token.request()
    calls = []
    token.add_listener(lambda: calls.append(1))
    assert calls == [1]


def test_wait_wakes_other_thread():
    token = CancellationToken()
    woke = threading.Event()

    def waiter():
        if token.wait(10):
            woke.set()

    t = threading.Thread(target=waiter)
    t.start()
    token.request("test")
    t.join(5)
    assert woke.is_set()
