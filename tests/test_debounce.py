"""Tests for debounced refreshes and request sequencing."""

import threading
import time
from unittest.mock import MagicMock

from debounce import Debouncer, RequestSequencer


class TestDebouncer:

    def test_last_call_wins(self):
        func = MagicMock(return_value="done")
        debouncer = Debouncer(func, wait=60)

        debouncer("a")
        debouncer("b")
        debouncer("c", flag=True)

        assert debouncer.pending
        assert debouncer.flush() == "done"
        func.assert_called_once_with("c", flag=True)
        assert not debouncer.pending

    def test_flush_without_pending_call(self):
        func = MagicMock()
        assert Debouncer(func, wait=60).flush() is None
        func.assert_not_called()

    def test_cancel_drops_pending_call(self):
        func = MagicMock()
        debouncer = Debouncer(func, wait=60)

        debouncer("a")
        debouncer.cancel()

        assert not debouncer.pending
        assert debouncer.flush() is None
        func.assert_not_called()

    def test_fires_after_quiet_window(self):
        fired = threading.Event()
        received = []

        def target(value):
            received.append(value)
            fired.set()

        debouncer = Debouncer(target, wait=0.01)
        debouncer(1)
        debouncer(2)

        assert fired.wait(timeout=5)
        assert received == [2]

    def test_timer_errors_are_logged(self, caplog):
        done = threading.Event()

        def target():
            try:
                raise RuntimeError("refresh failed")
            finally:
                done.set()

        debouncer = Debouncer(target, wait=0.01)
        debouncer()

        assert done.wait(timeout=5)
        # logging happens right after the exception leaves target
        for _ in range(100):
            if "Debounced call to target failed" in caplog.text:
                break
            time.sleep(0.01)
        assert "Debounced call to target failed" in caplog.text

    def test_elapsed_timer_does_not_take_newer_call(self):
        func = MagicMock()
        debouncer = Debouncer(func, wait=60)

        debouncer("a")
        replaced = debouncer._timer
        debouncer("b")
        # the replaced timer elapsed before the second call cancelled it
        debouncer._fire(replaced)

        func.assert_not_called()
        assert debouncer.pending

        debouncer.cancel()
        assert not debouncer.pending
        func.assert_not_called()

    def test_owning_timer_runs_pending_call(self):
        func = MagicMock()
        debouncer = Debouncer(func, wait=60)

        debouncer("a")
        debouncer._fire(debouncer._timer)

        func.assert_called_once_with("a")
        assert not debouncer.pending

    def test_wait_property(self):
        assert Debouncer(MagicMock(), wait=2.5).wait == 2.5


class TestRequestSequencer:

    def test_tokens_increase(self):
        sequencer = RequestSequencer()
        first = sequencer.next_token()
        second = sequencer.next_token()

        assert second > first
        assert sequencer.latest == second

    def test_only_newest_token_is_latest(self):
        sequencer = RequestSequencer()
        first = sequencer.next_token()
        assert sequencer.is_latest(first)

        second = sequencer.next_token()
        assert not sequencer.is_latest(first)
        assert sequencer.is_latest(second)
