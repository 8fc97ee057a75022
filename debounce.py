"""
Trigger coordination for report refreshes.

Debouncer collapses bursts of facet-change events into a single refresh
that runs with the arguments of the last event. RequestSequencer hands out
monotonic tokens so a refresh that finishes after a newer one started can
recognize itself as stale.
"""

import itertools
import logging
import threading
from typing import Any, Callable, Dict, Optional, Tuple

from constants import DEBOUNCE_WINDOW_SECONDS

logger = logging.getLogger(__name__)


class Debouncer:
    """
    Trailing-edge debounce around a callable.

    Each call restarts the quiet window; when the window elapses without a
    further call, the wrapped function runs once on a timer thread with the
    most recent arguments. Exceptions raised by the wrapped function are
    logged on that thread.

    Example:
        fetch = Debouncer(report.refresh, wait=1.0)
        fetch(selection_a)
        fetch(selection_b)   # only selection_b is refreshed
    """

    def __init__(self, func: Callable[..., Any], wait: float = DEBOUNCE_WINDOW_SECONDS):
        self._func = func
        self._wait = wait
        self._lock = threading.Lock()
        self._timer: Optional[threading.Timer] = None
        self._pending: Optional[Tuple[Tuple[Any, ...], Dict[str, Any]]] = None

    @property
    def wait(self) -> float:
        return self._wait

    @property
    def pending(self) -> bool:
        with self._lock:
            return self._pending is not None

    def __call__(self, *args: Any, **kwargs: Any) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._pending = (args, kwargs)
            timer = threading.Timer(self._wait, self._fire)
            timer.args = (timer,)
            timer.daemon = True
            self._timer = timer
            timer.start()

    def _take_pending(self, owner: Optional[threading.Timer] = None
                      ) -> Optional[Tuple[Tuple[Any, ...], Dict[str, Any]]]:
        """Detach the pending call.

        With an owner, the call is only taken if that timer still owns it; a
        timer that elapsed just as a newer call replaced it gets nothing.
        """
        with self._lock:
            if owner is not None and self._timer is not owner:
                return None
            if self._timer is not None:
                self._timer.cancel()
            pending = self._pending
            self._pending = None
            self._timer = None
            return pending

    def _fire(self, timer: threading.Timer) -> None:
        pending = self._take_pending(owner=timer)
        if pending is None:
            return
        args, kwargs = pending
        try:
            self._func(*args, **kwargs)
        except Exception:
            logger.exception(f"Debounced call to {getattr(self._func, '__name__', self._func)} failed")

    def flush(self) -> Any:
        """Run the pending call now, on the calling thread.

        Returns:
            The wrapped function's result, or None if nothing was pending

        Raises:
            Exception: Whatever the wrapped function raised
        """
        pending = self._take_pending()
        if pending is None:
            return None
        args, kwargs = pending
        return self._func(*args, **kwargs)

    def cancel(self) -> None:
        """Drop the pending call, if any."""
        self._take_pending()


class RequestSequencer:
    """Monotonic request tokens; only the newest token is current."""

    def __init__(self):
        self._counter = itertools.count(1)
        self._lock = threading.Lock()
        self._latest = 0

    def next_token(self) -> int:
        with self._lock:
            self._latest = next(self._counter)
            return self._latest

    def is_latest(self, token: int) -> bool:
        with self._lock:
            return token == self._latest

    @property
    def latest(self) -> int:
        with self._lock:
            return self._latest
