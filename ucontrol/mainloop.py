"""
Ultimate Control - Main-loop scheduler

One-shot timers and idle callbacks on the GLib main loop. The loader,
the animation dispatcher and the Wi-Fi controller only ever see this
small interface, so tests can drive them with a manual clock.
"""

import logging
import threading
from typing import Callable, Optional

from gi.repository import GLib

logger = logging.getLogger(__name__)


class TimerHandle:
    """A pending one-shot timeout that can be cancelled before it fires."""

    def __init__(self):
        self._source_id: Optional[int] = None
        self._done = False

    @property
    def active(self) -> bool:
        return not self._done

    def cancel(self) -> None:
        if self._done:
            return
        self._done = True
        if self._source_id is not None:
            GLib.source_remove(self._source_id)
            self._source_id = None


class GLibScheduler:
    """Scheduler backed by GLib.timeout_add and GLib.idle_add."""

    def timeout_add(self, delay_ms: int, callback: Callable, *args) -> TimerHandle:
        """Run `callback(*args)` once after `delay_ms` on the main loop."""
        handle = TimerHandle()

        def fire():
            if handle._done:
                return False
            handle._done = True
            handle._source_id = None
            try:
                callback(*args)
            except Exception as e:
                logger.exception(f"Timer callback {getattr(callback, '__name__', callback)} failed: {e}")
            return False

        handle._source_id = GLib.timeout_add(delay_ms, fire)
        return handle

    def idle_add(self, callback: Callable, *args) -> None:
        """
        Run `callback(*args)` once on the main loop.

        Safe to call from any thread.
        """
        def fire():
            try:
                callback(*args)
            except Exception as e:
                logger.exception(f"Idle callback {getattr(callback, '__name__', callback)} failed: {e}")
            return False

        GLib.idle_add(fire)


def run_in_background(func: Callable, *args, callback: Optional[Callable] = None) -> None:
    """
    Run a blocking call on a daemon thread and hand its result to
    `callback` on the main loop.

    Used by the simpler tab pages for quick host-utility calls; the Wi-Fi
    controller has its own worker lanes.
    """
    def deliver(result):
        callback(result)
        return False

    def worker():
        try:
            result = func(*args)
        except Exception as e:
            logger.error(f"Background call {getattr(func, '__name__', func)} failed: {e}")
            return
        if callback is not None:
            GLib.idle_add(deliver, result)

    threading.Thread(target=worker, daemon=True).start()
