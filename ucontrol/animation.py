"""
Ultimate Control - Animation Dispatcher

Cross-fades tab content with CSS classes and opacity. Purely decorative:
nothing here ever delays or blocks a tab state change.
"""

import logging
import weakref
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)

ANIMATE_IN_CLASS = "animate-in"
ANIMATE_OUT_CLASS = "animate-out"

OUT_DURATION_MS = 250
IN_DELAY_MS = 50


class AnimationDispatcher:
    """
    Schedules the fade-out of the outgoing view and the fade-in of the
    incoming view.

    Views only need add_css_class(), remove_css_class() and set_opacity().
    Timers keep weak references, and `is_current(view)` (when given) is
    asked again before each deferred change, so a view that was destroyed
    or swapped out in the meantime is left alone.
    """

    def __init__(self, scheduler, is_current: Optional[Callable[[Any], bool]] = None):
        self._scheduler = scheduler
        self._is_current = is_current

    def transition(self, outgoing: Any, incoming: Any) -> None:
        """Fade `outgoing` out and `incoming` in."""
        if outgoing is not None and outgoing is not incoming:
            outgoing.add_css_class(ANIMATE_OUT_CLASS)
            self._later(OUT_DURATION_MS, outgoing, self._finish_out)
        if incoming is not None:
            self.reveal(incoming)

    def reveal(self, view: Any) -> None:
        """Fade in a view alone, e.g. content that was just built."""
        view.set_opacity(0.0)
        view.add_css_class(ANIMATE_IN_CLASS)
        self._later(IN_DELAY_MS, view, self._finish_in)

    def _later(self, delay_ms: int, view: Any, action: Callable[[Any], None]) -> None:
        try:
            ref = weakref.ref(view)
        except TypeError:
            # Not weak-referenceable; hold it strongly for the timer's lifetime
            ref = lambda: view

        def fire():
            target = ref()
            if target is None:
                return
            if self._is_current is not None and not self._is_current(target):
                logger.debug("Skipping animation step for a replaced view")
                return
            action(target)

        self._scheduler.timeout_add(delay_ms, fire)

    @staticmethod
    def _finish_out(view: Any) -> None:
        view.remove_css_class(ANIMATE_OUT_CLASS)

    @staticmethod
    def _finish_in(view: Any) -> None:
        view.remove_css_class(ANIMATE_IN_CLASS)
        view.set_opacity(1.0)
