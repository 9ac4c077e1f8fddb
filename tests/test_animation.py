from __future__ import annotations

import gc

from conftest import FakeView

from ucontrol.animation import (
    ANIMATE_IN_CLASS,
    ANIMATE_OUT_CLASS,
    IN_DELAY_MS,
    OUT_DURATION_MS,
    AnimationDispatcher,
)


def test_transition_fades_out_and_in(scheduler) -> None:
    outgoing = FakeView("out")
    incoming = FakeView("in")
    dispatcher = AnimationDispatcher(scheduler)

    dispatcher.transition(outgoing, incoming)

    assert ANIMATE_OUT_CLASS in outgoing.css_classes
    assert ANIMATE_IN_CLASS in incoming.css_classes
    assert incoming.opacity == 0.0

    scheduler.advance(IN_DELAY_MS)
    assert ANIMATE_IN_CLASS not in incoming.css_classes
    assert incoming.opacity == 1.0
    assert ANIMATE_OUT_CLASS in outgoing.css_classes

    scheduler.advance(OUT_DURATION_MS - IN_DELAY_MS)
    assert ANIMATE_OUT_CLASS not in outgoing.css_classes


def test_reveal_only_touches_one_view(scheduler) -> None:
    view = FakeView()
    dispatcher = AnimationDispatcher(scheduler)

    dispatcher.reveal(view)
    assert view.opacity == 0.0

    scheduler.advance(IN_DELAY_MS)
    assert view.opacity == 1.0
    assert view.css_classes == set()
    assert len(scheduler.timers) == 1


def test_replaced_view_is_left_alone(scheduler) -> None:
    view = FakeView()
    current = {"live": True}
    dispatcher = AnimationDispatcher(scheduler, is_current=lambda v: current["live"])

    dispatcher.reveal(view)
    current["live"] = False
    scheduler.advance(IN_DELAY_MS)

    assert view.opacity == 0.0
    assert ANIMATE_IN_CLASS in view.css_classes


def test_destroyed_view_makes_timer_a_noop(scheduler) -> None:
    dispatcher = AnimationDispatcher(scheduler)
    view = FakeView()
    dispatcher.reveal(view)

    del view
    gc.collect()

    scheduler.advance(IN_DELAY_MS)
    assert scheduler.pending() == []
