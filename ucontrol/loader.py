"""
Ultimate Control - Lazy Tab Loader

Tabs start as empty placeholders. A tab's real content is built only when
the tab is first opened: the placeholder is swapped for a loading
indicator, construction runs a moment later on the UI thread, and the
indicator is swapped for the content (or kept, if construction failed).

The loader does not talk to GTK directly. It drives a tab host with this
interface:

    host.append(view, tab_id) -> position
    host.replace(position, view, tab_id) -> position
    host.set_current(position)
    host.remove_all()
"""

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional

from .tabs import TabRegistry, TabRecord, TabState, KNOWN_TABS
from .animation import AnimationDispatcher

logger = logging.getLogger(__name__)

# Delay between showing the loading indicator and building the content,
# long enough for the indicator to be painted
LOAD_DELAY_MS: Dict[str, int] = {"power": 10}
DEFAULT_LOAD_DELAY_MS = 100

# How long navigation events are ignored after a navigation-triggered load
NAV_GUARD_MS = 100


class UnknownTabError(Exception):
    """No content constructor exists for the tab id."""

    def __init__(self, tab_id: str):
        self.tab_id = tab_id
        super().__init__(f"Unknown tab type: {tab_id}")


class ConstructionError(Exception):
    """Raised by a content constructor that could not build its view."""
    pass


@dataclass
class LoadResult:
    """Outcome of building one tab's content."""
    view: Any = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.view is not None


class ReentrancyGuard:
    """
    Blocks navigation handling while the loader itself changes the tab bar.

    hold() covers a synchronous block; hold_for() keeps the guard up until
    a scheduled timer releases it.
    """

    def __init__(self, scheduler):
        self._scheduler = scheduler
        self._depth = 0
        self._timer = None

    @property
    def held(self) -> bool:
        return self._depth > 0 or self._timer is not None

    @contextmanager
    def hold(self):
        self._depth += 1
        try:
            yield
        finally:
            self._depth -= 1

    def hold_for(self, delay_ms: int) -> None:
        if self._timer is not None:
            self._timer.cancel()
        self._timer = self._scheduler.timeout_add(delay_ms, self._release)

    def _release(self) -> None:
        self._timer = None


Constructor = Callable[[], Any]
ViewFactory = Callable[[str], Any]
LoadedCallback = Callable[[TabRecord], None]


class LazyLoader:
    """
    Drives each tab through PLACEHOLDER -> LOADING -> LOADED | FAILED.

    Only a rebuild() returns a tab to PLACEHOLDER. A LOADING tab is never
    constructed twice.
    """

    def __init__(self, host, scheduler, constructors: Dict[str, Constructor],
                 make_placeholder: ViewFactory, make_loading_indicator: ViewFactory,
                 initial_tab: Optional[str] = None,
                 registry: Optional[TabRegistry] = None,
                 animator: Optional[AnimationDispatcher] = None):
        """
        Args:
            host: Tab host (see module docstring)
            scheduler: Provides timeout_add() on the UI thread
            constructors: Content constructor per tab id
            make_placeholder: Builds the empty view reserving a tab slot
            make_loading_indicator: Builds the spinner view for a tab
            initial_tab: Tab requested at startup; other tabs do not load on
                navigation until it has finished loading
            registry: Tab registry to fill (a new one by default)
            animator: Animation dispatcher (one on `scheduler` by default)
        """
        self.host = host
        self.registry = registry if registry is not None else TabRegistry()
        self._scheduler = scheduler
        self._constructors = dict(constructors)
        self._make_placeholder = make_placeholder
        self._make_loading_indicator = make_loading_indicator
        self._animator = animator or AnimationDispatcher(scheduler, is_current=self.is_current_view)
        self._guard = ReentrancyGuard(scheduler)
        self._initial_tab = initial_tab
        self._suppressed = initial_tab is not None
        self._shown_id: Optional[str] = None
        self._loaded_callbacks: List[LoadedCallback] = []
        self._construct_count: Dict[str, int] = {}

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    @property
    def suppressed(self) -> bool:
        """True until the initial tab has finished loading."""
        return self._suppressed

    @property
    def guard(self) -> ReentrancyGuard:
        return self._guard

    @property
    def shown_tab(self) -> Optional[str]:
        return self._shown_id

    def construct_count(self, tab_id: str) -> int:
        """How many times the content of `tab_id` has been constructed."""
        return self._construct_count.get(tab_id, 0)

    def is_current_view(self, view: Any) -> bool:
        """True if `view` is still what some tab shows."""
        return self.registry.find_by_view(view) is not None

    def connect_loaded(self, callback: LoadedCallback) -> None:
        """Call `callback(record)` whenever a load finishes, successful or not."""
        self._loaded_callbacks.append(callback)

    # -------------------------------------------------------------------------
    # Tab bar
    # -------------------------------------------------------------------------

    def rebuild(self, order: Iterable[str]) -> None:
        """Replace every tab with a fresh placeholder, in `order`."""
        with self._guard.hold():
            self.host.remove_all()
            self.registry.clear()
            self._shown_id = None
            for tab_id in order:
                if tab_id not in KNOWN_TABS:
                    logger.warning(f"Skipping unknown tab: {tab_id}")
                    continue
                if tab_id in self.registry:
                    logger.warning(f"Skipping duplicate tab: {tab_id}")
                    continue
                placeholder = self._make_placeholder(tab_id)
                position = self.host.append(placeholder, tab_id)
                self.registry.insert(tab_id, position, placeholder)
        logger.info(f"Tab bar built: {', '.join(self.registry.ids)}")

    # -------------------------------------------------------------------------
    # Navigation
    # -------------------------------------------------------------------------

    def switch_to(self, tab_id: str) -> bool:
        """
        Show a tab and start loading it if it is still a placeholder.

        Used for startup selection and explicit tab clicks, so it is never
        suppressed.

        Returns:
            False if the tab is unknown or not enabled
        """
        record = self.registry.find_by_id(tab_id)
        if record is None:
            logger.warning(f"Cannot switch to tab {tab_id}: not present")
            return False

        self._animate_to(record)
        with self._guard.hold():
            self.host.set_current(record.position)
        self._shown_id = tab_id

        if record.state is TabState.PLACEHOLDER:
            self._begin_load(record)
        return True

    def on_navigate(self, position: int) -> None:
        """Handle the tab bar reporting that `position` is now selected."""
        if self._guard.held:
            return

        tab_id = self.registry.find_by_position(position)
        if tab_id is None:
            return
        record = self.registry.find_by_id(tab_id)

        self._animate_to(record)
        self._shown_id = tab_id

        if self._suppressed and tab_id != self._initial_tab:
            logger.debug(f"Not loading {tab_id} before {self._initial_tab} is ready")
            return

        if record.state is TabState.PLACEHOLDER:
            self._guard.hold_for(NAV_GUARD_MS)
            self._begin_load(record)

    def _animate_to(self, record: TabRecord) -> None:
        if self._shown_id is None or self._shown_id == record.id:
            return
        outgoing = self.registry.find_by_id(self._shown_id)
        if outgoing is None:
            return
        if outgoing.state is TabState.LOADED and record.state is TabState.LOADED:
            self._animator.transition(outgoing.view, record.view)

    # -------------------------------------------------------------------------
    # Loading
    # -------------------------------------------------------------------------

    def _swap(self, record: TabRecord, view: Any) -> None:
        with self._guard.hold():
            position = self.host.replace(record.position, view, record.id)
        self.registry.set_position(record.id, position)

    def _begin_load(self, record: TabRecord) -> None:
        logger.info(f"Loading tab: {record.id}")
        indicator = self._make_loading_indicator(record.id)
        self.registry.set_state(record.id, TabState.LOADING, view=indicator)
        self._swap(record, indicator)

        delay = LOAD_DELAY_MS.get(record.id, DEFAULT_LOAD_DELAY_MS)
        self._scheduler.timeout_add(delay, self._complete_load, record)

    def _build(self, tab_id: str) -> LoadResult:
        constructor = self._constructors.get(tab_id)
        if constructor is None:
            return LoadResult(error=str(UnknownTabError(tab_id)))

        self._construct_count[tab_id] = self._construct_count.get(tab_id, 0) + 1
        try:
            view = constructor()
        except ConstructionError as e:
            return LoadResult(error=str(e))
        except Exception as e:
            logger.exception(f"Constructor for {tab_id} raised: {e}")
            return LoadResult(error=str(e) or type(e).__name__)

        if view is None:
            return LoadResult(error=f"Constructor for {tab_id} returned no view")
        return LoadResult(view=view)

    def _complete_load(self, record: TabRecord) -> None:
        # The tab bar may have been rebuilt while the timer was pending
        if self.registry.find_by_id(record.id) is not record:
            return
        if record.state is not TabState.LOADING:
            return

        result = self._build(record.id)
        if result.ok:
            self._swap(record, result.view)
            self.registry.set_state(record.id, TabState.LOADED, view=result.view)
            self._animator.reveal(result.view)
            logger.info(f"Tab {record.id} loaded")
        else:
            self.registry.set_state(record.id, TabState.FAILED, error=result.error)
            logger.error(f"Failed to load tab {record.id}: {result.error}")

        released = self._suppressed and record.id == self._initial_tab
        if released:
            self._suppressed = False
            logger.debug("Initial tab ready, loading on navigation enabled")

        for callback in list(self._loaded_callbacks):
            callback(record)

        # The user may have moved to another tab while loads were held back
        if released and self._shown_id not in (None, record.id):
            shown = self.registry.find_by_id(self._shown_id)
            if shown is not None and shown.state is TabState.PLACEHOLDER:
                self._begin_load(shown)
