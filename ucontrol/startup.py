"""
Ultimate Control - Initial-Tab Policy

Turns the tab selector given on the command line into "open this tab
first and do not load the others until it is ready".
"""

import logging
from typing import Iterable, Mapping, Optional

from .tabs import KNOWN_TABS

logger = logging.getLogger(__name__)


class InitialTabPolicy:
    """The tab requested at startup, if any."""

    def __init__(self, tab_id: Optional[str] = None):
        if tab_id is not None and tab_id not in KNOWN_TABS:
            raise ValueError(f"Unknown tab id: {tab_id}")
        self.tab_id = tab_id

    @classmethod
    def from_flags(cls, flags: Mapping[str, bool]) -> "InitialTabPolicy":
        """
        Pick the selector from parsed command-line flags.

        Several selectors resolve in tab order (volume first); the rest
        are logged and ignored.
        """
        selected = [tab for tab in KNOWN_TABS if flags.get(tab)]
        if not selected:
            return cls()
        if len(selected) > 1:
            logger.warning(
                f"Multiple tabs requested ({', '.join(selected)}), opening {selected[0]}"
            )
        return cls(selected[0])

    @property
    def active(self) -> bool:
        return self.tab_id is not None

    def apply(self, config) -> None:
        """Force-enable the selected tab for this run, without saving."""
        if not self.active:
            return
        if self.tab_id in config.disabled_tabs:
            logger.info(f"Enabling disabled tab {self.tab_id} for this session")
            config.disabled_tabs = [t for t in config.disabled_tabs if t != self.tab_id]
        if self.tab_id not in config.tab_order:
            config.tab_order = list(config.tab_order) + [self.tab_id]

    def enabled_tabs(self, config) -> Iterable[str]:
        """Tab ids to show, in configured order, with the selection applied."""
        self.apply(config)
        return config.enabled_tabs()

    def activate(self, loader) -> bool:
        """Open the selected tab. Call once the window is shown."""
        if not self.active:
            return False
        logger.info(f"Opening initial tab: {self.tab_id}")
        return loader.switch_to(self.tab_id)
