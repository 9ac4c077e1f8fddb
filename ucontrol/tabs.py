"""
Ultimate Control - Tab Registry

One record per enabled tab: its identity, where it sits in the tab bar,
its load state and the view currently shown for it.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional

logger = logging.getLogger(__name__)

KNOWN_TABS = ("volume", "wifi", "bluetooth", "display", "power")


@dataclass(frozen=True)
class TabMetadata:
    title: str
    icon_name: str


TAB_METADATA: Dict[str, TabMetadata] = {
    "volume": TabMetadata("Volume", "audio-volume-high-symbolic"),
    "wifi": TabMetadata("WiFi", "network-wireless-symbolic"),
    "bluetooth": TabMetadata("Bluetooth", "bluetooth-active-symbolic"),
    "display": TabMetadata("Display", "video-display-symbolic"),
    "power": TabMetadata("Power", "system-shutdown-symbolic"),
}


class TabState(Enum):
    PLACEHOLDER = "placeholder"
    LOADING = "loading"
    LOADED = "loaded"
    FAILED = "failed"


@dataclass
class TabRecord:
    """Per-tab bookkeeping. Mutated only through TabRegistry."""
    id: str
    title: str
    icon_name: str
    position: int
    placeholder: Any
    view: Any = None
    state: TabState = TabState.PLACEHOLDER
    error: Optional[str] = None

    def check(self) -> None:
        """Assert the record's internal consistency."""
        if self.state is TabState.LOADED:
            assert self.view is not None, f"{self.id}: loaded without a view"
        if self.state is TabState.PLACEHOLDER:
            assert self.view is self.placeholder, f"{self.id}: placeholder state shows another view"
        if self.state is TabState.FAILED:
            assert self.error is not None, f"{self.id}: failed without an error"
        else:
            assert self.error is None, f"{self.id}: error set outside failed state"


class TabRegistry:
    """
    Ordered table of tab records, keyed by tab id.

    Insertion order is the configured tab order. Only the UI thread
    touches the registry, so there is no locking.
    """

    def __init__(self):
        self._records: Dict[str, TabRecord] = {}

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[TabRecord]:
        return iter(list(self._records.values()))

    def __contains__(self, tab_id: str) -> bool:
        return tab_id in self._records

    @property
    def ids(self) -> List[str]:
        return list(self._records)

    def insert(self, tab_id: str, position: int, placeholder_view: Any) -> TabRecord:
        """
        Add a tab in the PLACEHOLDER state.

        Raises:
            ValueError: If the id is unknown or already present
        """
        if tab_id not in TAB_METADATA:
            raise ValueError(f"Unknown tab id: {tab_id}")
        if tab_id in self._records:
            raise ValueError(f"Duplicate tab id: {tab_id}")

        meta = TAB_METADATA[tab_id]
        record = TabRecord(
            id=tab_id,
            title=meta.title,
            icon_name=meta.icon_name,
            position=position,
            placeholder=placeholder_view,
            view=placeholder_view,
        )
        record.check()
        self._records[tab_id] = record
        return record

    def set_state(self, tab_id: str, state: TabState, view: Any = None,
                  error: Optional[str] = None) -> TabRecord:
        """
        Move a tab to `state`. `view` replaces the current view when given;
        `error` is kept only for FAILED.
        """
        record = self._records[tab_id]
        record.state = state
        if state is TabState.PLACEHOLDER:
            record.view = record.placeholder
        elif view is not None:
            record.view = view
        record.error = error if state is TabState.FAILED else None
        record.check()
        logger.debug(f"Tab {tab_id} -> {state.value}")
        return record

    def set_position(self, tab_id: str, position: int) -> None:
        self._records[tab_id].position = position

    def find_by_position(self, position: int) -> Optional[str]:
        for record in self._records.values():
            if record.position == position:
                return record.id
        return None

    def find_by_id(self, tab_id: str) -> Optional[TabRecord]:
        return self._records.get(tab_id)

    def find_by_view(self, view: Any) -> Optional[TabRecord]:
        for record in self._records.values():
            if record.view is view:
                return record
        return None

    def clear(self) -> None:
        self._records.clear()
