from __future__ import annotations

import pytest

from ucontrol.tabs import KNOWN_TABS, TAB_METADATA, TabRegistry, TabState


def _registry() -> TabRegistry:
    registry = TabRegistry()
    for position, tab_id in enumerate(["wifi", "volume", "power"]):
        registry.insert(tab_id, position, object())
    return registry


def test_every_known_tab_has_metadata() -> None:
    assert set(TAB_METADATA) == set(KNOWN_TABS)
    assert TAB_METADATA["wifi"].icon_name == "network-wireless-symbolic"
    assert TAB_METADATA["power"].title == "Power"


def test_insert_keeps_configured_order() -> None:
    registry = _registry()

    assert registry.ids == ["wifi", "volume", "power"]
    assert len(registry) == 3
    assert [r.id for r in registry] == ["wifi", "volume", "power"]


def test_new_records_show_their_placeholder() -> None:
    registry = TabRegistry()
    placeholder = object()

    record = registry.insert("display", 0, placeholder)

    assert record.state is TabState.PLACEHOLDER
    assert record.view is placeholder
    assert record.title == "Display"
    assert record.error is None


def test_duplicate_and_unknown_ids_are_rejected() -> None:
    registry = _registry()

    with pytest.raises(ValueError):
        registry.insert("wifi", 5, object())
    with pytest.raises(ValueError):
        registry.insert("keyboard", 5, object())


def test_lookups() -> None:
    registry = _registry()
    view = object()
    registry.set_state("volume", TabState.LOADED, view=view)

    assert registry.find_by_position(2) == "power"
    assert registry.find_by_position(9) is None
    assert registry.find_by_id("volume").view is view
    assert registry.find_by_id("bluetooth") is None
    assert registry.find_by_view(view).id == "volume"
    assert "wifi" in registry


def test_error_is_kept_only_while_failed() -> None:
    registry = _registry()

    registry.set_state("wifi", TabState.LOADING, view=object())
    record = registry.set_state("wifi", TabState.FAILED, error="boom")
    assert record.error == "boom"

    record = registry.set_state("wifi", TabState.PLACEHOLDER)
    assert record.error is None
    assert record.view is record.placeholder


def test_failed_without_error_violates_invariant() -> None:
    registry = _registry()

    with pytest.raises(AssertionError):
        registry.set_state("wifi", TabState.FAILED)


def test_clear_empties_the_table() -> None:
    registry = _registry()

    registry.clear()

    assert len(registry) == 0
    assert registry.find_by_id("wifi") is None
