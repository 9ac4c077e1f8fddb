from __future__ import annotations

import logging

import pytest

from ucontrol.config import AppConfig
from ucontrol.startup import InitialTabPolicy


class RecordingLoader:
    def __init__(self, result: bool = True) -> None:
        self.switched = []
        self._result = result

    def switch_to(self, tab_id: str) -> bool:
        self.switched.append(tab_id)
        return self._result


def test_no_selector_means_no_policy() -> None:
    policy = InitialTabPolicy.from_flags({"volume": False, "wifi": False})

    assert not policy.active
    assert policy.tab_id is None
    assert policy.activate(RecordingLoader()) is False


def test_single_selector() -> None:
    policy = InitialTabPolicy.from_flags({"wifi": True})

    assert policy.active
    assert policy.tab_id == "wifi"


def test_several_selectors_resolve_in_tab_order(caplog) -> None:
    with caplog.at_level(logging.WARNING):
        policy = InitialTabPolicy.from_flags({"power": True, "bluetooth": True})

    assert policy.tab_id == "bluetooth"
    assert "Multiple tabs requested" in caplog.text


def test_unknown_tab_is_rejected() -> None:
    with pytest.raises(ValueError):
        InitialTabPolicy("keyboard")


def test_apply_enables_a_disabled_tab() -> None:
    config = AppConfig(disabled_tabs=["wifi", "power"])

    InitialTabPolicy("wifi").apply(config)

    assert config.disabled_tabs == ["power"]
    assert "wifi" in config.enabled_tabs()


def test_apply_adds_a_tab_missing_from_the_order() -> None:
    config = AppConfig(tab_order=["volume", "power"])

    tabs = InitialTabPolicy("display").enabled_tabs(config)

    assert tabs == ["volume", "power", "display"]


def test_inactive_policy_leaves_config_alone() -> None:
    config = AppConfig(disabled_tabs=["wifi"])

    InitialTabPolicy().apply(config)

    assert config.disabled_tabs == ["wifi"]


def test_activate_switches_to_the_selected_tab() -> None:
    loader = RecordingLoader()

    assert InitialTabPolicy("power").activate(loader) is True
    assert loader.switched == ["power"]
