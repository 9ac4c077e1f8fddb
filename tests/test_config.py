from __future__ import annotations

from ucontrol.config import (
    DEFAULT_LOCK_COMMAND,
    AppConfig,
    ConfigManager,
    format_settings,
    parse_settings,
)
from ucontrol.tabs import KNOWN_TABS


def test_defaults() -> None:
    config = AppConfig()

    assert config.tab_order == list(KNOWN_TABS)
    assert config.enabled_tabs() == list(KNOWN_TABS)
    assert config.lock_command == DEFAULT_LOCK_COMMAND
    assert not config.floating


def test_parse_settings_skips_comments_and_blank_lines() -> None:
    text = "# generated\n\nfloating 1\nlock_command swaylock -f -c 000000\nempty\n"

    assert parse_settings(text) == {
        "floating": "1",
        "lock_command": "swaylock -f -c 000000",
        "empty": "",
    }


def test_from_dict_normalizes_tab_order() -> None:
    config = AppConfig.from_dict({"tab_order": "wifi,keyboard,wifi,power"})

    assert config.tab_order == ["wifi", "power", "volume", "bluetooth", "display"]


def test_from_dict_tolerates_bad_values() -> None:
    config = AppConfig.from_dict({
        "floating": "maybe",
        "window_width": "wide",
        "disabled_tabs": "bluetooth,keyboard",
        "lock_command": "",
    })

    assert config.floating is False
    assert config.window_width == 800
    assert config.disabled_tabs == ["bluetooth"]
    assert config.lock_command == DEFAULT_LOCK_COMMAND


def test_enabled_tabs_respects_order_and_disabled() -> None:
    config = AppConfig(tab_order=["power", "wifi", "volume"], disabled_tabs=["wifi"])

    assert config.enabled_tabs() == ["power", "volume"]


def test_format_settings_is_readable_back() -> None:
    config = AppConfig(floating=True, window_width=640, disabled_tabs=["display"],
                       lock_command="swaylock -f")

    text = format_settings(config)

    assert "floating 1\n" in text
    assert "disabled_tabs display\n" in text
    assert AppConfig.from_dict(parse_settings(text)) == config


def test_manager_uses_defaults_without_a_file(tmp_path) -> None:
    manager = ConfigManager(tmp_path / "settings.conf")

    assert manager.config == AppConfig()


def test_manager_saves_and_reloads(tmp_path) -> None:
    path = tmp_path / "nested" / "settings.conf"
    manager = ConfigManager(path)
    config = AppConfig(tab_order=["power", "volume", "wifi", "bluetooth", "display"],
                       disabled_tabs=["bluetooth"])

    assert manager.save(config)
    assert path.exists()

    reloaded = ConfigManager(path).load()
    assert reloaded.tab_order == config.tab_order
    assert reloaded.disabled_tabs == ["bluetooth"]


def test_manager_reset_to_defaults(tmp_path) -> None:
    manager = ConfigManager(tmp_path / "settings.conf")
    manager.save(AppConfig(floating=True))

    assert manager.reset_to_defaults() == AppConfig()
    assert ConfigManager(tmp_path / "settings.conf").load().floating is False
