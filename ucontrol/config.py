"""
Ultimate Control - Configuration Module

Handles application settings, stored as one `key value` pair per line.
"""

import logging
from pathlib import Path
from dataclasses import dataclass, asdict, field
from typing import Dict, Any, List, Optional

from .tabs import KNOWN_TABS

logger = logging.getLogger(__name__)

CONFIG_DIR = Path.home() / ".config" / "ucontrol"
CONFIG_FILE = CONFIG_DIR / "settings.conf"

DEFAULT_LOCK_COMMAND = "loginctl lock-session"


def _normalize_tab_order(order: List[str]) -> List[str]:
    """Drop unknown and duplicate ids, then append any missing known ids."""
    result = []
    for tab_id in order:
        if tab_id in KNOWN_TABS and tab_id not in result:
            result.append(tab_id)
        elif tab_id not in KNOWN_TABS:
            logger.warning(f"Ignoring unknown tab in config: {tab_id}")
    result.extend(t for t in KNOWN_TABS if t not in result)
    return result


def _split_list(value: str) -> List[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


def _parse_bool(value: Any, default: bool) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in ("1", "true", "yes", "on"):
        return True
    if text in ("0", "false", "no", "off"):
        return False
    return default


def _parse_int(value: Any, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


@dataclass
class AppConfig:
    """Application configuration."""

    # Window
    floating: bool = False
    window_width: int = 800
    window_height: int = 600

    # Tabs
    tab_order: List[str] = field(default_factory=lambda: list(KNOWN_TABS))
    disabled_tabs: List[str] = field(default_factory=list)

    # Power tab
    lock_command: str = DEFAULT_LOCK_COMMAND

    def enabled_tabs(self) -> List[str]:
        """Tab ids to show, in configured order."""
        return [t for t in self.tab_order if t not in self.disabled_tabs]

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AppConfig":
        """Create config from dictionary. Values may be strings as read from disk."""
        tab_order = data.get("tab_order", list(KNOWN_TABS))
        if isinstance(tab_order, str):
            tab_order = _split_list(tab_order)
        disabled = data.get("disabled_tabs", [])
        if isinstance(disabled, str):
            disabled = _split_list(disabled)

        return cls(
            floating=_parse_bool(data.get("floating", False), False),
            window_width=_parse_int(data.get("window_width", 800), 800),
            window_height=_parse_int(data.get("window_height", 600), 600),
            tab_order=_normalize_tab_order(list(tab_order)),
            disabled_tabs=[t for t in disabled if t in KNOWN_TABS],
            lock_command=str(data.get("lock_command", DEFAULT_LOCK_COMMAND)) or DEFAULT_LOCK_COMMAND,
        )


def parse_settings(text: str) -> Dict[str, str]:
    """
    Parse `key value` lines. Blank lines and lines starting with `#`
    are skipped; a key without a value maps to an empty string.
    """
    data = {}
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        key, _, value = line.partition(" ")
        data[key] = value.strip()
    return data


def format_settings(config: AppConfig) -> str:
    """Render a config as `key value` lines."""
    values = {
        "floating": "1" if config.floating else "0",
        "window_width": str(config.window_width),
        "window_height": str(config.window_height),
        "tab_order": ",".join(config.tab_order),
        "disabled_tabs": ",".join(config.disabled_tabs),
        "lock_command": config.lock_command,
    }
    return "".join(f"{key} {value}\n" for key, value in values.items())


class ConfigManager:
    """Manages application configuration."""

    def __init__(self, config_file: Optional[Path] = None):
        self.config_file = config_file or CONFIG_FILE
        self._config: Optional[AppConfig] = None

    @property
    def config(self) -> AppConfig:
        """Get current configuration, loading from file if needed."""
        if self._config is None:
            self._config = self.load()
        return self._config

    def load(self) -> AppConfig:
        """Load configuration from file."""
        if not self.config_file.exists():
            logger.info("No config file found, using defaults")
            return AppConfig()

        try:
            with open(self.config_file, 'r') as f:
                data = parse_settings(f.read())
            return AppConfig.from_dict(data)
        except (IOError, UnicodeDecodeError) as e:
            logger.warning(f"Failed to load config: {e}, using defaults")
            return AppConfig()

    def save(self, config: Optional[AppConfig] = None) -> bool:
        """Save configuration to file."""
        if config is not None:
            self._config = config

        if self._config is None:
            return False

        try:
            self.config_file.parent.mkdir(parents=True, exist_ok=True)
            with open(self.config_file, 'w') as f:
                f.write(format_settings(self._config))
            logger.info("Configuration saved")
            return True
        except IOError as e:
            logger.error(f"Failed to save config: {e}")
            return False

    def reset_to_defaults(self) -> AppConfig:
        """Reset configuration to defaults."""
        self._config = AppConfig()
        self.save()
        return self._config


# Global config manager instance
_config_manager: Optional[ConfigManager] = None


def get_config_manager() -> ConfigManager:
    """Get the global config manager instance."""
    global _config_manager
    if _config_manager is None:
        _config_manager = ConfigManager()
    return _config_manager


def get_config() -> AppConfig:
    """Get the current application configuration."""
    return get_config_manager().config


def save_config(config: AppConfig = None) -> bool:
    """Save the current application configuration."""
    return get_config_manager().save(config)
