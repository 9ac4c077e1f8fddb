"""
Ultimate Control - Desktop control panel

A GTK4 control panel for volume, Wi-Fi, Bluetooth, display and power
settings on Linux desktops. The host utilities (nmcli, pactl,
bluetoothctl, brightnessctl, systemctl, powerprofilesctl) do the work.
"""

__version__ = "0.1.0"
__author__ = "Ultimate Control Contributors"

from .shell import (
    ShellRunner,
    CommandResult,
)

from .wifi_controller import (
    WifiController,
    WifiError,
    NoInterfaceError,
    RadioOffError,
    CommandFailed,
    ParseError,
    Network,
    WifiState,
    ConnectRequest,
    OperationResult,
)

from .qr import (
    WifiCredentials,
    format_wifi_payload,
    parse_wifi_payload,
)

from .tabs import (
    KNOWN_TABS,
    TabRegistry,
    TabRecord,
    TabState,
)

from .loader import (
    LazyLoader,
    LoadResult,
    UnknownTabError,
    ConstructionError,
)

from .config import (
    AppConfig,
    ConfigManager,
    get_config,
    get_config_manager,
)

__all__ = [
    # Shell
    "ShellRunner",
    "CommandResult",
    # Wi-Fi
    "WifiController",
    "WifiError",
    "NoInterfaceError",
    "RadioOffError",
    "CommandFailed",
    "ParseError",
    "Network",
    "WifiState",
    "ConnectRequest",
    "OperationResult",
    # QR
    "WifiCredentials",
    "format_wifi_payload",
    "parse_wifi_payload",
    # Tabs
    "KNOWN_TABS",
    "TabRegistry",
    "TabRecord",
    "TabState",
    "LazyLoader",
    "LoadResult",
    "UnknownTabError",
    "ConstructionError",
    # Config
    "AppConfig",
    "ConfigManager",
    "get_config",
    "get_config_manager",
]
