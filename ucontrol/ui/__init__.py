"""
Ultimate Control - UI Package

GTK4 user interface components.
"""

from .volume import VolumePage
from .wifi import WifiPage
from .bluetooth import BluetoothPage
from .display import DisplayPage
from .power import PowerPage
from .settings import SettingsWindow

__all__ = [
    "VolumePage",
    "WifiPage",
    "BluetoothPage",
    "DisplayPage",
    "PowerPage",
    "SettingsWindow",
]
