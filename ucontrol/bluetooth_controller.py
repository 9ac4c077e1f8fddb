"""
Ultimate Control - Bluetooth Controller

Adapter power and paired devices through bluetoothctl.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

from .shell import ShellRunner

logger = logging.getLogger(__name__)

BLUETOOTHCTL = "bluetoothctl"


@dataclass
class BluetoothDevice:
    """A paired device."""
    address: str
    name: str
    connected: bool = False


def parse_devices(lines: List[str]) -> List[BluetoothDevice]:
    """Parse `Device <MAC> <name>` lines."""
    devices = []
    for line in lines:
        parts = line.strip().split(" ", 2)
        if len(parts) < 2 or parts[0] != "Device":
            continue
        name = parts[2] if len(parts) > 2 else parts[1]
        devices.append(BluetoothDevice(address=parts[1], name=name))
    return devices


def parse_info_flag(lines: List[str], key: str) -> Optional[bool]:
    """Value of a `Key: yes|no` line from `show` or `info` output."""
    for line in lines:
        name, sep, value = line.strip().partition(":")
        if sep and name.strip() == key:
            return value.strip().lower() == "yes"
    return None


class BluetoothController:
    """Thin wrapper over bluetoothctl."""

    def __init__(self, runner: Optional[ShellRunner] = None):
        self._runner = runner or ShellRunner()

    def is_powered(self) -> bool:
        result = self._runner.run(BLUETOOTHCTL, ["show"])
        return bool(result.ok and parse_info_flag(result.stdout_lines, "Powered"))

    def set_powered(self, powered: bool) -> bool:
        state = "on" if powered else "off"
        logger.info(f"Turning Bluetooth {state}")
        code = self._runner.run_discard(BLUETOOTHCTL, ["power", state])
        if code != 0:
            logger.error(f"bluetoothctl power {state} failed with exit code {code}")
        return code == 0

    def paired_devices(self) -> List[BluetoothDevice]:
        """Paired devices with their connection state."""
        result = self._runner.run(BLUETOOTHCTL, ["devices", "Paired"])
        if not result.ok:
            return []
        devices = parse_devices(result.stdout_lines)
        for device in devices:
            info = self._runner.run(BLUETOOTHCTL, ["info", device.address])
            device.connected = bool(parse_info_flag(info.stdout_lines, "Connected"))
        return devices

    def connect(self, address: str) -> bool:
        logger.info(f"Connecting Bluetooth device {address}")
        return self._runner.run_discard(BLUETOOTHCTL, ["connect", address]) == 0

    def disconnect(self, address: str) -> bool:
        logger.info(f"Disconnecting Bluetooth device {address}")
        return self._runner.run_discard(BLUETOOTHCTL, ["disconnect", address]) == 0
