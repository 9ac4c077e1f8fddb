from __future__ import annotations

import pytest

from ucontrol.audio_controller import SOURCE, AudioController, parse_mute, parse_volume
from ucontrol.bluetooth_controller import BluetoothController, parse_devices
from ucontrol.display_controller import DisplayController, parse_machine_output
from ucontrol.power_controller import PowerController, parse_profiles


# =============================================================================
# Audio
# =============================================================================

def test_parse_volume_takes_first_channel() -> None:
    lines = ["Volume: front-left: 42597 /  65% / -11.23 dB,   front-right: 42597 /  70% / -11.23 dB"]

    assert parse_volume(lines) == 65
    assert parse_volume(["nothing here"]) is None


def test_parse_mute() -> None:
    assert parse_mute(["Mute: yes"]) is True
    assert parse_mute(["Mute: no"]) is False
    assert parse_mute([]) is None


def test_audio_get_volume(runner) -> None:
    runner.respond("pactl", "get-sink-volume", stdout=["Volume: front-left: 1 /  30% / x"])

    assert AudioController(runner).get_volume() == 30


def test_audio_get_volume_without_pactl(runner) -> None:
    runner.respond("pactl", exit_code=127)

    assert AudioController(runner).get_volume() is None


def test_audio_set_volume_is_clamped(runner) -> None:
    audio = AudioController(runner)

    assert audio.set_volume(400)
    audio.set_volume(-5, kind=SOURCE)

    assert runner.commands("pactl") == [
        ["set-sink-volume", "@DEFAULT_SINK@", "150%"],
        ["set-source-volume", "@DEFAULT_SOURCE@", "0%"],
    ]


def test_audio_mute(runner) -> None:
    runner.respond("pactl", "get-source-mute", stdout=["Mute: yes"])
    audio = AudioController(runner)

    assert audio.is_muted(SOURCE) is True
    assert audio.set_muted(False)
    assert runner.calls[-1] == ["pactl", "set-sink-mute", "@DEFAULT_SINK@", "0"]


# =============================================================================
# Power
# =============================================================================

PROFILES_OUTPUT = [
    "  performance:",
    "    CpuDriver:\tintel_pstate",
    "    Degraded:   no",
    "",
    "* balanced:",
    "    CpuDriver:\tintel_pstate",
    "",
    "  power-saver:",
    "    CpuDriver:\tintel_pstate",
]


def test_parse_profiles() -> None:
    assert parse_profiles(PROFILES_OUTPUT) == ["performance", "balanced", "power-saver"]


def test_power_action_runs_systemctl(runner) -> None:
    power = PowerController(runner)

    assert power.power_action("suspend")
    assert runner.calls == [["systemctl", "suspend"]]


def test_unknown_power_action_is_rejected(runner) -> None:
    with pytest.raises(ValueError):
        PowerController(runner).power_action("self-destruct")
    assert runner.calls == []


def test_lock_runs_configured_command_through_shell(runner) -> None:
    power = PowerController(runner, lock_command="swaylock -f && notify-send locked")

    assert power.lock()
    assert runner.shell_calls == ["swaylock -f && notify-send locked"]


def test_lock_failure_and_missing_command(runner) -> None:
    runner.respond("swaylock -f", exit_code=1)

    assert PowerController(runner, lock_command="swaylock -f").lock() is False
    assert PowerController(runner, lock_command="").lock() is False
    assert runner.shell_calls == ["swaylock -f"]


def test_power_profiles(runner) -> None:
    runner.respond("powerprofilesctl", "list", stdout=PROFILES_OUTPUT)
    runner.respond("powerprofilesctl", "get", stdout=["balanced"])
    power = PowerController(runner)

    assert power.list_profiles() == ["performance", "balanced", "power-saver"]
    assert power.get_profile() == "balanced"
    assert power.set_profile("power-saver")
    assert runner.calls[-1] == ["powerprofilesctl", "set", "power-saver"]


def test_power_profiles_unavailable(runner) -> None:
    runner.respond("powerprofilesctl", exit_code=127)
    power = PowerController(runner)

    assert power.list_profiles() == []
    assert power.get_profile() is None


# =============================================================================
# Bluetooth
# =============================================================================

def test_parse_devices() -> None:
    devices = parse_devices([
        "Device AA:BB:CC:DD:EE:FF WH-1000XM4",
        "Device 11:22:33:44:55:66",
        "[CHG] Controller 00:00:00:00:00:00 Powered: yes",
    ])

    assert [(d.address, d.name) for d in devices] == [
        ("AA:BB:CC:DD:EE:FF", "WH-1000XM4"),
        ("11:22:33:44:55:66", "11:22:33:44:55:66"),
    ]


def test_bluetooth_power_state(runner) -> None:
    runner.respond("bluetoothctl", "show", stdout=["Controller 00:00 (public)", "\tPowered: yes"])
    bluetooth = BluetoothController(runner)

    assert bluetooth.is_powered()
    assert bluetooth.set_powered(False)
    assert runner.calls[-1] == ["bluetoothctl", "power", "off"]


def test_bluetooth_paired_devices_with_connection_state(runner) -> None:
    runner.respond("bluetoothctl", "devices", "Paired",
                   stdout=["Device AA:AA:AA:AA:AA:AA Headphones", "Device BB:BB:BB:BB:BB:BB Mouse"])
    runner.respond("bluetoothctl", "info", "AA:AA:AA:AA:AA:AA", stdout=["\tConnected: yes"])
    runner.respond("bluetoothctl", "info", "BB:BB:BB:BB:BB:BB", stdout=["\tConnected: no"])

    devices = BluetoothController(runner).paired_devices()

    assert [(d.name, d.connected) for d in devices] == [("Headphones", True), ("Mouse", False)]


def test_bluetooth_connect_and_disconnect(runner) -> None:
    runner.respond("bluetoothctl", "connect", exit_code=1)
    bluetooth = BluetoothController(runner)

    assert bluetooth.connect("AA:AA:AA:AA:AA:AA") is False
    assert bluetooth.disconnect("AA:AA:AA:AA:AA:AA") is True


# =============================================================================
# Display
# =============================================================================

def test_parse_machine_output() -> None:
    assert parse_machine_output("intel_backlight,backlight,9600,50%,19200") == 50
    assert parse_machine_output("garbage") is None
    assert parse_machine_output("a,b,c,lots,e") is None


def test_display_brightness(runner) -> None:
    runner.respond("brightnessctl", "-m", stdout=["intel_backlight,backlight,19200,100%,19200"])
    display = DisplayController(runner)

    assert display.get_brightness() == 100
    display.set_brightness(0)
    display.set_brightness(250)

    assert runner.commands("brightnessctl")[1:] == [["set", "1%"], ["set", "100%"]]
