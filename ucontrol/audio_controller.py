"""
Ultimate Control - Audio Controller

Volume and mute of the default PulseAudio/PipeWire sink (speakers) and
source (microphone) through pactl.
"""

import re
import logging
from typing import Optional

from .shell import ShellRunner

logger = logging.getLogger(__name__)

PACTL = "pactl"

SINK = "sink"
SOURCE = "source"
DEFAULT_DEVICE = {SINK: "@DEFAULT_SINK@", SOURCE: "@DEFAULT_SOURCE@"}

MAX_VOLUME_PERCENT = 150

_PERCENT_RE = re.compile(r"(\d+)%")


def parse_volume(lines) -> Optional[int]:
    """First percentage in `pactl get-*-volume` output (the first channel)."""
    for line in lines:
        match = _PERCENT_RE.search(line)
        if match:
            return int(match.group(1))
    return None


def parse_mute(lines) -> Optional[bool]:
    """`Mute: yes` / `Mute: no`."""
    for line in lines:
        key, _, value = line.partition(":")
        if key.strip().lower() == "mute":
            return value.strip().lower() == "yes"
    return None


class AudioController:
    """Reads and changes default sink/source volume and mute state."""

    def __init__(self, runner: Optional[ShellRunner] = None):
        self._runner = runner or ShellRunner()

    def get_volume(self, kind: str = SINK) -> Optional[int]:
        """Volume in percent, or None if pactl is unavailable."""
        result = self._runner.run(PACTL, [f"get-{kind}-volume", DEFAULT_DEVICE[kind]])
        if not result.ok:
            return None
        return parse_volume(result.stdout_lines)

    def set_volume(self, percent: int, kind: str = SINK) -> bool:
        percent = max(0, min(MAX_VOLUME_PERCENT, int(percent)))
        code = self._runner.run_discard(
            PACTL, [f"set-{kind}-volume", DEFAULT_DEVICE[kind], f"{percent}%"]
        )
        if code != 0:
            logger.warning(f"Failed to set {kind} volume to {percent}%")
        return code == 0

    def is_muted(self, kind: str = SINK) -> Optional[bool]:
        result = self._runner.run(PACTL, [f"get-{kind}-mute", DEFAULT_DEVICE[kind]])
        if not result.ok:
            return None
        return parse_mute(result.stdout_lines)

    def set_muted(self, muted: bool, kind: str = SINK) -> bool:
        code = self._runner.run_discard(
            PACTL, [f"set-{kind}-mute", DEFAULT_DEVICE[kind], "1" if muted else "0"]
        )
        if code != 0:
            logger.warning(f"Failed to {'mute' if muted else 'unmute'} {kind}")
        return code == 0
