"""
Ultimate Control - Display Controller

Backlight brightness through brightnessctl.
"""

import logging
from typing import Optional

from .shell import ShellRunner

logger = logging.getLogger(__name__)

BRIGHTNESSCTL = "brightnessctl"

# Keep the screen from going fully dark
MIN_BRIGHTNESS_PERCENT = 1


def parse_machine_output(line: str) -> Optional[int]:
    """
    Brightness percentage from `brightnessctl -m`, whose output is
    `device,class,current,percent%,max`.
    """
    fields = line.strip().split(",")
    if len(fields) < 4:
        return None
    try:
        return int(fields[3].rstrip("%"))
    except ValueError:
        return None


class DisplayController:

    def __init__(self, runner: Optional[ShellRunner] = None):
        self._runner = runner or ShellRunner()

    def get_brightness(self) -> Optional[int]:
        result = self._runner.run(BRIGHTNESSCTL, ["-m"])
        if not result.ok or not result.stdout_lines:
            return None
        return parse_machine_output(result.stdout_lines[0])

    def set_brightness(self, percent: int) -> bool:
        percent = max(MIN_BRIGHTNESS_PERCENT, min(100, int(percent)))
        code = self._runner.run_discard(BRIGHTNESSCTL, ["set", f"{percent}%"])
        if code != 0:
            logger.warning(f"Failed to set brightness to {percent}%")
        return code == 0
