"""
Ultimate Control - Power Controller

System power actions through systemctl, the configured session lock
command, and power profiles through powerprofilesctl.
"""

import logging
from typing import List, Optional

from .shell import ShellRunner

logger = logging.getLogger(__name__)

SYSTEMCTL = "systemctl"
POWERPROFILESCTL = "powerprofilesctl"

POWER_ACTIONS = ("poweroff", "reboot", "suspend", "hibernate")


def parse_profiles(lines: List[str]) -> List[str]:
    """
    Profile names from `powerprofilesctl list`.

    Profile headers look like `* balanced:` (active) or `  power-saver:`;
    the indented `Key: value` lines below them are skipped.
    """
    profiles = []
    for line in lines:
        stripped = line.strip()
        if line.startswith("    ") or not stripped.endswith(":"):
            continue
        name = stripped.lstrip("*").strip().rstrip(":")
        if name and " " not in name:
            profiles.append(name)
    return profiles


class PowerController:
    """Power menu actions."""

    def __init__(self, runner: Optional[ShellRunner] = None, lock_command: str = ""):
        self._runner = runner or ShellRunner()
        self.lock_command = lock_command

    def power_action(self, action: str) -> bool:
        """
        Run one of poweroff, reboot, suspend or hibernate.

        Raises:
            ValueError: If the action is not known
        """
        if action not in POWER_ACTIONS:
            raise ValueError(f"Unknown power action: {action}")
        logger.info(f"Requesting system {action}")
        code = self._runner.run_discard(SYSTEMCTL, [action])
        if code != 0:
            logger.error(f"systemctl {action} failed with exit code {code}")
        return code == 0

    def lock(self) -> bool:
        """Lock the session with the configured command."""
        if not self.lock_command:
            logger.warning("No lock command configured")
            return False
        result = self._runner.run_shell(self.lock_command)
        if not result.ok:
            logger.error(f"Lock command failed with exit code {result.exit_code}")
        return result.ok

    def list_profiles(self) -> List[str]:
        result = self._runner.run(POWERPROFILESCTL, ["list"])
        if not result.ok:
            return []
        return parse_profiles(result.stdout_lines)

    def get_profile(self) -> Optional[str]:
        result = self._runner.run(POWERPROFILESCTL, ["get"])
        if not result.ok or not result.stdout_lines:
            return None
        return result.stdout_lines[0].strip() or None

    def set_profile(self, profile: str) -> bool:
        logger.info(f"Setting power profile: {profile}")
        return self._runner.run_discard(POWERPROFILESCTL, ["set", profile]) == 0
