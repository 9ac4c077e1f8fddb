"""
Ultimate Control - Shell Runner

Every interaction with host utilities (nmcli, pactl, systemctl, ...) goes
through this module. Argument vectors are executed directly, without a
shell, so user-supplied strings such as SSIDs and passwords are always
passed as single argv tokens.
"""

import subprocess
import logging
import shlex
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

logger = logging.getLogger(__name__)

# Exit codes reported when the process could not be run at all
EXIT_NOT_FOUND = 127
EXIT_NOT_EXECUTABLE = 126
EXIT_TIMEOUT = 124

DEFAULT_TIMEOUT_SECONDS = 30

# The argument following one of these is a passphrase
SECRET_FLAGS = frozenset({"password", "wifi-sec.psk"})
REDACTED = "********"


@dataclass
class CommandResult:
    """Outcome of one external command."""
    exit_code: int
    stdout_lines: List[str] = field(default_factory=list)
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.exit_code == 0


class ShellRunner:
    """
    Runs external commands and captures their output.

    Failures never raise: a missing binary, a timeout or a non-zero exit
    all come back as a CommandResult carrying the exit code, with whatever
    stdout the process produced.
    """

    def __init__(self, timeout: float = DEFAULT_TIMEOUT_SECONDS):
        self.timeout = timeout

    def run(self, cmd: str, args: Sequence[str] = ()) -> CommandResult:
        """
        Run `cmd` with `args` as separate argv tokens.

        Args:
            cmd: Executable name or path
            args: Arguments, never interpreted by a shell

        Returns:
            CommandResult with stdout split into lines
        """
        argv = [cmd, *[str(a) for a in args]]
        logger.debug(f"Running: {_describe(argv)}")
        return self._execute(argv, shell=False)

    def run_discard(self, cmd: str, args: Sequence[str] = ()) -> int:
        """Run a command, ignore its output and return the exit code."""
        return self.run(cmd, args).exit_code

    def run_shell(self, command_line: str) -> CommandResult:
        """
        Run a fixed or user-configured command line through /bin/sh.

        Only for strings that contain no untrusted substrings, such as the
        configured lock command.
        """
        logger.debug(f"Running via shell: {command_line}")
        return self._execute(command_line, shell=True)

    def _execute(self, command, shell: bool) -> CommandResult:
        try:
            result = subprocess.run(
                command,
                shell=shell,
                capture_output=True,
                encoding="utf-8",
                errors="replace",
                timeout=self.timeout
            )
        except FileNotFoundError:
            logger.warning(f"Command not found: {_describe(command)}")
            return CommandResult(exit_code=EXIT_NOT_FOUND)
        except PermissionError:
            logger.warning(f"Command not executable: {_describe(command)}")
            return CommandResult(exit_code=EXIT_NOT_EXECUTABLE)
        except subprocess.TimeoutExpired as e:
            logger.warning(f"Command timed out after {self.timeout}s: {_describe(command)}")
            return CommandResult(
                exit_code=EXIT_TIMEOUT,
                stdout_lines=_split_lines(e.stdout),
            )

        if result.returncode != 0:
            logger.debug(
                f"{_describe(command)} exited with {result.returncode}: {result.stderr.strip()}"
            )

        return CommandResult(
            exit_code=result.returncode,
            stdout_lines=_split_lines(result.stdout),
            stderr=result.stderr or "",
        )


def _split_lines(output: Optional[object]) -> List[str]:
    if not output:
        return []
    if isinstance(output, bytes):
        output = output.decode(errors="replace")
    return str(output).splitlines()


def _describe(command) -> str:
    """Printable form of a command, with secret arguments masked."""
    if isinstance(command, str):
        return command
    shown = list(command)
    for i, token in enumerate(shown[:-1]):
        if token in SECRET_FLAGS:
            shown[i + 1] = REDACTED
    return shlex.join(shown)
