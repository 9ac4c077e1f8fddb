from __future__ import annotations

import threading
from collections import deque
from typing import Callable, Dict, List, Optional, Sequence, Tuple

import pytest

from ucontrol.shell import CommandResult


class FakeRunner:
    """Records every command and answers from canned responses."""

    def __init__(self) -> None:
        self.calls: List[List[str]] = []
        self.shell_calls: List[str] = []
        self._responses: List[Tuple[Tuple[str, ...], object]] = []
        self._lock = threading.Lock()

    def respond(self, *argv: str, stdout: Sequence[str] = (), exit_code: int = 0) -> None:
        """Answer commands starting with `argv`. Later rules win."""
        result = CommandResult(exit_code=exit_code, stdout_lines=list(stdout))
        self._responses.insert(0, (tuple(argv), result))

    def respond_with(self, *argv: str, handler: Callable[[List[str]], CommandResult]) -> None:
        self._responses.insert(0, (tuple(argv), handler))

    def run(self, cmd: str, args: Sequence[str] = ()) -> CommandResult:
        argv = [cmd, *args]
        with self._lock:
            self.calls.append(argv)
        for prefix, response in self._responses:
            if tuple(argv[: len(prefix)]) == prefix:
                if callable(response):
                    return response(argv)
                return CommandResult(
                    exit_code=response.exit_code,
                    stdout_lines=list(response.stdout_lines),
                )
        return CommandResult(exit_code=0)

    def run_discard(self, cmd: str, args: Sequence[str] = ()) -> int:
        return self.run(cmd, args).exit_code

    def run_shell(self, command_line: str) -> CommandResult:
        self.shell_calls.append(command_line)
        for prefix, response in self._responses:
            if prefix == (command_line,):
                return response
        return CommandResult(exit_code=0)

    def commands(self, program: str = "nmcli") -> List[List[str]]:
        """Recorded argument lists for `program`, without the program name."""
        return [call[1:] for call in self.calls if call[0] == program]


class FakeNetworkManager(FakeRunner):
    """
    A small stateful nmcli: saved profiles, visible networks, radio and
    device state. Connecting activates a network when a profile with its
    name exists (or when a password is given).
    """

    def __init__(self) -> None:
        super().__init__()
        self.radio = True
        self.profiles: List[str] = []
        self.passwords: Dict[str, str] = {}
        self.visible: List[Tuple[str, int, str]] = []  # ssid, signal, security
        self.active: Optional[str] = None
        self.devices: List[Tuple[str, str, str]] = [
            ("wlan0", "wifi", "connected"),
            ("p2p-dev-wlan0", "wifi-p2p", "disconnected"),
            ("lo", "loopback", "unmanaged"),
        ]
        self.fail: Dict[Tuple[str, ...], int] = {}

    def run(self, cmd: str, args: Sequence[str] = ()) -> CommandResult:
        argv = [cmd, *args]
        with self._lock:
            self.calls.append(argv)
        if cmd != "nmcli":
            return CommandResult(exit_code=127)

        for prefix, code in self.fail.items():
            if tuple(args[: len(prefix)]) == prefix:
                return CommandResult(exit_code=code)

        a = list(args)
        if a == ["radio", "wifi"]:
            return CommandResult(0, ["enabled" if self.radio else "disabled"])
        if a[:2] == ["radio", "wifi"]:
            self.radio = a[2] == "on"
            if not self.radio:
                self.active = None
            return CommandResult(0)
        if a == ["device", "status"]:
            lines = ["DEVICE  TYPE  STATE  CONNECTION"]
            lines += [f"{d}  {t}  {s}  --" for d, t, s in self.devices]
            return CommandResult(0, lines)
        if a[:3] == ["-t", "-f", "IN-USE,SSID,SIGNAL,SECURITY"]:
            lines = []
            for ssid, signal, security in self.visible:
                in_use = "*" if ssid == self.active else ""
                escaped = ssid.replace("\\", "\\\\").replace(":", "\\:")
                lines.append(f"{in_use}:{escaped}:{signal}:{security}")
            return CommandResult(0, lines)
        if a[:3] == ["dev", "wifi", "connect"]:
            ssid = a[3]
            if ssid in self.profiles or "password" in a:
                if ssid not in self.profiles:
                    self.profiles.append(ssid)
                self.active = ssid
                return CommandResult(0)
            return CommandResult(4)
        if a[:2] == ["con", "add"]:
            self.profiles.append(a[a.index("con-name") + 1])
            return CommandResult(0)
        if a[:2] == ["con", "modify"]:
            if a[3] == "wifi-sec.psk":
                self.passwords[a[2]] = a[4]
            return CommandResult(0)
        if a[:2] == ["con", "up"]:
            self.active = a[2]
            return CommandResult(0)
        if a[:2] == ["con", "delete"]:
            if a[2] in self.profiles:
                self.profiles.remove(a[2])
                return CommandResult(0)
            return CommandResult(10)
        if a == ["-t", "-f", "NAME", "con", "show"]:
            return CommandResult(0, list(self.profiles))
        if a[:3] == ["-s", "-g", "802-11-wireless-security.psk"]:
            ssid = a[-1]
            if ssid in self.passwords:
                return CommandResult(0, [self.passwords[ssid]])
            return CommandResult(10)
        if a[:2] == ["device", "disconnect"]:
            self.active = None
            return CommandResult(0)
        return CommandResult(0)


class FakeTimer:
    def __init__(self, due: int, callback: Callable, args: tuple) -> None:
        self.due = due
        self.callback = callback
        self.args = args
        self._done = False

    @property
    def active(self) -> bool:
        return not self._done

    def cancel(self) -> None:
        self._done = True


class FakeScheduler:
    """Manual clock: timers fire only from advance(), idle work from run_idle()."""

    def __init__(self) -> None:
        self.now = 0
        self.timers: List[FakeTimer] = []
        self._idle: deque = deque()
        self._idle_lock = threading.Lock()

    def timeout_add(self, delay_ms: int, callback: Callable, *args) -> FakeTimer:
        timer = FakeTimer(self.now + delay_ms, callback, args)
        self.timers.append(timer)
        return timer

    def idle_add(self, callback: Callable, *args) -> None:
        with self._idle_lock:
            self._idle.append((callback, args))

    def pending(self) -> List[FakeTimer]:
        return [t for t in self.timers if t.active]

    def advance(self, ms: int) -> None:
        target = self.now + ms
        while True:
            due = [t for t in self.pending() if t.due <= target]
            if not due:
                break
            timer = min(due, key=lambda t: t.due)
            self.now = timer.due
            timer._done = True
            timer.callback(*timer.args)
        self.now = target

    def run_idle(self) -> int:
        count = 0
        while True:
            with self._idle_lock:
                if not self._idle:
                    return count
                callback, args = self._idle.popleft()
            callback(*args)
            count += 1


class FakeView:
    def __init__(self, name: str = "") -> None:
        self.name = name
        self.css_classes: set = set()
        self.opacity = 1.0

    def add_css_class(self, name: str) -> None:
        self.css_classes.add(name)

    def remove_css_class(self, name: str) -> None:
        self.css_classes.discard(name)

    def set_opacity(self, value: float) -> None:
        self.opacity = value

    def __repr__(self) -> str:
        return f"FakeView({self.name!r})"


class FakeHost:
    """
    In-memory tab bar. When `navigate` is set, it is called like a
    tab-bar signal whenever the selected page changes.
    """

    def __init__(self) -> None:
        self.pages: List[Tuple[object, str]] = []
        self.current = -1
        self.navigate: Optional[Callable[[int], None]] = None
        self.replace_offset = 0

    def _select(self, position: int) -> None:
        changed = position != self.current
        self.current = position
        if changed and self.navigate is not None:
            self.navigate(position)

    def append(self, view, tab_id: str) -> int:
        self.pages.append((view, tab_id))
        if self.current < 0:
            self._select(0)
        return len(self.pages) - 1

    def replace(self, position: int, view, tab_id: str) -> int:
        self.pages[position] = (view, tab_id)
        if self.navigate is not None:
            # Removing the current page makes a real notebook select another one
            self.navigate(position)
        return position + self.replace_offset

    def set_current(self, position: int) -> None:
        self._select(position)

    def remove_all(self) -> None:
        self.pages.clear()
        self.current = -1

    def view_at(self, position: int):
        return self.pages[position][0]


@pytest.fixture
def runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def nm() -> FakeNetworkManager:
    return FakeNetworkManager()


@pytest.fixture
def scheduler() -> FakeScheduler:
    return FakeScheduler()


@pytest.fixture
def host() -> FakeHost:
    return FakeHost()
