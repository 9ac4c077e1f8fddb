"""
Ultimate Control - Wi-Fi Controller

Drives NetworkManager through its command-line client (nmcli) to scan,
connect, disconnect, forget and share Wi-Fi networks.

All public operations except the *_async variants block on external
processes and must not be called on the UI thread. The async variants run
on single-thread worker lanes and deliver their results through the
scheduler's idle_add, i.e. on the UI thread.
"""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from .shell import ShellRunner, CommandResult
from .qr import format_wifi_payload, AUTH_WPA, AUTH_NONE

logger = logging.getLogger(__name__)

NMCLI = "nmcli"
TEMP_PROFILE_PREFIX = "temp-conn-"
DEFAULT_SECURITY_TYPE = "wpa-psk"

SCAN_FIELDS = "IN-USE,SSID,SIGNAL,SECURITY"


# =============================================================================
# Errors
# =============================================================================

class WifiError(Exception):
    """Base exception for Wi-Fi operations."""
    pass


class NoInterfaceError(WifiError):
    """No Wi-Fi device is reported by `nmcli device status`."""

    def __init__(self):
        super().__init__("No Wi-Fi interface found")


class RadioOffError(WifiError):
    """The Wi-Fi radio is disabled."""

    def __init__(self):
        super().__init__("Wi-Fi radio is disabled")


class CommandFailed(WifiError):
    """An nmcli invocation exited with a non-zero status."""

    def __init__(self, exit_code: int, command: str = ""):
        self.exit_code = exit_code
        self.command = command
        super().__init__(f"'{command}' failed with exit code {exit_code}")


class ParseError(WifiError):
    """A line of nmcli output could not be interpreted."""
    pass


# =============================================================================
# Data model
# =============================================================================

@dataclass(frozen=True)
class Network:
    """One Wi-Fi scan result."""
    ssid: str
    bssid: str = ""
    signal: int = 0
    connected: bool = False
    secured: bool = False


@dataclass(frozen=True)
class WifiState:
    """Radio state and the most recent scan, replaced as a whole."""
    enabled: bool = False
    last_scan: Tuple[Network, ...] = ()


@dataclass
class ConnectRequest:
    """Parameters of a connection attempt."""
    ssid: str
    password: str = ""
    security_type: str = ""


@dataclass
class OperationResult:
    """Status of a blocking controller operation."""
    success: bool
    error: Optional[WifiError] = None

    def __bool__(self) -> bool:
        return self.success

    @classmethod
    def ok(cls) -> "OperationResult":
        return cls(success=True)

    @classmethod
    def failed(cls, error: WifiError) -> "OperationResult":
        return cls(success=False, error=error)


def _failure_result(exc: Exception) -> OperationResult:
    """What a background operation delivers when it raised."""
    if isinstance(exc, WifiError):
        return OperationResult.failed(exc)
    return OperationResult.failed(WifiError(str(exc) or type(exc).__name__))


# =============================================================================
# nmcli output parsing
# =============================================================================

def split_terse_fields(line: str) -> List[str]:
    """
    Split an `nmcli -t` record on unescaped colons.

    nmcli escapes literal colons and backslashes inside values with a
    backslash; the escapes are removed from the returned fields.
    """
    fields = []
    current = []
    escaped = False
    for c in line:
        if escaped:
            current.append(c)
            escaped = False
        elif c == "\\":
            escaped = True
        elif c == ":":
            fields.append("".join(current))
            current = []
        else:
            current.append(c)
    fields.append("".join(current))
    return fields


def parse_scan_line(line: str) -> Network:
    """
    Parse one `IN-USE:SSID:SIGNAL:SECURITY` record.

    Raises:
        ParseError: If the record has fewer than four fields
    """
    fields = split_terse_fields(line)
    if len(fields) < 4:
        raise ParseError(f"Expected 4 fields, got {len(fields)}: {line!r}")

    in_use, ssid, signal_text, security = fields[:4]
    try:
        signal = max(0, min(100, int(signal_text.strip())))
    except ValueError:
        signal = 0

    security = security.strip()
    return Network(
        ssid=ssid,
        bssid="",  # not requested from nmcli
        signal=signal,
        connected=in_use.strip() == "*",
        secured=security not in ("", "--"),
    )


def parse_scan_output(lines: Sequence[str]) -> List[Network]:
    """Parse every nonblank line of a scan, skipping malformed records."""
    networks = []
    for line in lines:
        if not line.strip():
            continue
        try:
            networks.append(parse_scan_line(line))
        except ParseError as e:
            logger.debug(f"Skipping scan record: {e}")
    return networks


def sort_networks(networks: Sequence[Network]) -> List[Network]:
    """Connected networks first, then by descending signal strength."""
    return sorted(networks, key=lambda n: (not n.connected, -n.signal))


def signal_icon_name(signal: int) -> str:
    """Symbolic icon for a signal strength in percent."""
    if signal < 20:
        level = "none"
    elif signal < 40:
        level = "weak"
    elif signal < 60:
        level = "ok"
    elif signal < 80:
        level = "good"
    else:
        level = "excellent"
    return f"network-wireless-signal-{level}-symbolic"


def parse_device_status(lines: Sequence[str]) -> List[Tuple[str, str, str]]:
    """Return (device, type, state) rows from `nmcli device status`."""
    rows = []
    for line in lines:
        parts = line.split()
        if len(parts) < 3 or parts[0] == "DEVICE":
            continue
        rows.append((parts[0], parts[1], parts[2]))
    return rows


# =============================================================================
# Controller
# =============================================================================

UpdateCallback = Callable[[List[Network]], None]
StateCallback = Callable[[bool], None]
ConnectionCallback = Callable[[bool, str], None]


class WifiController:
    """
    Wi-Fi management through nmcli.

    Usage:
        controller = WifiController(ShellRunner(), scheduler)
        controller.set_update_callback(on_networks)
        controller.scan_async(on_scan_done)
    """

    def __init__(self, runner: Optional[ShellRunner] = None, scheduler=None,
                 probe: bool = True):
        """
        Args:
            runner: Shell runner used for every nmcli call
            scheduler: UI-thread scheduler providing idle_add(); when None,
                callbacks run on the thread that produced the result
            probe: Query the radio state immediately
        """
        self._runner = runner or ShellRunner()
        self._scheduler = scheduler
        self._state = WifiState()
        self._state_lock = threading.Lock()
        self._scan_lock = threading.Lock()
        self._scan_in_flight = False
        self._workers: Dict[str, ThreadPoolExecutor] = {}
        self._workers_lock = threading.Lock()
        self._update_callback: Optional[UpdateCallback] = None
        self._state_callback: Optional[StateCallback] = None

        if probe:
            self.refresh_radio_state()

    # -------------------------------------------------------------------------
    # State and subscriptions
    # -------------------------------------------------------------------------

    @property
    def state(self) -> WifiState:
        return self._state

    @property
    def networks(self) -> List[Network]:
        """Most recent scan results."""
        return list(self._state.last_scan)

    def is_enabled(self) -> bool:
        """Cached radio state from the last probe, enable() or disable()."""
        return self._state.enabled

    def set_update_callback(self, cb: Optional[UpdateCallback]) -> None:
        self._update_callback = cb

    def set_state_callback(self, cb: Optional[StateCallback]) -> None:
        self._state_callback = cb

    def _replace_state(self, **changes) -> WifiState:
        with self._state_lock:
            current = self._state
            self._state = WifiState(
                enabled=changes.get("enabled", current.enabled),
                last_scan=tuple(changes.get("last_scan", current.last_scan)),
            )
            return self._state

    def _dispatch(self, callback: Optional[Callable], *args) -> None:
        if callback is None:
            return
        if self._scheduler is None:
            callback(*args)
        else:
            self._scheduler.idle_add(callback, *args)

    def _publish_networks(self, networks: List[Network]) -> None:
        self._dispatch(self._update_callback, list(networks))

    def _publish_state(self, enabled: bool) -> None:
        self._dispatch(self._state_callback, enabled)

    # -------------------------------------------------------------------------
    # nmcli helpers
    # -------------------------------------------------------------------------

    def _nmcli(self, *args: str) -> CommandResult:
        return self._runner.run(NMCLI, list(args))

    def _checked(self, *args: str) -> Optional[CommandFailed]:
        """Run nmcli and return a CommandFailed on non-zero exit."""
        result = self._nmcli(*args)
        if result.ok:
            return None
        return CommandFailed(result.exit_code, " ".join((NMCLI,) + args))

    def get_wifi_interface(self) -> Optional[str]:
        """First Wi-Fi device (excluding p2p devices) or None."""
        result = self._nmcli("device", "status")
        for device, dev_type, _ in parse_device_status(result.stdout_lines):
            if dev_type == "wifi" and "p2p" not in device:
                return device
        return None

    def refresh_radio_state(self) -> bool:
        """Probe `nmcli radio wifi` and update the cached state."""
        result = self._nmcli("radio", "wifi")
        first = result.stdout_lines[0].strip() if result.stdout_lines else ""
        enabled = result.ok and first == "enabled"
        self._replace_state(enabled=enabled)
        logger.info(f"Wi-Fi radio is {'enabled' if enabled else 'disabled'}")
        return enabled

    # -------------------------------------------------------------------------
    # Blocking operations
    # -------------------------------------------------------------------------

    def scan(self) -> List[Network]:
        """
        List visible networks.

        Returns an empty list without calling nmcli when the radio is off.
        The result replaces the cached scan and is published to the update
        callback.
        """
        if not self._state.enabled:
            networks: List[Network] = []
        else:
            result = self._nmcli("-t", "-f", SCAN_FIELDS, "device", "wifi", "list")
            if not result.ok:
                logger.warning(f"Wi-Fi scan exited with {result.exit_code}")
            networks = parse_scan_output(result.stdout_lines)
            logger.debug(f"Scan found {len(networks)} networks")

        self._replace_state(last_scan=networks)
        self._publish_networks(networks)
        return networks

    def connect(self, req: ConnectRequest) -> OperationResult:
        """
        Connect to a network.

        An empty password or security type reuses saved credentials via
        `nmcli dev wifi connect`. Explicit credentials replace any profile
        named after the SSID with a freshly created one. A scan always
        follows, whatever the outcome.
        """
        try:
            result = self._connect(req)
        finally:
            self.scan()

        if result:
            logger.info(f"Connected to {req.ssid}")
        else:
            logger.error(f"Failed to connect to {req.ssid}: {result.error}")
        return result

    def _connect(self, req: ConnectRequest) -> OperationResult:
        if not self._state.enabled:
            return OperationResult.failed(RadioOffError())

        if any(n.ssid == req.ssid and n.connected for n in self._state.last_scan):
            logger.info(f"Already connected to {req.ssid}")
            return OperationResult.ok()

        logger.info(f"Connecting to Wi-Fi network: {req.ssid}")

        if not req.security_type or not req.password:
            args = ["dev", "wifi", "connect", req.ssid]
            if req.password:
                args += ["password", req.password]
            error = self._checked(*args)
            return OperationResult.failed(error) if error else OperationResult.ok()

        interface = self.get_wifi_interface()
        if not interface:
            return OperationResult.failed(NoInterfaceError())

        # Best effort: a stale profile with this name would shadow the new one
        self._nmcli("con", "delete", req.ssid)

        steps = (
            ("con", "add", "type", "wifi", "con-name", req.ssid,
             "ifname", interface, "ssid", req.ssid),
            ("con", "modify", req.ssid, "wifi-sec.key-mgmt", req.security_type),
            ("con", "modify", req.ssid, "wifi-sec.psk", req.password),
            ("con", "up", req.ssid),
        )
        for step in steps:
            result = self._nmcli(*step)
            if not result.ok:
                # Only the leading words: the psk must not end up in logs
                command = " ".join((NMCLI,) + step[:3])
                return OperationResult.failed(CommandFailed(result.exit_code, command))
        return OperationResult.ok()

    def disconnect(self) -> OperationResult:
        """Disconnect the Wi-Fi interface. No-op when there is none."""
        interface = self.get_wifi_interface()
        if not interface:
            logger.warning("No Wi-Fi interface to disconnect")
            return OperationResult.ok()

        logger.info(f"Disconnecting {interface}")
        error = self._checked("device", "disconnect", interface)
        self.scan()
        return OperationResult.failed(error) if error else OperationResult.ok()

    def list_profiles(self) -> List[str]:
        """Names of all saved connection profiles."""
        result = self._nmcli("-t", "-f", "NAME", "con", "show")
        return [split_terse_fields(line)[0] for line in result.stdout_lines if line.strip()]

    def forget(self, ssid: str) -> OperationResult:
        """
        Delete every saved profile named `ssid`, plus all leftover
        `temp-conn-*` profiles.
        """
        logger.info(f"Forgetting network: {ssid}")
        self._nmcli("con", "delete", ssid)

        error = None
        for name in self.list_profiles():
            if name == ssid or name.startswith(TEMP_PROFILE_PREFIX):
                failure = self._checked("con", "delete", name)
                if failure:
                    logger.warning(f"Could not delete profile {name}: {failure}")
                    error = error or failure

        self.scan()
        return OperationResult.failed(error) if error else OperationResult.ok()

    def enable(self) -> OperationResult:
        """Turn the radio on and scan."""
        error = self._checked("radio", "wifi", "on")
        if error:
            logger.error(f"Failed to enable Wi-Fi: {error}")
            return OperationResult.failed(error)

        self._replace_state(enabled=True)
        self._publish_state(True)
        self.scan()
        return OperationResult.ok()

    def disable(self) -> OperationResult:
        """Turn the radio off and clear the network list."""
        error = self._checked("radio", "wifi", "off")
        if error:
            logger.error(f"Failed to disable Wi-Fi: {error}")
            return OperationResult.failed(error)

        self._replace_state(enabled=False, last_scan=())
        self._publish_state(False)
        self._publish_networks([])
        return OperationResult.ok()

    def is_ethernet_connected(self) -> bool:
        """True if any wired device reports `connected`."""
        result = self._nmcli("device", "status")
        return any(
            dev_type == "ethernet" and state == "connected"
            for _, dev_type, state in parse_device_status(result.stdout_lines)
        )

    def get_password(self, ssid: str) -> str:
        """Saved passphrase for `ssid`, or an empty string."""
        result = self._nmcli(
            "-s", "-g", "802-11-wireless-security.psk", "connection", "show", ssid
        )
        if not result.ok or not result.stdout_lines:
            return ""
        return result.stdout_lines[0].strip()

    def share_payload(self, network: Network, password: Optional[str] = None) -> str:
        """
        Wi-Fi QR payload for a network.

        For secured networks without an explicit password the saved
        passphrase is looked up.
        """
        if network.secured:
            if password is None:
                password = self.get_password(network.ssid)
            auth = AUTH_WPA
        else:
            password = ""
            auth = AUTH_NONE
        return format_wifi_payload(network.ssid, password or "", False, auth)

    # -------------------------------------------------------------------------
    # Asynchronous operations
    # -------------------------------------------------------------------------

    def _worker(self, lane: str) -> ThreadPoolExecutor:
        with self._workers_lock:
            worker = self._workers.get(lane)
            if worker is None:
                worker = ThreadPoolExecutor(max_workers=1, thread_name_prefix=f"wifi-{lane}")
                self._workers[lane] = worker
            return worker

    def _submit(self, lane: str, func: Callable, *args,
                callback: Optional[Callable] = None,
                on_error: Optional[Callable[[Exception], object]] = None) -> None:
        def task():
            try:
                result = func(*args)
            except Exception as e:
                logger.exception(f"Background Wi-Fi operation {func.__name__} failed: {e}")
                result = (on_error or _failure_result)(e)
            self._dispatch(callback, result)

        self._worker(lane).submit(task)

    def scan_async(self, callback: Optional[UpdateCallback] = None) -> bool:
        """
        Scan on the scan worker and hand the result to `callback` on the
        UI thread.

        Returns False, dropping the request, while another scan is running.
        """
        with self._scan_lock:
            if self._scan_in_flight:
                logger.debug("Scan already in progress, request dropped")
                return False
            self._scan_in_flight = True

        def finished(networks: List[Network]) -> None:
            with self._scan_lock:
                self._scan_in_flight = False
            if callback is not None:
                callback(networks)

        def task():
            try:
                networks = self.scan()
            except Exception as e:
                logger.exception(f"Wi-Fi scan failed: {e}")
                networks = []
            self._dispatch(finished, networks)

        self._worker("scan").submit(task)
        return True

    def connect_async(self, req: ConnectRequest,
                      callback: Optional[ConnectionCallback] = None) -> None:
        """Run connect() on the operations worker; callback(success, ssid) on the UI thread."""
        def done(result: OperationResult) -> None:
            if callback is not None:
                callback(result.success, req.ssid)

        self._submit("ops", self.connect, req, callback=done)

    def call_async(self, func: Callable, *args,
                   callback: Optional[Callable] = None,
                   on_error: Optional[Callable[[Exception], object]] = None) -> None:
        """
        Run any blocking controller method in the background.

        Probes (is_ethernet_connected, get_password) use their own worker
        so they are not queued behind slow connects.

        If `func` raises, `callback` still runs, with `on_error(exc)`. The
        default is a failed OperationResult, which suits every method that
        returns one; pass `on_error` for methods returning something else.
        """
        name = getattr(func, "__name__", "")
        lane = "probe" if name in ("is_ethernet_connected", "get_password") else "ops"
        self._submit(lane, func, *args, callback=callback, on_error=on_error)

    def shutdown(self, wait: bool = False) -> None:
        """Stop the worker threads."""
        with self._workers_lock:
            workers = list(self._workers.values())
            self._workers.clear()
        for worker in workers:
            worker.shutdown(wait=wait)
