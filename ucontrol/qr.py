"""
Ultimate Control - Wi-Fi QR payloads

Builds the `WIFI:T:<auth>;S:<ssid>;P:<password>;H:<hidden>;;` string
understood by phone cameras, parses it back, and turns it into a module
matrix with the qrcode library for drawing.
"""

import logging
from dataclasses import dataclass
from typing import List, Union

import qrcode
from qrcode.constants import ERROR_CORRECT_M

logger = logging.getLogger(__name__)

AUTH_WPA = "WPA"
AUTH_WEP = "WEP"
AUTH_NONE = "nopass"
AUTH_TYPES = (AUTH_WPA, AUTH_WEP, AUTH_NONE)

# Characters that must be backslash-escaped inside S: and P:
SPECIAL_CHARS = '\\;,:"'


@dataclass(frozen=True)
class WifiCredentials:
    """The fields carried by a Wi-Fi QR payload."""
    ssid: str
    password: str
    hidden: bool
    auth: str


def escape_field(value: str) -> str:
    """Backslash-escape the characters reserved by the payload grammar."""
    return "".join(f"\\{c}" if c in SPECIAL_CHARS else c for c in value)


def format_wifi_payload(ssid: str, password: str, hidden: Union[bool, str], auth: str) -> str:
    """
    Format a Wi-Fi network as a QR payload string.

    Args:
        ssid: Network name
        password: Passphrase (empty for open networks)
        hidden: Whether the SSID is hidden; bool or "true"/"false"
        auth: One of WPA, WEP or nopass, passed through as given

    Returns:
        The payload, e.g. ``WIFI:T:WPA;S:Home;P:secret;H:false;;``
    """
    if isinstance(hidden, str):
        hidden = hidden.strip().lower() == "true"
    hidden_text = "true" if hidden else "false"
    return (
        f"WIFI:T:{auth};S:{escape_field(ssid)};"
        f"P:{escape_field(password)};H:{hidden_text};;"
    )


def _split_unescaped(text: str, separator: str) -> List[str]:
    parts = []
    current = []
    escaped = False
    for c in text:
        if escaped:
            current.append("\\" + c)
            escaped = False
        elif c == "\\":
            escaped = True
        elif c == separator:
            parts.append("".join(current))
            current = []
        else:
            current.append(c)
    if escaped:
        current.append("\\")
    parts.append("".join(current))
    return parts


def _unescape(value: str) -> str:
    out = []
    escaped = False
    for c in value:
        if escaped:
            out.append(c)
            escaped = False
        elif c == "\\":
            escaped = True
        else:
            out.append(c)
    if escaped:
        out.append("\\")
    return "".join(out)


def parse_wifi_payload(payload: str) -> WifiCredentials:
    """
    Parse a Wi-Fi QR payload.

    Raises:
        ValueError: If the string is not a WIFI: payload
    """
    if not payload.startswith("WIFI:"):
        raise ValueError(f"Not a Wi-Fi QR payload: {payload!r}")

    fields = {}
    for token in _split_unescaped(payload[len("WIFI:"):], ";"):
        if not token:
            continue
        key, sep, raw = token.partition(":")
        if not sep:
            raise ValueError(f"Malformed field {token!r} in Wi-Fi QR payload")
        fields[key] = _unescape(raw)

    return WifiCredentials(
        ssid=fields.get("S", ""),
        password=fields.get("P", ""),
        hidden=fields.get("H", "false").lower() == "true",
        auth=fields.get("T", AUTH_NONE),
    )


def build_matrix(payload: str) -> List[List[bool]]:
    """Encode a payload and return its modules, True for dark, without a quiet zone."""
    code = qrcode.QRCode(error_correction=ERROR_CORRECT_M, border=0)
    code.add_data(payload)
    code.make(fit=True)
    matrix = code.get_matrix()
    logger.debug(f"Encoded QR payload as {len(matrix)}x{len(matrix)} matrix")
    return matrix
