"""
Ultimate Control - Wi-Fi UI Component

Network list with radio switch, scan button, per-network actions and the
password and QR sharing dialogs.
"""

import gi
gi.require_version('Gtk', '4.0')
gi.require_version('Adw', '1')
from gi.repository import Gtk, Adw
import cairo

import logging
from typing import Callable, List, Optional

from ..wifi_controller import (
    WifiController,
    Network,
    ConnectRequest,
    OperationResult,
    DEFAULT_SECURITY_TYPE,
    sort_networks,
    signal_icon_name,
)
from ..qr import build_matrix

logger = logging.getLogger(__name__)

INITIAL_SCAN_DELAY_MS = 100
SCAN_BUTTON_COOLDOWN_MS = 2000
SWITCH_COOLDOWN_MS = 1000

QR_MODULE_PIXELS = 6
QR_QUIET_ZONE = 4


class QRCodeView(Gtk.DrawingArea):
    """Draws a QR module matrix, dark modules on white."""

    def __init__(self, matrix: List[List[bool]]):
        super().__init__()
        self.matrix = matrix
        side = (len(matrix) + 2 * QR_QUIET_ZONE) * QR_MODULE_PIXELS
        self.set_content_width(side)
        self.set_content_height(side)
        self.set_halign(Gtk.Align.CENTER)
        self.set_draw_func(self._draw)

    def _draw(self, area, cr, width, height):
        # Sharp module edges for scanners
        cr.set_antialias(cairo.ANTIALIAS_NONE)
        cr.set_source_rgb(1, 1, 1)
        cr.rectangle(0, 0, width, height)
        cr.fill()

        count = len(self.matrix) + 2 * QR_QUIET_ZONE
        module = min(width, height) / count
        offset_x = (width - module * count) / 2 + QR_QUIET_ZONE * module
        offset_y = (height - module * count) / 2 + QR_QUIET_ZONE * module

        cr.set_source_rgb(0, 0, 0)
        for y, row in enumerate(self.matrix):
            for x, dark in enumerate(row):
                if dark:
                    cr.rectangle(offset_x + x * module, offset_y + y * module, module, module)
        cr.fill()


class NetworkRow(Gtk.Box):
    """One network in the list, with its action buttons."""

    def __init__(self, network: Network, page: "WifiPage"):
        super().__init__(orientation=Gtk.Orientation.HORIZONTAL, spacing=10)
        self.network = network
        self.page = page

        self.set_margin_top(8)
        self.set_margin_bottom(8)
        self.set_margin_start(10)
        self.set_margin_end(10)

        signal_icon = Gtk.Image.new_from_icon_name(signal_icon_name(network.signal))
        signal_icon.set_pixel_size(24)
        signal_icon.set_tooltip_text(f"Signal: {network.signal}%")
        self.append(signal_icon)

        text_box = Gtk.Box(orientation=Gtk.Orientation.VERTICAL, spacing=2)
        text_box.set_hexpand(True)

        name_label = Gtk.Label(label=network.ssid)
        name_label.add_css_class("heading")
        name_label.set_halign(Gtk.Align.START)
        text_box.append(name_label)

        if network.connected:
            status = "Connected"
        elif network.secured:
            status = "Secured"
        else:
            status = "Open"
        status_label = Gtk.Label(label=status)
        status_label.add_css_class("dim-label")
        status_label.set_halign(Gtk.Align.START)
        text_box.append(status_label)
        self.append(text_box)

        security_icon = Gtk.Image.new_from_icon_name(
            "channel-secure-symbolic" if network.secured else "channel-insecure-symbolic"
        )
        self.append(security_icon)

        if network.connected:
            action_button = Gtk.Button(label="Disconnect")
            action_button.connect("clicked", lambda b: self.page.disconnect_network())
        else:
            action_button = Gtk.Button(label="Connect")
            action_button.add_css_class("suggested-action")
            action_button.connect("clicked", lambda b: self.page.connect_network(self.network))
        action_button.set_valign(Gtk.Align.CENTER)
        self.append(action_button)

        forget_button = Gtk.Button.new_from_icon_name("user-trash-symbolic")
        forget_button.set_tooltip_text("Forget network")
        forget_button.set_valign(Gtk.Align.CENTER)
        forget_button.connect("clicked", lambda b: self.page.forget_network(self.network))
        self.append(forget_button)

        share_button = Gtk.Button.new_from_icon_name("send-to-symbolic")
        share_button.set_tooltip_text("Share network")
        share_button.set_valign(Gtk.Align.CENTER)
        share_button.connect("clicked", lambda b: self.page.share_network(self.network))
        self.append(share_button)


class WifiPage(Gtk.Box):
    """Wi-Fi tab."""

    def __init__(self, controller: WifiController, scheduler):
        super().__init__(orientation=Gtk.Orientation.VERTICAL, spacing=10)

        self.controller = controller
        self.scheduler = scheduler
        self._updating_switch = False

        self.set_margin_top(10)
        self.set_margin_bottom(10)
        self.set_margin_start(10)
        self.set_margin_end(10)

        # ===== HEADER =====
        header = Gtk.Box(orientation=Gtk.Orientation.HORIZONTAL, spacing=10)

        self.status_icon = Gtk.Image.new_from_icon_name("network-wireless-symbolic")
        self.status_icon.set_pixel_size(32)
        header.append(self.status_icon)

        title = Gtk.Label()
        title.set_markup("<span size='large' weight='bold'>Available Networks</span>")
        title.set_halign(Gtk.Align.START)
        title.set_hexpand(True)
        header.append(title)

        self.wifi_switch = Gtk.Switch()
        self.wifi_switch.set_valign(Gtk.Align.CENTER)
        self.wifi_switch.set_active(controller.is_enabled())
        self.wifi_switch.connect("notify::active", self._on_switch_toggled)
        header.append(self.wifi_switch)

        self.scan_button = Gtk.Button(label="Scan")
        self.scan_button.set_valign(Gtk.Align.CENTER)
        self.scan_button.connect("clicked", self._on_scan_clicked)
        header.append(self.scan_button)

        self.append(header)

        # ===== ETHERNET BANNER =====
        self.ethernet_box = Gtk.Box(orientation=Gtk.Orientation.HORIZONTAL, spacing=10)
        self.ethernet_box.add_css_class("card")
        wired_icon = Gtk.Image.new_from_icon_name("network-wired-symbolic")
        wired_icon.set_margin_start(10)
        self.ethernet_box.append(wired_icon)
        wired_label = Gtk.Label(label="You are connected to ethernet")
        wired_label.set_margin_top(8)
        wired_label.set_margin_bottom(8)
        self.ethernet_box.append(wired_label)
        self.ethernet_box.set_visible(False)
        self.append(self.ethernet_box)

        # ===== NETWORK LIST =====
        scroll = Gtk.ScrolledWindow()
        scroll.set_vexpand(True)
        scroll.set_policy(Gtk.PolicyType.NEVER, Gtk.PolicyType.AUTOMATIC)

        list_container = Gtk.Box(orientation=Gtk.Orientation.VERTICAL, spacing=8)

        self.status_label = Gtk.Label(label="Loading networks...")
        self.status_label.add_css_class("dim-label")
        self.status_label.set_margin_top(20)
        list_container.append(self.status_label)

        self.network_list = Gtk.ListBox()
        self.network_list.add_css_class("boxed-list")
        self.network_list.set_selection_mode(Gtk.SelectionMode.NONE)
        self.network_list.set_visible(False)
        list_container.append(self.network_list)

        scroll.set_child(list_container)
        self.append(scroll)

        controller.set_update_callback(self.update_network_list)
        controller.set_state_callback(self._on_radio_state_changed)

        self.scheduler.timeout_add(INITIAL_SCAN_DELAY_MS, self._initial_scan)

    # -------------------------------------------------------------------------
    # Scanning and list
    # -------------------------------------------------------------------------

    def _initial_scan(self) -> None:
        self.controller.call_async(
            self.controller.refresh_radio_state, callback=self._on_radio_probed,
            on_error=lambda e: False,
        )

    def _on_radio_probed(self, enabled: bool) -> None:
        self._set_switch(enabled)
        self._refresh_ethernet()
        if enabled:
            self.controller.scan_async()
        else:
            self.update_network_list([])

    def _refresh_ethernet(self) -> None:
        self.controller.call_async(
            self.controller.is_ethernet_connected, callback=self.ethernet_box.set_visible,
            on_error=lambda e: False,
        )

    def _on_scan_clicked(self, button: Gtk.Button) -> None:
        button.set_sensitive(False)
        button.set_label("Scanning...")
        if not self.controller.scan_async():
            logger.debug("Scan already running")
        self.scheduler.timeout_add(SCAN_BUTTON_COOLDOWN_MS, self._reset_scan_button)

    def _reset_scan_button(self) -> None:
        self.scan_button.set_label("Scan")
        self.scan_button.set_sensitive(True)
        self._refresh_ethernet()

    def update_network_list(self, networks: List[Network]) -> None:
        """Show `networks`, connected first, then strongest first."""
        while child := self.network_list.get_first_child():
            self.network_list.remove(child)

        if not self.controller.is_enabled():
            self.status_label.set_label("Wi-Fi is turned off")
            self.status_label.set_visible(True)
            self.network_list.set_visible(False)
            return

        if not networks:
            self.status_label.set_label("No wireless networks found")
            self.status_label.set_visible(True)
            self.network_list.set_visible(False)
            return

        for network in sort_networks(networks):
            self.network_list.append(NetworkRow(network, self))

        self.status_label.set_visible(False)
        self.network_list.set_visible(True)

    # -------------------------------------------------------------------------
    # Radio switch
    # -------------------------------------------------------------------------

    def _set_switch(self, enabled: bool) -> None:
        self._updating_switch = True
        try:
            self.wifi_switch.set_active(enabled)
        finally:
            self._updating_switch = False
        self.status_icon.set_from_icon_name(
            "network-wireless-symbolic" if enabled else "network-wireless-disabled-symbolic"
        )

    def _on_switch_toggled(self, switch: Gtk.Switch, param) -> None:
        if self._updating_switch:
            return

        enable = switch.get_active()
        switch.set_sensitive(False)
        self.scheduler.timeout_add(SWITCH_COOLDOWN_MS, switch.set_sensitive, True)

        operation = self.controller.enable if enable else self.controller.disable
        self.controller.call_async(
            operation, callback=lambda result: self._on_toggle_done(enable, result)
        )

    def _on_toggle_done(self, enable: bool, result: OperationResult) -> None:
        if not result:
            self._show_toast(f"Failed to turn Wi-Fi {'on' if enable else 'off'}")
            self._set_switch(not enable)

    def _on_radio_state_changed(self, enabled: bool) -> None:
        self._set_switch(enabled)
        if not enabled:
            self.update_network_list([])

    # -------------------------------------------------------------------------
    # Network actions
    # -------------------------------------------------------------------------

    def _is_connected(self, ssid: str) -> bool:
        return any(n.ssid == ssid and n.connected for n in self.controller.networks)

    def connect_network(self, network: Network) -> None:
        """Try saved credentials first; ask for a password if that fails."""
        self._show_toast(f"Connecting to {network.ssid}...")
        request = ConnectRequest(
            ssid=network.ssid,
            password="",
            security_type=DEFAULT_SECURITY_TYPE if network.secured else "",
        )
        self.controller.connect_async(
            request, callback=lambda success, ssid: self._after_saved_attempt(network, success)
        )

    def _after_saved_attempt(self, network: Network, success: bool) -> None:
        if self._is_connected(network.ssid):
            self._show_toast(f"Connected to {network.ssid}")
            return

        if network.secured:
            self.ask_password(network, self._connect_with_password)
        else:
            self._show_toast(f"Failed to connect to {network.ssid}")

    def _connect_with_password(self, network: Network, password: str) -> None:
        request = ConnectRequest(network.ssid, password, DEFAULT_SECURITY_TYPE)
        self.controller.connect_async(request, callback=self._on_connect_finished)

    def _on_connect_finished(self, success: bool, ssid: str) -> None:
        if success and self._is_connected(ssid):
            self._show_toast(f"Connected to {ssid}")
        else:
            self._show_toast(f"Failed to connect to {ssid}")

    def disconnect_network(self) -> None:
        self.controller.call_async(self.controller.disconnect, callback=self._on_disconnected)

    def _on_disconnected(self, result: OperationResult) -> None:
        if not result:
            self._show_toast(f"Failed to disconnect: {result.error}")

    def forget_network(self, network: Network) -> None:
        """Ask for confirmation, then delete the saved profiles."""
        dialog = Adw.MessageDialog(
            transient_for=self.get_root(),
            heading="Forget Network?",
            body=f"Saved settings for {network.ssid} will be removed.",
        )
        dialog.add_response("cancel", "Cancel")
        dialog.add_response("forget", "Forget")
        dialog.set_response_appearance("forget", Adw.ResponseAppearance.DESTRUCTIVE)
        dialog.set_close_response("cancel")
        dialog.connect("response", self._on_forget_response, network)
        dialog.present()

    def _on_forget_response(self, dialog: Adw.MessageDialog, response: str, network: Network) -> None:
        if response != "forget":
            return
        self.controller.call_async(
            self.controller.forget, network.ssid,
            callback=lambda result: self._show_toast(
                f"Forgot {network.ssid}" if result else f"Failed to forget {network.ssid}"
            ),
        )

    def share_network(self, network: Network) -> None:
        """Show a QR code for joining `network` from another device."""
        if network.secured and not network.connected:
            self.ask_password(network, self._share_with_password)
            return
        self.controller.call_async(
            self.controller.share_payload, network,
            callback=lambda payload: self._on_payload_ready(network, payload),
            on_error=lambda e: None,
        )

    def _on_payload_ready(self, network: Network, payload: Optional[str]) -> None:
        if payload is None:
            self._show_toast(f"Could not share {network.ssid}")
            return
        self.show_qr_dialog(network, payload)

    def _share_with_password(self, network: Network, password: str) -> None:
        self.show_qr_dialog(network, self.controller.share_payload(network, password))

    # -------------------------------------------------------------------------
    # Dialogs
    # -------------------------------------------------------------------------

    def ask_password(self, network: Network, on_password: Callable[[Network, str], None]) -> None:
        """Prompt for the network password and pass it to `on_password`."""
        dialog = Adw.MessageDialog(
            transient_for=self.get_root(),
            heading=network.ssid,
            body="Enter the network password",
        )
        entry = Gtk.PasswordEntry()
        entry.set_show_peek_icon(True)
        entry.connect("activate", lambda e: dialog.response("ok"))
        dialog.set_extra_child(entry)

        dialog.add_response("cancel", "Cancel")
        dialog.add_response("ok", "OK")
        dialog.set_response_appearance("ok", Adw.ResponseAppearance.SUGGESTED)
        dialog.set_default_response("ok")
        dialog.set_close_response("cancel")

        def on_response(dlg, response):
            password = entry.get_text()
            if response == "ok" and password:
                on_password(network, password)

        dialog.connect("response", on_response)
        dialog.present()

    def show_qr_dialog(self, network: Network, payload: str) -> None:
        try:
            matrix = build_matrix(payload)
        except Exception as e:
            logger.error(f"Failed to encode QR code: {e}")
            self._show_toast("Could not create QR code")
            return

        dialog = Adw.MessageDialog(
            transient_for=self.get_root(),
            heading=f"Share {network.ssid}",
            body="Scan this QR code with a phone camera\nor WiFi configuration app to connect",
        )
        dialog.set_extra_child(QRCodeView(matrix))
        dialog.add_response("close", "Close")
        dialog.set_close_response("close")
        dialog.present()

    def _show_toast(self, message: str) -> None:
        """Show a toast notification."""
        parent = self.get_root()
        if hasattr(parent, 'show_toast'):
            parent.show_toast(message)
        else:
            logger.info(f"Toast: {message}")
