"""
Ultimate Control - Bluetooth UI Component

Adapter power switch and the list of paired devices.
"""

import gi
gi.require_version('Gtk', '4.0')
gi.require_version('Adw', '1')
from gi.repository import Gtk

import logging
from typing import List

from ..bluetooth_controller import BluetoothController, BluetoothDevice
from ..mainloop import run_in_background

logger = logging.getLogger(__name__)


class DeviceRow(Gtk.Box):
    """A paired device with a connect/disconnect button."""

    def __init__(self, device: BluetoothDevice, page: "BluetoothPage"):
        super().__init__(orientation=Gtk.Orientation.HORIZONTAL, spacing=10)
        self.device = device

        self.set_margin_top(8)
        self.set_margin_bottom(8)
        self.set_margin_start(10)
        self.set_margin_end(10)

        self.append(Gtk.Image.new_from_icon_name("bluetooth-symbolic"))

        name = Gtk.Label(label=device.name)
        name.set_halign(Gtk.Align.START)
        name.set_hexpand(True)
        self.append(name)

        button = Gtk.Button(label="Disconnect" if device.connected else "Connect")
        if not device.connected:
            button.add_css_class("suggested-action")
        button.connect("clicked", lambda b: page.toggle_device(self.device))
        self.append(button)


class BluetoothPage(Gtk.Box):
    """Bluetooth tab."""

    def __init__(self, controller: BluetoothController):
        super().__init__(orientation=Gtk.Orientation.VERTICAL, spacing=10)

        self.controller = controller
        self._updating_switch = False

        self.set_margin_top(10)
        self.set_margin_bottom(10)
        self.set_margin_start(10)
        self.set_margin_end(10)

        header = Gtk.Box(orientation=Gtk.Orientation.HORIZONTAL, spacing=10)
        icon = Gtk.Image.new_from_icon_name("bluetooth-active-symbolic")
        icon.set_pixel_size(32)
        header.append(icon)

        title = Gtk.Label()
        title.set_markup("<span size='large' weight='bold'>Paired Devices</span>")
        title.set_halign(Gtk.Align.START)
        title.set_hexpand(True)
        header.append(title)

        self.power_switch = Gtk.Switch()
        self.power_switch.set_valign(Gtk.Align.CENTER)
        self.power_switch.connect("notify::active", self._on_power_toggled)
        header.append(self.power_switch)

        refresh = Gtk.Button.new_from_icon_name("view-refresh-symbolic")
        refresh.set_tooltip_text("Refresh")
        refresh.connect("clicked", lambda b: self.refresh())
        header.append(refresh)
        self.append(header)

        self.status_label = Gtk.Label(label="Loading devices...")
        self.status_label.add_css_class("dim-label")
        self.append(self.status_label)

        self.device_list = Gtk.ListBox()
        self.device_list.add_css_class("boxed-list")
        self.device_list.set_selection_mode(Gtk.SelectionMode.NONE)
        self.append(self.device_list)

        self.refresh()

    def refresh(self) -> None:
        run_in_background(self._read_state, callback=self._on_state_loaded)

    def _read_state(self):
        powered = self.controller.is_powered()
        devices = self.controller.paired_devices() if powered else []
        return powered, devices

    def _on_state_loaded(self, result) -> None:
        powered, devices = result
        self._updating_switch = True
        try:
            self.power_switch.set_active(powered)
        finally:
            self._updating_switch = False
        self._show_devices(powered, devices)

    def _show_devices(self, powered: bool, devices: List[BluetoothDevice]) -> None:
        while child := self.device_list.get_first_child():
            self.device_list.remove(child)

        if not powered:
            self.status_label.set_label("Bluetooth is turned off")
        elif not devices:
            self.status_label.set_label("No paired devices")
        self.status_label.set_visible(not powered or not devices)

        for device in devices:
            self.device_list.append(DeviceRow(device, self))

    def _on_power_toggled(self, switch: Gtk.Switch, param) -> None:
        if self._updating_switch:
            return
        run_in_background(
            self.controller.set_powered, switch.get_active(),
            callback=lambda ok: self.refresh(),
        )

    def toggle_device(self, device: BluetoothDevice) -> None:
        operation = self.controller.disconnect if device.connected else self.controller.connect
        run_in_background(operation, device.address, callback=lambda ok: self.refresh())
