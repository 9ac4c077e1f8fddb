"""
Ultimate Control - Power UI Component

System power buttons, session actions and the power profile selector.
"""

import gi
gi.require_version('Gtk', '4.0')
gi.require_version('Adw', '1')
from gi.repository import Gtk, Adw

import logging
from typing import List

from ..power_controller import PowerController
from ..mainloop import run_in_background

logger = logging.getLogger(__name__)


def _section(title: str, icon_name: str) -> Gtk.Box:
    box = Gtk.Box(orientation=Gtk.Orientation.VERTICAL, spacing=10)

    header = Gtk.Box(orientation=Gtk.Orientation.HORIZONTAL, spacing=10)
    icon = Gtk.Image.new_from_icon_name(icon_name)
    icon.set_pixel_size(32)
    header.append(icon)
    label = Gtk.Label()
    label.set_markup(f"<span size='large' weight='bold'>{title}</span>")
    label.set_halign(Gtk.Align.START)
    header.append(label)
    box.append(header)
    return box


def _action_button(label: str, icon_name: str, tooltip: str) -> Gtk.Button:
    button = Gtk.Button()
    content = Gtk.Box(orientation=Gtk.Orientation.HORIZONTAL, spacing=6)
    content.set_halign(Gtk.Align.CENTER)
    content.append(Gtk.Image.new_from_icon_name(icon_name))
    content.append(Gtk.Label(label=label))
    button.set_child(content)
    button.set_tooltip_text(tooltip)
    button.set_hexpand(True)
    return button


class PowerPage(Gtk.Box):
    """Power tab."""

    def __init__(self, controller: PowerController):
        super().__init__(orientation=Gtk.Orientation.VERTICAL, spacing=20)

        self.controller = controller
        self._setting_profile = False
        self._profiles: List[str] = []

        self.set_margin_top(15)
        self.set_margin_bottom(15)
        self.set_margin_start(15)
        self.set_margin_end(15)

        # ===== SYSTEM POWER =====
        system_box = _section("System Power", "system-shutdown-symbolic")
        system_buttons = Gtk.Box(orientation=Gtk.Orientation.HORIZONTAL, spacing=15)
        system_buttons.set_homogeneous(True)

        shutdown = _action_button("Shutdown", "system-shutdown-symbolic", "Power off the system")
        shutdown.add_css_class("destructive-action")
        shutdown.connect("clicked", self._on_confirm_action, "poweroff", "Shut down the system?")
        system_buttons.append(shutdown)

        reboot = _action_button("Reboot", "system-reboot-symbolic", "Restart the system")
        reboot.connect("clicked", self._on_confirm_action, "reboot", "Restart the system?")
        system_buttons.append(reboot)

        system_box.append(system_buttons)
        self.append(system_box)

        # ===== SESSION =====
        session_box = _section("Session", "system-lock-screen-symbolic")
        session_buttons = Gtk.Box(orientation=Gtk.Orientation.HORIZONTAL, spacing=15)
        session_buttons.set_homogeneous(True)

        suspend = _action_button("Suspend", "system-suspend-symbolic", "Put the system to sleep")
        suspend.connect("clicked", lambda b: self._run_action("suspend"))
        session_buttons.append(suspend)

        hibernate = _action_button("Hibernate", "system-hibernate-symbolic", "Hibernate the system")
        hibernate.connect("clicked", lambda b: self._run_action("hibernate"))
        session_buttons.append(hibernate)

        lock = _action_button("Lock", "system-lock-screen-symbolic", "Lock the screen")
        lock.connect("clicked", self._on_lock_clicked)
        session_buttons.append(lock)

        session_box.append(session_buttons)
        self.append(session_box)

        # ===== POWER PROFILE =====
        self.profile_box = _section("Power Profile", "power-profile-balanced-symbolic")
        self.profile_dropdown = Gtk.DropDown()
        self.profile_dropdown.connect("notify::selected", self._on_profile_selected)
        self.profile_box.append(self.profile_dropdown)
        self.profile_box.set_visible(False)
        self.append(self.profile_box)

        run_in_background(self._read_profiles, callback=self._on_profiles_loaded)

    def _on_confirm_action(self, button: Gtk.Button, action: str, question: str) -> None:
        dialog = Adw.MessageDialog(transient_for=self.get_root(), heading=question)
        dialog.add_response("cancel", "Cancel")
        dialog.add_response("confirm", button.get_tooltip_text() or "OK")
        dialog.set_response_appearance("confirm", Adw.ResponseAppearance.DESTRUCTIVE)
        dialog.set_close_response("cancel")
        dialog.connect("response", self._on_confirm_response, action)
        dialog.present()

    def _on_confirm_response(self, dialog: Adw.MessageDialog, response: str, action: str) -> None:
        if response == "confirm":
            self._run_action(action)

    def _run_action(self, action: str) -> None:
        run_in_background(self.controller.power_action, action, callback=self._on_action_done)

    def _on_action_done(self, ok: bool) -> None:
        if not ok:
            self._show_toast("Power action failed")

    def _on_lock_clicked(self, button: Gtk.Button) -> None:
        run_in_background(self.controller.lock, callback=self._on_action_done)

    def _read_profiles(self):
        return self.controller.list_profiles(), self.controller.get_profile()

    def _on_profiles_loaded(self, result) -> None:
        profiles, current = result
        if not profiles:
            return

        self._profiles = profiles
        self._setting_profile = True
        try:
            self.profile_dropdown.set_model(Gtk.StringList.new(profiles))
            if current in profiles:
                self.profile_dropdown.set_selected(profiles.index(current))
        finally:
            self._setting_profile = False
        self.profile_box.set_visible(True)

    def _on_profile_selected(self, dropdown: Gtk.DropDown, param) -> None:
        if self._setting_profile:
            return
        selected = dropdown.get_selected()
        if selected < len(self._profiles):
            run_in_background(self.controller.set_profile, self._profiles[selected])

    def _show_toast(self, message: str) -> None:
        parent = self.get_root()
        if hasattr(parent, 'show_toast'):
            parent.show_toast(message)
        else:
            logger.info(f"Toast: {message}")
