"""
Ultimate Control - Display UI Component
"""

import gi
gi.require_version('Gtk', '4.0')
gi.require_version('Adw', '1')
from gi.repository import Gtk

import logging

from ..display_controller import DisplayController, MIN_BRIGHTNESS_PERCENT
from ..mainloop import run_in_background

logger = logging.getLogger(__name__)


class DisplayPage(Gtk.Box):
    """Display tab: backlight brightness."""

    def __init__(self, controller: DisplayController):
        super().__init__(orientation=Gtk.Orientation.VERTICAL, spacing=15)

        self.controller = controller
        self._setting_value = False

        self.set_margin_top(15)
        self.set_margin_bottom(15)
        self.set_margin_start(15)
        self.set_margin_end(15)

        header = Gtk.Box(orientation=Gtk.Orientation.HORIZONTAL, spacing=10)
        icon = Gtk.Image.new_from_icon_name("display-brightness-symbolic")
        icon.set_pixel_size(32)
        header.append(icon)

        title = Gtk.Label()
        title.set_markup("<span size='large' weight='bold'>Brightness</span>")
        title.set_halign(Gtk.Align.START)
        title.set_hexpand(True)
        header.append(title)

        self.value_label = Gtk.Label(label="--")
        header.append(self.value_label)
        self.append(header)

        self.scale = Gtk.Scale.new_with_range(
            Gtk.Orientation.HORIZONTAL, MIN_BRIGHTNESS_PERCENT, 100, 1
        )
        self.scale.set_draw_value(False)
        self.scale.set_hexpand(True)
        self.scale.connect("value-changed", self._on_value_changed)
        self.append(self.scale)

        self.unavailable_label = Gtk.Label(label="Brightness control is not available")
        self.unavailable_label.add_css_class("dim-label")
        self.unavailable_label.set_visible(False)
        self.append(self.unavailable_label)

        self.refresh()

    def refresh(self) -> None:
        brightness = self.controller.get_brightness()
        if brightness is None:
            self.scale.set_sensitive(False)
            self.unavailable_label.set_visible(True)
            return

        self._setting_value = True
        try:
            self.scale.set_value(brightness)
        finally:
            self._setting_value = False
        self.value_label.set_label(f"{brightness}%")

    def _on_value_changed(self, scale: Gtk.Scale) -> None:
        value = int(scale.get_value())
        self.value_label.set_label(f"{value}%")
        if not self._setting_value:
            run_in_background(self.controller.set_brightness, value)
