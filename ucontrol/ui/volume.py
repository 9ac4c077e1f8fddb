"""
Ultimate Control - Volume UI Component

Output and input volume sliders with mute toggles.
"""

import gi
gi.require_version('Gtk', '4.0')
gi.require_version('Adw', '1')
from gi.repository import Gtk

import logging

from ..audio_controller import AudioController, SINK, SOURCE
from ..mainloop import run_in_background

logger = logging.getLogger(__name__)


class VolumeControl(Gtk.Box):
    """Slider and mute button for one device."""

    def __init__(self, controller: AudioController, kind: str, title: str, icon_name: str):
        super().__init__(orientation=Gtk.Orientation.VERTICAL, spacing=8)

        self.controller = controller
        self.kind = kind
        self._setting_value = False

        header = Gtk.Box(orientation=Gtk.Orientation.HORIZONTAL, spacing=10)
        icon = Gtk.Image.new_from_icon_name(icon_name)
        icon.set_pixel_size(24)
        header.append(icon)

        label = Gtk.Label()
        label.set_markup(f"<span weight='bold'>{title}</span>")
        label.set_halign(Gtk.Align.START)
        label.set_hexpand(True)
        header.append(label)

        self.value_label = Gtk.Label(label="--")
        self.value_label.set_width_chars(5)
        self.value_label.set_xalign(1.0)
        header.append(self.value_label)

        self.mute_button = Gtk.ToggleButton()
        self.mute_button.set_icon_name("audio-volume-muted-symbolic")
        self.mute_button.set_tooltip_text("Mute")
        self.mute_button.connect("toggled", self._on_mute_toggled)
        header.append(self.mute_button)

        self.append(header)

        self.scale = Gtk.Scale.new_with_range(Gtk.Orientation.HORIZONTAL, 0, 100, 1)
        self.scale.set_draw_value(False)
        self.scale.set_hexpand(True)
        self.scale.add_mark(100, Gtk.PositionType.BOTTOM, None)
        self.scale.connect("value-changed", self._on_value_changed)
        self.append(self.scale)

        self.refresh()

    def refresh(self) -> None:
        """Read the current volume and mute state."""
        volume = self.controller.get_volume(self.kind)
        muted = self.controller.is_muted(self.kind)

        self._setting_value = True
        try:
            if volume is not None:
                self.scale.set_value(min(volume, 100))
                self.value_label.set_label(f"{volume}%")
            self.mute_button.set_active(bool(muted))
        finally:
            self._setting_value = False

        self.set_sensitive(volume is not None)

    def _on_value_changed(self, scale: Gtk.Scale) -> None:
        value = int(scale.get_value())
        self.value_label.set_label(f"{value}%")
        if self._setting_value:
            return
        run_in_background(self.controller.set_volume, value, self.kind)

    def _on_mute_toggled(self, button: Gtk.ToggleButton) -> None:
        if self._setting_value:
            return
        run_in_background(self.controller.set_muted, button.get_active(), self.kind)


class VolumePage(Gtk.Box):
    """Volume tab."""

    def __init__(self, controller: AudioController):
        super().__init__(orientation=Gtk.Orientation.VERTICAL, spacing=20)

        self.controller = controller

        self.set_margin_top(15)
        self.set_margin_bottom(15)
        self.set_margin_start(15)
        self.set_margin_end(15)

        self.output_control = VolumeControl(
            controller, SINK, "Output", "audio-speakers-symbolic"
        )
        self.append(self.output_control)

        self.input_control = VolumeControl(
            controller, SOURCE, "Input", "audio-input-microphone-symbolic"
        )
        self.append(self.input_control)
