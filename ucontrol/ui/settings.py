"""
Ultimate Control - Settings UI Component

Tab visibility and order, window behaviour and the lock command. Saving
asks the application to restart so the tab bar is rebuilt.
"""

import gi
gi.require_version('Gtk', '4.0')
gi.require_version('Adw', '1')
from gi.repository import Gtk, Adw

import logging
from typing import Callable, Dict, List, Optional

from ..config import AppConfig, save_config
from ..tabs import TAB_METADATA

logger = logging.getLogger(__name__)


class SettingsWindow(Adw.Window):
    """Application settings."""

    def __init__(self, config: AppConfig, parent: Optional[Gtk.Window] = None,
                 on_saved: Optional[Callable[[], None]] = None):
        super().__init__(title="Settings", modal=True)
        if parent is not None:
            self.set_transient_for(parent)
        self.set_default_size(420, 520)

        self.config = config
        self.on_saved = on_saved
        self.tab_order: List[str] = list(config.tab_order)
        self.tab_switches: Dict[str, Gtk.Switch] = {}

        main_box = Gtk.Box(orientation=Gtk.Orientation.VERTICAL)

        header = Adw.HeaderBar()
        save_button = Gtk.Button(label="Save")
        save_button.add_css_class("suggested-action")
        save_button.connect("clicked", self._on_save_clicked)
        header.pack_end(save_button)
        main_box.append(header)

        scroll = Gtk.ScrolledWindow()
        scroll.set_vexpand(True)
        scroll.set_policy(Gtk.PolicyType.NEVER, Gtk.PolicyType.AUTOMATIC)

        content = Gtk.Box(orientation=Gtk.Orientation.VERTICAL, spacing=16)
        content.set_margin_top(16)
        content.set_margin_bottom(16)
        content.set_margin_start(16)
        content.set_margin_end(16)

        # ===== TABS SECTION =====
        tabs_title = Gtk.Label(label="Tabs")
        tabs_title.add_css_class("title-4")
        tabs_title.set_halign(Gtk.Align.START)
        content.append(tabs_title)

        self.tab_list = Gtk.ListBox()
        self.tab_list.add_css_class("boxed-list")
        self.tab_list.set_selection_mode(Gtk.SelectionMode.NONE)
        content.append(self.tab_list)

        # ===== WINDOW SECTION =====
        window_title = Gtk.Label(label="Window")
        window_title.add_css_class("title-4")
        window_title.set_halign(Gtk.Align.START)
        content.append(window_title)

        float_row = Gtk.Box(orientation=Gtk.Orientation.HORIZONTAL, spacing=12)
        float_label = Gtk.Label(label="Floating window")
        float_label.set_hexpand(True)
        float_label.set_halign(Gtk.Align.START)
        float_row.append(float_label)

        self.float_switch = Gtk.Switch()
        self.float_switch.set_active(config.floating)
        self.float_switch.set_valign(Gtk.Align.CENTER)
        float_row.append(self.float_switch)
        content.append(float_row)

        # ===== POWER SECTION =====
        lock_title = Gtk.Label(label="Lock Command")
        lock_title.add_css_class("title-4")
        lock_title.set_halign(Gtk.Align.START)
        content.append(lock_title)

        self.lock_entry = Gtk.Entry()
        self.lock_entry.set_text(config.lock_command)
        content.append(self.lock_entry)

        scroll.set_child(content)
        main_box.append(scroll)
        self.set_content(main_box)

        self._refresh_tab_list()

    def _refresh_tab_list(self) -> None:
        while child := self.tab_list.get_first_child():
            self.tab_list.remove(child)

        for index, tab_id in enumerate(self.tab_order):
            meta = TAB_METADATA[tab_id]
            row = Gtk.Box(orientation=Gtk.Orientation.HORIZONTAL, spacing=10)
            row.set_margin_top(6)
            row.set_margin_bottom(6)
            row.set_margin_start(10)
            row.set_margin_end(10)

            row.append(Gtk.Image.new_from_icon_name(meta.icon_name))
            label = Gtk.Label(label=meta.title)
            label.set_hexpand(True)
            label.set_halign(Gtk.Align.START)
            row.append(label)

            up = Gtk.Button.new_from_icon_name("go-up-symbolic")
            up.set_sensitive(index > 0)
            up.connect("clicked", self._on_move, tab_id, -1)
            row.append(up)

            down = Gtk.Button.new_from_icon_name("go-down-symbolic")
            down.set_sensitive(index < len(self.tab_order) - 1)
            down.connect("clicked", self._on_move, tab_id, 1)
            row.append(down)

            switch = self.tab_switches.get(tab_id)
            active = switch.get_active() if switch else tab_id not in self.config.disabled_tabs
            switch = Gtk.Switch()
            switch.set_active(active)
            switch.set_valign(Gtk.Align.CENTER)
            self.tab_switches[tab_id] = switch
            row.append(switch)

            self.tab_list.append(row)

    def _on_move(self, button: Gtk.Button, tab_id: str, offset: int) -> None:
        index = self.tab_order.index(tab_id)
        target = index + offset
        if 0 <= target < len(self.tab_order):
            self.tab_order[index], self.tab_order[target] = self.tab_order[target], self.tab_order[index]
            self._refresh_tab_list()

    def _on_save_clicked(self, button: Gtk.Button) -> None:
        disabled = [t for t in self.tab_order if not self.tab_switches[t].get_active()]
        if len(disabled) == len(self.tab_order):
            parent = self.get_transient_for()
            if hasattr(parent, 'show_toast'):
                parent.show_toast("At least one tab must stay enabled")
            return

        self.config.tab_order = list(self.tab_order)
        self.config.disabled_tabs = disabled
        self.config.floating = self.float_switch.get_active()
        self.config.lock_command = self.lock_entry.get_text().strip() or self.config.lock_command

        if not save_config(self.config):
            logger.error("Settings could not be saved")
            return

        logger.info("Settings saved, restart required")
        self.close()
        if self.on_saved:
            self.on_saved()
