"""
Ultimate Control - Main Window

The application window: a notebook with one lazily loaded page per
enabled tab.
"""

import gi
gi.require_version('Gtk', '4.0')
gi.require_version('Adw', '1')
from gi.repository import Gtk, Adw, Gio

import logging
from typing import Callable, Dict, Optional

from .config import AppConfig, get_config
from .loader import LazyLoader
from .mainloop import GLibScheduler
from .shell import ShellRunner
from .startup import InitialTabPolicy
from .tabs import TabRecord, TabState, TAB_METADATA
from .wifi_controller import WifiController
from .audio_controller import AudioController
from .power_controller import PowerController
from .bluetooth_controller import BluetoothController
from .display_controller import DisplayController
from .ui import VolumePage, WifiPage, BluetoothPage, DisplayPage, PowerPage, SettingsWindow

logger = logging.getLogger(__name__)

WINDOW_TITLE = "Ultimate Control"

CSS = """
.tab-content {
    transition: opacity 200ms ease-in-out;
}

.tab-content.animate-in {
    opacity: 0;
}

.tab-content.animate-out {
    opacity: 0;
}

.tab-label {
    padding: 2px 4px;
}
"""


class NotebookHost:
    """Adapts a Gtk.Notebook to the tab host interface used by LazyLoader."""

    def __init__(self, notebook: Gtk.Notebook, on_label_clicked: Callable[[str], None]):
        self.notebook = notebook
        self._on_label_clicked = on_label_clicked

    def _make_label(self, tab_id: str) -> Gtk.Widget:
        meta = TAB_METADATA[tab_id]
        box = Gtk.Box(orientation=Gtk.Orientation.HORIZONTAL, spacing=6)
        box.add_css_class("tab-label")
        box.append(Gtk.Image.new_from_icon_name(meta.icon_name))
        box.append(Gtk.Label(label=meta.title))
        box.set_tooltip_text(meta.title)

        click = Gtk.GestureClick()
        click.connect("pressed", lambda gesture, n, x, y: self._on_label_clicked(tab_id))
        box.add_controller(click)
        return box

    def append(self, view: Gtk.Widget, tab_id: str) -> int:
        return self.notebook.append_page(view, self._make_label(tab_id))

    def replace(self, position: int, view: Gtk.Widget, tab_id: str) -> int:
        current = self.notebook.get_current_page()
        self.notebook.remove_page(position)
        new_position = self.notebook.insert_page(view, self._make_label(tab_id), position)
        self.notebook.set_current_page(new_position if current == position else current)
        return new_position

    def set_current(self, position: int) -> None:
        self.notebook.set_current_page(position)

    def remove_all(self) -> None:
        while self.notebook.get_n_pages() > 0:
            self.notebook.remove_page(-1)


def make_placeholder(tab_id: str) -> Gtk.Widget:
    placeholder = Gtk.Box()
    placeholder.set_size_request(100, 100)
    return placeholder


def make_loading_indicator(tab_id: str) -> Gtk.Widget:
    box = Gtk.Box(orientation=Gtk.Orientation.VERTICAL, spacing=10)
    box.set_halign(Gtk.Align.CENTER)
    box.set_valign(Gtk.Align.CENTER)

    spinner = Gtk.Spinner()
    spinner.set_size_request(32, 32)
    spinner.start()
    box.append(spinner)

    box.append(Gtk.Label(label="Loading..."))
    return box


class MainWindow(Adw.ApplicationWindow):
    """Main application window with a lazily loaded tab bar."""

    def __init__(self, app: Adw.Application, policy: Optional[InitialTabPolicy] = None,
                 minimal: bool = False, floating: bool = False,
                 runner: Optional[ShellRunner] = None):
        super().__init__(application=app)

        self.app = app
        self.config = get_config()
        self.policy = policy or InitialTabPolicy()
        self.runner = runner or ShellRunner()
        self.scheduler = GLibScheduler()
        self.wifi_controller: Optional[WifiController] = None

        # The forced tab applies to this session only
        session_config = AppConfig.from_dict(self.config.to_dict())
        self.policy.apply(session_config)

        self.set_title(WINDOW_TITLE)
        self.set_default_size(self.config.window_width, self.config.window_height)
        if floating or self.config.floating:
            self.set_resizable(False)

        # ===== MAIN LAYOUT =====
        main_box = Gtk.Box(orientation=Gtk.Orientation.VERTICAL)

        self.header = Adw.HeaderBar()
        settings_button = Gtk.Button.new_from_icon_name("emblem-system-symbolic")
        settings_button.set_tooltip_text("Settings")
        settings_button.connect("clicked", lambda b: self.open_settings())
        self.header.pack_end(settings_button)

        menu_button = Gtk.MenuButton()
        menu_button.set_icon_name("open-menu-symbolic")
        menu = Gio.Menu()
        menu.append("Settings", "app.settings")
        menu.append("About", "app.about")
        menu.append("Quit", "app.quit")
        menu_button.set_menu_model(menu)
        self.header.pack_end(menu_button)
        main_box.append(self.header)

        self.toast_overlay = Adw.ToastOverlay()
        self.notebook = Gtk.Notebook()
        self.notebook.set_scrollable(True)
        self.notebook.set_vexpand(True)
        self.notebook.set_hexpand(True)
        if minimal:
            self.notebook.set_show_tabs(False)
        self.toast_overlay.set_child(self.notebook)
        main_box.append(self.toast_overlay)

        self.set_content(main_box)

        # ===== TABS =====
        self.host = NotebookHost(self.notebook, self._on_tab_label_clicked)
        self.loader = LazyLoader(
            self.host,
            self.scheduler,
            self._content_constructors(),
            make_placeholder,
            make_loading_indicator,
            initial_tab=self.policy.tab_id,
        )
        self.loader.connect_loaded(self._on_tab_loaded)
        self.loader.rebuild(session_config.enabled_tabs())

        self.notebook.connect_after("switch-page", self._on_switch_page)

        self._load_css()

    # -------------------------------------------------------------------------
    # Tab content
    # -------------------------------------------------------------------------

    def _content_constructors(self) -> Dict[str, Callable[[], Gtk.Widget]]:
        def content(tab_id: str, build: Callable[[], Gtk.Widget]) -> Callable[[], Gtk.Widget]:
            def construct() -> Gtk.Widget:
                view = build()
                view.set_name(f"tab-{tab_id}")
                view.add_css_class("tab-content")
                return view
            return construct

        return {
            "volume": content("volume", lambda: VolumePage(AudioController(self.runner))),
            "wifi": content("wifi", lambda: WifiPage(self._get_wifi_controller(), self.scheduler)),
            "bluetooth": content("bluetooth", lambda: BluetoothPage(BluetoothController(self.runner))),
            "display": content("display", lambda: DisplayPage(DisplayController(self.runner))),
            "power": content("power", lambda: PowerPage(
                PowerController(self.runner, lock_command=self.config.lock_command)
            )),
        }

    def _get_wifi_controller(self) -> WifiController:
        if self.wifi_controller is None:
            self.wifi_controller = WifiController(self.runner, self.scheduler, probe=False)
        return self.wifi_controller

    def start(self) -> None:
        """Open the initial tab. Call after the window is presented."""
        if self.policy.activate(self.loader):
            return
        ids = self.loader.registry.ids
        if ids:
            self.loader.switch_to(ids[0])

    def _on_switch_page(self, notebook: Gtk.Notebook, page: Gtk.Widget, page_num: int) -> None:
        self.loader.on_navigate(page_num)

    def _on_tab_label_clicked(self, tab_id: str) -> None:
        self.loader.switch_to(tab_id)

    def _on_tab_loaded(self, record: TabRecord) -> None:
        if record.state is TabState.FAILED:
            self.show_toast(f"Failed to load {record.title}: {record.error}")

    # -------------------------------------------------------------------------
    # Settings
    # -------------------------------------------------------------------------

    def open_settings(self) -> None:
        settings = SettingsWindow(self.config, parent=self, on_saved=self._on_settings_saved)
        settings.present()

    def _on_settings_saved(self) -> None:
        request_restart = getattr(self.app, "request_restart", None)
        if request_restart:
            request_restart()

    # -------------------------------------------------------------------------
    # Misc
    # -------------------------------------------------------------------------

    def _load_css(self) -> None:
        """Load custom CSS styling."""
        css_provider = Gtk.CssProvider()
        css_provider.load_from_data(CSS.encode())
        Gtk.StyleContext.add_provider_for_display(
            self.get_display(),
            css_provider,
            Gtk.STYLE_PROVIDER_PRIORITY_APPLICATION
        )

    def show_toast(self, message: str) -> None:
        """Show a toast notification."""
        toast = Adw.Toast(title=message)
        toast.set_timeout(3)
        self.toast_overlay.add_toast(toast)

    def do_close_request(self) -> bool:
        """Handle window close."""
        if self.wifi_controller is not None:
            self.wifi_controller.shutdown()
        return False  # Allow close
