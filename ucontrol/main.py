#!/usr/bin/env python3
"""
Ultimate Control - Desktop control panel

Main application entry point.
"""

import gi
gi.require_version('Gtk', '4.0')
gi.require_version('Adw', '1')
from gi.repository import Gtk, Adw, Gio, GLib

import sys
import logging
from typing import Dict, Optional

from .startup import InitialTabPolicy
from .window import MainWindow

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# The launcher restarts the application when it exits with this code
RESTART_EXIT_CODE = 42

TAB_OPTIONS = (
    ("volume", 'v', "Start with the Volume tab"),
    ("wifi", 'w', "Start with the WiFi tab"),
    ("bluetooth", 'b', "Start with the Bluetooth tab"),
    ("display", 'd', "Start with the Display tab"),
    ("power", 'p', "Start with the Power tab"),
)

MODE_OPTIONS = (
    ("settings", 's', "Open the settings window"),
    ("minimal", 'm', "Hide the tab bar"),
    ("float", 'f', "Start as a floating window"),
)


class UltimateControlApplication(Adw.Application):
    """Main Ultimate Control GTK4 Application."""

    def __init__(self):
        super().__init__(
            application_id="io.github.ucontrol",
            flags=Gio.ApplicationFlags.NON_UNIQUE
        )

        self.window: Optional[MainWindow] = None
        self.flags: Dict[str, bool] = {}
        self.restart_requested = False

        # Add command line options
        for name, short_name, description in TAB_OPTIONS + MODE_OPTIONS:
            self.add_main_option(
                name, ord(short_name),
                GLib.OptionFlags.NONE,
                GLib.OptionArg.NONE,
                description,
                None
            )

        self.add_main_option(
            "version", 0,
            GLib.OptionFlags.NONE,
            GLib.OptionArg.NONE,
            "Show version information",
            None
        )

    def do_handle_local_options(self, options: GLib.VariantDict) -> int:
        """Handle command line options."""
        if options.contains("version"):
            from . import __version__
            print(f"Ultimate Control version {__version__}")
            return 0

        self.flags = {
            name: options.contains(name)
            for name, _, _ in TAB_OPTIONS + MODE_OPTIONS
        }
        return -1  # Continue to do_activate

    def do_activate(self) -> None:
        """Activate the application."""
        if self.window is not None:
            self.window.present()
            return

        policy = InitialTabPolicy.from_flags(self.flags)

        self.window = MainWindow(
            self,
            policy=policy,
            minimal=self.flags.get("minimal", False),
            floating=self.flags.get("float", False),
        )

        # Setup actions
        about_action = Gio.SimpleAction.new("about", None)
        about_action.connect("activate", self._on_about)
        self.add_action(about_action)

        quit_action = Gio.SimpleAction.new("quit", None)
        quit_action.connect("activate", self._on_quit)
        self.add_action(quit_action)
        self.set_accels_for_action("app.quit", ["<Control>q"])

        settings_action = Gio.SimpleAction.new("settings", None)
        settings_action.connect("activate", self._on_settings)
        self.add_action(settings_action)

        self.window.present()
        self.window.start()

        if self.flags.get("settings"):
            self.window.open_settings()

    def _on_about(self, action: Gio.SimpleAction, param) -> None:
        """Show about dialog."""
        from . import __version__

        about = Adw.AboutWindow(
            application_name="Ultimate Control",
            application_icon="preferences-system-symbolic",
            developer_name="Ultimate Control Contributors",
            version=__version__,
            comments="Volume, WiFi, Bluetooth, display and power controls",
            developers=["Ultimate Control Contributors"],
        )
        about.set_transient_for(self.window)
        about.present()

    def _on_quit(self, action: Gio.SimpleAction, param) -> None:
        """Quit the application."""
        if self.window:
            self.window.close()
        self.quit()

    def _on_settings(self, action: Gio.SimpleAction, param) -> None:
        if self.window:
            self.window.open_settings()

    def request_restart(self) -> None:
        """Quit with RESTART_EXIT_CODE so the launcher starts a fresh instance."""
        logger.info("Restart requested")
        self.restart_requested = True
        if self.window:
            self.window.close()
        self.quit()


def main() -> int:
    """Main entry point."""
    app = UltimateControlApplication()
    status = app.run(sys.argv)
    if app.restart_requested:
        return RESTART_EXIT_CODE
    return status


if __name__ == "__main__":
    sys.exit(main())
