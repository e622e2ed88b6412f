"""Global hotkeys using pynput.

pynput calls back on its own thread; callbacks only emit Qt signals so the
actual work happens on the GUI thread.
"""

from PySide6.QtCore import QObject, Signal

from .. import log

logger = log.get_logger()


class HotkeyListener(QObject):
    """Emits a signal for each configured global hotkey."""

    refresh_pressed = Signal()
    toggle_pressed = Signal()
    copy_pressed = Signal()

    def __init__(self, refresh: str, toggle: str, copy: str):
        """Initialize with pynput hotkey strings such as '<ctrl>+<alt>+r'."""
        super().__init__()
        self._bindings = {
            refresh: self.refresh_pressed.emit,
            toggle: self.toggle_pressed.emit,
            copy: self.copy_pressed.emit,
        }
        self._listener = None

    def start(self) -> bool:
        """Start listening; returns False if global hotkeys are unavailable."""
        if self._listener is not None:
            return True
        try:
            from pynput import keyboard

            self._listener = keyboard.GlobalHotKeys({k: v for k, v in self._bindings.items() if k})
            self._listener.start()
        except (ImportError, OSError, ValueError) as e:
            # No X server / accessibility permission, or a malformed hotkey string
            logger.warning("global hotkeys unavailable", err=str(e))
            self._listener = None
            return False

        logger.debug("global hotkeys active", keys=",".join(k for k in self._bindings if k))
        return True

    def stop(self) -> None:
        if self._listener is not None:
            self._listener.stop()
            self._listener = None
