"""PySide6 application entry point."""

import os
import platform
import sys

# On Linux, force Qt to use X11/XWayland instead of native Wayland.
# Native Wayland compositors ignore WindowStaysOnTopHint and hide global
# window positions, both of which the lens depends on.
# Must be set BEFORE importing Qt.
if platform.system() == "Linux" and "QT_QPA_PLATFORM" not in os.environ:
    os.environ["QT_QPA_PLATFORM"] = "xcb"

from PySide6.QtCore import Qt
from PySide6.QtWidgets import QApplication

from .. import __version__, log
from ..backends.base import Language
from ..capture.region import CaptureRegion, RegionCapture
from ..config import Config
from ..pipeline import RecognitionResult, create_pipeline
from .hotkeys import HotkeyListener
from .lens import LensWindow
from .workers import FrameRequest, ProcessWorker

logger = log.get_logger()


class LensApp:
    """Main application: lens window, capture, and OCR worker."""

    def __init__(self, config: Config, debug: bool = False):
        self._config = config
        self._debug = debug
        self._app: QApplication | None = None
        self._window: LensWindow | None = None
        self._worker: ProcessWorker | None = None
        self._hotkeys: HotkeyListener | None = None
        self._capture = RegionCapture()
        self._request_id = 0

    def setup(self):
        """Set up the application."""
        self._app = QApplication.instance()
        if self._app is None:
            QApplication.setHighDpiScaleFactorRoundingPolicy(Qt.HighDpiScaleFactorRoundingPolicy.PassThrough)
            self._app = QApplication(sys.argv)
        self._app.setApplicationName("hanzilens")
        self._app.setApplicationVersion(__version__)

        self._worker = ProcessWorker(create_pipeline(self._config, self._debug))
        self._window = LensWindow(self._config)

        self._window.capture_requested.connect(self._on_capture_requested)
        self._window.region_changed.connect(self._invalidate_results)
        self._window.language_selected.connect(self._on_language_selected)
        self._window.copy_requested.connect(self._copy_text)
        self._window.quit_requested.connect(self._app.quit)

        self._worker.result_ready.connect(self._on_result)
        self._worker.status_changed.connect(self._window.set_status)
        self._worker.failed.connect(lambda message: self._window.set_status("error", message))

        if self._config.hotkeys_enabled:
            self._hotkeys = HotkeyListener(
                refresh=self._config.hotkey_refresh,
                toggle=self._config.hotkey_toggle,
                copy=self._config.hotkey_copy,
            )
            self._hotkeys.refresh_pressed.connect(self._window.request_refresh)
            self._hotkeys.toggle_pressed.connect(self._window.toggle_visibility)
            self._hotkeys.copy_pressed.connect(self._copy_text)

        self._app.aboutToQuit.connect(self._on_quit)

    def _invalidate_results(self):
        """Void results still in flight for the previous region."""
        self._request_id += 1

    def _on_capture_requested(self, region: CaptureRegion):
        screen = self._window.screen()
        ratio = screen.devicePixelRatio() if screen is not None else 1.0

        self._request_id += 1
        frame = self._capture.grab(region, ratio)
        if frame is None:
            return

        # Frame pixels per logical pixel, measured rather than assumed
        scale = frame.shape[1] / region.width
        self._worker.submit(FrameRequest(self._request_id, frame, scale))
        logger.debug("frame submitted", request=self._request_id, region=str(region.as_monitor()), scale=f"{scale:.2f}")

    def _on_result(self, request_id: int, result: RecognitionResult):
        if request_id != self._request_id:
            logger.debug("stale result dropped", request=request_id, latest=self._request_id)
            return

        self._window.set_result(result)
        logger.info("recognized", text=result.text.replace("\n", " / "), words=len(result.words))
        if self._config.copy_to_clipboard and result.text:
            QApplication.clipboard().setText(result.text)

    def _on_language_selected(self, language: Language):
        self._config.language = language
        self._worker.set_language(language)

    def _copy_text(self):
        text = self._window.text
        if text:
            QApplication.clipboard().setText(text)
            logger.info("copied to clipboard", chars=len(text))

    def _on_quit(self):
        """Persist window geometry and stop background threads."""
        if self._window:
            region = self._window.window_region()
            logger.debug("saving window geometry", region=str(region.as_monitor()))
            self._config.region = region
            self._config.language = self._window.language
        self._config.save()

        if self._hotkeys:
            self._hotkeys.stop()
        if self._worker:
            self._worker.stop()

    def run(self) -> int:
        """Run the application.

        Returns:
            Exit code.
        """
        self._window.show()
        self._worker.start()
        if self._hotkeys:
            self._hotkeys.start()
        return self._app.exec()


def run(config: Config, debug: bool = False) -> int:
    """Start the GUI."""
    logger.info(f"hanzilens v{__version__}")
    logger.info(
        "system",
        platform=platform.system(),
        version=platform.version(),
        python=platform.python_version(),
        language=config.language.value,
    )

    app = LensApp(config, debug=debug)
    app.setup()
    return app.run()
