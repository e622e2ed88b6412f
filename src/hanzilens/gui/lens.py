"""The lens: a transparent, movable overlay that shows what it recognized.

The user drags and resizes the lens over Chinese text. After each move or
resize settles, the area inside the border is captured and the recognized
words are drawn on white panels where the text was found. Hovering a word
opens its dictionary entries.
"""

from PySide6.QtCore import QPoint, QRectF, Qt, QTimer, Signal
from PySide6.QtGui import QAction, QActionGroup, QColor, QFont, QFontMetricsF, QKeySequence, QPainter, QPen, QShortcut
from PySide6.QtWidgets import QMenu, QWidget

from .. import log
from ..backends.base import BoundingBox, Language
from ..capture.region import CaptureRegion
from ..config import Config
from ..layout import COLOR_PANEL, COLOR_TEXT, PresentableLine, PresentableWord, build_lines, panel_origin
from ..pipeline import RecognitionResult

logger = log.get_logger()

BORDER_WIDTH = 2
MIN_WIDTH = 60
MIN_HEIGHT = 40
PANEL_PADDING = 6
RESIZE_MARGIN = 8
STATUS_FONT_SIZE = 11
NO_ENTRY_TEXT = "(no dictionary entry)"

STATUS_MESSAGES = {
    "loading": "Loading OCR engine…",
    "busy": "Recognizing…",
}

EDGE_CURSORS = {
    "nw": Qt.CursorShape.SizeFDiagCursor,
    "se": Qt.CursorShape.SizeFDiagCursor,
    "ne": Qt.CursorShape.SizeBDiagCursor,
    "sw": Qt.CursorShape.SizeBDiagCursor,
    "n": Qt.CursorShape.SizeVerCursor,
    "s": Qt.CursorShape.SizeVerCursor,
    "e": Qt.CursorShape.SizeHorCursor,
    "w": Qt.CursorShape.SizeHorCursor,
}


class LensWindow(QWidget):
    """Frameless always-on-top capture window with the recognition overlay."""

    # Interior region to capture, in global logical coordinates
    capture_requested = Signal(object)

    # Lens moved or resized; results for the old region are void
    region_changed = Signal()

    language_selected = Signal(object)
    copy_requested = Signal()
    quit_requested = Signal()

    def __init__(self, config: Config):
        super().__init__()
        self._config = config
        self._language = config.language
        self._lines: list[PresentableLine] = []
        self._result: RecognitionResult | None = None
        self._drag_pos: QPoint | None = None
        self._resize_edge: str | None = None
        self._status = ""
        self._error = ""

        self._debounce = QTimer(self)
        self._debounce.setSingleShot(True)
        self._debounce.setInterval(config.capture_delay_ms)
        self._debounce.timeout.connect(self._emit_capture)

        self._setup_window()
        self._setup_shortcuts()

    def _setup_window(self):
        """Configure window flags for overlay behavior."""
        self.setWindowFlags(
            Qt.WindowType.FramelessWindowHint
            | Qt.WindowType.WindowStaysOnTopHint
            | Qt.WindowType.Tool  # Hides from taskbar
        )
        self.setAttribute(Qt.WidgetAttribute.WA_TranslucentBackground, True)
        self.setMouseTracking(True)
        self.setMinimumSize(MIN_WIDTH, MIN_HEIGHT)

        region = self._config.region
        self.setGeometry(region.x, region.y, region.width, region.height)

    def _setup_shortcuts(self):
        bindings = [
            (QKeySequence(Qt.Key.Key_F5), self.request_refresh),
            (QKeySequence(QKeySequence.StandardKey.Copy), self.copy_requested.emit),
            (QKeySequence(Qt.Key.Key_Escape), self.quit_requested.emit),
        ]
        for sequence, slot in bindings:
            QShortcut(sequence, self).activated.connect(slot)

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------

    @property
    def language(self) -> Language:
        return self._language

    @property
    def text(self) -> str:
        return self._result.text if self._result else ""

    @property
    def status_text(self) -> str:
        """Status label to draw; empty while a capture is pending so it stays out of the frame."""
        if self._debounce.isActive():
            return ""
        return self._error or STATUS_MESSAGES.get(self._status, "")

    def capture_region(self) -> CaptureRegion:
        """Area inside the border, in global logical coordinates."""
        top_left = self.mapToGlobal(QPoint(BORDER_WIDTH, BORDER_WIDTH))
        return CaptureRegion(
            top_left.x(),
            top_left.y(),
            max(1, self.width() - 2 * BORDER_WIDTH),
            max(1, self.height() - 2 * BORDER_WIDTH),
        )

    def window_region(self) -> CaptureRegion:
        """Outer window geometry, as persisted in config.ini."""
        return CaptureRegion(self.x(), self.y(), self.width(), self.height())

    def request_refresh(self):
        """Clear the overlay and capture again once the delay has passed."""
        self._clear()
        self._debounce.start()
        self.region_changed.emit()

    def set_result(self, result: RecognitionResult):
        self._result = result
        self._lines = build_lines(result.lines, self._measure)
        logger.debug("overlay updated", lines=len(self._lines))
        self.update()

    def set_status(self, status: str, message: str = ""):
        if status == "error":
            self._error = message or "OCR engine unavailable"
        elif status == "ready":
            self._error = ""
        self._status = status
        self.update()

    def set_language(self, language: Language):
        self._language = language
        self.update()

    def toggle_visibility(self):
        if self.isVisible():
            self._debounce.stop()
            self.hide()
        else:
            self.show()
            self.request_refresh()

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _clear(self):
        self._lines = []
        self._result = None
        self.update()

    def _emit_capture(self):
        if not self.isVisible():
            return
        self.capture_requested.emit(self.capture_region())
        # Status label was hidden for the capture
        self.update()

    def _font(self, pixel_size: float) -> QFont:
        font = QFont(self._config.font_family)
        font.setPixelSize(max(1, round(pixel_size)))
        return font

    def _measure(self, text: str, pixel_size: float) -> float:
        return QFontMetricsF(self._font(pixel_size)).horizontalAdvance(text)

    def _hovered(self) -> tuple[PresentableLine, PresentableWord] | None:
        for line in self._lines:
            word = line.hovered
            if word is not None:
                return line, word
        return None

    def _translation_text(self, word: PresentableWord) -> str:
        entries = word.word.entries
        if not entries:
            return f"{word.text} {NO_ENTRY_TEXT}"
        return "".join(entry.format(self._language) for entry in entries).rstrip("\n")

    # -------------------------------------------------------------------------
    # Painting
    # -------------------------------------------------------------------------

    def paintEvent(self, event):
        painter = QPainter(self)
        painter.setRenderHint(QPainter.RenderHint.Antialiasing)
        painter.setRenderHint(QPainter.RenderHint.TextAntialiasing)

        # Almost invisible fill so the window still receives mouse events
        painter.fillRect(self.rect(), QColor(0, 0, 0, 1))

        pen = QPen(QColor(self._config.border_color))
        pen.setWidth(BORDER_WIDTH)
        painter.setPen(pen)
        half = BORDER_WIDTH // 2
        painter.drawRect(self.rect().adjusted(half, half, -half, -half))

        painter.translate(BORDER_WIDTH, BORDER_WIDTH)
        threshold = self._config.low_confidence_threshold
        for line in self._lines:
            bounds = line.bounds
            painter.fillRect(QRectF(bounds.x, bounds.y, bounds.width, bounds.height), QColor(COLOR_PANEL))
            painter.setFont(self._font(line.scale))
            for word in line.words:
                painter.setPen(QColor(word.color(threshold)))
                painter.drawText(
                    QRectF(word.x, word.y, word.width + 1, line.scale),
                    Qt.AlignmentFlag.AlignLeft | Qt.AlignmentFlag.AlignVCenter,
                    word.text,
                )

        hovered = self._hovered()
        if hovered is not None:
            self._paint_translation(painter, *hovered)

        self._paint_status(painter)
        painter.end()

    def _paint_translation(self, painter: QPainter, line: PresentableLine, word: PresentableWord):
        text = self._translation_text(word)
        font = self._font(self._config.translation_font_size)
        area_w = self.width() - 2 * BORDER_WIDTH
        area_h = self.height() - 2 * BORDER_WIDTH
        flags = Qt.AlignmentFlag.AlignLeft | Qt.TextFlag.TextExpandTabs | Qt.TextFlag.TextWordWrap

        metrics = QFontMetricsF(font)
        text_rect = metrics.boundingRect(QRectF(0, 0, max(1, area_w - 2 * PANEL_PADDING), 100000), flags, text)
        panel_w = text_rect.width() + 2 * PANEL_PADDING
        panel_h = text_rect.height() + 2 * PANEL_PADDING

        anchor = BoundingBox(word.x, word.y, word.width, line.scale)
        x, y = panel_origin(anchor, panel_w, panel_h, area_w, area_h)

        painter.fillRect(QRectF(x, y, panel_w, panel_h), QColor(COLOR_PANEL))
        painter.setPen(QColor(COLOR_TEXT))
        painter.drawRect(QRectF(x, y, panel_w, panel_h))
        painter.setFont(font)
        painter.drawText(
            QRectF(x + PANEL_PADDING, y + PANEL_PADDING, text_rect.width() + 1, text_rect.height() + 1),
            flags,
            text,
        )

    def _paint_status(self, painter: QPainter):
        message = self.status_text
        if not message:
            return
        font = QFont(self._config.font_family)
        font.setPixelSize(STATUS_FONT_SIZE)
        painter.setFont(font)
        metrics = QFontMetricsF(font)
        rect = QRectF(0, self.height() - 2 * BORDER_WIDTH - metrics.height() - 4, metrics.horizontalAdvance(message) + 8, metrics.height() + 4)
        painter.fillRect(rect, QColor(COLOR_PANEL))
        painter.setPen(QColor("#FF0000") if self._error else QColor(COLOR_TEXT))
        painter.drawText(rect, Qt.AlignmentFlag.AlignCenter, message)

    # -------------------------------------------------------------------------
    # Events
    # -------------------------------------------------------------------------

    def moveEvent(self, event):
        super().moveEvent(event)
        self.request_refresh()

    def resizeEvent(self, event):
        super().resizeEvent(event)
        self.request_refresh()

    def _edge_at(self, pos: QPoint) -> str | None:
        """Which edge or corner a window-relative point is on, if any."""
        x, y = pos.x(), pos.y()
        vertical = "n" if y < RESIZE_MARGIN else "s" if y >= self.height() - RESIZE_MARGIN else ""
        horizontal = "w" if x < RESIZE_MARGIN else "e" if x >= self.width() - RESIZE_MARGIN else ""
        return (vertical + horizontal) or None

    def _resize_to(self, global_pos: QPoint):
        geom = self.geometry()
        edge = self._resize_edge
        if "e" in edge:
            geom.setRight(max(geom.left() + MIN_WIDTH, global_pos.x()))
        if "w" in edge:
            geom.setLeft(min(geom.right() - MIN_WIDTH, global_pos.x()))
        if "s" in edge:
            geom.setBottom(max(geom.top() + MIN_HEIGHT, global_pos.y()))
        if "n" in edge:
            geom.setTop(min(geom.bottom() - MIN_HEIGHT, global_pos.y()))
        self.setGeometry(geom)

    def mousePressEvent(self, event):
        if event.button() != Qt.MouseButton.LeftButton:
            return
        pos = event.position().toPoint()
        self._resize_edge = self._edge_at(pos)
        if self._resize_edge is None:
            self._drag_pos = event.globalPosition().toPoint() - self.frameGeometry().topLeft()
        event.accept()

    def mouseMoveEvent(self, event):
        if event.buttons() == Qt.MouseButton.LeftButton:
            if self._resize_edge is not None:
                self._resize_to(event.globalPosition().toPoint())
                event.accept()
                return
            if self._drag_pos is not None:
                self.move(event.globalPosition().toPoint() - self._drag_pos)
                event.accept()
                return

        pos = event.position()
        edge = self._edge_at(pos.toPoint())
        if edge is None:
            self.unsetCursor()
        else:
            self.setCursor(EDGE_CURSORS[edge])

        x = pos.x() - BORDER_WIDTH
        y = pos.y() - BORDER_WIDTH
        changed = False
        for line in self._lines:
            changed = line.handle_cursor(x, y) or changed
        if changed:
            self.update()

    def mouseReleaseEvent(self, event):
        if self._drag_pos is not None or self._resize_edge is not None:
            self._drag_pos = None
            self._resize_edge = None
            event.accept()

    def leaveEvent(self, event):
        super().leaveEvent(event)
        changed = False
        for line in self._lines:
            changed = line.clear_highlight() or changed
        if changed:
            self.update()

    def contextMenuEvent(self, event):
        menu = QMenu(self)
        menu.addAction("Refresh", self.request_refresh)

        language_menu = menu.addMenu("Language")
        group = QActionGroup(language_menu)
        for language in Language:
            action = QAction(language.display_name, language_menu, checkable=True)
            action.setChecked(language == self._language)
            action.triggered.connect(lambda checked=False, lang=language: self._select_language(lang))
            group.addAction(action)
            language_menu.addAction(action)

        copy_action = menu.addAction("Copy text", self.copy_requested.emit)
        copy_action.setEnabled(bool(self.text))
        menu.addSeparator()
        menu.addAction("Quit", self.quit_requested.emit)
        menu.exec(event.globalPos())

    def _select_language(self, language: Language):
        if language == self._language:
            return
        self.set_language(language)
        self.language_selected.emit(language)
        self.request_refresh()
