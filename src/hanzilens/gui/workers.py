"""Background worker running the OCR pipeline off the GUI thread."""

import hashlib
import threading
from dataclasses import dataclass

import cv2
import numpy as np
from numpy.typing import NDArray
from PySide6.QtCore import QObject, Signal

from .. import log
from ..backends.base import DictionaryError, Language, OCREngineError
from ..pipeline import Pipeline, RecognitionResult

logger = log.get_logger()


def compute_frame_hash(frame: NDArray[np.uint8], thumb_size: int = 32) -> str:
    """Hash a downsampled copy of the frame for duplicate detection.

    Args:
        frame: numpy array (H, W, 4) in BGRA format
        thumb_size: size to downsample to before hashing

    Returns:
        MD5 hash string of the downsampled frame
    """
    thumb = cv2.resize(frame, (thumb_size, thumb_size), interpolation=cv2.INTER_AREA)
    return hashlib.md5(thumb.tobytes()).hexdigest()


@dataclass
class FrameRequest:
    """A captured frame waiting for OCR."""

    request_id: int
    frame: NDArray[np.uint8]
    scale: float = 1.0


class FrameBuffer:
    """Thread-safe 'latest frame' buffer with signaling.

    Holds at most one request: a newer frame replaces one that has not been
    picked up yet, so OCR never runs on a stale region.
    """

    def __init__(self):
        self._item: FrameRequest | None = None
        self._lock = threading.Lock()
        self._condition = threading.Condition(self._lock)
        self._closed = False

    def put(self, item: FrameRequest) -> None:
        """Store new request and signal worker."""
        with self._condition:
            self._item = item
            self._condition.notify()

    def get(self, timeout: float | None = None) -> FrameRequest | None:
        """Wait for and take the pending request. Returns None on timeout or close."""
        with self._condition:
            if self._condition.wait_for(lambda: self._item is not None or self._closed, timeout):
                if self._closed:
                    return None
                item = self._item
                self._item = None
                return item
            return None

    def close(self) -> None:
        """Signal worker to stop waiting."""
        with self._condition:
            self._closed = True
            self._condition.notify()


class ProcessWorker(QObject):
    """Runs the pipeline on submitted frames in a Python thread.

    Results are emitted through Qt signals, which Qt delivers on the GUI
    thread as queued connections.
    """

    # (request_id, RecognitionResult)
    result_ready = Signal(int, object)

    # "loading", "ready", "error", "busy"
    status_changed = Signal(str)

    # Error message when the engine or dictionary cannot be loaded
    failed = Signal(str)

    def __init__(self, pipeline: Pipeline):
        super().__init__()
        self._pipeline = pipeline
        self._frame_buffer = FrameBuffer()
        self._thread: threading.Thread | None = None
        self._running = False
        self._pending_language: Language | None = None

        self._last_frame_hash: str | None = None
        self._last_result: RecognitionResult | None = None

    def start(self) -> None:
        """Start the worker thread; models load inside it."""
        if self._thread is not None:
            return
        self._running = True
        self._thread = threading.Thread(target=self._run, daemon=True, name="ocr-worker")
        self._thread.start()

    def stop(self) -> None:
        """Stop the worker thread."""
        self._running = False
        self._frame_buffer.close()
        if self._thread is not None:
            self._thread.join(timeout=2.0)
        self._thread = None

    def submit(self, request: FrameRequest) -> None:
        """Queue a frame for processing (non-blocking)."""
        if self._running:
            self._frame_buffer.put(request)

    def set_language(self, language: Language) -> None:
        """Switch OCR language before the next frame."""
        self._pending_language = language

    def _load(self) -> bool:
        self.status_changed.emit("loading")
        try:
            self._pipeline.load()
        except (OCREngineError, DictionaryError) as e:
            logger.error("failed to load models", err=str(e))
            self.status_changed.emit("error")
            self.failed.emit(str(e))
            return False
        self.status_changed.emit("ready")
        return True

    def _run(self) -> None:
        logger.debug("worker thread starting")

        if self._load():
            while self._running:
                request = self._frame_buffer.get(timeout=0.5)
                if request is not None:
                    self._process(request)

        logger.debug("worker thread stopped")

    def _apply_pending_language(self) -> bool:
        language = self._pending_language
        if language is None or language == self._pipeline.language:
            return True
        self._pending_language = None
        self._pipeline.language = language
        self._last_frame_hash = None
        logger.info("language changed", language=language.value)
        return self._load()

    def _process(self, request: FrameRequest) -> None:
        """Run one pass; a failure drops the frame but keeps the loop alive."""
        if not self._apply_pending_language():
            return

        frame_hash = compute_frame_hash(request.frame)
        if frame_hash == self._last_frame_hash and self._last_result is not None:
            logger.debug("frame unchanged, skipping OCR")
            self.result_ready.emit(request.request_id, self._last_result)
            return

        self.status_changed.emit("busy")
        try:
            result = self._pipeline.process(request.frame, scale=request.scale)
        except (OCREngineError, RuntimeError, OSError, ValueError) as e:
            # pytesseract.TesseractError is a RuntimeError
            logger.error("OCR error", err=str(e), request=request.request_id)
            self.status_changed.emit("ready")
            return

        self._last_frame_hash = frame_hash
        self._last_result = result
        self.status_changed.emit("ready")
        self.result_ready.emit(request.request_id, result)
