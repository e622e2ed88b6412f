"""One capture-to-words pass: OCR, segmentation and dictionary lookup."""

import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

import numpy as np
from numpy.typing import NDArray

from . import log
from .backends.base import DictionaryBackend, Language, OCRBackend
from .segment import RecognizedWord, Segmenter

if TYPE_CHECKING:
    from .config import Config

logger = log.get_logger()


@dataclass
class RecognitionResult:
    """Words found in one frame, grouped by line."""

    lines: list[list[RecognizedWord]] = field(default_factory=list)
    ocr_ms: int = 0
    total_ms: int = 0

    @property
    def text(self) -> str:
        return "\n".join("".join(word.text for word in line) for line in self.lines)

    @property
    def words(self) -> list[RecognizedWord]:
        return [word for line in self.lines for word in line]

    def scaled(self, factor: float) -> "RecognitionResult":
        """Same result with every box divided by factor."""
        if factor == 1:
            return self
        return RecognitionResult(
            lines=[[word.scaled(factor) for word in line] for line in self.lines],
            ocr_ms=self.ocr_ms,
            total_ms=self.total_ms,
        )


class Pipeline:
    """Runs OCR, segmentation and dictionary lookup on a frame."""

    def __init__(
        self,
        ocr: OCRBackend,
        dictionary: DictionaryBackend,
        segmenter: Segmenter | None = None,
    ):
        self._ocr = ocr
        self._dictionary = dictionary
        self._segmenter = segmenter or Segmenter()

    @property
    def language(self) -> Language:
        return self._ocr.language

    @language.setter
    def language(self, value: Language) -> None:
        self._ocr.language = value

    def load(self) -> None:
        """Load every backend.

        Raises:
            OCREngineError: If the OCR engine is unusable.
            DictionaryError: If the dictionary cannot be loaded.
        """
        self._ocr.load()
        self._dictionary.load()
        self._segmenter.initialize()

    def process(self, frame: NDArray[np.uint8], scale: float = 1.0) -> RecognitionResult:
        """Recognize, segment and translate a frame.

        Args:
            frame: Numpy array (H, W, 4) in BGRA format.
            scale: Frame pixels per output unit; boxes are divided by it.

        Returns:
            The recognized words with their dictionary entries.
        """
        start = time.perf_counter()

        ocr_lines = self._ocr.recognize(frame)
        ocr_ms = int((time.perf_counter() - start) * 1000)

        lines = self._segmenter.segment_lines(ocr_lines)
        for line in lines:
            for word in line:
                word.entries = self._dictionary.lookup_with_fallback(word.text)

        result = RecognitionResult(lines=lines, ocr_ms=ocr_ms)
        result = result.scaled(scale)
        result.total_ms = int((time.perf_counter() - start) * 1000)

        logger.debug(
            "frame processed",
            lines=len(lines),
            words=len(result.words),
            ocr_ms=ocr_ms,
            total_ms=result.total_ms,
        )
        return result


def create_pipeline(config: "Config", debug: bool = False) -> Pipeline:
    """Build the Tesseract + CC-CEDICT pipeline described by a config."""
    from .backends.dictionary.cedict import CedictDictionary
    from .backends.ocr.preprocess import PreprocessOptions
    from .backends.ocr.tesseract import TesseractOCRBackend

    options = PreprocessOptions(
        upscale=config.upscale,
        invert=config.invert,
        debug_dir=Path(config.debug_dir) if debug else None,
    )
    ocr = TesseractOCRBackend(
        language=config.language,
        preprocess_options=options,
        page_segmentation_mode=config.page_segmentation_mode,
        tesseract_cmd=config.tesseract_cmd or None,
    )
    return Pipeline(ocr, CedictDictionary())
