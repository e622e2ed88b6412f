"""Tesseract OCR backend for Traditional and Simplified Chinese."""

import numpy as np
import pytesseract
from numpy.typing import NDArray
from PIL import Image

from ... import log
from ..base import (
    BoundingBox,
    Language,
    OCRBackend,
    OCRBackendInfo,
    OCREngineError,
    OCRLine,
    RecognizedCharacter,
)
from .preprocess import PreprocessOptions, preprocess

logger = log.get_logger()

# Assume a single uniform block of text
DEFAULT_PAGE_SEGMENTATION_MODE = 6

SUPPORTED_LANGUAGES = [Language.CHI_TRA, Language.CHI_SIM]


class TesseractOCRBackend(OCRBackend):
    """Recognizes Chinese glyphs using Tesseract.

    Every glyph is returned with its box and confidence, including glyphs
    Tesseract is unsure about. Low confidence is shown to the user rather
    than filtered here.
    """

    def __init__(
        self,
        language: Language = Language.CHI_TRA,
        preprocess_options: PreprocessOptions | None = None,
        page_segmentation_mode: int = DEFAULT_PAGE_SEGMENTATION_MODE,
        tesseract_cmd: str | None = None,
    ):
        super().__init__(language)
        self._options = preprocess_options or PreprocessOptions()
        self._psm = page_segmentation_mode
        self._loaded = False
        if tesseract_cmd:
            pytesseract.pytesseract.tesseract_cmd = tesseract_cmd

    @classmethod
    def get_info(cls) -> OCRBackendInfo:
        return OCRBackendInfo(
            id="tesseract",
            name="Tesseract",
            supported_languages=SUPPORTED_LANGUAGES,
            license="Apache-2.0",
            description="Tesseract with chi_tra / chi_sim traineddata",
        )

    @property
    def preprocess_options(self) -> PreprocessOptions:
        return self._options

    @OCRBackend.language.setter
    def language(self, value: Language) -> None:
        if value != self._language:
            self._language = value
            self._loaded = False

    def load(self) -> None:
        """Check that Tesseract and the language data are installed.

        Raises:
            OCREngineError: If Tesseract or the traineddata is missing.
        """
        if self._loaded:
            return

        code = self._language.tesseract_code
        logger.info("loading tesseract", language=code)

        try:
            version = pytesseract.get_tesseract_version()
            available = pytesseract.get_languages(config="")
        except (pytesseract.TesseractNotFoundError, OSError) as e:
            raise OCREngineError(
                "Tesseract OCR is not installed or not in PATH. "
                "Please install Tesseract: https://github.com/tesseract-ocr/tesseract"
            ) from e

        if code not in available:
            raise OCREngineError(
                f"Tesseract language data '{code}' is not installed "
                f"(available: {', '.join(sorted(available)) or 'none'})"
            )

        logger.info("tesseract ready", version=str(version), language=code)
        self._loaded = True

    def is_loaded(self) -> bool:
        return self._loaded

    def recognize(self, image: NDArray[np.uint8]) -> list[OCRLine]:
        """Recognize lines of characters.

        Args:
            image: Numpy array (H, W, 4) in BGRA format.

        Returns:
            Lines with per-character boxes in the input image's pixels.
        """
        if not self._loaded:
            self.load()

        prepared = preprocess(image, self._options)
        data = pytesseract.image_to_data(
            Image.fromarray(prepared),
            lang=self._language.tesseract_code,
            config=f"--psm {self._psm}",
            output_type=pytesseract.Output.DICT,
        )
        return self._rows_to_lines(data, max(1, self._options.upscale))

    def _rows_to_lines(self, data: dict, scale: float) -> list[OCRLine]:
        """Group image_to_data rows into lines of single-glyph characters.

        Args:
            data: pytesseract DICT output.
            scale: Factor the image was upscaled by before OCR.
        """
        lines: list[OCRLine] = []
        current: OCRLine | None = None
        current_key = None

        for i in range(len(data["text"])):
            text = "".join(str(data["text"][i]).split())
            conf = float(data["conf"][i])

            # conf == -1 marks block/paragraph/line rows, not words
            if not text or conf < 0:
                continue

            key = (data["block_num"][i], data["par_num"][i], data["line_num"][i])
            if key != current_key:
                current = OCRLine()
                lines.append(current)
                current_key = key

            box = BoundingBox(
                float(data["left"][i]),
                float(data["top"][i]),
                float(data["width"][i]),
                float(data["height"][i]),
            ).scaled(scale)
            current.characters.extend(self._split_word(text, box, conf))

        if log.is_debug_enabled():
            for line in lines:
                logger.debug(
                    "ocr line",
                    text=line.text,
                    conf=" ".join(f"{c.text}:{c.confidence:.0f}" for c in line.characters),
                )
        return lines

    @staticmethod
    def _split_word(text: str, box: BoundingBox, confidence: float) -> list[RecognizedCharacter]:
        """Split a multi-glyph word into characters of equal width."""
        if len(text) == 1:
            return [RecognizedCharacter(text, box, confidence)]

        step = box.width / len(text)
        return [
            RecognizedCharacter(char, BoundingBox(box.x + step * n, box.y, step, box.height), confidence)
            for n, char in enumerate(text)
        ]
