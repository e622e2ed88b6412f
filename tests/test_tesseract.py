"""Tests for the Tesseract OCR backend."""

from unittest.mock import MagicMock, patch

import numpy as np
import pytesseract
import pytest

from hanzilens.backends.base import BoundingBox, Language, OCREngineError
from hanzilens.backends.ocr.preprocess import PreprocessOptions
from hanzilens.backends.ocr.tesseract import TesseractOCRBackend


def _image_to_data_rows() -> dict:
    """Rows as returned by image_to_data(output_type=DICT), in 5x upscaled pixels.

    Line 1: 你 (95), 好 (80), 世界 as one two-glyph word (91).
    Line 2: 嗎 (60).
    Rows with conf -1 are block/paragraph/line rows.
    """
    return {
        "text": ["", "你", "好", "世界", "", "嗎", " "],
        "conf": [-1, 95, 80, "91", -1, 60.0, 50],
        "block_num": [1, 1, 1, 1, 1, 1, 1],
        "par_num": [1, 1, 1, 1, 1, 1, 1],
        "line_num": [1, 1, 1, 1, 2, 2, 2],
        "left": [0, 10, 60, 110, 0, 10, 70],
        "top": [0, 5, 5, 5, 0, 80, 80],
        "width": [0, 50, 50, 100, 0, 50, 50],
        "height": [0, 50, 50, 50, 0, 50, 50],
    }


def _mock_pytesseract(languages=("chi_tra", "chi_sim", "eng")) -> MagicMock:
    mock = MagicMock()
    mock.get_tesseract_version.return_value = "5.3.0"
    mock.get_languages.return_value = list(languages)
    mock.image_to_data.return_value = _image_to_data_rows()
    mock.TesseractNotFoundError = pytesseract.TesseractNotFoundError
    return mock


def _frame() -> np.ndarray:
    return np.zeros((20, 60, 4), dtype=np.uint8)


class TestTesseractLoad:
    """Tests for TesseractOCRBackend.load."""

    def test_load_succeeds_with_language_data(self):
        backend = TesseractOCRBackend(Language.CHI_TRA)

        with patch("hanzilens.backends.ocr.tesseract.pytesseract", _mock_pytesseract()):
            backend.load()

        assert backend.is_loaded()

    def test_missing_binary_raises(self):
        """TesseractNotFoundError surfaces as OCREngineError."""
        mock = _mock_pytesseract()
        mock.get_tesseract_version.side_effect = pytesseract.TesseractNotFoundError()
        backend = TesseractOCRBackend(Language.CHI_TRA)

        with patch("hanzilens.backends.ocr.tesseract.pytesseract", mock):
            with pytest.raises(OCREngineError, match="not installed"):
                backend.load()

        assert not backend.is_loaded()

    def test_missing_language_data_raises(self):
        backend = TesseractOCRBackend(Language.CHI_SIM)

        with patch("hanzilens.backends.ocr.tesseract.pytesseract", _mock_pytesseract(["eng", "chi_tra"])):
            with pytest.raises(OCREngineError, match="chi_sim"):
                backend.load()

    def test_changing_language_requires_reload(self):
        backend = TesseractOCRBackend(Language.CHI_TRA)
        with patch("hanzilens.backends.ocr.tesseract.pytesseract", _mock_pytesseract()):
            backend.load()

        backend.language = Language.CHI_SIM

        assert backend.language == Language.CHI_SIM
        assert not backend.is_loaded()

    def test_same_language_keeps_loaded_state(self):
        backend = TesseractOCRBackend(Language.CHI_TRA)
        with patch("hanzilens.backends.ocr.tesseract.pytesseract", _mock_pytesseract()):
            backend.load()

        backend.language = Language.CHI_TRA

        assert backend.is_loaded()


class TestTesseractRecognize:
    """Tests for TesseractOCRBackend.recognize."""

    @pytest.fixture
    def recognized(self):
        backend = TesseractOCRBackend(Language.CHI_TRA, PreprocessOptions(upscale=5))
        mock = _mock_pytesseract()
        with patch("hanzilens.backends.ocr.tesseract.pytesseract", mock):
            lines = backend.recognize(_frame())
        return lines, mock

    def test_rows_are_grouped_into_lines(self, recognized):
        lines, _ = recognized

        assert [line.text for line in lines] == ["你好世界", "嗎"]

    def test_multi_glyph_words_are_split(self, recognized):
        """世界 becomes two characters sharing the word box equally."""
        lines, _ = recognized
        world = lines[0].characters[2:]

        assert [c.text for c in world] == ["世", "界"]
        assert world[0].bbox == BoundingBox(22, 1, 10, 10)
        assert world[1].bbox == BoundingBox(32, 1, 10, 10)

    def test_boxes_are_mapped_back_from_upscaled_pixels(self, recognized):
        lines, _ = recognized

        assert lines[0].characters[0].bbox == BoundingBox(2, 1, 10, 10)
        assert lines[1].characters[0].bbox == BoundingBox(2, 16, 10, 10)

    def test_low_confidence_glyphs_are_kept(self, recognized):
        lines, _ = recognized

        assert [c.confidence for c in lines[0].characters] == [95, 80, 91, 91]
        assert lines[1].characters[0].confidence == 60

    def test_engine_is_called_with_language_and_psm(self, recognized):
        _, mock = recognized

        kwargs = mock.image_to_data.call_args.kwargs
        assert kwargs["lang"] == "chi_tra"
        assert kwargs["config"] == "--psm 6"

    def test_extract_text_joins_lines(self):
        backend = TesseractOCRBackend(Language.CHI_TRA)

        with patch("hanzilens.backends.ocr.tesseract.pytesseract", _mock_pytesseract()):
            text = backend.extract_text(_frame())

        assert text == "你好世界\n嗎"
