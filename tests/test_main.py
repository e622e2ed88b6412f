"""Tests for the command-line entry point."""

import sys
from unittest.mock import MagicMock, patch

import pytesseract
from PIL import Image

from hanzilens.__main__ import main, run_headless
from hanzilens.backends.base import BoundingBox, DictionaryEntry, Language, OCREngineError
from hanzilens.config import Config
from hanzilens.pipeline import RecognitionResult
from hanzilens.segment import RecognizedWord


def _result() -> RecognitionResult:
    hello = RecognizedWord("你好", BoundingBox(0, 0, 20, 10), 95, [DictionaryEntry("你好", "你好", "nǐ hǎo", ["hello", "hi"])])
    unknown = RecognizedWord("嗎", BoundingBox(20, 0, 10, 10), 60)
    return RecognitionResult(lines=[[hello, unknown]])


def _image(tmp_path):
    path = tmp_path / "page.png"
    Image.new("RGB", (10, 10), (255, 255, 255)).save(path)
    return path


class TestRunHeadless:
    """Tests for run_headless."""

    def test_prints_text_and_tokens(self, tmp_path, capsys):
        pipeline = MagicMock()
        pipeline.process.return_value = _result()

        with patch("hanzilens.pipeline.create_pipeline", return_value=pipeline):
            code = run_headless(Config(), str(_image(tmp_path)))

        out = capsys.readouterr().out.splitlines()
        assert code == 0
        assert out == [
            "Final OCR - 你好嗎",
            "2 tokens",
            "你好 - ['hello', 'hi']",
            "嗎 - []",
        ]

    def test_engine_error_exits_nonzero(self, tmp_path, capsys):
        pipeline = MagicMock()
        pipeline.load.side_effect = OCREngineError("Tesseract OCR is not installed")

        with patch("hanzilens.pipeline.create_pipeline", return_value=pipeline):
            code = run_headless(Config(), str(_image(tmp_path)))

        assert code == 1
        assert "not installed" in capsys.readouterr().err

    def test_ocr_failure_exits_nonzero(self, tmp_path, capsys):
        """A Tesseract crash on the image is reported, not raised."""
        pipeline = MagicMock()
        pipeline.process.side_effect = pytesseract.TesseractError(1, "boom")

        with patch("hanzilens.pipeline.create_pipeline", return_value=pipeline):
            code = run_headless(Config(), str(_image(tmp_path)))

        captured = capsys.readouterr()
        assert code == 1
        assert "OCR failed" in captured.err
        assert "Final OCR" not in captured.out

    def test_unreadable_image_exits_nonzero(self, tmp_path, capsys):
        with patch("hanzilens.pipeline.create_pipeline", return_value=MagicMock()):
            code = run_headless(Config(), str(tmp_path / "missing.png"))

        assert code == 1
        assert "cannot read image" in capsys.readouterr().err


class TestMain:
    def test_language_flag_overrides_config(self, tmp_path):
        config_path = tmp_path / "config.ini"
        config_path.write_text('[other]\nlanguage="ChiTra"\n', encoding="utf-8")

        with patch("hanzilens.__main__.run_headless", return_value=0) as headless:
            code = main(["--config", str(config_path), "--language", "ChiSim", "--image", "page.png"])

        config = headless.call_args.args[0]
        assert code == 0
        assert config.language == Language.CHI_SIM

    def test_headless_logs_go_to_stderr(self):
        """stdout carries only the recognized words in --image mode."""
        with (
            patch("hanzilens.__main__.log.configure") as configure,
            patch("hanzilens.__main__.run_headless", return_value=0),
        ):
            main(["--image", "page.png", "--config", "missing.ini"])

        assert configure.call_args.kwargs["stream"] is sys.stderr
