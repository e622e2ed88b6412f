"""Tests for the config module."""

from unittest.mock import patch

from hanzilens.backends.base import Language
from hanzilens.capture.region import CaptureRegion
from hanzilens.config import DEFAULT_CONFIG, DEFAULT_REGION, Config


class TestConfigLoad:
    """Tests for Config.load."""

    def test_quoted_language_is_parsed(self, tmp_path):
        """language="ChiSim" in [other] selects Simplified Chinese."""
        path = tmp_path / "config.ini"
        path.write_text('[other]\nlanguage="ChiSim"\n', encoding="utf-8")

        config = Config.load(path)

        assert config.language == Language.CHI_SIM

    def test_unquoted_language_is_parsed(self, tmp_path):
        path = tmp_path / "config.ini"
        path.write_text("[other]\nlanguage=ChiTra\n", encoding="utf-8")

        assert Config.load(path).language == Language.CHI_TRA

    def test_unknown_language_falls_back_to_traditional(self, tmp_path):
        """An unrecognized language value should not abort loading."""
        path = tmp_path / "config.ini"
        path.write_text('[other]\nlanguage="Klingon"\n', encoding="utf-8")

        assert Config.load(path).language == Language.CHI_TRA

    def test_missing_sections_use_defaults(self, tmp_path):
        path = tmp_path / "config.ini"
        path.write_text('[other]\nlanguage="ChiTra"\n', encoding="utf-8")

        config = Config.load(path)

        assert config.region == DEFAULT_REGION
        assert config.low_confidence_threshold == 90
        assert config.upscale == 5
        assert config.invert is True
        assert config.page_segmentation_mode == 6
        assert config.translation_font_size == 24

    def test_window_geometry_is_read(self, tmp_path):
        path = tmp_path / "config.ini"
        path.write_text("[window]\nx=10\ny=20\nwidth=640\nheight=120\n", encoding="utf-8")

        assert Config.load(path).region == CaptureRegion(10, 20, 640, 120)

    def test_invalid_geometry_falls_back(self, tmp_path):
        """A zero-sized window in the file restores the default geometry."""
        path = tmp_path / "config.ini"
        path.write_text("[window]\nx=10\ny=20\nwidth=0\nheight=120\n", encoding="utf-8")

        assert Config.load(path).region == DEFAULT_REGION

    def test_malformed_numbers_fall_back(self, tmp_path):
        path = tmp_path / "config.ini"
        path.write_text(
            "[ocr]\nlow_confidence_threshold=high\nupscale=0\ncapture_delay_ms=-5\n",
            encoding="utf-8",
        )

        config = Config.load(path)

        assert config.low_confidence_threshold == 90
        assert config.upscale == 1
        assert config.capture_delay_ms == 0

    def test_inline_comments_are_ignored(self, tmp_path):
        path = tmp_path / "config.ini"
        path.write_text("[ocr]\nupscale=3 ; smaller images\n", encoding="utf-8")

        assert Config.load(path).upscale == 3

    def test_missing_explicit_path_returns_defaults(self, tmp_path):
        """An explicit path that does not exist is not created."""
        path = tmp_path / "nope.ini"

        config = Config.load(path)

        assert config.language == Language.CHI_TRA
        assert not path.exists()

    def test_default_config_created_when_none_found(self, tmp_path, monkeypatch):
        """Without any config.ini, the commented default is written to the user dir."""
        monkeypatch.chdir(tmp_path)
        user_dir = tmp_path / "home" / ".hanzilens"

        with patch("hanzilens.config.USER_CONFIG_DIR", user_dir):
            config = Config.load()

        assert config.path == user_dir / "config.ini"
        assert config.path.read_text(encoding="utf-8") == DEFAULT_CONFIG

    def test_default_config_round_trips(self, tmp_path):
        """The shipped default file parses back to the constructor defaults."""
        path = tmp_path / "config.ini"
        path.write_text(DEFAULT_CONFIG, encoding="utf-8")

        config = Config.load(path)
        defaults = Config()

        assert config.language == defaults.language
        assert config.region == defaults.region
        assert config.tesseract_cmd == ""
        assert config.font_family == defaults.font_family
        assert config.border_color == defaults.border_color
        assert config.hotkey_refresh == defaults.hotkey_refresh


class TestConfigSave:
    """Tests for Config.save."""

    def test_geometry_and_language_persist(self, tmp_path):
        path = tmp_path / "config.ini"
        path.write_text(DEFAULT_CONFIG, encoding="utf-8")

        config = Config.load(path)
        config.region = CaptureRegion(300, 40, 800, 200)
        config.language = Language.CHI_SIM
        config.save()

        reloaded = Config.load(path)
        assert reloaded.region == CaptureRegion(300, 40, 800, 200)
        assert reloaded.language == Language.CHI_SIM

    def test_language_is_written_quoted(self, tmp_path):
        path = tmp_path / "config.ini"
        config = Config(language=Language.CHI_SIM, path=path)

        config.save()

        assert 'language = "ChiSim"' in path.read_text(encoding="utf-8")

    def test_unknown_keys_are_preserved(self, tmp_path):
        path = tmp_path / "config.ini"
        path.write_text("[other]\nlanguage=ChiTra\nnote=keep me\n", encoding="utf-8")

        config = Config.load(path)
        config.save()

        text = path.read_text(encoding="utf-8")
        assert "note = keep me" in text

    def test_save_without_path_is_noop(self):
        Config(path=None).save()
