"""Configuration management for hanzilens (config.ini)."""

import configparser
from pathlib import Path

from . import log
from .backends.base import DEFAULT_LOW_CONFIDENCE_THRESHOLD, Language
from .capture.region import CaptureRegion

logger = log.get_logger()

CONFIG_FILENAME = "config.ini"
USER_CONFIG_DIR = Path.home() / ".hanzilens"

DEFAULT_REGION = CaptureRegion(100, 100, 400, 300)

DEFAULT_CONFIG = """; hanzilens configuration

[other]
; OCR language variant: "ChiTra" (Traditional) or "ChiSim" (Simplified)
language="ChiTra"
; Copy recognized text to the clipboard after every pass
copy_to_clipboard=true

[window]
; Last lens position and size, updated on exit
x=100
y=100
width=400
height=300

[ocr]
; Words below this confidence (0-100) are drawn in red
low_confidence_threshold=90
; Upscale factor applied before OCR
upscale=5
; Negate colours before OCR (for light text on dark backgrounds)
invert=true
; Tesseract page segmentation mode (6 = uniform block of text)
page_segmentation_mode=6
; Wait this long after the last move/resize before capturing
capture_delay_ms=400
; Explicit path to the tesseract binary (empty = search PATH)
tesseract_cmd=

[display]
font_family="Noto Sans CJK TC"
translation_font_size=24
border_color="#3080FF"

[hotkeys]
enabled=true
refresh="<ctrl>+<alt>+r"
toggle="<ctrl>+<alt>+h"
copy="<ctrl>+<alt>+c"
"""


def _unquote(value: str) -> str:
    value = value.strip()
    if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
        return value[1:-1]
    return value


def _quote(value: str) -> str:
    return f'"{value}"'


class Config:
    """Application configuration."""

    def __init__(
        self,
        language: Language = Language.CHI_TRA,
        copy_to_clipboard: bool = True,
        region: CaptureRegion = DEFAULT_REGION,
        low_confidence_threshold: float = DEFAULT_LOW_CONFIDENCE_THRESHOLD,
        upscale: int = 5,
        invert: bool = True,
        page_segmentation_mode: int = 6,
        capture_delay_ms: int = 400,
        tesseract_cmd: str = "",
        font_family: str = "Noto Sans CJK TC",
        translation_font_size: int = 24,
        border_color: str = "#3080FF",
        hotkeys_enabled: bool = True,
        hotkey_refresh: str = "<ctrl>+<alt>+r",
        hotkey_toggle: str = "<ctrl>+<alt>+h",
        hotkey_copy: str = "<ctrl>+<alt>+c",
        debug_dir: str = "debug",
        path: Path | None = None,
    ):
        self.language = language
        self.copy_to_clipboard = copy_to_clipboard
        self.region = region
        self.low_confidence_threshold = low_confidence_threshold
        self.upscale = upscale
        self.invert = invert
        self.page_segmentation_mode = page_segmentation_mode
        self.capture_delay_ms = capture_delay_ms
        self.tesseract_cmd = tesseract_cmd
        self.font_family = font_family
        self.translation_font_size = translation_font_size
        self.border_color = border_color
        self.hotkeys_enabled = hotkeys_enabled
        self.hotkey_refresh = hotkey_refresh
        self.hotkey_toggle = hotkey_toggle
        self.hotkey_copy = hotkey_copy
        self.debug_dir = debug_dir
        self.path = path
        self._parser = configparser.ConfigParser(interpolation=None, inline_comment_prefixes=(";",))

    @classmethod
    def load(cls, config_path: str | Path | None = None) -> "Config":
        """Load configuration from config.ini.

        Args:
            config_path: Path to config file. If None, looks for config.ini
                        in the working directory, then in ~/.hanzilens/.

        Returns:
            Config instance with loaded values. Missing or malformed values
            fall back to defaults.
        """
        if config_path is None:
            for candidate in (Path(CONFIG_FILENAME), USER_CONFIG_DIR / CONFIG_FILENAME):
                if candidate.exists():
                    config_path = candidate
                    break

        if config_path is None:
            config = cls(path=USER_CONFIG_DIR / CONFIG_FILENAME)
            config._create_default_config()
            return config

        path = Path(config_path)
        config = cls(path=path)
        if path.exists():
            config._parser.read(path, encoding="utf-8")
            config._apply_parser()
            logger.info("config loaded", path=str(path))
        else:
            logger.warning("config file not found, using defaults", path=str(path))
        return config

    def _get(self, section: str, key: str, fallback: str) -> str:
        try:
            value = _unquote(self._parser.get(section, key))
        except (configparser.NoSectionError, configparser.NoOptionError):
            return fallback
        return value if value else fallback

    def _getint(self, section: str, key: str, fallback: int) -> int:
        raw = self._get(section, key, str(fallback))
        try:
            return int(raw)
        except ValueError:
            logger.warning("invalid integer in config", section=section, key=key, value=raw)
            return fallback

    def _getfloat(self, section: str, key: str, fallback: float) -> float:
        raw = self._get(section, key, str(fallback))
        try:
            return float(raw)
        except ValueError:
            logger.warning("invalid number in config", section=section, key=key, value=raw)
            return fallback

    def _getbool(self, section: str, key: str, fallback: bool) -> bool:
        raw = self._get(section, key, "true" if fallback else "false").lower()
        if raw in ("1", "true", "yes", "on"):
            return True
        if raw in ("0", "false", "no", "off"):
            return False
        logger.warning("invalid boolean in config", section=section, key=key, value=raw)
        return fallback

    def _apply_parser(self) -> None:
        raw_language = self._get("other", "language", self.language.value)
        try:
            self.language = Language.from_config(raw_language)
        except ValueError:
            logger.warning("unknown language", value=raw_language, fallback=Language.CHI_TRA.value)
            self.language = Language.CHI_TRA
        self.copy_to_clipboard = self._getbool("other", "copy_to_clipboard", self.copy_to_clipboard)

        try:
            self.region = CaptureRegion(
                self._getint("window", "x", DEFAULT_REGION.x),
                self._getint("window", "y", DEFAULT_REGION.y),
                self._getint("window", "width", DEFAULT_REGION.width),
                self._getint("window", "height", DEFAULT_REGION.height),
            )
        except ValueError as e:
            logger.warning("invalid window geometry", err=str(e))
            self.region = DEFAULT_REGION

        self.low_confidence_threshold = self._getfloat("ocr", "low_confidence_threshold", self.low_confidence_threshold)
        self.upscale = max(1, self._getint("ocr", "upscale", self.upscale))
        self.invert = self._getbool("ocr", "invert", self.invert)
        self.page_segmentation_mode = self._getint("ocr", "page_segmentation_mode", self.page_segmentation_mode)
        self.capture_delay_ms = max(0, self._getint("ocr", "capture_delay_ms", self.capture_delay_ms))
        self.tesseract_cmd = self._get("ocr", "tesseract_cmd", self.tesseract_cmd)
        self.debug_dir = self._get("ocr", "debug_dir", self.debug_dir)

        self.font_family = self._get("display", "font_family", self.font_family)
        self.translation_font_size = self._getint("display", "translation_font_size", self.translation_font_size)
        self.border_color = self._get("display", "border_color", self.border_color)

        self.hotkeys_enabled = self._getbool("hotkeys", "enabled", self.hotkeys_enabled)
        self.hotkey_refresh = self._get("hotkeys", "refresh", self.hotkey_refresh)
        self.hotkey_toggle = self._get("hotkeys", "toggle", self.hotkey_toggle)
        self.hotkey_copy = self._get("hotkeys", "copy", self.hotkey_copy)

    def _create_default_config(self) -> None:
        """Write the commented default config, never overwriting an existing file."""
        if self.path is None or self.path.exists():
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(DEFAULT_CONFIG, encoding="utf-8")
        logger.info("created default config", path=str(self.path))

    def _set(self, section: str, key: str, value: str) -> None:
        if not self._parser.has_section(section):
            self._parser.add_section(section)
        self._parser.set(section, key, value)

    def save(self) -> None:
        """Write the current settings (including window geometry) back to disk.

        Keys this class does not know about are preserved.
        """
        if self.path is None:
            return

        self._set("other", "language", _quote(self.language.value))
        self._set("other", "copy_to_clipboard", str(self.copy_to_clipboard).lower())

        self._set("window", "x", str(self.region.x))
        self._set("window", "y", str(self.region.y))
        self._set("window", "width", str(self.region.width))
        self._set("window", "height", str(self.region.height))

        self._set("ocr", "low_confidence_threshold", f"{self.low_confidence_threshold:g}")
        self._set("ocr", "upscale", str(self.upscale))
        self._set("ocr", "invert", str(self.invert).lower())
        self._set("ocr", "page_segmentation_mode", str(self.page_segmentation_mode))
        self._set("ocr", "capture_delay_ms", str(self.capture_delay_ms))
        self._set("ocr", "tesseract_cmd", self.tesseract_cmd)

        self._set("display", "font_family", _quote(self.font_family))
        self._set("display", "translation_font_size", str(self.translation_font_size))
        self._set("display", "border_color", _quote(self.border_color))

        self._set("hotkeys", "enabled", str(self.hotkeys_enabled).lower())
        self._set("hotkeys", "refresh", _quote(self.hotkey_refresh))
        self._set("hotkeys", "toggle", _quote(self.hotkey_toggle))
        self._set("hotkeys", "copy", _quote(self.hotkey_copy))

        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            self._parser.write(f)
        logger.debug("config saved", path=str(self.path))
