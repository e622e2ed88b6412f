"""Abstract base classes and shared data types for OCR and dictionary backends."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum

import numpy as np
from numpy.typing import NDArray

# Default for words drawn in red (0-100 scale, same as Tesseract)
DEFAULT_LOW_CONFIDENCE_THRESHOLD = 90.0


class OCREngineError(RuntimeError):
    """The OCR engine or its language data is unavailable."""


class DictionaryError(RuntimeError):
    """The dictionary data could not be loaded."""


class Language(Enum):
    """Chinese script variants understood by the OCR engine."""

    CHI_TRA = "ChiTra"
    CHI_SIM = "ChiSim"

    @property
    def tesseract_code(self) -> str:
        """Tesseract traineddata name."""
        return {
            Language.CHI_TRA: "chi_tra",
            Language.CHI_SIM: "chi_sim",
        }[self]

    @property
    def display_name(self) -> str:
        return {
            Language.CHI_TRA: "Traditional Chinese",
            Language.CHI_SIM: "Simplified Chinese",
        }[self]

    @classmethod
    def from_config(cls, value: str) -> "Language":
        """Parse a config value such as 'ChiTra' or '"ChiSim"'.

        Raises:
            ValueError: If the value names no known variant.
        """
        cleaned = value.strip().strip('"').strip("'")
        for language in cls:
            if language.value.lower() == cleaned.lower():
                return language
        raise ValueError(f"unknown language: {value!r}")

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class BoundingBox:
    """Axis-aligned rectangle in pixels."""

    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    def union(self, other: "BoundingBox") -> "BoundingBox":
        """Smallest box containing both boxes."""
        x = min(self.x, other.x)
        y = min(self.y, other.y)
        return BoundingBox(x, y, max(self.right, other.right) - x, max(self.bottom, other.bottom) - y)

    def scaled(self, factor: float) -> "BoundingBox":
        """Divide every coordinate by factor (e.g. upscaled image -> capture pixels)."""
        if factor == 1:
            return self
        return BoundingBox(self.x / factor, self.y / factor, self.width / factor, self.height / factor)


@dataclass
class RecognizedCharacter:
    """A single glyph returned by the OCR engine.

    Bounding boxes come straight from the engine and are not exact,
    especially for glyphs split out of a multi-character word.
    """

    text: str
    bbox: BoundingBox
    confidence: float  # 0-100


@dataclass
class OCRLine:
    """Characters of one recognized line, in reading order."""

    characters: list[RecognizedCharacter] = field(default_factory=list)

    @property
    def text(self) -> str:
        return "".join(c.text for c in self.characters)


@dataclass
class DictionaryEntry:
    """One CC-CEDICT entry with tone-marked pinyin."""

    traditional: str
    simplified: str
    pinyin: str
    definitions: list[str] = field(default_factory=list)

    def headword(self, language: Language) -> str:
        return self.simplified if language == Language.CHI_SIM else self.traditional

    def format(self, language: Language = Language.CHI_TRA) -> str:
        """Render as shown in the translation panel.

        Example: '你好(nǐ hǎo): \\thello\\n          hi\\n'
        """
        definitions = "\n          ".join(self.definitions)
        return f"{self.headword(language)}({self.pinyin}): \t{definitions}\n"


@dataclass(frozen=True)
class OCRBackendInfo:
    """Metadata about an OCR backend."""

    id: str
    name: str
    supported_languages: list[Language]
    license: str
    description: str = ""


class OCRBackend(ABC):
    """Abstract base class for OCR backends."""

    def __init__(self, language: Language = Language.CHI_TRA):
        self._language = language

    @property
    def language(self) -> Language:
        return self._language

    @language.setter
    def language(self, value: Language) -> None:
        self._language = value

    @abstractmethod
    def load(self) -> None:
        """Verify the engine and its language data are usable.

        Raises:
            OCREngineError: If the engine cannot be used.
        """

    @abstractmethod
    def recognize(self, image: NDArray[np.uint8]) -> list[OCRLine]:
        """Recognize lines of characters.

        Args:
            image: Numpy array (H, W, 4) in BGRA format.

        Returns:
            Lines with per-character boxes in image pixels and 0-100 confidences.
        """

    @abstractmethod
    def is_loaded(self) -> bool:
        """Check if load() has succeeded."""

    @classmethod
    @abstractmethod
    def get_info(cls) -> OCRBackendInfo:
        """Get metadata about this backend."""

    def extract_text(self, image: NDArray[np.uint8]) -> str:
        """Recognized text, one line per OCR line, without whitespace."""
        return "\n".join(line.text for line in self.recognize(image) if line.characters)


class DictionaryBackend(ABC):
    """Abstract base class for word lookup backends."""

    @abstractmethod
    def load(self) -> None:
        """Load dictionary data.

        Raises:
            DictionaryError: If the data cannot be loaded.
        """

    @abstractmethod
    def lookup(self, word: str) -> list[DictionaryEntry]:
        """Exact headword lookup (traditional or simplified)."""

    @abstractmethod
    def is_loaded(self) -> bool:
        """Check if load() has succeeded."""

    def lookup_with_fallback(self, word: str) -> list[DictionaryEntry]:
        """Lookup used for display; backends may add fallbacks for misses."""
        return self.lookup(word)
