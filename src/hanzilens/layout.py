"""Overlay geometry: where recognized words are drawn and how they are coloured.

Qt-free so it can be tested without a display. Text width comes from a
`measure(text, pixel_size)` callable, which the GUI backs with QFontMetricsF.
"""

import string
from collections.abc import Callable
from dataclasses import dataclass

from .backends.base import DEFAULT_LOW_CONFIDENCE_THRESHOLD, BoundingBox
from .segment import RecognizedWord

# Advance width of text drawn at a pixel size
Measure = Callable[[str, float], float]

COLOR_TEXT = "#000000"
COLOR_LOW_CONFIDENCE = "#FF0000"
COLOR_HIGHLIGHT = "#00FF00"
COLOR_PANEL = "#FFFFFF"

MIN_SCALE = 8.0

# Punctuation is excluded from line height, it is often boxed short or tall
PUNCTUATION = set(string.punctuation) | set("。，、；：！？「」『』（）【】《》〈〉…—～·＂＇．")


def is_punctuation(text: str) -> bool:
    return bool(text) and text[0] in PUNCTUATION


def line_scale(words: list[RecognizedWord]) -> float:
    """Font pixel size for a line: mean box height of its non-punctuation words."""
    measured = [w for w in words if not is_punctuation(w.text)] or words
    if not measured:
        return MIN_SCALE
    return max(MIN_SCALE, sum(w.bbox.height for w in measured) / len(measured))


@dataclass
class PresentableWord:
    """A word placed on the overlay."""

    word: RecognizedWord
    x: float
    y: float
    width: float
    highlighted: bool = False

    @property
    def text(self) -> str:
        return self.word.text

    @property
    def confidence(self) -> float:
        return self.word.confidence

    def contains(self, x: float, y: float, scale: float) -> bool:
        """Hit test against the word's drawn area (left/top edges exclusive)."""
        return self.x < x <= self.x + self.width and self.y < y <= self.y + scale

    def set_highlighted(self, highlighted: bool) -> bool:
        """Set hover state; returns True if it changed."""
        changed = self.highlighted != highlighted
        self.highlighted = highlighted
        return changed

    def color(self, low_confidence_threshold: float = DEFAULT_LOW_CONFIDENCE_THRESHOLD) -> str:
        if self.highlighted:
            return COLOR_HIGHLIGHT
        if self.confidence < low_confidence_threshold:
            return COLOR_LOW_CONFIDENCE
        return COLOR_TEXT


@dataclass
class PresentableLine:
    """A line of words drawn on one background panel."""

    words: list[PresentableWord]
    x: float
    y: float
    scale: float

    @classmethod
    def from_words(cls, words: list[RecognizedWord], measure: Measure) -> "PresentableLine":
        """Lay words out left to right from the first word's recognized origin.

        Recognized boxes are too unreliable to place every word on its own,
        so only the first word keeps its position and the rest follow at
        their measured advance.
        """
        if not words:
            raise ValueError("a line needs at least one word")
        scale = line_scale(words)
        origin_x = words[0].bbox.x
        origin_y = words[0].bbox.y

        placed = []
        offset = origin_x
        for word in words:
            width = measure(word.text, scale)
            placed.append(PresentableWord(word, offset, origin_y, width))
            offset += width
        return cls(placed, origin_x, origin_y, scale)

    @property
    def width(self) -> float:
        if not self.words:
            return 0.0
        last = self.words[-1]
        return last.x + last.width - self.x

    @property
    def bounds(self) -> BoundingBox:
        """Background panel rectangle."""
        return BoundingBox(self.x, self.y, self.width, self.scale)

    @property
    def hovered(self) -> PresentableWord | None:
        for word in self.words:
            if word.highlighted:
                return word
        return None

    def handle_cursor(self, x: float, y: float) -> bool:
        """Highlight the word under the cursor; returns True if anything changed."""
        changed = False
        for word in self.words:
            changed = word.set_highlighted(word.contains(x, y, self.scale)) or changed
        return changed

    def clear_highlight(self) -> bool:
        changed = False
        for word in self.words:
            changed = word.set_highlighted(False) or changed
        return changed


def build_lines(lines: list[list[RecognizedWord]], measure: Measure) -> list[PresentableLine]:
    return [PresentableLine.from_words(words, measure) for words in lines if words]


def panel_origin(
    anchor: BoundingBox,
    panel_width: float,
    panel_height: float,
    area_width: float,
    area_height: float,
) -> tuple[float, float]:
    """Top-left for a popup panel below the anchor, kept inside the area.

    The panel flips above the anchor when it does not fit below.
    """
    x = min(anchor.x, area_width - panel_width)
    y = anchor.bottom
    if y + panel_height > area_height and anchor.y - panel_height >= 0:
        y = anchor.y - panel_height
    return max(0.0, x), max(0.0, min(y, area_height - panel_height))
