"""Word segmentation of recognized lines.

Chinese has no spaces between words, so a line of recognized glyphs is
split into words with jieba. Each token is mapped back onto the glyphs it
covers, giving every word a box and a confidence.
"""

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field

import jieba

from . import log
from .backends.base import BoundingBox, DictionaryEntry, OCRLine, RecognizedCharacter

logger = log.get_logger()

# (word, start, end) tuples over the input string
Tokenizer = Callable[[str], Iterable[tuple[str, int, int]]]


def remove_whitespace(text: str) -> str:
    """Drop every whitespace character, including ideographic spaces."""
    return "".join(text.split())


def jieba_tokenize(text: str) -> Iterable[tuple[str, int, int]]:
    return jieba.tokenize(text)


@dataclass
class RecognizedWord:
    """A segmented word with the merged geometry of its glyphs.

    The box is the union of the glyph boxes and the confidence is the
    lowest glyph confidence: one doubtful glyph makes the whole word doubtful.
    """

    text: str
    bbox: BoundingBox
    confidence: float
    entries: list[DictionaryEntry] = field(default_factory=list)

    @classmethod
    def from_characters(cls, characters: list[RecognizedCharacter]) -> "RecognizedWord":
        if not characters:
            raise ValueError("a word needs at least one character")
        bbox = characters[0].bbox
        for char in characters[1:]:
            bbox = bbox.union(char.bbox)
        return cls(
            text="".join(c.text for c in characters),
            bbox=bbox,
            confidence=min(c.confidence for c in characters),
        )

    def scaled(self, factor: float) -> "RecognizedWord":
        return RecognizedWord(self.text, self.bbox.scaled(factor), self.confidence, self.entries)


class Segmenter:
    """Splits OCR lines into words."""

    def __init__(self, tokenizer: Tokenizer | None = None):
        self._tokenizer = tokenizer or jieba_tokenize

    def initialize(self) -> None:
        """Load jieba's dictionary up front instead of on the first line."""
        if self._tokenizer is jieba_tokenize:
            jieba.initialize()

    def segment(self, line: OCRLine) -> list[RecognizedWord]:
        """Segment one line.

        Whitespace glyphs are dropped first, so concatenating the returned
        words always gives the line's text without whitespace.
        """
        characters = [c for c in line.characters if remove_whitespace(c.text)]
        if not characters:
            return []

        # Glyph text may hold more than one code point; map offsets back to glyphs
        text = ""
        owner: list[int] = []
        for index, char in enumerate(characters):
            piece = remove_whitespace(char.text)
            text += piece
            owner.extend([index] * len(piece))

        words: list[RecognizedWord] = []
        covered = 0
        for token, start, end in self._tokenizer(text):
            if start >= end:
                continue
            if start != covered:
                logger.warning("tokenizer skipped text", start=start, covered=covered, text=text)
            first, last = owner[start], owner[end - 1]
            word = RecognizedWord.from_characters(characters[first:last + 1])
            # A glyph split across tokens contributes its box to both
            word.text = token
            words.append(word)
            covered = end

        return words

    def segment_lines(self, lines: Iterable[OCRLine]) -> list[list[RecognizedWord]]:
        """Segment several lines, dropping lines that end up empty."""
        result = []
        for line in lines:
            words = self.segment(line)
            if words:
                result.append(words)
        return result
