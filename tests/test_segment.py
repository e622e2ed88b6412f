"""Tests for word segmentation."""

import pytest

from hanzilens.backends.base import BoundingBox, OCRLine, RecognizedCharacter
from hanzilens.segment import RecognizedWord, Segmenter, remove_whitespace


def _char(text: str, x: float, confidence: float = 95) -> RecognizedCharacter:
    return RecognizedCharacter(text, BoundingBox(x, 0, 10, 12), confidence)


def _fixed_tokenizer(tokens: list[str]):
    """Tokenizer returning the given tokens with offsets, recording its input."""
    seen = []

    def tokenize(text):
        seen.append(text)
        offset = 0
        for token in tokens:
            yield token, offset, offset + len(token)
            offset += len(token)

    tokenize.seen = seen
    return tokenize


class TestRemoveWhitespace:
    def test_removes_ascii_and_ideographic_spaces(self):
        assert remove_whitespace("你 好　世\n界\t") == "你好世界"


class TestRecognizedWord:
    """Tests for RecognizedWord.from_characters."""

    def test_merges_boxes_and_takes_lowest_confidence(self):
        word = RecognizedWord.from_characters([_char("你", 0, 95), _char("好", 12, 70)])

        assert word.text == "你好"
        assert word.bbox == BoundingBox(0, 0, 22, 12)
        assert word.confidence == 70

    def test_requires_characters(self):
        with pytest.raises(ValueError):
            RecognizedWord.from_characters([])

    def test_scaled_divides_box(self):
        word = RecognizedWord("你", BoundingBox(10, 20, 30, 40), 90)

        scaled = word.scaled(2)

        assert scaled.bbox == BoundingBox(5, 10, 15, 20)
        assert scaled.confidence == 90


class TestSegmenter:
    """Tests for Segmenter.segment."""

    def test_tokens_take_geometry_of_their_glyphs(self):
        line = OCRLine([_char("你", 0, 95), _char("好", 10, 80), _char("世", 20, 91), _char("界", 30, 99)])
        segmenter = Segmenter(_fixed_tokenizer(["你好", "世界"]))

        words = segmenter.segment(line)

        assert [w.text for w in words] == ["你好", "世界"]
        assert words[0].bbox == BoundingBox(0, 0, 20, 12)
        assert words[0].confidence == 80
        assert words[1].bbox == BoundingBox(20, 0, 20, 12)
        assert words[1].confidence == 91

    def test_whitespace_glyphs_are_dropped(self):
        tokenizer = _fixed_tokenizer(["你好"])
        line = OCRLine([_char("你", 0), _char(" ", 10, 10), _char("好", 20)])

        words = Segmenter(tokenizer).segment(line)

        assert tokenizer.seen == ["你好"]
        assert words[0].confidence == 95

    def test_token_inside_one_glyph(self):
        """A glyph carrying two code points can be split across tokens."""
        line = OCRLine([_char("AB", 0), _char("中", 10)])

        words = Segmenter(_fixed_tokenizer(["A", "B中"])).segment(line)

        assert [w.text for w in words] == ["A", "B中"]
        assert words[0].bbox == BoundingBox(0, 0, 10, 12)
        assert words[1].bbox == BoundingBox(0, 0, 20, 12)

    def test_empty_line(self):
        assert Segmenter(_fixed_tokenizer([])).segment(OCRLine()) == []

    def test_segment_lines_drops_empty_lines(self):
        lines = [OCRLine([_char(" ", 0)]), OCRLine([_char("中", 0)])]

        result = Segmenter(_fixed_tokenizer(["中"])).segment_lines(lines)

        assert len(result) == 1
        assert result[0][0].text == "中"

    def test_jieba_tokens_cover_the_whole_line(self):
        text = "我喜欢学习中文"
        line = OCRLine([_char(c, i * 10) for i, c in enumerate(text)])

        words = Segmenter().segment(line)

        assert "".join(w.text for w in words) == text
        assert all(w.bbox.height == 12 for w in words)
        assert words[0].bbox.x == 0
        assert words[-1].bbox.right == 70
