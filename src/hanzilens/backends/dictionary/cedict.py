"""CC-CEDICT dictionary backend.

Entries come from the CC-CEDICT data bundled with pycccedict. Pinyin in
CC-CEDICT is written with tone numbers ('zhong1 guo2'); it is converted to
tone marks ('zhōng guó') with pypinyin.
"""

import re

from pycccedict.cccedict import CcCedict
from pypinyin import Style, lazy_pinyin
from pypinyin.contrib.tone_convert import to_tone

from ... import log
from ..base import DictionaryBackend, DictionaryEntry, DictionaryError

logger = log.get_logger()

_SYLLABLE_WITH_TONE = re.compile(r"^([A-Za-zü:]+)([1-5])$")

# Unified ideographs with extensions A-F and the compatibility blocks
CJK_RANGES = [
    ("\u3400", "\u4dbf"),
    ("\u4e00", "\u9fff"),
    ("\uf900", "\ufaff"),
    ("\U00020000", "\U0002ebef"),
    ("\U0002f800", "\U0002fa1f"),
]


def is_cjk(char: str) -> bool:
    return any(low <= char <= high for low, high in CJK_RANGES)


def numbered_to_marks(pinyin: str) -> str:
    """Convert CC-CEDICT numbered pinyin to tone marks.

    'ni3 hao3' -> 'nǐ hǎo', 'lu:4' -> 'lǜ'. Tone 5 (neutral) carries no
    mark. Syllables without a tone number (letters, punctuation) are kept.
    """
    converted = []
    for syllable in pinyin.split():
        match = _SYLLABLE_WITH_TONE.match(syllable)
        if not match:
            converted.append(syllable)
            continue
        letters, tone = match.groups()
        letters = letters.replace("u:", "ü")
        if tone == "5":
            marked = letters.lower()
        else:
            marked = to_tone(f"{letters.lower()}{tone}")
        if syllable[0].isupper():
            marked = marked[0].upper() + marked[1:]
        converted.append(marked)
    return " ".join(converted)


class CedictDictionary(DictionaryBackend):
    """Looks Chinese words up in CC-CEDICT by traditional or simplified form."""

    def __init__(self, source: CcCedict | None = None):
        """Initialize (lazy loading).

        Args:
            source: Preloaded pycccedict instance, created on load() when omitted.
        """
        self._source = source
        self._index: dict[str, list[DictionaryEntry]] | None = None

    def load(self) -> None:
        """Index every entry under both of its headwords.

        Raises:
            DictionaryError: If the CC-CEDICT data cannot be read.
        """
        if self._index is not None:
            return

        logger.info("loading cc-cedict")
        try:
            source = self._source or CcCedict()
            raw_entries = source.get_entries()
        except (OSError, ValueError) as e:
            raise DictionaryError(f"failed to load CC-CEDICT data: {e}") from e

        index: dict[str, list[DictionaryEntry]] = {}
        for raw in raw_entries:
            definitions = raw.get("definitions") or []
            if isinstance(definitions, str):
                definitions = [definitions]
            entry = DictionaryEntry(
                traditional=raw["traditional"],
                simplified=raw["simplified"],
                pinyin=numbered_to_marks(raw.get("pinyin", "")),
                definitions=list(definitions),
            )
            index.setdefault(entry.traditional, []).append(entry)
            if entry.simplified != entry.traditional:
                index.setdefault(entry.simplified, []).append(entry)

        self._index = index
        logger.info("cc-cedict ready", headwords=len(index))

    def is_loaded(self) -> bool:
        return self._index is not None

    def lookup(self, word: str) -> list[DictionaryEntry]:
        if self._index is None:
            self.load()
        return list(self._index.get(word, []))

    def lookup_with_fallback(self, word: str) -> list[DictionaryEntry]:
        """Look a word up, falling back to its characters on a miss.

        A multi-character miss is looked up character by character. A
        character that is still missing gets an entry with pypinyin-derived
        pinyin and no definitions, so it can still be shown.
        """
        entries = self.lookup(word)
        if entries:
            return entries

        chars = [word] if len(word) == 1 else list(word)
        fallback: list[DictionaryEntry] = []
        for char in chars:
            char_entries = self.lookup(char) if len(word) > 1 else []
            if char_entries:
                fallback.extend(char_entries)
            elif is_cjk(char):
                pinyin = " ".join(lazy_pinyin(char, style=Style.TONE))
                fallback.append(DictionaryEntry(traditional=char, simplified=char, pinyin=pinyin))

        logger.debug("dictionary miss", word=word, fallback=len(fallback))
        return fallback
