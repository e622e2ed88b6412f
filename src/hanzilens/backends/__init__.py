"""Pluggable backends for OCR and dictionary lookup."""

from .base import (
    BoundingBox,
    DictionaryBackend,
    DictionaryEntry,
    DictionaryError,
    Language,
    OCRBackend,
    OCRBackendInfo,
    OCREngineError,
    OCRLine,
    RecognizedCharacter,
)

__all__ = [
    "BoundingBox",
    "DictionaryBackend",
    "DictionaryEntry",
    "DictionaryError",
    "Language",
    "OCRBackend",
    "OCRBackendInfo",
    "OCREngineError",
    "OCRLine",
    "RecognizedCharacter",
]
