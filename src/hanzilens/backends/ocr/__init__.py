"""OCR backend implementations."""

from .preprocess import PreprocessOptions, preprocess
from .tesseract import TesseractOCRBackend

__all__ = [
    "PreprocessOptions",
    "TesseractOCRBackend",
    "preprocess",
]
