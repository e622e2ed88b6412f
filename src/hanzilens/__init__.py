"""hanzilens - OCR lens for reading Chinese text anywhere on screen.

A transparent overlay window captures the screen area beneath it, runs
Tesseract OCR over it, segments the recognized Chinese text with jieba and
looks every word up in CC-CEDICT. Hovering a word shows its translation.
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
