"""Dictionary backend implementations."""

from .cedict import CedictDictionary, numbered_to_marks

__all__ = [
    "CedictDictionary",
    "numbered_to_marks",
]
