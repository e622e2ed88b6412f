"""PySide6 GUI for hanzilens.

- Lens overlay window
- Background OCR worker
- Global hotkeys
"""

from .app import run

__all__ = ["run"]
