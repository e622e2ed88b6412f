"""Frame format conversion utilities.

Captured frames are numpy arrays in BGRA order (what mss returns).
These helpers convert them for consumers that need RGB.
"""

from pathlib import Path

import numpy as np
from numpy.typing import NDArray
from PIL import Image

# Type alias for BGRA frame (height, width, 4 channels)
BGRAFrame = NDArray[np.uint8]


def bgra_to_rgb(frame: BGRAFrame) -> NDArray[np.uint8]:
    """Convert BGRA numpy array to RGB numpy array.

    Args:
        frame: numpy array of shape (H, W, 4) in BGRA format.

    Returns:
        numpy array of shape (H, W, 3) in RGB format.
    """
    # B=0, G=1, R=2, A=3 -> R, G, B
    rgb = frame[:, :, [2, 1, 0]]
    return np.ascontiguousarray(rgb)


def rgb_to_bgra(rgb: NDArray[np.uint8]) -> BGRAFrame:
    """Convert (H, W, 3) RGB to (H, W, 4) BGRA with an opaque alpha channel."""
    h, w = rgb.shape[:2]
    bgra = np.empty((h, w, 4), dtype=np.uint8)
    bgra[:, :, 0] = rgb[:, :, 2]
    bgra[:, :, 1] = rgb[:, :, 1]
    bgra[:, :, 2] = rgb[:, :, 0]
    bgra[:, :, 3] = 255
    return bgra


def load_image(path: str | Path) -> BGRAFrame:
    """Read an image file as a BGRA frame (used for headless runs)."""
    with Image.open(path) as img:
        rgb = np.array(img.convert("RGB"))
    return rgb_to_bgra(rgb)
