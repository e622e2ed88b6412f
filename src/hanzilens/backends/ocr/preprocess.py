"""Image clean-up applied before Tesseract.

Screen text is small and often light-on-dark, which Tesseract handles
poorly. The frame is negated, upscaled, reduced to two levels and
sharpened so glyph strokes come out as crisp dark-on-light shapes.
"""

from dataclasses import dataclass
from pathlib import Path

import cv2
import numpy as np
from numpy.typing import NDArray

from ... import log
from ...capture.convert import bgra_to_rgb

logger = log.get_logger()

DEFAULT_UPSCALE = 5
SHARPEN_SIGMA = 1.0
SHARPEN_AMOUNT = 0.5


@dataclass
class PreprocessOptions:
    """Tunable preprocessing parameters."""

    upscale: int = DEFAULT_UPSCALE
    invert: bool = True
    debug_dir: Path | None = None


def _dump(stage_index: int, name: str, image: NDArray[np.uint8], debug_dir: Path | None) -> None:
    if debug_dir is None:
        return
    debug_dir.mkdir(parents=True, exist_ok=True)
    path = debug_dir / f"{stage_index:02d}-{name}.png"
    # cv2 writes BGR; single-channel images are written as-is
    out = image if image.ndim == 2 else cv2.cvtColor(image, cv2.COLOR_RGB2BGR)
    cv2.imwrite(str(path), out)
    logger.debug("preprocess stage saved", stage=name, path=str(path))


def sharpen(gray: NDArray[np.uint8], sigma: float = SHARPEN_SIGMA, amount: float = SHARPEN_AMOUNT) -> NDArray[np.uint8]:
    """Unsharp mask: image + amount * (image - blurred)."""
    blurred = cv2.GaussianBlur(gray, (0, 0), sigma)
    return cv2.addWeighted(gray, 1.0 + amount, blurred, -amount, 0)


def preprocess(frame: NDArray[np.uint8], options: PreprocessOptions | None = None) -> NDArray[np.uint8]:
    """Prepare a captured frame for OCR.

    Args:
        frame: Numpy array (H, W, 4) in BGRA format.
        options: Preprocessing parameters, defaults when omitted.

    Returns:
        Single-channel uint8 image of size (H * upscale, W * upscale).
    """
    options = options or PreprocessOptions()
    debug_dir = options.debug_dir

    rgb = bgra_to_rgb(frame)
    _dump(0, "capture", rgb, debug_dir)

    if options.invert:
        rgb = cv2.bitwise_not(rgb)
        _dump(1, "negate", rgb, debug_dir)

    if options.upscale > 1:
        h, w = rgb.shape[:2]
        rgb = cv2.resize(
            rgb,
            (w * options.upscale, h * options.upscale),
            interpolation=cv2.INTER_NEAREST,
        )
        _dump(2, "resize", rgb, debug_dir)

    gray = cv2.cvtColor(rgb, cv2.COLOR_RGB2GRAY)
    _dump(3, "gray", gray, debug_dir)

    # Two-level quantization
    _, binary = cv2.threshold(gray, 0, 255, cv2.THRESH_BINARY | cv2.THRESH_OTSU)
    _dump(4, "quantize", binary, debug_dir)

    normalized = cv2.normalize(binary, None, 0, 255, cv2.NORM_MINMAX)
    _dump(5, "normalize", normalized, debug_dir)

    result = sharpen(normalized)
    _dump(6, "sharpen", result, debug_dir)
    return result
