"""Screen region capture using mss."""

import platform
from dataclasses import dataclass

import mss
from mss.exception import ScreenShotError
import numpy as np
from numpy.typing import NDArray

from .. import log

logger = log.get_logger()

_system = platform.system()


@dataclass(frozen=True)
class CaptureRegion:
    """Rectangle on screen in logical (Qt) coordinates."""

    x: int
    y: int
    width: int
    height: int

    def __post_init__(self):
        if self.width < 1 or self.height < 1:
            raise ValueError(f"capture region must be at least 1x1, got {self.width}x{self.height}")

    def scaled(self, factor: float) -> "CaptureRegion":
        """Physical-pixel rectangle for a device pixel ratio."""
        if factor == 1:
            return self
        return CaptureRegion(
            int(round(self.x * factor)),
            int(round(self.y * factor)),
            max(1, int(round(self.width * factor))),
            max(1, int(round(self.height * factor))),
        )

    def as_monitor(self) -> dict:
        """Region in the dict form mss.grab() expects."""
        return {"left": self.x, "top": self.y, "width": self.width, "height": self.height}


class RegionCapture:
    """Grabs a rectangle of the screen as a BGRA frame.

    A fresh mss instance is opened per grab. mss handles are bound to the
    thread that created them, and grabs happen on the GUI thread only when
    the region changes, so there is nothing worth keeping open.
    """

    def __init__(self):
        self._last_error: str | None = None

    def grab(self, region: CaptureRegion, device_pixel_ratio: float = 1.0) -> NDArray[np.uint8] | None:
        """Capture the region.

        Args:
            region: Rectangle in logical coordinates.
            device_pixel_ratio: Qt device pixel ratio of the screen the region is on.

        Returns:
            Numpy array (H, W, 4) in BGRA format, or None if the grab failed.
        """
        # mss works in points on macOS and in physical pixels elsewhere
        target = region if _system == "Darwin" else region.scaled(device_pixel_ratio)
        try:
            with mss.mss() as sct:
                shot = sct.grab(target.as_monitor())
                frame = np.array(shot, dtype=np.uint8)
        except ScreenShotError as e:
            if str(e) != self._last_error:
                logger.error("capture failed", err=str(e), region=str(target.as_monitor()))
            self._last_error = str(e)
            return None

        self._last_error = None
        logger.debug("region captured", width=frame.shape[1], height=frame.shape[0])
        return frame
