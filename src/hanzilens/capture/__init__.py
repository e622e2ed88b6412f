"""Screen capture of the region under the lens window."""

from .convert import BGRAFrame, bgra_to_rgb, load_image, rgb_to_bgra
from .region import CaptureRegion, RegionCapture

__all__ = [
    "BGRAFrame",
    "CaptureRegion",
    "RegionCapture",
    "bgra_to_rgb",
    "load_image",
    "rgb_to_bgra",
]
