import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Union

from moviepy import VideoFileClip

from .geometry import Size

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AssetGeometry:
    width: float  # natural pixel width of the decoded video
    height: float
    duration: float  # seconds

    @property
    def size(self) -> Size:
        return Size(self.width, self.height)


def probe_asset(path: Union[str, Path]) -> AssetGeometry:
    """Read natural pixel size and duration of a recording"""
    try:
        with VideoFileClip(str(path), audio=False) as clip:
            width, height = clip.size
            geometry = AssetGeometry(float(width), float(height), float(clip.duration or 0.0))
    except Exception as e:
        logger.error(f"Error probing video {path}: {str(e)}")
        raise
    logger.debug(f"Probed {path}: {geometry.width:.0f}x{geometry.height:.0f}, {geometry.duration:.3f}s")
    return geometry
