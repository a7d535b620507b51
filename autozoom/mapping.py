import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence

from .events import InputEvent
from .geometry import Point, Rect, Size

logger = logging.getLogger(__name__)

MIN_PIXEL_SCALE = 0.01


class CaptureSource(str, Enum):
    DISPLAY = "display"
    WINDOW = "window"


@dataclass(frozen=True)
class CaptureRect:
    """Captured content rectangle in the capture surface's own coordinates"""
    x: float
    y: float
    width: float
    height: float

    @property
    def rect(self) -> Rect:
        return Rect(Point(self.x, self.y), Size(self.width, self.height))

    def to_dict(self) -> dict:
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height}

    @staticmethod
    def from_dict(d: dict) -> "CaptureRect":
        return CaptureRect(
            x=float(d["x"]), y=float(d["y"]),
            width=float(d["width"]), height=float(d["height"]),
        )


@dataclass(frozen=True)
class CaptureMetadata:
    source: CaptureSource
    content_rect: CaptureRect
    pixel_scale: float  # backing pixels per point

    @property
    def pixel_size(self) -> Size:
        """Pixel size of the capture descriptor at record time"""
        return Size(
            self.content_rect.width * self.pixel_scale,
            self.content_rect.height * self.pixel_scale,
        )

    def to_dict(self) -> dict:
        return {
            "source": self.source.value,
            "contentRect": self.content_rect.to_dict(),
            "pixelScale": self.pixel_scale,
        }

    @staticmethod
    def from_dict(d: dict) -> "CaptureMetadata":
        return CaptureMetadata(
            source=CaptureSource(d.get("source", CaptureSource.DISPLAY.value)),
            content_rect=CaptureRect.from_dict(d["contentRect"]),
            pixel_scale=float(d.get("pixelScale", 1.0)),
        )


def map_events_to_asset_space(
    events: Sequence[InputEvent],
    metadata: Optional[CaptureMetadata],
    asset_pixel_size: Size,
) -> List[InputEvent]:
    """Project screen-space event positions into the decoded asset's pixel space.

    Positions are translated by the content rect origin, flipped vertically
    (screen origin is bottom-left, pixel origin top-left), scaled by
    ``pixel_scale * asset / descriptor`` per axis and pinned to the asset
    bounds.  Without metadata, or with an empty content rect, events pass
    through unmapped.
    """
    if metadata is None:
        logger.debug("No capture metadata; using event positions unmapped")
        return list(events)

    rect = metadata.content_rect.rect
    if rect.size.is_empty:
        logger.warning(f"Empty capture content rect {metadata.content_rect}; events left unmapped")
        return list(events)

    pixel_scale = max(MIN_PIXEL_SCALE, metadata.pixel_scale)
    descriptor = metadata.pixel_size
    scale_x = asset_pixel_size.width / descriptor.width if descriptor.width > 0 else 1.0
    scale_y = asset_pixel_size.height / descriptor.height if descriptor.height > 0 else 1.0

    mapped = []
    for event in events:
        point = event.position.sanitized()
        local = Point(point.x - rect.min_x, rect.max_y - point.y)
        projected = Point(local.x * pixel_scale * scale_x, local.y * pixel_scale * scale_y)
        mapped.append(event.with_position(asset_pixel_size.clamp_point(projected)))
    return mapped
