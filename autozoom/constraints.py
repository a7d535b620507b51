"""Numeric limits that keep a planned camera path comfortable to watch.

``ZoomConstraints`` is the single configuration object consumed by the
attention model and the planner.  ``scale`` derives the working set from
the v1 baseline and the user-facing intensity knob.
"""

import math
from dataclasses import dataclass, fields, replace
from typing import Optional

from .geometry import Point, Size, clamp, finite_or_zero

FOLLOW_SMOOTHING = 0.75  # keeps preview motion calmer than the theoretical limit
MIN_KEYFRAME_INTERVAL_FLOOR = 0.01
MAX_SAFE_MARGIN_FRACTION = 0.25
MIN_VISIBLE_AREA_FLOOR = 0.01


@dataclass(frozen=True)
class ZoomConstraints:
    max_zoom: float = 2.5
    min_visible_area_fraction: float = 0.4
    safe_margin_fraction: float = 0.1
    dwell_duration: float = 0.35  # seconds of sustained low speed
    dwell_speed_threshold: float = 40.0  # points/sec
    velocity_smoothing_alpha: float = 0.2
    max_pan_speed: float = 1400.0  # points/sec
    max_pan_acceleration: float = 3600.0  # points/sec^2
    idle_zoom: float = 1.05
    base_zoom: float = 1.0
    minimum_keyframe_interval: float = 1.0 / 30.0
    motion_intensity: float = 0.25
    dwell_intensity: float = 0.7
    click_intensity: float = 1.0
    motion_speed_ceiling: float = 1000.0  # points/sec treated as full motion

    def __post_init__(self):
        for f in fields(self):
            value = getattr(self, f.name)
            if not math.isfinite(value):
                raise ValueError(f"{f.name} must be finite, got {value!r}")
        if self.max_zoom < 1.0:
            raise ValueError(f"max_zoom must be >= 1, got {self.max_zoom}")
        if not 1.0 <= self.idle_zoom <= self.max_zoom:
            raise ValueError(
                f"idle_zoom must lie in [1, max_zoom={self.max_zoom}], got {self.idle_zoom}"
            )
        if not 0.0 < self.min_visible_area_fraction <= 1.0:
            raise ValueError(
                f"min_visible_area_fraction must lie in (0, 1], got {self.min_visible_area_fraction}"
            )
        if not 0.0 < self.velocity_smoothing_alpha <= 1.0:
            raise ValueError(
                f"velocity_smoothing_alpha must lie in (0, 1], got {self.velocity_smoothing_alpha}"
            )
        if self.minimum_keyframe_interval <= 0:
            raise ValueError(
                f"minimum_keyframe_interval must be positive, got {self.minimum_keyframe_interval}"
            )

    def replace(self, **changes) -> "ZoomConstraints":
        return replace(self, **changes)

    @property
    def allowed_max_zoom(self) -> float:
        """Tightest zoom permitted by both max_zoom and the visible-area floor"""
        min_area = clamp(self.min_visible_area_fraction, MIN_VISIBLE_AREA_FLOOR, 1.0)
        return max(1.0, min(self.max_zoom, 1.0 / min_area))

    @property
    def margin_fraction(self) -> float:
        return clamp(self.safe_margin_fraction, 0.0, MAX_SAFE_MARGIN_FRACTION)

    def clamp_zoom(self, zoom: float) -> float:
        return clamp(finite_or_zero(zoom), 1.0, self.allowed_max_zoom)

    def clamp_center(self, center: Point, source_size: Size, zoom: float) -> Point:
        """Keep the crop rectangle at ``zoom`` inside the source, inset by the safe margin.

        When the allowed interval on an axis is empty (the crop plus margins
        is wider than the source) the center snaps to the source's own center
        on that axis.  The result is a fixed point of this function.
        """
        if source_size.is_empty:
            return center
        zoom = self.clamp_zoom(zoom)
        center = center.sanitized()
        x = _clamp_axis(center.x, source_size.width, zoom, self.margin_fraction)
        y = _clamp_axis(center.y, source_size.height, zoom, self.margin_fraction)
        return Point(x, y)

    def intensity_zoom(self, intensity: float) -> float:
        """Zoom a keyframe of the given attention intensity should settle at"""
        intensity = clamp(finite_or_zero(intensity), 0.0, 1.0)
        if intensity <= 1e-6:
            return self.clamp_zoom(self.idle_zoom)
        base = max(1.0, self.base_zoom)
        top = self.allowed_max_zoom
        return self.clamp_zoom(base + (top - base) * intensity)


def _clamp_axis(value: float, extent: float, zoom: float, margin_fraction: float) -> float:
    visible = extent / zoom
    margin = visible * margin_fraction
    lower = visible / 2 + margin
    upper = extent - visible / 2 - margin
    if lower > upper:
        return extent / 2
    return clamp(value, lower, upper)


def default_constraints() -> ZoomConstraints:
    """The v1 baseline"""
    return ZoomConstraints()


def scale(
    intensity: float,
    minimum_keyframe_interval: float = 1.0 / 30.0,
    base: Optional[ZoomConstraints] = None,
) -> ZoomConstraints:
    """Derive working constraints from the baseline and the user intensity knob.

    Zoom limits and attention weights scale linearly with ``intensity``;
    pan speed and acceleration are always damped by ``FOLLOW_SMOOTHING``.
    """
    base = base or default_constraints()
    intensity = clamp(finite_or_zero(intensity), 0.0, 1.0)
    interval = finite_or_zero(minimum_keyframe_interval)
    return replace(
        base,
        max_zoom=1.0 + (base.max_zoom - 1.0) * intensity,
        idle_zoom=1.0 + (base.idle_zoom - 1.0) * intensity,
        motion_intensity=base.motion_intensity * intensity,
        dwell_intensity=base.dwell_intensity * intensity,
        click_intensity=base.click_intensity * intensity,
        max_pan_speed=base.max_pan_speed * FOLLOW_SMOOTHING,
        max_pan_acceleration=base.max_pan_acceleration * FOLLOW_SMOOTHING,
        minimum_keyframe_interval=max(interval, MIN_KEYFRAME_INTERVAL_FLOOR),
    )


@dataclass(frozen=True)
class AutoZoomSettings:
    """Persisted per-project auto-zoom preferences"""
    is_enabled: bool = True
    intensity: float = 1.0
    minimum_keyframe_interval: float = 1.0 / 30.0

    INTENSITY_RANGE = (0.0, 1.0)
    KEYFRAME_INTERVAL_RANGE = (1.0 / 60.0, 1.0 / 10.0)

    def clamped(self) -> "AutoZoomSettings":
        intensity = self.intensity if math.isfinite(self.intensity) else 1.0
        interval = self.minimum_keyframe_interval
        if not math.isfinite(interval):
            interval = 1.0 / 30.0
        return AutoZoomSettings(
            is_enabled=self.is_enabled,
            intensity=clamp(intensity, *self.INTENSITY_RANGE),
            minimum_keyframe_interval=clamp(interval, *self.KEYFRAME_INTERVAL_RANGE),
        )

    def constraints(self, base: Optional[ZoomConstraints] = None) -> ZoomConstraints:
        settings = self.clamped()
        return scale(settings.intensity, settings.minimum_keyframe_interval, base=base)

    def to_dict(self) -> dict:
        return {
            "isEnabled": self.is_enabled,
            "intensity": self.intensity,
            "minimumKeyframeInterval": self.minimum_keyframe_interval,
        }

    @staticmethod
    def from_dict(d: dict) -> "AutoZoomSettings":
        defaults = AutoZoomSettings()
        return AutoZoomSettings(
            is_enabled=bool(d.get("isEnabled", defaults.is_enabled)),
            intensity=float(d.get("intensity", defaults.intensity)),
            minimum_keyframe_interval=float(
                d.get("minimumKeyframeInterval", defaults.minimum_keyframe_interval)
            ),
        )
