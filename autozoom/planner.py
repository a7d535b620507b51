"""Virtual camera planning.

Turns input telemetry into a ``CameraPlan``: an ordered list of
``(time, zoom, center)`` keyframes covering ``[0, duration]`` that a
renderer interpolates into a per-frame crop.

Pipeline:

1. score events with the ``AttentionModel``;
2. reserve the first and last ``minimum_keyframe_interval`` for the
   boundary keyframes, bucket everything in between so no two
   keyframes are closer than the interval;
3. pick one representative per bucket (click > dwell > motion, then
   intensity) and derive its zoom and clamped center;
4. limit pan speed and acceleration left to right, re-clamping each
   center after the adjustment and pulling it back along the step when
   the clamp pushed the acceleration over its cap.

Degenerate input (no events, no duration, empty source) yields an idle
plan instead of an error.
"""

import logging
import math
import threading
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import numpy as np
from scipy.spatial.distance import cdist

from .attention import AttentionModel, AttentionSample
from .constraints import ZoomConstraints, default_constraints
from .events import InputEvent
from .geometry import Point, Size, clamp, finite_or_zero

MIN_SEGMENT_DURATION = 0.0001
ANCHOR_PRIORITY = 3


@dataclass(frozen=True)
class CameraKeyframe:
    time: float
    zoom: float
    center: Point

    def to_dict(self) -> dict:
        return {"time": self.time, "zoom": self.zoom, "center": self.center.to_dict()}

    @staticmethod
    def from_dict(d: dict) -> "CameraKeyframe":
        return CameraKeyframe(
            time=float(d["time"]),
            zoom=float(d["zoom"]),
            center=Point.from_dict(d["center"]),
        )


@dataclass(frozen=True)
class CameraPlan:
    duration: float
    keyframes: Tuple[CameraKeyframe, ...]
    source_size: Size = Size()

    @property
    def is_idle(self) -> bool:
        first = self.keyframes[0]
        return all(k.zoom == first.zoom and k.center == first.center for k in self.keyframes)

    def to_dict(self) -> dict:
        return {
            "duration": self.duration,
            "sourceSize": self.source_size.to_dict(),
            "keyframes": [k.to_dict() for k in self.keyframes],
        }

    @staticmethod
    def from_dict(d: dict) -> "CameraPlan":
        return CameraPlan(
            duration=float(d["duration"]),
            keyframes=tuple(CameraKeyframe.from_dict(k) for k in d["keyframes"]),
            source_size=Size.from_dict(d["sourceSize"]) if "sourceSize" in d else Size(),
        )


class PlanCancelled(Exception):
    """Raised when a caller abandons a plan through its cancel event"""


@dataclass(frozen=True)
class _FocusTarget:
    time: float
    position: Optional[Point]  # None frames the source center
    intensity: float
    priority: int


def _rank(indexed: Tuple[int, AttentionSample]):
    # later sample wins a full tie
    index, sample = indexed
    return sample.priority, sample.intensity, index


def _medoid(points: List[Point]) -> Point:
    """The observed point with the smallest total distance to the others"""
    if len(points) == 1:
        return points[0]
    coords = np.array([(p.x, p.y) for p in points], dtype=np.float64)
    totals = cdist(coords, coords).sum(axis=1)
    return points[int(np.argmin(totals))]


def _resolve(members: Sequence[Tuple[int, AttentionSample]], time: Optional[float] = None) -> _FocusTarget:
    """Collapse a bucket into one target at the winner's time (or ``time``)"""
    _, winner = max(members, key=_rank)
    peers = [s.position for _, s in members if s.priority == winner.priority]
    return _FocusTarget(
        time=winner.time if time is None else time,
        position=_medoid(peers),
        intensity=winner.intensity,
        priority=winner.priority,
    )


class VirtualCameraPlanner:
    def __init__(self, attention_model: Optional[AttentionModel] = None):
        self.attention_model = attention_model or AttentionModel()
        self.logger = logging.getLogger(__name__)

    def plan(
        self,
        events: Sequence[InputEvent],
        source_size: Size,
        duration: float,
        constraints: Optional[ZoomConstraints] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> CameraPlan:
        """Plan a camera path over ``[0, duration]`` for a source of ``source_size`` pixels"""
        constraints = constraints or default_constraints()
        duration = finite_or_zero(duration)

        if duration <= 0 or source_size.is_empty:
            self.logger.debug(f"Degenerate plan input (duration={duration}, size={source_size}); idle plan")
            return self._idle_plan(source_size, duration, constraints)

        samples = [s for s in self.attention_model.samples(events, constraints) if s.time <= duration]
        if not samples:
            self.logger.debug("No attention samples; idle plan")
            return self._idle_plan(source_size, duration, constraints)

        targets = self._reduce(samples, duration, constraints, cancel_event)
        keyframes = [self._keyframe(t, source_size, constraints) for t in targets]
        keyframes = self._limit_pan(keyframes, source_size, constraints, cancel_event)
        keyframes = _coalesce(keyframes, targets)

        self.logger.debug(
            f"Planned {len(keyframes)} keyframes from {len(samples)} samples over {duration:.3f}s"
        )
        return CameraPlan(duration=duration, keyframes=tuple(keyframes), source_size=source_size)

    def _idle_plan(self, source_size: Size, duration: float, constraints: ZoomConstraints) -> CameraPlan:
        zoom = constraints.clamp_zoom(constraints.idle_zoom)
        center = source_size.center
        keyframes = [CameraKeyframe(0.0, zoom, center)]
        if duration > 0:
            keyframes.append(CameraKeyframe(duration, zoom, center))
        return CameraPlan(duration=max(duration, 0.0), keyframes=tuple(keyframes), source_size=source_size)

    def _reduce(
        self,
        samples: List[AttentionSample],
        duration: float,
        constraints: ZoomConstraints,
        cancel_event: Optional[threading.Event],
    ) -> List[_FocusTarget]:
        """Bucket samples by the keyframe interval, keeping both boundaries"""
        interval = constraints.minimum_keyframe_interval
        indexed = list(enumerate(samples))

        head = [(i, s) for i, s in indexed if s.time < interval]
        rest = [(i, s) for i, s in indexed if s.time >= interval]

        if head:
            first = _resolve(head, time=0.0)
            lead = _FocusTarget(0.0, first.position, first.intensity, ANCHOR_PRIORITY)
        else:
            # nothing near the start: open on idle framing
            lead = _FocusTarget(0.0, None, 0.0, ANCHOR_PRIORITY)

        buckets: List[List[Tuple[int, AttentionSample]]] = []
        bucket_start = None
        for item in rest:
            if cancel_event is not None and cancel_event.is_set():
                raise PlanCancelled()
            time = item[1].time
            if bucket_start is not None and time - bucket_start < interval:
                buckets[-1].append(item)
            else:
                buckets.append([item])
                bucket_start = time

        tail: List[Tuple[int, AttentionSample]] = []
        while buckets and duration - buckets[-1][0][1].time < interval:
            tail = buckets.pop() + tail

        targets = [lead] + [_resolve(bucket) for bucket in buckets]

        if tail:
            last = _resolve(tail, time=duration)
        else:
            last = targets[-1]
        targets.append(_FocusTarget(duration, last.position, last.intensity, ANCHOR_PRIORITY))
        return targets

    def _keyframe(self, target: _FocusTarget, source_size: Size, constraints: ZoomConstraints) -> CameraKeyframe:
        zoom = constraints.intensity_zoom(target.intensity)
        position = target.position if target.position is not None else source_size.center
        return CameraKeyframe(target.time, zoom, constraints.clamp_center(position, source_size, zoom))

    def _limit_pan(
        self,
        keyframes: List[CameraKeyframe],
        source_size: Size,
        constraints: ZoomConstraints,
        cancel_event: Optional[threading.Event],
    ) -> List[CameraKeyframe]:
        """Cap pan speed and acceleration between consecutive keyframes"""
        if len(keyframes) < 2:
            return keyframes
        adjusted = [keyframes[0]]
        previous_velocity = Point()

        for frame in keyframes[1:]:
            if cancel_event is not None and cancel_event.is_set():
                raise PlanCancelled()
            last = adjusted[-1]
            elapsed = max(frame.time - last.time, MIN_SEGMENT_DURATION)

            delta = frame.center - last.center
            max_distance = max(constraints.max_pan_speed, 0.0) * elapsed
            if delta.magnitude > max_distance:
                delta = delta.scaled_to(max_distance)

            velocity = delta / elapsed
            velocity_change = velocity - previous_velocity
            max_velocity_change = max(constraints.max_pan_acceleration, 0.0) * elapsed
            if velocity_change.magnitude > max_velocity_change:
                velocity = previous_velocity + velocity_change.scaled_to(max_velocity_change)

            center = constraints.clamp_center(last.center + velocity * elapsed, source_size, frame.zoom)
            realised = (center - last.center) / elapsed
            if (realised - previous_velocity).magnitude > max_velocity_change:
                # the clamp bent the step; retreat along it toward the last center.
                # If no point on the step meets the cap, the clamp wins.
                fraction = _acceleration_fraction(realised, previous_velocity, max_velocity_change)
                center = constraints.clamp_center(
                    last.center + (center - last.center) * fraction, source_size, frame.zoom
                )
            adjusted.append(CameraKeyframe(frame.time, frame.zoom, center))
            previous_velocity = (center - last.center) / elapsed

        return adjusted


def _acceleration_fraction(velocity: Point, previous_velocity: Point, limit: float) -> float:
    """Largest t in [0, 1] with |t * velocity - previous_velocity| <= limit.

    Falls back to the t closest to the limit when no t in [0, 1] meets it.
    """
    a = velocity.x * velocity.x + velocity.y * velocity.y
    if a == 0:
        return 1.0
    b = velocity.x * previous_velocity.x + velocity.y * previous_velocity.y
    c = previous_velocity.x * previous_velocity.x + previous_velocity.y * previous_velocity.y - limit * limit
    discriminant = b * b - a * c
    if discriminant < 0:
        return clamp(b / a, 0.0, 1.0)
    upper = (b + math.sqrt(discriminant)) / a
    if upper < 0:
        return 0.0
    return min(upper, 1.0)


def _coalesce(keyframes: List[CameraKeyframe], targets: List[_FocusTarget]) -> List[CameraKeyframe]:
    """Drop exact-time collisions, keeping the higher-ranked keyframe.

    Bucketing already spaces keyframes by the interval; this only guards
    against two targets landing on the same time.
    """
    result: List[Tuple[CameraKeyframe, _FocusTarget]] = []
    for frame, target in zip(keyframes, targets):
        if result and frame.time <= result[-1][0].time:
            if (target.priority, target.intensity) > (result[-1][1].priority, result[-1][1].intensity):
                result[-1] = (CameraKeyframe(result[-1][0].time, frame.zoom, frame.center), target)
            continue
        result.append((frame, target))
    return [frame for frame, _ in result]


_default_planner = VirtualCameraPlanner()


def plan(
    events: Sequence[InputEvent],
    source_size: Size,
    duration: float,
    constraints: Optional[ZoomConstraints] = None,
    cancel_event: Optional[threading.Event] = None,
) -> CameraPlan:
    """Plan with a shared stateless planner"""
    return _default_planner.plan(events, source_size, duration, constraints, cancel_event)
