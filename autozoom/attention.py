"""Attention scoring over cursor/click telemetry.

Every input event yields one ``AttentionSample``:

* clicks (mouse down/up) always score ``click_intensity``;
* cursor moves that close a sustained low-speed window score
  ``dwell_intensity``;
* any other cursor move scores ``motion_intensity`` scaled by the
  smoothed cursor speed, so the planner has a background signal
  between dwells and clicks.

Speed is an exponential moving average of the instantaneous speed
between consecutive cursor moves.  Same-timestamp samples are all kept;
merging them is the planner's job.
"""

import logging
from dataclasses import dataclass
from typing import List, Sequence

import numpy as np

from .constraints import ZoomConstraints
from .events import InputEvent, InputEventKind
from .geometry import Point, clamp, finite_or_zero

MIN_DWELL_SPEED_THRESHOLD = 0.01


@dataclass(frozen=True)
class AttentionSample:
    time: float
    position: Point
    intensity: float  # [0, 1]
    is_dwell: bool = False
    is_click: bool = False

    @property
    def priority(self) -> int:
        if self.is_click:
            return 2
        if self.is_dwell:
            return 1
        return 0


def sanitize_events(events: Sequence[InputEvent]) -> List[InputEvent]:
    """Neutralise non-finite or negative timestamps/positions and stable-sort by time"""
    cleaned = []
    for event in events:
        timestamp = max(0.0, finite_or_zero(event.timestamp))
        position = event.position.sanitized()
        if timestamp != event.timestamp or position != event.position:
            event = InputEvent(event.kind, timestamp, position, event.button)
        cleaned.append(event)
    # sorted() is stable: same-timestamp events keep their recorded order
    return sorted(cleaned, key=lambda e: e.timestamp)


def instantaneous_speeds(moves: Sequence[InputEvent]) -> np.ndarray:
    """Speed between each cursor move and the previous one (0 for the first)"""
    if len(moves) < 2:
        return np.zeros(len(moves))
    times = np.array([e.timestamp for e in moves], dtype=np.float64)
    xs = np.array([e.position.x for e in moves], dtype=np.float64)
    ys = np.array([e.position.y for e in moves], dtype=np.float64)

    elapsed = np.diff(times)
    distance = np.hypot(np.diff(xs), np.diff(ys))
    with np.errstate(divide="ignore", invalid="ignore"):
        speed = np.where(elapsed > 0, distance / elapsed, 0.0)
    speed = np.nan_to_num(speed, nan=0.0, posinf=0.0, neginf=0.0)
    return np.concatenate(([0.0], speed))


class AttentionModel:
    def __init__(self):
        self.logger = logging.getLogger(__name__)

    def samples(
        self,
        events: Sequence[InputEvent],
        constraints: ZoomConstraints,
    ) -> List[AttentionSample]:
        """Score events in time order"""
        ordered = sanitize_events(events)
        if not ordered:
            return []

        moves = [e for e in ordered if e.kind == InputEventKind.CURSOR_MOVED]
        speeds = instantaneous_speeds(moves)

        alpha = clamp(constraints.velocity_smoothing_alpha, 0.0, 1.0)
        threshold = max(MIN_DWELL_SPEED_THRESHOLD, constraints.dwell_speed_threshold)
        ceiling = constraints.motion_speed_ceiling

        samples = []
        move_index = 0
        smoothed_speed = 0.0
        dwell_start = None
        is_dwell = False

        for event in ordered:
            if event.kind == InputEventKind.CURSOR_MOVED:
                if move_index > 0:
                    smoothed_speed = alpha * float(speeds[move_index]) + (1 - alpha) * smoothed_speed
                move_index += 1

                if smoothed_speed < threshold:
                    if dwell_start is None:
                        dwell_start = event.timestamp
                    is_dwell = event.timestamp - dwell_start >= constraints.dwell_duration
                else:
                    dwell_start = None
                    is_dwell = False

            if event.is_click:
                intensity = constraints.click_intensity
            elif is_dwell:
                intensity = constraints.dwell_intensity
            else:
                normalized = clamp(smoothed_speed / ceiling, 0.0, 1.0) if ceiling > 0 else 0.0
                intensity = constraints.motion_intensity * normalized

            samples.append(AttentionSample(
                time=event.timestamp,
                position=event.position,
                intensity=clamp(intensity, 0.0, 1.0),
                is_dwell=is_dwell,
                is_click=event.is_click,
            ))

        self.logger.debug(
            f"Scored {len(samples)} samples "
            f"({sum(s.is_click for s in samples)} clicks, {sum(s.is_dwell for s in samples)} dwell)"
        )
        return samples
