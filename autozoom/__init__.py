"""Auto-zoom planning for screen recordings.

Converts recorded cursor/click telemetry into a camera plan of pan and
zoom keyframes that a renderer turns into a cinematic crop.
"""

from .attention import AttentionModel, AttentionSample
from .cache import PlanCache, cache_key, events_signature
from .constraints import AutoZoomSettings, ZoomConstraints, default_constraints, scale
from .events import InputEvent, InputEventKind, InputEventLog, MouseButton
from .geometry import Point, Rect, Size
from .mapping import CaptureMetadata, CaptureRect, CaptureSource, map_events_to_asset_space
from .planner import CameraKeyframe, CameraPlan, PlanCancelled, VirtualCameraPlanner, plan

__all__ = [
    "AttentionModel",
    "AttentionSample",
    "AutoZoomSettings",
    "CameraKeyframe",
    "CameraPlan",
    "CaptureMetadata",
    "CaptureRect",
    "CaptureSource",
    "InputEvent",
    "InputEventKind",
    "InputEventLog",
    "MouseButton",
    "PlanCache",
    "PlanCancelled",
    "Point",
    "Rect",
    "Size",
    "VirtualCameraPlanner",
    "ZoomConstraints",
    "cache_key",
    "default_constraints",
    "events_signature",
    "map_events_to_asset_space",
    "plan",
    "scale",
]

__version__ = "0.1.0"
