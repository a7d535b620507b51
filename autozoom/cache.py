"""Content-addressed memo for camera plans.

Keys are a 64-bit FNV-1a style fold over every planning input: each
event's kind, button, timestamp and position bit patterns (in order),
every constraints field, the duration rounded to milliseconds and the
source size rounded to 1/100 pixel.  Rounding keeps float jitter in
asset inspection from defeating the cache.  Not for security use.
"""

import logging
import threading
from collections import OrderedDict
from dataclasses import fields
from typing import Iterable, List, Optional, Sequence

import numpy as np

from .constraints import ZoomConstraints
from .events import InputEvent, InputEventKind, MouseButton
from .geometry import Size, finite_or_zero
from .planner import CameraPlan

FNV_OFFSET_BASIS = 0xCBF29CE484222325
FNV_PRIME = 0x100000001B3
MASK_64 = 0xFFFFFFFFFFFFFFFF

KIND_CODES = {
    InputEventKind.CURSOR_MOVED: 1,
    InputEventKind.MOUSE_DOWN: 2,
    InputEventKind.MOUSE_UP: 3,
}
BUTTON_CODES = {
    None: 0,
    MouseButton.LEFT: 1,
    MouseButton.RIGHT: 2,
    MouseButton.OTHER: 3,
}


def fnv_combine(hash_value: int, value: int) -> int:
    return ((hash_value ^ value) * FNV_PRIME) & MASK_64


def float_bits(values: Iterable[float]) -> List[int]:
    """IEEE-754 bit patterns of the values as unsigned 64-bit ints"""
    return np.asarray(list(values), dtype=np.float64).view(np.uint64).tolist()


def _fold(hash_value: int, values: Iterable[int]) -> int:
    for value in values:
        hash_value = fnv_combine(hash_value, value)
    return hash_value


def events_signature(events: Sequence[InputEvent], seed: int = FNV_OFFSET_BASIS) -> int:
    hash_value = seed
    for event in events:
        hash_value = fnv_combine(hash_value, KIND_CODES[event.kind])
        hash_value = fnv_combine(hash_value, BUTTON_CODES[event.button])
        hash_value = _fold(hash_value, float_bits((event.timestamp, event.position.x, event.position.y)))
    return hash_value


def _rounded(value: float, scale: float) -> float:
    return round(finite_or_zero(value) * scale) / scale


def cache_key(
    events: Sequence[InputEvent],
    constraints: ZoomConstraints,
    duration: float,
    source_size: Size,
) -> int:
    hash_value = events_signature(events)
    hash_value = _fold(hash_value, float_bits(getattr(constraints, f.name) for f in fields(constraints)))
    return _fold(hash_value, float_bits((
        _rounded(duration, 1000),
        _rounded(source_size.width, 100),
        _rounded(source_size.height, 100),
    )))


class PlanCache:
    """Thread-safe plan memo; one slot by default, LRU when capacity > 1"""

    def __init__(self, capacity: int = 1):
        if capacity < 1:
            raise ValueError(f"capacity must be >= 1, got {capacity}")
        self.capacity = capacity
        self._entries: "OrderedDict[int, CameraPlan]" = OrderedDict()
        self._lock = threading.Lock()
        self.logger = logging.getLogger(__name__)

    def get(self, key: int) -> Optional[CameraPlan]:
        with self._lock:
            plan = self._entries.get(key)
            if plan is not None:
                self._entries.move_to_end(key)
        self.logger.debug(f"Plan cache {'hit' if plan is not None else 'miss'} for {key:016x}")
        return plan

    def put(self, key: int, plan: CameraPlan) -> None:
        with self._lock:
            self._entries[key] = plan
            self._entries.move_to_end(key)
            while len(self._entries) > self.capacity:
                self._entries.popitem(last=False)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: int) -> bool:
        with self._lock:
            return key in self._entries
