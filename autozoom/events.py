"""Input telemetry recorded alongside a capture session.

Events are produced by the input-tracking side of the recorder and
persisted as a JSON log next to the recording.  Positions are in the
global screen coordinate space at capture time (origin bottom-left);
timestamps are seconds since recording start.
"""

import json
import logging
import os
import tempfile
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional, Union

from .geometry import Point

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 1


class InputEventKind(str, Enum):
    CURSOR_MOVED = "cursorMoved"
    MOUSE_DOWN = "mouseDown"
    MOUSE_UP = "mouseUp"

    @property
    def is_click(self) -> bool:
        return self in (InputEventKind.MOUSE_DOWN, InputEventKind.MOUSE_UP)


class MouseButton(str, Enum):
    LEFT = "left"
    RIGHT = "right"
    OTHER = "other"


@dataclass(frozen=True)
class InputEvent:
    kind: InputEventKind
    timestamp: float  # seconds since recording start
    position: Point
    button: Optional[MouseButton] = None  # only for mouseDown / mouseUp

    @property
    def is_click(self) -> bool:
        return self.kind.is_click

    def with_position(self, position: Point) -> "InputEvent":
        return InputEvent(self.kind, self.timestamp, position, self.button)

    def to_dict(self) -> dict:
        d = {
            "type": self.kind.value,
            "timestamp": self.timestamp,
            "position": self.position.to_dict(),
        }
        if self.button is not None:
            d["button"] = self.button.value
        return d

    @staticmethod
    def from_dict(d: dict) -> "InputEvent":
        button = d.get("button")
        return InputEvent(
            kind=InputEventKind(d["type"]),
            timestamp=float(d["timestamp"]),
            position=Point.from_dict(d["position"]),
            button=MouseButton(button) if button is not None else None,
        )


@dataclass(frozen=True)
class InputEventLog:
    """Versioned container for a session's events"""
    events: List[InputEvent] = field(default_factory=list)
    schema_version: int = SCHEMA_VERSION

    def to_dict(self) -> dict:
        return {
            "schemaVersion": self.schema_version,
            "events": [event.to_dict() for event in self.events],
        }

    @staticmethod
    def from_dict(d: dict) -> "InputEventLog":
        return InputEventLog(
            events=[InputEvent.from_dict(item) for item in d.get("events", [])],
            schema_version=int(d.get("schemaVersion", SCHEMA_VERSION)),
        )

    def dumps(self) -> str:
        return json.dumps(self.to_dict(), indent=2, sort_keys=True)

    @staticmethod
    def loads(text: str) -> "InputEventLog":
        return InputEventLog.from_dict(json.loads(text))

    def dump(self, path: Union[str, Path]) -> None:
        """Write the log atomically (temp file in the same directory, then replace)"""
        path = Path(path)
        fd, tmp_name = tempfile.mkstemp(prefix=path.name, suffix=".tmp", dir=path.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(self.dumps())
            os.replace(tmp_name, path)
        except OSError as e:
            logger.error(f"Error writing event log {path}: {e}")
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise

    @staticmethod
    def load(path: Union[str, Path]) -> "InputEventLog":
        try:
            text = Path(path).read_text(encoding="utf-8")
            log = InputEventLog.loads(text)
        except (OSError, ValueError, KeyError) as e:
            logger.error(f"Error loading event log {path}: {str(e)}")
            raise
        if log.schema_version != SCHEMA_VERSION:
            logger.warning(
                f"Event log {path} has schema version {log.schema_version}, "
                f"expected {SCHEMA_VERSION}"
            )
        logger.debug(f"Loaded {len(log.events)} events from {path}")
        return log
