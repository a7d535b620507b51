import pytest

from autozoom.events import InputEvent, InputEventKind, MouseButton
from autozoom.geometry import Point, Size


def move(t, x, y):
    return InputEvent(InputEventKind.CURSOR_MOVED, t, Point(x, y))


def down(t, x, y, button=MouseButton.LEFT):
    return InputEvent(InputEventKind.MOUSE_DOWN, t, Point(x, y), button)


def up(t, x, y, button=MouseButton.LEFT):
    return InputEvent(InputEventKind.MOUSE_UP, t, Point(x, y), button)


@pytest.fixture
def source_size():
    return Size(1920, 1080)


@pytest.fixture
def session_events():
    """A few seconds of sweeping, resting and clicking"""
    events = []
    for i in range(60):
        t = i / 30.0
        events.append(move(t, 200 + i * 25, 150 + i * 10))
    for i in range(30):
        events.append(move(2.0 + i / 30.0, 1675, 745))
    events.append(down(2.5, 1675, 745))
    events.append(up(2.6, 1675, 745))
    for i in range(20):
        t = 3.0 + i / 20.0
        events.append(move(t, 1675 - i * 70, 745 - i * 30))
    events.append(down(3.9, 345, 175, MouseButton.RIGHT))
    return events
