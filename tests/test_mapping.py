import pytest

from autozoom.events import InputEventKind, MouseButton
from autozoom.geometry import Point, Size
from autozoom.mapping import (
    CaptureMetadata,
    CaptureRect,
    CaptureSource,
    map_events_to_asset_space,
)

from conftest import down, move


def assert_point(actual, expected):
    assert actual.x == pytest.approx(expected.x, abs=1e-3)
    assert actual.y == pytest.approx(expected.y, abs=1e-3)


def test_maps_using_content_rect_and_pixel_scale():
    metadata = CaptureMetadata(
        source=CaptureSource.WINDOW,
        content_rect=CaptureRect(x=100, y=200, width=400, height=300),
        pixel_scale=2,
    )
    events = [move(0.0, 100, 500), move(0.5, 300, 350), move(1.0, 500, 200)]

    mapped = map_events_to_asset_space(events, metadata, Size(800, 600))

    assert len(mapped) == len(events)
    assert_point(mapped[0].position, Point(0, 0))
    assert_point(mapped[1].position, Point(400, 300))
    assert_point(mapped[2].position, Point(800, 600))


def test_rescales_to_asset_size_that_differs_from_capture():
    metadata = CaptureMetadata(CaptureSource.DISPLAY, CaptureRect(0, 0, 100, 50), pixel_scale=2)

    mapped = map_events_to_asset_space([move(0.0, 50, 25)], metadata, Size(400, 200))

    assert_point(mapped[0].position, Point(200, 100))


def test_pins_points_outside_the_capture_rect_to_the_edge():
    metadata = CaptureMetadata(CaptureSource.DISPLAY, CaptureRect(0, 0, 100, 100), pixel_scale=1)

    mapped = map_events_to_asset_space([move(0.0, -5, 120), move(0.1, 130, -40)], metadata, Size(100, 100))

    assert_point(mapped[0].position, Point(0, 0))
    assert_point(mapped[1].position, Point(100, 100))


def test_preserves_kind_timestamp_and_button():
    metadata = CaptureMetadata(CaptureSource.DISPLAY, CaptureRect(0, 0, 100, 100), pixel_scale=1)
    event = down(1.25, 10, 10, MouseButton.RIGHT)

    mapped = map_events_to_asset_space([event], metadata, Size(100, 100))[0]

    assert mapped.kind == InputEventKind.MOUSE_DOWN
    assert mapped.timestamp == 1.25
    assert mapped.button == MouseButton.RIGHT


def test_missing_metadata_passes_events_through():
    events = [move(0.0, 123, 456)]
    assert map_events_to_asset_space(events, None, Size(10, 10)) == events


def test_empty_content_rect_passes_events_through():
    metadata = CaptureMetadata(CaptureSource.DISPLAY, CaptureRect(0, 0, 0, 100), pixel_scale=1)
    events = [move(0.0, 123, 456)]
    assert map_events_to_asset_space(events, metadata, Size(10, 10)) == events


def test_metadata_round_trips_persisted_keys():
    d = {"source": "window", "contentRect": {"x": 1, "y": 2, "width": 3, "height": 4}, "pixelScale": 2}
    metadata = CaptureMetadata.from_dict(d)
    assert metadata.source == CaptureSource.WINDOW
    assert metadata.pixel_size == Size(6, 8)
    assert CaptureMetadata.from_dict(metadata.to_dict()) == metadata
