import math

import pytest

from autozoom.constraints import (
    AutoZoomSettings,
    FOLLOW_SMOOTHING,
    ZoomConstraints,
    default_constraints,
    scale,
)
from autozoom.geometry import Point, Size


def test_default_constraints_baseline():
    c = default_constraints()
    assert c.max_zoom == 2.5
    assert c.min_visible_area_fraction == 0.4
    assert 0.08 <= c.safe_margin_fraction <= 0.12
    assert c.dwell_duration >= 0.35
    assert c.minimum_keyframe_interval == pytest.approx(1 / 30)
    assert 1.0 <= c.idle_zoom <= c.max_zoom


def test_scale_full_intensity_only_damps_pan():
    c = scale(1.0)
    base = default_constraints()
    assert c.max_zoom == pytest.approx(base.max_zoom)
    assert c.idle_zoom == pytest.approx(base.idle_zoom)
    assert c.click_intensity == pytest.approx(base.click_intensity)
    assert c.max_pan_speed == pytest.approx(base.max_pan_speed * FOLLOW_SMOOTHING)
    assert c.max_pan_acceleration == pytest.approx(base.max_pan_acceleration * FOLLOW_SMOOTHING)


def test_scale_half_intensity():
    c = scale(0.5, minimum_keyframe_interval=0.05)
    assert c.max_zoom == pytest.approx(1.75)
    assert c.idle_zoom == pytest.approx(1.025)
    assert c.motion_intensity == pytest.approx(0.125)
    assert c.dwell_intensity == pytest.approx(0.35)
    assert c.click_intensity == pytest.approx(0.5)
    assert c.minimum_keyframe_interval == pytest.approx(0.05)


def test_scale_zero_intensity_and_tiny_interval():
    c = scale(0.0, minimum_keyframe_interval=0.0001)
    assert c.max_zoom == 1.0
    assert c.idle_zoom == 1.0
    assert c.click_intensity == 0.0
    assert c.minimum_keyframe_interval == pytest.approx(0.01)


def test_scale_clamps_out_of_range_intensity():
    assert scale(4.0).max_zoom == pytest.approx(2.5)
    assert scale(float("nan")).max_zoom == 1.0


def test_clamp_zoom_bounds_and_area_floor():
    c = ZoomConstraints(max_zoom=3.0, min_visible_area_fraction=0.5)
    assert c.allowed_max_zoom == pytest.approx(2.0)
    assert c.clamp_zoom(0.3) == 1.0
    assert c.clamp_zoom(1.5) == 1.5
    assert c.clamp_zoom(10.0) == pytest.approx(2.0)
    assert c.clamp_zoom(float("nan")) == 1.0


@pytest.mark.parametrize("zoom", [0.5, 1.0, 1.7, 2.5, 9.0])
def test_clamp_zoom_is_idempotent(zoom):
    c = default_constraints()
    once = c.clamp_zoom(zoom)
    assert c.clamp_zoom(once) == once


def test_clamp_center_keeps_crop_inside_margins(source_size):
    c = default_constraints()

    def clamped(x, y):
        p = c.clamp_center(Point(x, y), source_size, 2.0)
        return p.x, p.y

    assert clamped(1800, 900) == pytest.approx((1344, 756))
    assert clamped(0, 0) == pytest.approx((576, 324))
    assert clamped(900, 500) == (900, 500)


def test_clamp_center_snaps_to_source_center_when_interval_is_empty(source_size):
    c = default_constraints()
    assert c.clamp_center(Point(10, 1000), source_size, 1.0) == Point(960, 540)


@pytest.mark.parametrize("center", [Point(0, 0), Point(1919, 3), Point(700, 800), Point(-50, 5000)])
@pytest.mark.parametrize("zoom", [1.0, 1.3, 2.0, 2.5])
def test_clamp_center_is_idempotent(source_size, center, zoom):
    c = default_constraints()
    once = c.clamp_center(center, source_size, zoom)
    assert c.clamp_center(once, source_size, zoom) == once


def test_clamp_center_neutralises_nan(source_size):
    c = default_constraints()
    clamped = c.clamp_center(Point(float("nan"), float("inf")), source_size, 2.0)
    assert math.isfinite(clamped.x) and math.isfinite(clamped.y)


@pytest.mark.parametrize("changes", [
    {"max_zoom": 0.5, "idle_zoom": 0.5},
    {"idle_zoom": 3.0},
    {"velocity_smoothing_alpha": 0.0},
    {"minimum_keyframe_interval": 0.0},
    {"min_visible_area_fraction": 0.0},
    {"max_pan_speed": float("nan")},
])
def test_invalid_constraints_raise(changes):
    with pytest.raises(ValueError):
        ZoomConstraints(**changes)


def test_settings_clamped():
    s = AutoZoomSettings(intensity=2.0, minimum_keyframe_interval=1.0).clamped()
    assert s.intensity == 1.0
    assert s.minimum_keyframe_interval == pytest.approx(0.1)

    s = AutoZoomSettings(intensity=float("nan"), minimum_keyframe_interval=0.0).clamped()
    assert s.intensity == 1.0
    assert s.minimum_keyframe_interval == pytest.approx(1 / 60)


def test_settings_from_dict_defaults_missing_keys():
    s = AutoZoomSettings.from_dict({"intensity": 0.4})
    assert s.is_enabled is True
    assert s.intensity == 0.4
    assert s.minimum_keyframe_interval == pytest.approx(1 / 30)
    assert AutoZoomSettings.from_dict(s.to_dict()) == s


def test_settings_constraints_use_scaled_values():
    c = AutoZoomSettings(intensity=0.5, minimum_keyframe_interval=0.05).constraints()
    assert c == scale(0.5, 0.05)
