import numpy as np
import pytest

from ascii_camera.controller import RESOLUTION_PRESETS, RenderParameters
from ascii_camera.processor import (
    FrameProcessor,
    adjust_contrast_brightness,
    compute_output_size,
    to_grayscale,
)

from conftest import bgr_frame


def test_aspect_fit_for_vga_into_default_box():
    width, height = compute_output_size(640, 480, 80, 24)
    assert width <= 80
    assert height <= 24
    assert width / height == pytest.approx((640 / 480) * 2, rel=0.05)
    assert (width, height) == (64, 24)


def test_wide_source_fits_width():
    width, height = compute_output_size(1920, 1080, 80, 24)
    assert width == 80
    # 22.5 cells rounds half to even.
    assert height == 22


def test_tall_source_fits_height():
    assert compute_output_size(480, 640, 80, 24) == (36, 24)


def test_degenerate_source_keeps_at_least_one_cell():
    assert compute_output_size(1, 1000, 80, 24) == (1, 24)
    assert compute_output_size(1000, 1, 80, 24) == (80, 1)


@pytest.mark.parametrize("source", [(640, 480), (1280, 720), (480, 640), (333, 111), (100, 900)])
@pytest.mark.parametrize("preset", sorted(RESOLUTION_PRESETS))
def test_output_never_exceeds_target_box(source, preset):
    _, target_width, target_height = RESOLUTION_PRESETS[preset]
    width, height = compute_output_size(*source, target_width, target_height)
    assert 1 <= width <= target_width
    assert 1 <= height <= target_height


def test_invalid_source_size_rejected():
    with pytest.raises(ValueError):
        compute_output_size(0, 480, 80, 24)


def test_single_channel_passes_through():
    gray = np.arange(12, dtype=np.uint8).reshape(3, 4)
    assert to_grayscale(gray) is gray
    np.testing.assert_array_equal(to_grayscale(gray[:, :, None]), gray)


@pytest.mark.parametrize(
    "bgr, expected",
    [((255, 0, 0), 29), ((0, 255, 0), 150), ((0, 0, 255), 76), ((255, 255, 255), 255)],
)
def test_color_reduction_uses_perceptual_weights(bgr, expected):
    frame = bgr_frame(4, 4, bgr)
    assert abs(int(to_grayscale(frame)[0, 0]) - expected) <= 1


def test_four_channel_frames_are_reduced():
    frame = np.zeros((4, 4, 4), dtype=np.uint8)
    frame[:, :] = (0, 255, 0, 255)
    assert abs(int(to_grayscale(frame)[0, 0]) - 150) <= 1


def test_contrast_and_brightness_are_linear_and_clamped():
    gray = np.array([[0, 50, 100, 200]], dtype=np.uint8)
    np.testing.assert_array_equal(adjust_contrast_brightness(gray, 2.0, 20), [[20, 120, 220, 255]])
    np.testing.assert_array_equal(adjust_contrast_brightness(gray, 1.0, -100), [[0, 0, 0, 100]])


def test_process_returns_grid_of_computed_size(context):
    grid = FrameProcessor(context.log).process(bgr_frame(), RenderParameters())
    assert grid.shape == (64, 24)
    assert set(np.unique(grid.pixels)) == {100}


def test_process_applies_parameters(context):
    params = RenderParameters(contrast=2.0, brightness=20, target_width=40, target_height=15)
    grid = FrameProcessor(context.log).process(bgr_frame(), params)
    assert grid.shape == (40, 15)
    assert set(np.unique(grid.pixels)) == {220}


@pytest.mark.parametrize("frame", [None, np.zeros((0, 0, 3), dtype=np.uint8), np.zeros((0,), dtype=np.uint8)])
def test_absent_or_empty_frames_yield_none(context, frame):
    assert FrameProcessor(context.log).process(frame, RenderParameters()) is None
