from __future__ import annotations

import pytest

from photostamp.geometry import compute_scaled_size, longest_side


def test_landscape_scales_by_width():
    assert compute_scaled_size(1200, 800, 600) == (600, 400)


def test_portrait_scales_by_height():
    assert compute_scaled_size(800, 1200, 600) == (400, 600)


def test_square_scales_by_height():
    assert compute_scaled_size(500, 500, 320) == (320, 320)


def test_other_side_is_rounded():
    # 400 * 640 / 600 = 426.67
    assert compute_scaled_size(600, 400, 640) == (640, 427)


def test_enlarges_small_images():
    assert compute_scaled_size(60, 40, 600) == (600, 400)


def test_thin_images_clamp_to_one_pixel():
    assert compute_scaled_size(5000, 2, 100) == (100, 1)
    assert compute_scaled_size(2, 5000, 100) == (1, 100)


@pytest.mark.parametrize("longest", [0, -1])
def test_non_positive_target_raises(longest):
    with pytest.raises(ValueError):
        compute_scaled_size(100, 100, longest)


@pytest.mark.parametrize(
    "width,height",
    [(1, 1), (3, 7), (640, 480), (1024, 768), (4000, 3000), (3000, 4000), (123, 4567)],
)
@pytest.mark.parametrize("target", [1, 8, 320, 600, 999])
def test_longest_side_hits_target_and_keeps_aspect(width, height, target):
    out_w, out_h = compute_scaled_size(width, height, target)

    assert max(out_w, out_h) == target
    assert min(out_w, out_h) >= 1
    if min(out_w, out_h) > 1:
        # Rounding moves the short side by at most half a pixel.
        assert abs(out_w / out_h - width / height) <= (width / height) * (1 / min(out_w, out_h))


def test_longest_side_helper():
    assert longest_side(10, 20) == 20
    assert longest_side(20, 10) == 20
    assert longest_side(7, 7) == 7
