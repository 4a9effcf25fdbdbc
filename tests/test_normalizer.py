"""Tests for the baseline normalizer."""

from pathlib import Path
from unittest.mock import Mock

import pytest
from PIL import Image

from svgcheck.baseline.normalizer import axis_scale, compute_scale, normalize, round_half_up, scaled_size
from svgcheck.models.images import DisplayBounds, ImageDescriptor

FULL_HD = DisplayBounds(width=1920, height=1080)


def _descriptor(width: int, height: int, path: Path = Path("/pics/base.png")) -> ImageDescriptor:
    return ImageDescriptor(width=width, height=height, quality=0, format="PNG", path=path)


class TestScale:
    def test_fits_within_margin_is_unscaled(self):
        assert compute_scale(_descriptor(1820, 980), FULL_HD) == 100

    def test_fits_bounds_but_not_margin_is_unscaled(self):
        # Scaling only kicks in once an axis exceeds the display itself
        assert compute_scale(_descriptor(1920, 1080), FULL_HD) == 100

    def test_wide_baseline(self):
        baseline = _descriptor(2000, 1000)
        assert axis_scale(2000, 1920) == 91
        assert axis_scale(1000, 1080) == 100
        assert compute_scale(baseline, FULL_HD) == 91
        assert scaled_size(baseline, 91) == (1820, 910)

    def test_height_governs(self):
        # width: round(1820/2000*100)=91, height: round(980/1400*100)=70
        assert compute_scale(_descriptor(2000, 1400), FULL_HD) == 70

    def test_equal_scales(self):
        bounds = DisplayBounds(width=1100, height=1100)
        assert compute_scale(_descriptor(2000, 2000), bounds) == 50

    def test_rounds_half_up(self):
        # (5 / 8) * 100 = 62.5
        assert axis_scale(8, 5, margin=0) == 63
        assert round_half_up(2.5) == 3

    def test_margin_filling_display_leaves_no_scale(self):
        bounds = DisplayBounds(width=100, height=100)
        assert compute_scale(_descriptor(200, 200), bounds, margin=100) == 0
        assert compute_scale(_descriptor(200, 200), bounds, margin=150) < 0


class TestNormalize:
    def test_small_baseline_is_used_unchanged(self, tmp_path):
        engine = Mock()
        baseline = _descriptor(800, 600)
        path, resized = normalize(baseline, FULL_HD, tmp_path, engine=engine)
        assert path == baseline.path
        assert resized is False
        engine.resize.assert_not_called()

    def test_oversized_baseline_requests_resize(self, tmp_path):
        engine = Mock()
        engine.resize.return_value = True
        baseline = _descriptor(2000, 1000)

        path, resized = normalize(baseline, FULL_HD, tmp_path, engine=engine)

        assert resized is True
        assert path == tmp_path / "base_png-resize.png"
        engine.resize.assert_called_once_with(baseline.path, path, 1820, 910)

    def test_resize_failure_falls_back_to_original(self, tmp_path):
        engine = Mock()
        engine.resize.return_value = False
        baseline = _descriptor(2000, 1000)

        path, resized = normalize(baseline, FULL_HD, tmp_path, engine=engine)

        assert path == baseline.path
        assert resized is False

    def test_margin_filling_display_keeps_original(self, tmp_path):
        engine = Mock()
        baseline = _descriptor(200, 200)

        path, resized = normalize(baseline, DisplayBounds(width=100, height=100), tmp_path,
                                  engine=engine, margin=100)

        assert (path, resized) == (baseline.path, False)
        engine.resize.assert_not_called()

    def test_resizes_real_file(self, png_factory, tmp_path):
        source = png_factory(tmp_path / "big.png", size=(400, 200))
        baseline = _descriptor(400, 200, path=source)
        bounds = DisplayBounds(width=300, height=300)
        out = tmp_path / "out"
        out.mkdir()

        path, resized = normalize(baseline, bounds, out, margin=100)

        assert resized is True
        with Image.open(path) as image:
            assert image.size == (200, 100)

    @pytest.mark.parametrize("margin", [0, 50, 100])
    def test_fitting_baseline_ignores_margin(self, tmp_path, margin):
        baseline = _descriptor(100, 100)
        path, resized = normalize(baseline, FULL_HD, tmp_path, engine=Mock(), margin=margin)
        assert (path, resized) == (baseline.path, False)
