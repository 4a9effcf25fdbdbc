"""Tests for the Pillow/numpy image engine."""

from pathlib import Path

import pytest
from PIL import Image

from svgcheck.errors import ComparisonUnavailable, ImageNotFound
from svgcheck.imaging.engine import DIFF_HIGHLIGHT, ImageEngine, estimate_jpeg_quality


@pytest.fixture
def engine() -> ImageEngine:
    return ImageEngine()


def _with_black_pixels(path: Path, points, size=(10, 10)) -> Path:
    image = Image.new("RGB", size, (255, 255, 255))
    for point in points:
        image.putpixel(point, (0, 0, 0))
    image.save(path)
    return path


class TestIdentify:
    def test_png(self, engine, png_factory, tmp_path):
        path = png_factory(tmp_path / "a.png", size=(30, 12))
        info = engine.identify(path)
        assert info["width"] == 30
        assert info["height"] == 12
        assert info["format"] == "PNG"
        assert info["quality"] == 0.0

    def test_jpeg_quality_estimate(self, engine, tmp_path):
        path = tmp_path / "a.jpg"
        Image.new("RGB", (16, 16), (120, 30, 60)).save(path, quality=75)
        info = engine.identify(path)
        assert info["format"] == "JPEG"
        assert abs(info["quality"] - 75) <= 2

    def test_missing_file(self, engine, tmp_path):
        with pytest.raises(ImageNotFound):
            engine.identify(tmp_path / "nope.png")

    def test_estimate_without_tables(self):
        assert estimate_jpeg_quality({}) == 0.0


class TestResizeCropTrim:
    def test_resize(self, engine, png_factory, tmp_path):
        source = png_factory(tmp_path / "a.png", size=(40, 20))
        assert engine.resize(source, tmp_path / "b.png", 20, 10) is True
        with Image.open(tmp_path / "b.png") as image:
            assert image.size == (20, 10)

    def test_resize_unwritable_destination_fails(self, engine, png_factory, tmp_path):
        source = png_factory(tmp_path / "a.png")
        assert engine.resize(source, tmp_path / "missing-dir" / "b.png", 20, 10) is False

    def test_resize_missing_source(self, engine, tmp_path):
        with pytest.raises(ImageNotFound):
            engine.resize(tmp_path / "nope.png", tmp_path / "b.png", 1, 1)

    def test_crop(self, engine, png_factory, tmp_path):
        source = png_factory(tmp_path / "a.png", size=(40, 20))
        assert engine.crop(source, tmp_path / "c.png", 10, 5, 3, 4) is True
        with Image.open(tmp_path / "c.png") as image:
            assert image.size == (10, 5)

    def test_crop_is_clamped_to_image(self, engine, png_factory, tmp_path):
        source = png_factory(tmp_path / "a.png", size=(40, 20))
        assert engine.crop(source, tmp_path / "c.png", 100, 100, 30, 10) is True
        with Image.open(tmp_path / "c.png") as image:
            assert image.size == (10, 10)

    def test_crop_outside_image_fails(self, engine, png_factory, tmp_path):
        source = png_factory(tmp_path / "a.png", size=(40, 20))
        assert engine.crop(source, tmp_path / "c.png", 10, 10, 50, 50) is False

    def test_trim_removes_uniform_border(self, engine, tmp_path):
        image = Image.new("RGB", (20, 20), (255, 255, 255))
        for x in range(5, 9):
            for y in range(6, 9):
                image.putpixel((x, y), (10, 200, 10))
        image.save(tmp_path / "border.png")

        assert engine.trim(tmp_path / "border.png", tmp_path / "trimmed.png") is True
        with Image.open(tmp_path / "trimmed.png") as trimmed:
            assert trimmed.size == (4, 3)

    def test_trim_single_colour_keeps_image(self, engine, png_factory, tmp_path):
        source = png_factory(tmp_path / "a.png", size=(8, 8))
        assert engine.trim(source, tmp_path / "t.png") is True
        with Image.open(tmp_path / "t.png") as image:
            assert image.size == (8, 8)


class TestCompare:
    def test_identical_file_is_zero(self, engine, png_factory, tmp_path):
        path = png_factory(tmp_path / "a.png")
        assert engine.compare(path, path, tmp_path / "diff.png", 0) == 0

    def test_counts_differing_pixels(self, engine, tmp_path):
        reference = _with_black_pixels(tmp_path / "ref.png", [])
        candidate = _with_black_pixels(tmp_path / "cand.png", [(0, 0), (3, 4), (9, 9)])
        assert engine.compare(reference, candidate, tmp_path / "diff.png", 15) == 3

    def test_fuzz_absorbs_small_colour_shift(self, engine, png_factory, tmp_path):
        reference = png_factory(tmp_path / "ref.png", size=(10, 10), color=(255, 255, 255))
        candidate = png_factory(tmp_path / "cand.png", size=(10, 10), color=(250, 250, 250))
        assert engine.compare(reference, candidate, tmp_path / "diff.png", 15) == 0
        assert engine.compare(reference, candidate, tmp_path / "diff.png", 1) == 100

    def test_transparent_reference_matches_white_page(self, engine, png_factory, tmp_path):
        reference = png_factory(tmp_path / "ref.png", size=(5, 5), color=(0, 0, 0, 0), mode="RGBA")
        candidate = png_factory(tmp_path / "cand.png", size=(5, 5))
        assert engine.compare(reference, candidate, tmp_path / "diff.png", 0) == 0

    def test_16bit_grayscale_reference_is_scaled(self, engine, png_factory, tmp_path):
        reference = tmp_path / "ref16.png"
        Image.new("I;16", (40, 20), 0x8080).save(reference, format="PNG")
        candidate = png_factory(tmp_path / "cand.png", size=(40, 20), color=(128, 128, 128))

        assert engine.compare(reference, candidate, tmp_path / "diff.png", 15) == 0
        assert engine.compare(reference, candidate, tmp_path / "diff.png", 0) == 0

    def test_16bit_grayscale_reference_still_detects_changes(self, engine, png_factory, tmp_path):
        reference = tmp_path / "ref16.png"
        Image.new("I;16", (10, 10), 0xFFFF).save(reference, format="PNG")
        candidate = png_factory(tmp_path / "cand.png", size=(10, 10), color=(0, 0, 0))

        assert engine.compare(reference, candidate, tmp_path / "diff.png", 15) == 100

    def test_writes_diff_artifact(self, engine, tmp_path):
        reference = _with_black_pixels(tmp_path / "ref.png", [])
        candidate = _with_black_pixels(tmp_path / "cand.png", [(2, 2)])
        diff = tmp_path / "diff.png"
        engine.compare(reference, candidate, diff, 15)

        with Image.open(diff) as image:
            assert image.size == (10, 10)
            assert image.getpixel((2, 2)) == DIFF_HIGHLIGHT
            assert image.getpixel((0, 0)) != DIFF_HIGHLIGHT

    def test_is_deterministic(self, engine, tmp_path):
        reference = _with_black_pixels(tmp_path / "ref.png", [(1, 1)])
        candidate = _with_black_pixels(tmp_path / "cand.png", [(1, 2), (5, 5)])
        first = engine.compare(reference, candidate, tmp_path / "diff.png", 15)
        second = engine.compare(reference, candidate, tmp_path / "diff.png", 15)
        assert first == second == 3

    def test_size_mismatch_is_unavailable(self, engine, png_factory, tmp_path):
        reference = png_factory(tmp_path / "ref.png", size=(10, 10))
        candidate = png_factory(tmp_path / "cand.png", size=(10, 11))
        with pytest.raises(ComparisonUnavailable, match="differ"):
            engine.compare(reference, candidate, tmp_path / "diff.png", 15)

    def test_unreadable_image_is_unavailable(self, engine, png_factory, tmp_path):
        reference = png_factory(tmp_path / "ref.png")
        candidate = tmp_path / "cand.png"
        candidate.write_text("not an image")
        with pytest.raises(ComparisonUnavailable):
            engine.compare(reference, candidate, tmp_path / "diff.png", 15)

    def test_missing_candidate(self, engine, png_factory, tmp_path):
        reference = png_factory(tmp_path / "ref.png")
        with pytest.raises(ImageNotFound):
            engine.compare(reference, tmp_path / "nope.png", tmp_path / "diff.png", 15)
