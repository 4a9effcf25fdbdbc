"""Image processing engine — metadata, resize, crop, trim and fuzzy comparison.

Built on Pillow for decoding/encoding and numpy for the per-pixel math. Every
operation works file-to-file so callers only ever deal with paths.
"""

from __future__ import annotations

import logging
from pathlib import Path

import numpy as np
from PIL import Image, ImageChops

from svgcheck.errors import ComparisonUnavailable, ImageNotFound

logger = logging.getLogger(__name__)

# libjpeg's standard luminance quantization table (quality 50)
_STD_LUMINANCE_QUANT = (
    16, 11, 10, 16, 24, 40, 51, 61,
    12, 12, 14, 19, 26, 58, 60, 55,
    14, 13, 16, 24, 40, 57, 69, 56,
    14, 17, 22, 29, 51, 87, 80, 62,
    18, 22, 37, 56, 68, 109, 103, 77,
    24, 35, 55, 64, 81, 104, 113, 92,
    49, 64, 78, 87, 103, 121, 120, 101,
    72, 92, 95, 98, 112, 100, 103, 99,
)

DIFF_HIGHLIGHT = (241, 0, 30)
DIFF_FADE = 0.7


def estimate_jpeg_quality(quantization: dict) -> float:
    """Estimate the encoder quality setting from a JPEG's luminance table."""
    table = quantization.get(0)
    if not table:
        return 0.0
    scale = sum(table) * 100.0 / sum(_STD_LUMINANCE_QUANT)
    if scale <= 0:
        return 100.0
    quality = (200.0 - scale) / 2.0 if scale <= 100 else 5000.0 / scale
    return float(min(max(round(quality), 1), 100))


def _to_8bit(image: Image.Image) -> Image.Image:
    """Scale 16-bit grayscale samples down to 8 bits; ``convert`` would clip them."""
    if image.mode == "I" or image.mode.startswith("I;16"):
        samples = np.asarray(image, dtype=np.uint32) >> 8
        return Image.fromarray(np.clip(samples, 0, 255).astype(np.uint8), "L")
    return image


def _flatten(image: Image.Image) -> Image.Image:
    """Composite onto white, the page background the browser renders over."""
    rgba = _to_8bit(image).convert("RGBA")
    background = Image.new("RGBA", rgba.size, (255, 255, 255, 255))
    return Image.alpha_composite(background, rgba).convert("RGB")


def _require(path: Path) -> Path:
    path = Path(path)
    if not path.exists():
        raise ImageNotFound(path)
    return path


class ImageEngine:
    """File based image operations used by the normalizer, renderer and comparator."""

    def identify(self, path: Path) -> dict:
        """Return ``width``, ``height``, ``quality`` and ``format`` of an image.

        Raises whatever Pillow raises for unreadable input; the metadata
        adapter turns that into ``InspectionFailed``.
        """
        path = _require(path)
        with Image.open(path) as image:
            image.load()
            if image.format == "JPEG":
                quality = estimate_jpeg_quality(getattr(image, "quantization", None) or {})
            else:
                quality = image.info.get("quality", 0.0)
            return {
                "width": image.width,
                "height": image.height,
                "quality": quality,
                "format": image.format,
            }

    def resize(self, source: Path, destination: Path, width: int, height: int) -> bool:
        source = _require(source)
        try:
            with Image.open(source) as image:
                resized = image.resize((width, height), Image.Resampling.LANCZOS)
                resized.save(destination)
            return True
        except (OSError, ValueError) as e:
            logger.error("Error while resizing image %s: %s", source, e, exc_info=True)
            return False

    def crop(self, source: Path, destination: Path, width: int, height: int, x: int, y: int) -> bool:
        """Cut a ``width`` x ``height`` region at ``(x, y)``, clamped to the image."""
        source = _require(source)
        try:
            with Image.open(source) as image:
                left = max(0, x)
                top = max(0, y)
                right = min(image.width, x + width)
                bottom = min(image.height, y + height)
                if right <= left or bottom <= top:
                    logger.error(
                        "Crop box %dx%d+%d+%d lies outside %s (%dx%d)",
                        width, height, x, y, source, image.width, image.height,
                    )
                    return False
                image.crop((left, top, right, bottom)).save(destination)
            return True
        except (OSError, ValueError) as e:
            logger.error("Error while cropping image %s: %s", source, e, exc_info=True)
            return False

    def trim(self, source: Path, destination: Path) -> bool:
        """Remove the border whose colour matches the top-left pixel."""
        source = _require(source)
        try:
            with Image.open(source) as image:
                rgba = image.convert("RGBA")
                background = Image.new("RGBA", rgba.size, rgba.getpixel((0, 0)))
                bands = ImageChops.difference(rgba, background).split()
                changed = bands[0]
                for band in bands[1:]:
                    changed = ImageChops.lighter(changed, band)
                bbox = changed.getbbox()
                if bbox is None:
                    logger.warning("Image %s is a single colour, nothing to trim", source)
                    image.save(destination)
                else:
                    image.crop(bbox).save(destination)
            return True
        except (OSError, ValueError) as e:
            logger.error("Error while trimming image %s: %s", source, e, exc_info=True)
            return False

    def compare(self, first: Path, second: Path, diff_path: Path, fuzz: float) -> int:
        """Count pixels whose colour distance exceeds ``fuzz`` percent of full scale.

        Distance is the RMS of the RGB channel differences after flattening
        onto white, normalized to 0..1. A diff image (faded reference with the
        differing pixels highlighted) is written to ``diff_path``.
        """
        first = _require(first)
        second = _require(second)
        try:
            with Image.open(first) as a, Image.open(second) as b:
                reference = _flatten(a)
                candidate = _flatten(b)
        except (OSError, ValueError) as e:
            raise ComparisonUnavailable(f"Unable to read images for comparison: {e}") from e

        if reference.size != candidate.size:
            raise ComparisonUnavailable(
                f"Image widths or heights differ: {reference.size[0]}x{reference.size[1]} "
                f"vs {candidate.size[0]}x{candidate.size[1]}"
            )

        ref = np.asarray(reference, dtype=np.float64) / 255.0
        cand = np.asarray(candidate, dtype=np.float64) / 255.0
        distance = np.sqrt(np.mean((ref - cand) ** 2, axis=2))
        mask = distance > fuzz / 100.0
        count = int(np.count_nonzero(mask))

        self._write_diff(reference, mask, diff_path)
        return count

    def _write_diff(self, reference: Image.Image, mask: np.ndarray, diff_path: Path) -> None:
        white = Image.new("RGB", reference.size, (255, 255, 255))
        faded = Image.blend(reference.convert("L").convert("RGB"), white, DIFF_FADE)
        pixels = np.array(faded)
        pixels[mask] = DIFF_HIGHLIGHT
        try:
            Image.fromarray(pixels).save(diff_path)
        except (OSError, ValueError) as e:
            logger.warning("Could not write diff image %s: %s", diff_path, e)
