"""Baseline normalizer — shrinks an oversized baseline so it fits on the display.

Screenshots are captured at the working baseline's size, so shrinking the
baseline here keeps baseline and screenshot dimensions identical.
"""

from __future__ import annotations

import logging
import math
from pathlib import Path

from svgcheck.imaging.engine import ImageEngine
from svgcheck.models.images import DisplayBounds, ImageDescriptor
from svgcheck.paths import resized_baseline_path

logger = logging.getLogger(__name__)

DEFAULT_MARGIN = 100


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def axis_scale(size: int, bound: int, margin: int = DEFAULT_MARGIN) -> int:
    """Percentage an axis must be scaled to so it fits ``bound`` minus ``margin``."""
    if size <= bound:
        return 100
    return round_half_up(((bound - margin) / size) * 100)


def compute_scale(baseline: ImageDescriptor, bounds: DisplayBounds, margin: int = DEFAULT_MARGIN) -> int:
    """The more restrictive axis governs. Zero or below means the margin leaves no room."""
    return min(
        axis_scale(baseline.width, bounds.width, margin),
        axis_scale(baseline.height, bounds.height, margin),
    )


def scaled_size(baseline: ImageDescriptor, scale: int) -> tuple[int, int]:
    return (
        max(round_half_up(baseline.width * scale / 100), 1),
        max(round_half_up(baseline.height * scale / 100), 1),
    )


def normalize(
    baseline: ImageDescriptor,
    bounds: DisplayBounds,
    output_dir: Path,
    engine: ImageEngine | None = None,
    margin: int = DEFAULT_MARGIN,
) -> tuple[Path, bool]:
    """Return the working baseline path and whether it was resized.

    A failed resize falls back to the original baseline; the comparison can
    still run against an oversized reference.
    """
    scale = compute_scale(baseline, bounds, margin)
    if scale == 100:
        logger.info("Baseline %s fits %s, size unchanged", baseline.path.name, bounds)
        return baseline.path, False
    if scale <= 0:
        logger.warning(
            "Margin %d leaves no room on display %s, using baseline %s unchanged",
            margin, bounds, baseline.path.name,
        )
        return baseline.path, False

    engine = engine or ImageEngine()
    width, height = scaled_size(baseline, scale)
    destination = resized_baseline_path(baseline.path, output_dir)
    logger.debug(
        "Baseline %dx%d exceeds display %s, scaling to %d%%",
        baseline.width, baseline.height, bounds, scale,
    )
    if not engine.resize(baseline.path, destination, width, height):
        logger.warning("Could not resize baseline %s, using it unchanged", baseline.path)
        return baseline.path, False

    logger.info(
        "Baseline resized from %dx%d to %dx%d (%s)",
        baseline.width, baseline.height, width, height, destination,
    )
    return destination, True
