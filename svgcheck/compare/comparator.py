"""Comparator — fuzzy pixel diff between the working baseline and a screenshot."""

from __future__ import annotations

import logging
from pathlib import Path

from svgcheck.errors import ComparisonUnavailable, ImageNotFound
from svgcheck.imaging.engine import ImageEngine
from svgcheck.models.results import ComparisonResult, ComparisonStatus
from svgcheck.paths import compare_result_path

logger = logging.getLogger(__name__)


def classify(differing_pixel_count: int, threshold: int) -> ComparisonStatus:
    """Pass when the count is within ``0..threshold`` inclusive."""
    if 0 <= differing_pixel_count <= threshold:
        return ComparisonStatus.PASS
    return ComparisonStatus.FAIL


class Comparator:
    def __init__(self, output_dir: Path, engine: ImageEngine | None = None):
        self.output_dir = Path(output_dir)
        self.engine = engine or ImageEngine()

    def compare(self, reference: Path, candidate: Path, fuzz: float, threshold: int) -> ComparisonResult:
        """Compare ``candidate`` against ``reference``; engine failures become an ``error`` result."""
        artifact = compare_result_path(candidate, self.output_dir)
        try:
            count = self.engine.compare(reference, candidate, artifact, fuzz)
        except (ComparisonUnavailable, ImageNotFound) as e:
            logger.error("Comparing %s with %s failed: %s", reference, candidate, e)
            return ComparisonResult(
                status=ComparisonStatus.ERROR,
                diagnostic=str(e),
                artifact_path=artifact if artifact.exists() else None,
            )

        status = classify(count, threshold)
        logger.info(
            "Comparing %s with %s: %d differing pixels (fuzz %g%%, threshold %d) -> %s",
            Path(reference).name, Path(candidate).name, count, fuzz, threshold, status.value,
        )
        return ComparisonResult(status=status, differing_pixel_count=count, artifact_path=artifact)
