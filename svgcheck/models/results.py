"""Comparison result data structures produced by the orchestrator."""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from svgcheck.models.targets import RenderTarget


class ComparisonStatus(str, Enum):
    PASS = "pass"
    FAIL = "fail"
    ERROR = "error"


class ComparisonResult(BaseModel):
    """Verdict of a single reference/candidate comparison."""

    model_config = ConfigDict(frozen=True)

    status: ComparisonStatus
    differing_pixel_count: Optional[int] = Field(default=None, ge=0)
    diagnostic: Optional[str] = None
    artifact_path: Optional[Path] = None


class ComparisonOutcome(BaseModel):
    """One row of the run report, one per requested target."""

    model_config = ConfigDict(frozen=True)

    target: RenderTarget
    status: ComparisonStatus
    differing_pixel_count: Optional[int] = Field(default=None, ge=0)  # None for errors
    diagnostic: Optional[str] = None
    artifact_path: Optional[Path] = None  # diff image; None when the render failed
    screenshot_path: Optional[Path] = None

    @property
    def is_equal(self) -> bool:
        return self.status == ComparisonStatus.PASS


class RunReport(BaseModel):
    output_dir: Path
    baseline: Path
    working_baseline: Path
    baseline_resized: bool = False
    outcomes: list[ComparisonOutcome] = Field(default_factory=list)

    @property
    def passed(self) -> int:
        return sum(1 for o in self.outcomes if o.status == ComparisonStatus.PASS)

    @property
    def failed(self) -> int:
        return sum(1 for o in self.outcomes if o.status == ComparisonStatus.FAIL)

    @property
    def errors(self) -> int:
        return sum(1 for o in self.outcomes if o.status == ComparisonStatus.ERROR)
