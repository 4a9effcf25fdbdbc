"""Configuration models for svgcheck."""

from __future__ import annotations

import json
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator

from svgcheck.models.images import DisplayBounds
from svgcheck.models.targets import RenderTarget

DEFAULT_SETTINGS_FILE = "svgcheck.json"


def _check_unique_targets(targets: list[RenderTarget]) -> list[RenderTarget]:
    if not targets:
        raise ValueError("At least one browser must be configured")
    seen = set()
    for target in targets:
        if target in seen:
            raise ValueError(f"Browser '{target.value}' listed more than once")
        seen.add(target)
    return targets


class Settings(BaseModel):
    """Persisted user settings, edited by ``svgcheck init`` or by hand."""

    # Comparison
    fuzz: float = Field(default=15.0, ge=0, le=100)
    threshold: int = Field(default=500, ge=0)

    # Baseline normalization
    display: DisplayBounds = Field(default_factory=DisplayBounds)
    margin: int = Field(default=100, ge=0)

    # Rendering
    browsers: list[RenderTarget] = Field(
        default_factory=lambda: [
            RenderTarget.CHROMIUM,
            RenderTarget.FIREFOX,
            RenderTarget.WEBKIT,
        ]
    )
    render_timeout_seconds: float = Field(default=60.0, gt=0)
    max_parallel_targets: int = Field(default=3, ge=1)
    headless: bool = True
    executable_paths: dict[RenderTarget, str] = Field(default_factory=dict)

    # Diagnostics
    log_file: str = "svgcheck.log"

    @field_validator("browsers")
    @classmethod
    def browsers_unique(cls, v: list[RenderTarget]) -> list[RenderTarget]:
        return _check_unique_targets(v)

    @classmethod
    def load(cls, path: str | Path) -> "Settings":
        """Load settings from a JSON file."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Settings file not found: {path}")
        with open(path) as f:
            data = json.load(f)
        return cls(**data)

    @classmethod
    def load_or_create(cls, path: str | Path) -> "Settings":
        """Load settings, writing the defaults first if the file does not exist yet."""
        path = Path(path)
        if path.exists():
            return cls.load(path)
        settings = cls()
        settings.save(path)
        return settings

    def save(self, path: str | Path) -> None:
        """Save settings to a JSON file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            json.dump(self.model_dump(mode="json"), f, indent=2)


class RunConfiguration(BaseModel):
    """Fully resolved, read-only input for a single run."""

    model_config = ConfigDict(frozen=True)

    document: Path
    baseline: Path
    output_dir: Path
    targets: tuple[RenderTarget, ...]
    fuzz: float = Field(default=15.0, ge=0, le=100)
    threshold: int = Field(default=500, ge=0)
    display: DisplayBounds = Field(default_factory=DisplayBounds)
    margin: int = Field(default=100, ge=0)
    render_timeout_seconds: float = Field(default=60.0, gt=0)
    max_parallel_targets: int = Field(default=3, ge=1)
    headless: bool = True
    executable_paths: dict[RenderTarget, str] = Field(default_factory=dict)

    @field_validator("targets")
    @classmethod
    def targets_unique(cls, v: tuple[RenderTarget, ...]) -> tuple[RenderTarget, ...]:
        return tuple(_check_unique_targets(list(v)))

    @field_validator("document")
    @classmethod
    def document_is_svg(cls, v: Path) -> Path:
        if v.suffix.lower() != ".svg":
            raise ValueError(f"Document {v} is not an SVG file")
        return v

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        document: Path,
        baseline: Path,
        output_dir: Path,
        targets: list[RenderTarget] | None = None,
        **overrides,
    ) -> "RunConfiguration":
        """Combine persisted settings with per-run arguments. ``None`` overrides are ignored."""
        values = {
            "fuzz": settings.fuzz,
            "threshold": settings.threshold,
            "display": settings.display,
            "margin": settings.margin,
            "render_timeout_seconds": settings.render_timeout_seconds,
            "max_parallel_targets": settings.max_parallel_targets,
            "headless": settings.headless,
            "executable_paths": settings.executable_paths,
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(
            document=document,
            baseline=baseline,
            output_dir=output_dir,
            targets=tuple(targets or settings.browsers),
            **values,
        )
