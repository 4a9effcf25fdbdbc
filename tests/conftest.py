"""Pytest configuration and shared fixtures."""

import asyncio
from pathlib import Path

import pytest
from PIL import Image

from svgcheck.errors import RenderFailed
from svgcheck.models.config import RunConfiguration, Settings
from svgcheck.models.images import DisplayBounds
from svgcheck.models.targets import RenderTarget

SVG_SOURCE = """<?xml version="1.0" encoding="UTF-8"?>
<svg xmlns="http://www.w3.org/2000/svg" width="40" height="20">
  <rect width="40" height="20" fill="#ffffff"/>
</svg>
"""


def make_png(path: Path, size=(40, 20), color=(255, 255, 255), mode="RGB") -> Path:
    """Write a solid colour PNG and return its path."""
    path.parent.mkdir(parents=True, exist_ok=True)
    Image.new(mode, size, color).save(path, format="PNG")
    return path


class FakeProvider:
    """Stands in for Playwright: writes a solid image of the requested size."""

    def __init__(self, color=(255, 255, 255), failures=None, delays=None, sizes=None):
        self.color = color
        self.failures = failures or {}
        self.delays = delays or {}
        self.sizes = sizes or {}
        self.calls: list[tuple[RenderTarget, tuple[int, int]]] = []

    async def capture(self, target, document, size, destination):
        self.calls.append((target, size))
        await asyncio.sleep(self.delays.get(target, 0))
        if target in self.failures:
            raise RenderFailed(target, self.failures[target])
        make_png(Path(destination), size=self.sizes.get(target, size), color=self.color)
        return Path(destination)


# ============================================================================
# File Fixtures
# ============================================================================


@pytest.fixture
def svg_document(tmp_path: Path) -> Path:
    """Create a small SVG document."""
    path = tmp_path / "drawing.svg"
    path.write_text(SVG_SOURCE)
    return path


@pytest.fixture
def baseline_png(tmp_path: Path) -> Path:
    """Create a white 40x20 baseline."""
    return make_png(tmp_path / "baseline.png")


@pytest.fixture
def output_dir(tmp_path: Path) -> Path:
    return tmp_path / "drawing_svg_screenshots"


# ============================================================================
# Configuration Fixtures
# ============================================================================


@pytest.fixture
def settings() -> Settings:
    return Settings()


@pytest.fixture
def run_config(svg_document: Path, baseline_png: Path, output_dir: Path) -> RunConfiguration:
    """Create a run configuration over three targets."""
    return RunConfiguration(
        document=svg_document,
        baseline=baseline_png,
        output_dir=output_dir,
        targets=(RenderTarget.CHROMIUM, RenderTarget.FIREFOX, RenderTarget.WEBKIT),
        fuzz=15.0,
        threshold=0,
        display=DisplayBounds(width=1920, height=1080),
        render_timeout_seconds=5,
    )


# ============================================================================
# Helper Fixtures
# ============================================================================


@pytest.fixture
def png_factory():
    """Return the PNG writer so tests can build their own images."""
    return make_png


@pytest.fixture
def provider_factory():
    """Return the fake browser provider class."""
    return FakeProvider
