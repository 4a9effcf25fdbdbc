"""Shared path utilities — derive artifact names inside the output directory."""

from __future__ import annotations

from pathlib import Path


def flatten_name(path: Path) -> str:
    """Turn ``drawing.svg`` into ``drawing_svg`` so derived names keep the source extension."""
    return Path(path).name.replace(".", "_")


def output_file(source: Path, output_dir: Path, postfix: str = "", extension: str = "png") -> Path:
    """Build an artifact path named after ``source`` inside ``output_dir``."""
    return Path(output_dir) / f"{flatten_name(source)}{postfix}.{extension}"


def screenshot_path(document: Path, output_dir: Path, target_slug: str) -> Path:
    return output_file(document, output_dir, f"-screen-by-{target_slug}")


def compare_result_path(screenshot: Path, output_dir: Path) -> Path:
    return output_file(screenshot, output_dir, "-compare-result")


def resized_baseline_path(baseline: Path, output_dir: Path) -> Path:
    return output_file(baseline, output_dir, "-resize")


def default_output_dir(document: Path, parent: Path | None = None) -> Path:
    """Directory used for a run's artifacts: ``{parent}/{document}_screenshots``."""
    base = Path(parent) if parent is not None else Path.cwd()
    return base / f"{flatten_name(document)}_screenshots"
