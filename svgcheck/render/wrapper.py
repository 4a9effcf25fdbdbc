"""HTML wrapper that embeds the SVG document at a fixed size."""

from __future__ import annotations

import html
from pathlib import Path

SVG_ELEMENT_NAME = "svg_file"
SVG_ELEMENT_SELECTOR = f'img[name="{SVG_ELEMENT_NAME}"]'


def build_wrapper_html(document: Path, width: int, height: int) -> str:
    document = Path(document).absolute()
    title = html.escape(f"Getting screenshot from svg file {document.name}")
    src = html.escape(document.as_uri(), quote=True)
    return f"""<!DOCTYPE html>
<html>
  <head>
    <meta charset="utf-8">
    <title>{title}</title>
    <style>html, body {{ margin: 0; padding: 0; background: #ffffff; }}</style>
  </head>
  <body>
    <img name="{SVG_ELEMENT_NAME}" src="{src}" width="{width}" height="{height}" alt="{SVG_ELEMENT_NAME}">
  </body>
</html>
"""


def write_wrapper(document: Path, size: tuple[int, int], directory: Path) -> Path:
    """Write the wrapper page into ``directory`` and return its path."""
    width, height = size
    path = Path(directory) / "wrapper.html"
    path.write_text(build_wrapper_html(document, width, height), encoding="utf-8")
    return path
