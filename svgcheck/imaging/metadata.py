"""Image metadata adapter — answers "what are this file's dimensions, quality, format?"."""

from __future__ import annotations

import logging
from pathlib import Path

from pydantic import ValidationError

from svgcheck.errors import ImageNotFound, InspectionFailed
from svgcheck.imaging.engine import ImageEngine
from svgcheck.models.images import ImageDescriptor

logger = logging.getLogger(__name__)


def inspect_image(path: Path, engine: ImageEngine | None = None) -> ImageDescriptor:
    """Inspect an image file.

    Raises:
        ImageNotFound: The file does not exist.
        InspectionFailed: The file is not a readable image, or its metadata
            is not usable (non-numeric or non-positive dimensions).
    """
    path = Path(path)
    if not path.exists():
        raise ImageNotFound(path.absolute())

    engine = engine or ImageEngine()
    try:
        info = engine.identify(path)
    except ImageNotFound:
        raise
    except Exception as e:
        # Pillow raises a mix of OSError, ValueError and decoder specific errors
        raise InspectionFailed(path.absolute(), str(e)) from e

    try:
        descriptor = ImageDescriptor(
            width=info["width"],
            height=info["height"],
            quality=info["quality"],
            format=info["format"] or "",
            path=path.absolute(),
        )
    except (KeyError, TypeError, ValidationError) as e:
        raise InspectionFailed(path.absolute(), "Can't get image info.") from e

    logger.debug(
        "Inspected %s: %dx%d %s (quality %.0f)",
        path, descriptor.width, descriptor.height, descriptor.format, descriptor.quality,
    )
    return descriptor
