"""Error taxonomy for visual regression runs."""

from __future__ import annotations


class VisualCheckError(Exception):
    """Base class for all errors raised by svgcheck."""


class ImageNotFound(VisualCheckError, FileNotFoundError):
    """A referenced image or document does not exist."""

    def __init__(self, path):
        self.path = path
        super().__init__(f"Image file {path} not found!")


class InspectionFailed(VisualCheckError):
    """An image exists but could not be read or returned malformed metadata."""

    def __init__(self, path, reason: str = ""):
        self.path = path
        self.reason = reason
        message = f"Error while reading image file {path}"
        if reason:
            message = f"{message}. {reason}"
        super().__init__(message)


class RenderFailed(VisualCheckError):
    """A browser target could not produce a screenshot."""

    def __init__(self, target, cause: str):
        self.target = target
        self.cause = cause
        super().__init__(f"Render in {getattr(target, 'label', target)} failed: {cause}")


class ComparisonUnavailable(VisualCheckError):
    """The diff engine could not produce a usable pixel count."""
