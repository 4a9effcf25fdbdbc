"""Browser engines a document can be rendered in."""

from __future__ import annotations

from enum import Enum
from typing import Optional


class RenderTarget(str, Enum):
    """Closed set of supported render targets.

    Each variant maps to a Playwright browser type and, for branded builds,
    a release channel. Adding a target means adding a variant here.
    """

    CHROMIUM = "chromium"
    CHROME = "chrome"
    MSEDGE = "msedge"
    FIREFOX = "firefox"
    WEBKIT = "webkit"

    @property
    def engine(self) -> str:
        """Name of the Playwright browser type attribute (``chromium``, ``firefox``, ``webkit``)."""
        return _ENGINES[self]

    @property
    def channel(self) -> Optional[str]:
        return _CHANNELS.get(self)

    @property
    def slug(self) -> str:
        return self.value

    @property
    def label(self) -> str:
        return self.name

    @classmethod
    def parse(cls, name: str) -> "RenderTarget":
        """Look up a target by case-insensitive name."""
        try:
            return cls(name.strip().lower())
        except ValueError:
            valid = ", ".join(t.value for t in cls)
            raise ValueError(f"Invalid browser '{name}'. Valid values: {valid}") from None

    @classmethod
    def parse_list(cls, names: str) -> list["RenderTarget"]:
        """Parse a comma-separated list such as ``chrome,firefox``."""
        return [cls.parse(n) for n in names.split(",") if n.strip()]


_ENGINES = {
    RenderTarget.CHROMIUM: "chromium",
    RenderTarget.CHROME: "chromium",
    RenderTarget.MSEDGE: "chromium",
    RenderTarget.FIREFOX: "firefox",
    RenderTarget.WEBKIT: "webkit",
}

_CHANNELS = {
    RenderTarget.CHROME: "chrome",
    RenderTarget.MSEDGE: "msedge",
}
