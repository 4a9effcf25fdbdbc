"""Browser automation provider — renders the wrapped SVG in Playwright and captures it."""

from __future__ import annotations

import asyncio
import logging
import tempfile
from pathlib import Path
from typing import Optional, Protocol

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Playwright, async_playwright

from svgcheck.errors import RenderFailed
from svgcheck.imaging.engine import ImageEngine
from svgcheck.models.images import DisplayBounds
from svgcheck.models.targets import RenderTarget

from .wrapper import SVG_ELEMENT_SELECTOR, write_wrapper

logger = logging.getLogger(__name__)

BROWSER_CLOSE_TIMEOUT = 10.0

_MISSING_BINARY_MARKERS = (
    "Executable doesn't exist",
    "is not found at",
)


class BrowserProvider(Protocol):
    async def capture(
        self, target: RenderTarget, document: Path, size: tuple[int, int], destination: Path,
    ) -> Path:
        ...


def describe_playwright_error(error: Exception) -> str:
    """Reduce a Playwright error to its first line, flagging missing browsers."""
    message = str(error).strip()
    first_line = message.splitlines()[0] if message else type(error).__name__
    if any(marker in message for marker in _MISSING_BINARY_MARKERS):
        return f"browser binary not found ({first_line})"
    return first_line


class PlaywrightProvider:
    """Captures the rendered ``<img>`` element of the wrapper page in a real browser.

    Every capture launches its own browser and uses its own temporary
    directory, so concurrent captures share nothing but the output directory.
    """

    def __init__(
        self,
        display: DisplayBounds | None = None,
        engine: ImageEngine | None = None,
        headless: bool = True,
        executable_paths: Optional[dict[RenderTarget, str]] = None,
    ):
        self.display = display or DisplayBounds()
        self.engine = engine or ImageEngine()
        self.headless = headless
        self.executable_paths = executable_paths or {}

    async def capture(
        self, target: RenderTarget, document: Path, size: tuple[int, int], destination: Path,
    ) -> Path:
        with tempfile.TemporaryDirectory(prefix=f"svgcheck-{target.slug}-") as workdir:
            workdir = Path(workdir)
            wrapper = write_wrapper(document, size, workdir)
            full_screenshot = workdir / "full.png"

            try:
                async with async_playwright() as p:
                    box = await self._shoot(p, target, wrapper, full_screenshot)
            except PlaywrightError as e:
                raise RenderFailed(target, describe_playwright_error(e)) from e

            x, y = round(box["x"]), round(box["y"])
            width, height = round(box["width"]), round(box["height"])
            logger.debug("[%s] element at %dx%d+%d+%d", target.label, width, height, x, y)
            cropped = await asyncio.to_thread(
                self.engine.crop, full_screenshot, destination, width, height, x, y,
            )
            if not cropped:
                raise RenderFailed(target, "could not crop the screenshot to the rendered element")
        return destination

    async def _shoot(self, p: Playwright, target: RenderTarget, wrapper: Path, screenshot: Path) -> dict:
        browser_type = getattr(p, target.engine)
        launch_kwargs: dict = {"headless": self.headless}
        if target.channel:
            launch_kwargs["channel"] = target.channel
        if target in self.executable_paths:
            launch_kwargs["executable_path"] = self.executable_paths[target]

        logger.debug("Launching %s with %s", target.label, launch_kwargs)
        browser = await browser_type.launch(**launch_kwargs)
        try:
            context = await browser.new_context(
                viewport={"width": self.display.width, "height": self.display.height},
                device_scale_factor=1,
            )
            page = await context.new_page()
            await page.goto(wrapper.as_uri(), wait_until="load")
            box = await page.locator(SVG_ELEMENT_SELECTOR).bounding_box()
            if box is None:
                raise RenderFailed(target, "rendered element not found on the wrapper page")
            await page.screenshot(path=str(screenshot), full_page=True)
            return box
        finally:
            await self._close(target, browser)

    async def _close(self, target: RenderTarget, browser) -> None:
        try:
            await asyncio.wait_for(browser.close(), timeout=BROWSER_CLOSE_TIMEOUT)
        except asyncio.TimeoutError:
            logger.warning("%s did not close within %gs, leaving it behind", target.label, BROWSER_CLOSE_TIMEOUT)
        except PlaywrightError as e:
            logger.warning("Error while closing %s: %s", target.label, e)
