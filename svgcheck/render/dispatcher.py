"""Render dispatcher — one screenshot per target, each failure kept to its own target."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from svgcheck.errors import RenderFailed
from svgcheck.models.targets import RenderTarget
from svgcheck.paths import screenshot_path

from .provider import BrowserProvider

logger = logging.getLogger(__name__)


class RenderDispatcher:
    """Forwards render requests to a provider under a per-render timeout.

    Failures are not retried; whatever the provider raises comes back as
    ``RenderFailed`` with the cause preserved. A capture that overruns the
    timeout is cancelled and abandoned, so a browser that never shuts down
    cannot hold up the target.
    """

    def __init__(self, provider: BrowserProvider, output_dir: Path, timeout_seconds: float = 60.0):
        self.provider = provider
        self.output_dir = Path(output_dir)
        self.timeout_seconds = timeout_seconds
        self._abandoned: set[asyncio.Task] = set()

    async def render(self, target: RenderTarget, document: Path, size: tuple[int, int]) -> Path:
        destination = screenshot_path(document, self.output_dir, target.slug)
        logger.info("Rendering %s in %s at %dx%d", Path(document).name, target.label, *size)
        task = asyncio.ensure_future(self.provider.capture(target, document, size, destination))
        try:
            done, _ = await asyncio.wait({task}, timeout=self.timeout_seconds)
        except asyncio.CancelledError:
            task.cancel()
            raise

        if not done:
            self._abandon(target, task)
            raise RenderFailed(target, f"timed out after {self.timeout_seconds:g}s")

        try:
            return task.result()
        except RenderFailed:
            raise
        except Exception as e:
            raise RenderFailed(target, str(e) or type(e).__name__) from e

    def _abandon(self, target: RenderTarget, task: asyncio.Task) -> None:
        task.cancel()
        self._abandoned.add(task)

        def _reap(finished: asyncio.Task) -> None:
            self._abandoned.discard(finished)
            if not finished.cancelled() and finished.exception() is not None:
                logger.debug("Abandoned %s render ended with: %s", target.label, finished.exception())

        task.add_done_callback(_reap)
