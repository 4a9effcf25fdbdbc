"""Run orchestrator — coordinates normalize, render, compare and report stages."""

from __future__ import annotations

import asyncio
import logging
import time
from enum import Enum
from pathlib import Path

from svgcheck.baseline.normalizer import normalize
from svgcheck.compare.comparator import Comparator
from svgcheck.errors import RenderFailed
from svgcheck.imaging.engine import ImageEngine
from svgcheck.imaging.metadata import inspect_image
from svgcheck.models.config import RunConfiguration
from svgcheck.models.images import ImageDescriptor
from svgcheck.models.results import ComparisonOutcome, ComparisonStatus, RunReport
from svgcheck.models.targets import RenderTarget
from svgcheck.render.dispatcher import RenderDispatcher
from svgcheck.render.provider import BrowserProvider, PlaywrightProvider

logger = logging.getLogger(__name__)


class RunState(str, Enum):
    IDLE = "idle"
    BASELINE_READY = "baseline_ready"
    RENDERING = "rendering"
    COMPARING = "comparing"
    RECORDED = "recorded"
    REPORTED = "reported"


class Orchestrator:
    """Runs one visual regression check over every configured target."""

    def __init__(
        self,
        config: RunConfiguration,
        engine: ImageEngine | None = None,
        provider: BrowserProvider | None = None,
    ):
        self.config = config
        self.engine = engine or ImageEngine()
        self.provider = provider or PlaywrightProvider(
            display=config.display,
            engine=self.engine,
            headless=config.headless,
            executable_paths=config.executable_paths,
        )
        self.dispatcher = RenderDispatcher(
            self.provider, config.output_dir, timeout_seconds=config.render_timeout_seconds,
        )
        self.comparator = Comparator(config.output_dir, engine=self.engine)
        self.state = RunState.IDLE
        self.target_states: dict[RenderTarget, RunState] = {}

    def run(self) -> RunReport:
        """Execute the complete run and return its report."""
        return asyncio.run(self.run_async())

    async def run_async(self) -> RunReport:
        start = time.time()
        cfg = self.config
        logger.info("=== Checking %s against %s in %d browser(s) ===",
                    cfg.document.name, cfg.baseline.name, len(cfg.targets))

        # Stage 1: Baseline. Inspection errors are fatal and propagate.
        working, resized = self._prepare_baseline()
        self.state = RunState.BASELINE_READY

        # Stage 2: Render + compare per target
        semaphore = asyncio.Semaphore(cfg.max_parallel_targets)

        async def _run_one(index: int, target: RenderTarget) -> ComparisonOutcome:
            async with semaphore:
                logger.info("--- [%d/%d] %s ---", index + 1, len(cfg.targets), target.label)
                try:
                    return await self._process_target(target, working)
                except Exception as e:
                    logger.error("Target %s crashed: %s", target.label, e, exc_info=True)
                    self.target_states[target] = RunState.RECORDED
                    return ComparisonOutcome(
                        target=target,
                        status=ComparisonStatus.ERROR,
                        diagnostic=str(e) or type(e).__name__,
                    )

        outcomes = await asyncio.gather(
            *(_run_one(i, t) for i, t in enumerate(cfg.targets))
        )

        # Stage 3: Report
        report = RunReport(
            output_dir=cfg.output_dir.absolute(),
            baseline=cfg.baseline,
            working_baseline=working.path,
            baseline_resized=resized,
            outcomes=list(outcomes),
        )
        self.state = RunState.REPORTED
        logger.info("=== Run complete in %.1fs: %d passed, %d failed, %d errors ===",
                    time.time() - start, report.passed, report.failed, report.errors)
        return report

    def _prepare_baseline(self) -> tuple[ImageDescriptor, bool]:
        cfg = self.config
        baseline = inspect_image(cfg.baseline, self.engine)
        cfg.output_dir.mkdir(parents=True, exist_ok=True)
        working_path, resized = normalize(
            baseline, cfg.display, cfg.output_dir, engine=self.engine, margin=cfg.margin,
        )
        working = inspect_image(working_path, self.engine) if resized else baseline
        return working, resized

    async def _process_target(self, target: RenderTarget, working: ImageDescriptor) -> ComparisonOutcome:
        cfg = self.config

        self.target_states[target] = RunState.RENDERING
        try:
            screenshot = await self.dispatcher.render(target, cfg.document, working.size)
        except RenderFailed as e:
            logger.error("Result of comparing %s with screenshot from %s: ERROR! %s",
                         cfg.baseline.name, target.label, e.cause)
            self.target_states[target] = RunState.RECORDED
            return ComparisonOutcome(
                target=target,
                status=ComparisonStatus.ERROR,
                diagnostic=e.cause,
            )

        self.target_states[target] = RunState.COMPARING
        result = await asyncio.to_thread(
            self.comparator.compare, working.path, screenshot, cfg.fuzz, cfg.threshold,
        )
        self.target_states[target] = RunState.RECORDED
        if result.status == ComparisonStatus.ERROR:
            logger.error("Result of comparing %s with screenshot from %s: ERROR! %s",
                         cfg.baseline.name, target.label, result.diagnostic)
        return ComparisonOutcome(
            target=target,
            status=result.status,
            differing_pixel_count=result.differing_pixel_count,
            diagnostic=result.diagnostic,
            artifact_path=result.artifact_path,
            screenshot_path=Path(screenshot),
        )
