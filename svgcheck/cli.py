"""CLI entry point for svgcheck."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import click
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler

from svgcheck.errors import ImageNotFound, InspectionFailed
from svgcheck.imaging.engine import ImageEngine
from svgcheck.imaging.metadata import inspect_image
from svgcheck.models.config import DEFAULT_SETTINGS_FILE, RunConfiguration, Settings
from svgcheck.models.images import DisplayBounds
from svgcheck.models.targets import RenderTarget
from svgcheck.orchestrator import Orchestrator
from svgcheck.paths import default_output_dir
from svgcheck.reporter.console import print_report

console = Console(soft_wrap=True)
logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False, log_file: str | None = None) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    handlers: list[logging.Handler] = [RichHandler(console=console, rich_tracebacks=True)]
    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s [%(name)s] %(message)s")
        )
        handlers.append(file_handler)
    logging.basicConfig(level=level, format="%(message)s", datefmt="[%X]",
                        handlers=handlers, force=True)


def _parse_browsers(ctx, param, value: str | None) -> list[RenderTarget] | None:
    if value is None:
        return None
    try:
        targets = RenderTarget.parse_list(value)
    except ValueError as e:
        raise click.BadParameter(str(e)) from None
    if not targets:
        raise click.BadParameter("At least one browser must be given")
    return targets


def _parse_display(ctx, param, value: str | None) -> DisplayBounds | None:
    if value is None:
        return None
    try:
        return DisplayBounds.parse(value)
    except (ValueError, ValidationError) as e:
        raise click.BadParameter(str(e)) from None


def _prompt_value(parse):
    """Adapt a parser so click re-prompts on bad input instead of aborting."""

    def _proc(value: str):
        try:
            return parse(value)
        except ValueError as e:
            raise click.UsageError(str(e)) from None

    return _proc


def _load_settings(path: str) -> Settings:
    try:
        return Settings.load_or_create(path)
    except (ValueError, OSError) as e:
        console.print(f"Could not load settings {path}: {e}", style="red", markup=False)
        console.print("Run 'svgcheck init' to recreate the settings file.")
        sys.exit(1)


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """Render an SVG in several browsers and compare each screenshot with a baseline PNG."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    setup_logging(verbose)


@cli.command()
@click.argument("document", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("baseline", type=click.Path(dir_okay=False, path_type=Path))
@click.option("--browsers", "-b", callback=_parse_browsers,
              help="Comma separated browsers, e.g. chrome,firefox. Defaults to the settings file.")
@click.option("--out", "-o", type=click.Path(file_okay=False, path_type=Path),
              help="Directory under which {document}_screenshots is created.")
@click.option("--settings", "-s", "settings_path", default=DEFAULT_SETTINGS_FILE,
              help="Settings file path")
@click.option("--display", callback=_parse_display, help="Display size as WIDTHxHEIGHT")
@click.option("--fuzz", type=float, help="Colour distance tolerance in percent")
@click.option("--threshold", type=int, help="Differing pixel count still treated as equal")
@click.pass_context
def run(
    ctx: click.Context,
    document: Path,
    baseline: Path,
    browsers: list[RenderTarget] | None,
    out: Path | None,
    settings_path: str,
    display: DisplayBounds | None,
    fuzz: float | None,
    threshold: int | None,
) -> None:
    """Render DOCUMENT (.svg) and compare the screenshots with BASELINE (.png)."""
    settings = _load_settings(settings_path)
    setup_logging(ctx.obj.get("verbose", False), settings.log_file)

    if baseline.suffix.lower() != ".png":
        console.print(f"Baseline {baseline} is not a PNG file", style="red", markup=False)
        sys.exit(1)

    try:
        cfg = RunConfiguration.from_settings(
            settings,
            document=document.absolute(),
            baseline=baseline.absolute(),
            output_dir=default_output_dir(document, out),
            targets=browsers,
            display=display,
            fuzz=fuzz,
            threshold=threshold,
        )
    except ValidationError as e:
        console.print(f"Invalid run configuration: {e}", style="red", markup=False)
        sys.exit(1)

    console.print("Starting work...")
    try:
        report = Orchestrator(cfg).run()
    except (ImageNotFound, InspectionFailed) as e:
        logger.error("Baseline unusable: %s", e)
        console.print(str(e), style="red", markup=False, highlight=False)
        console.print("Working stopped with ERROR!")
        sys.exit(1)

    print_report(report, console, settings.log_file)


@cli.command()
@click.option("--settings", "-s", "settings_path", default=DEFAULT_SETTINGS_FILE,
              help="Settings file path")
def init(settings_path: str) -> None:
    """Run the setup wizard and write the settings file."""
    path = Path(settings_path)
    if path.exists():
        if not click.confirm(f"{path} already exists. Overwrite?"):
            return

    defaults = Settings()
    console.print("Start setup wizard. Press Enter to keep the default value.")
    fuzz = click.prompt("Compare fuzz value (percent)", default=defaults.fuzz, type=float)
    threshold = click.prompt("Differing pixel count threshold", default=defaults.threshold, type=int)
    display = click.prompt("Display size (WIDTHxHEIGHT)", default=str(defaults.display),
                           value_proc=_prompt_value(DisplayBounds.parse))
    margin = click.prompt("Margin kept free around an oversized baseline (pixels)",
                          default=defaults.margin, type=click.IntRange(min=0))
    browsers = click.prompt(
        f"Browsers ({', '.join(t.value for t in RenderTarget)})",
        default=",".join(t.value for t in defaults.browsers),
        value_proc=_prompt_value(RenderTarget.parse_list),
    )
    timeout = click.prompt("Render timeout (seconds)", default=defaults.render_timeout_seconds,
                           type=float)
    max_parallel = click.prompt("Browsers rendering at the same time", default=defaults.max_parallel_targets,
                                type=click.IntRange(min=1))
    headless = click.confirm("Run browsers headless?", default=defaults.headless)
    log_file = click.prompt("Diagnostic log file", default=defaults.log_file)

    executable_paths: dict[RenderTarget, str] = {}
    for target in browsers:
        custom = click.prompt(
            f"Path to {target.label} executable (empty for Playwright's own build)",
            default="", show_default=False,
        )
        if custom:
            executable_paths[target] = custom

    try:
        settings = Settings(
            fuzz=fuzz,
            threshold=threshold,
            display=display,
            margin=margin,
            browsers=browsers,
            render_timeout_seconds=timeout,
            max_parallel_targets=max_parallel,
            headless=headless,
            log_file=log_file,
            executable_paths=executable_paths,
        )
    except ValidationError as e:
        console.print(f"Invalid settings: {e}", style="red", markup=False)
        sys.exit(1)
    settings.save(path)
    console.print(f"Created {path}", style="green", markup=False)
    console.print("\nYou can now run:")
    console.print("  [blue]svgcheck run drawing.svg baseline.png[/blue]")


@cli.command()
@click.argument("image", type=click.Path(dir_okay=False, path_type=Path))
def identify(image: Path) -> None:
    """Print dimensions, quality and format of IMAGE."""
    try:
        info = inspect_image(image)
    except (ImageNotFound, InspectionFailed) as e:
        console.print(str(e), style="red", markup=False)
        sys.exit(1)
    console.print(f"{info.path}: {info.width}x{info.height} {info.format} quality={info.quality:g}",
                  markup=False, highlight=False)


@cli.command()
@click.argument("source", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("destination", type=click.Path(dir_okay=False, path_type=Path))
def trim(source: Path, destination: Path) -> None:
    """Remove the uniform border around SOURCE and write DESTINATION."""
    if not ImageEngine().trim(source, destination):
        console.print(f"Could not trim {source}", style="red", markup=False)
        sys.exit(1)
    console.print(f"Trimmed image written to {destination}", style="green", markup=False)


if __name__ == "__main__":
    cli()
