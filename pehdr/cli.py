from __future__ import annotations

import logging
import sys
from importlib import metadata
from typing import Optional

import typer
import yaml
from pydantic import ValidationError

from pehdr.config import config_to_snapshot, load_config
from pehdr.errors import BoundsViolation, InspectError, MalformedSignature, SourceUnavailable
from pehdr.inspector import HeaderInspector
from pehdr.logs import setup_logging
from pehdr.reporters.console import render_console
from pehdr.source import open_image

logger = logging.getLogger(__name__)

EXIT_SOURCE_UNAVAILABLE = 1
EXIT_BOUNDS_VIOLATION = 3
EXIT_BAD_SIGNATURE = 4

app = typer.Typer(add_completion=False)


def version_callback(value: bool):
    if value:
        try:
            v = metadata.version("pehdr")
        except metadata.PackageNotFoundError:
            v = "0.1.0-dev"
        typer.echo(f"pehdr version: {v}")
        raise typer.Exit()


def exit_code_for(err: InspectError) -> int:
    if isinstance(err, SourceUnavailable):
        return EXIT_SOURCE_UNAVAILABLE
    if isinstance(err, BoundsViolation):
        return EXIT_BOUNDS_VIOLATION
    if isinstance(err, MalformedSignature):
        return EXIT_BAD_SIGNATURE
    return 1


@app.command()
def main(
    path: Optional[str] = typer.Argument(
        None, help="Executable to inspect. Defaults to the running Python interpreter."
    ),
    config: str = typer.Option(None, "--config", help="Path to YAML config."),
    strict: Optional[bool] = typer.Option(
        None, "--strict/--permissive", help="Reject bad MZ / PE signatures instead of dumping them."
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log decoding steps to stderr."),
    version: Optional[bool] = typer.Option(
        None, "--version", callback=version_callback, is_eager=True, help="Show version and exit."
    ),
):
    """
    Dump the DOS, COFF and optional headers of a PE image.
    """
    try:
        cfg = load_config(config)
    except (OSError, yaml.YAMLError, ValidationError) as e:
        raise typer.BadParameter(f"Cannot load config {config}: {e}", param_hint="--config")
    if strict is not None:
        cfg.strict_signatures = strict
    setup_logging("DEBUG" if verbose else cfg.log_level)
    logger.debug("Effective config: %s", config_to_snapshot(cfg))

    target = path or sys.executable
    try:
        with open_image(target) as image:
            inspector = HeaderInspector(image, strict=cfg.strict_signatures, width=cfg.line_width)
            for lines in inspector.run():
                render_console(lines)
    except InspectError as e:
        typer.secho(f"Error: {e.message}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=exit_code_for(e))


if __name__ == "__main__":
    app()
