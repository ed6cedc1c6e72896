"""
ELFScope CLI -- ELF Structure Decoder
======================================

Click-based command-line interface.  Decodes one ELF file and prints a
terminal summary, or the JSON data model, and optionally writes a JSON
report.

Usage::

    # Terminal summary
    elfscope /usr/bin/ls

    # JSON data model on stdout, without raw contents
    elfscope /usr/bin/ls --json --no-contents

    # Write a JSON report
    elfscope /usr/bin/ls --output report.json

    # Verbose (debug) logging on stderr
    elfscope /usr/bin/ls --verbose

References:
    - Click documentation: https://click.palletsprojects.com/
"""

from __future__ import annotations

import sys
from pathlib import Path

import click

from shared.config import ScopeConfig
from shared.console import ScopeConsole
from shared.logger import ScopeLogger

from elfscope import __version__
from elfscope.core.engine import ElfscopeEngine
from elfscope.core.errors import ElfDecodeError
from elfscope.output.console import ElfscopeConsoleOutput
from elfscope.output.report import ElfscopeReportGenerator


def _resolve_output(output_path: str, output_dir: str) -> Path:
    """Place a bare report file name inside the configured output directory."""
    target = Path(output_path)
    if target.parent == Path(".") and not output_path.startswith(("./", ".\\")):
        return Path(output_dir) / target
    return target


@click.command("elfscope")
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--json", "json_output",
    is_flag=True,
    default=False,
    help="Print the decoded image as JSON to stdout.",
)
@click.option(
    "--output", "-o",
    "output_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Write a JSON report to this path (bare file names go to the output directory).",
)
@click.option(
    "--no-contents",
    is_flag=True,
    default=False,
    help="Omit raw segment/section contents from JSON output and reports.",
)
@click.option(
    "--config", "-c",
    "config_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="TOML configuration file (default: elfscope.toml in the project root).",
)
@click.option(
    "--verbose", "-v",
    is_flag=True,
    default=False,
    help="Enable debug logging on stderr.",
)
@click.version_option(__version__, prog_name="elfscope")
def elfscope_cli(
    path: str,
    json_output: bool,
    output_path: str | None,
    no_contents: bool,
    config_path: str | None,
    verbose: bool,
) -> None:
    """ELFScope -- decode the structure of an ELF file.

    PATH is the ELF object, executable or shared library to decode.

    Examples:

    \b
        elfscope /usr/bin/ls
        elfscope libfoo.so --json --no-contents
        elfscope core.1234 --output report.json
    """
    console = ScopeConsole()

    try:
        config = ScopeConfig.load(config_path)
    except (OSError, ValueError) as exc:
        console.error(f"Invalid configuration: {exc}")
        sys.exit(1)

    settings = config.global_settings
    log_level = "DEBUG" if verbose or settings.debug else settings.log_level
    logger = ScopeLogger(
        "cli",
        log_level=log_level,
        log_file=settings.log_file or None,
        json_logs=settings.log_json,
        console_output=verbose,
    )

    engine = ElfscopeEngine(config=config, logger=logger)
    include_contents = config.decoder.include_contents and not no_contents

    try:
        image = engine.analyze_sync(path)
    except KeyboardInterrupt:
        console.warning("Decoding interrupted by user.")
        sys.exit(130)
    except ElfDecodeError as exc:
        console.error(f"Decoding failed: {exc}")
        sys.exit(1)

    if json_output:
        click.echo(image.to_json(
            indent=config.decoder.json_indent,
            include_contents=include_contents,
        ))
    else:
        preview = config.decoder.contents_preview_bytes if include_contents else 0
        ElfscopeConsoleOutput(console=console, preview_bytes=preview).display(
            image, title=path,
        )

    if output_path:
        generator = ElfscopeReportGenerator(
            indent=config.decoder.json_indent,
            include_contents=include_contents,
        )
        report_path = generator.generate_json(
            image, _resolve_output(output_path, settings.output_dir), source=path,
        )
        if not json_output:
            console.success(f"JSON report saved: {report_path}")


def main() -> None:
    """Entry point for the ``elfscope`` console script and ``python -m elfscope``."""
    elfscope_cli()


if __name__ == "__main__":
    main()
