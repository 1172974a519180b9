"""style-optimizer CLI entry point: Click group with subcommands."""

import logging

import click

from style_optimizer import __version__

_LOG_LEVELS = [logging.WARNING, logging.INFO, logging.DEBUG]


@click.group()
@click.version_option(version=__version__, prog_name="style-optimizer")
@click.option("-v", "--verbose", count=True, help="Increase log verbosity (-v, -vv)")
def cli(verbose: int) -> None:
    """Style Optimizer - rewrite render-blocking stylesheets from page-load telemetry."""
    logging.basicConfig(
        level=_LOG_LEVELS[min(verbose, len(_LOG_LEVELS) - 1)],
        format="%(levelname)s %(name)s: %(message)s",
    )


# Import and register subcommands
from style_optimizer.cli.optimize import optimize  # noqa: E402
from style_optimizer.cli.classify import classify  # noqa: E402

cli.add_command(optimize)
cli.add_command(classify)
