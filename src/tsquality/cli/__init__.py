"""
Command-line interface for the tsquality package.

Provides commands for assessing the quality of time series tables.
"""

import click
from pathlib import Path

from tsquality import __version__


def common_options(func):
    """Decorator to add common CLI options."""
    func = click.option(
        '--config-dir',
        type=click.Path(exists=False, file_okay=False, dir_okay=True, path_type=Path),
        default=Path('config'),
        help='Directory containing tsquality.yaml (default: ./config)',
    )(func)
    func = click.option(
        '--log-level',
        type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'], case_sensitive=False),
        default=None,
        help='Logging level (default: $TSQUALITY_LOG_LEVEL or INFO)',
    )(func)
    func = click.option(
        '--log-file',
        type=click.Path(dir_okay=False, path_type=Path),
        default=None,
        help='Also append log records to this file',
    )(func)
    return func


@click.group()
@click.version_option(version=__version__, prog_name='tsquality')
@click.pass_context
def cli(ctx):
    """
    Time Series Quality CLI.

    Repairs missing values in time series tables and scores their
    completeness, consistency, timeliness and validity.
    """
    ctx.ensure_object(dict)


@cli.command()
def version():
    """Display version information and the numeric stack in use."""
    import numpy
    import pandas

    click.echo(f"tsquality v{__version__}")
    click.echo(f"  numpy {numpy.__version__}, pandas {pandas.__version__}")


def main():
    """Main entry point for the CLI."""
    # Import commands to register them
    from tsquality.cli.commands import assess  # noqa: F401

    cli()


if __name__ == '__main__':
    main()
