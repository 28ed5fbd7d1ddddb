"""CLI entrypoint for canvaslint."""

import logging
import sys
from pathlib import Path

import click

from . import __version__
from .errors import CanvaslintError


@click.group()
@click.version_option(__version__, prog_name="canvaslint")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, file_okay=True, dir_okay=False, path_type=Path),
    default=None,
    help="Path to canvaslint.toml (defaults to the nearest one above the document)",
)
@click.option("--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, config_path: Path | None, verbose: bool) -> None:
    """canvaslint - Lint and repair OCIF canvas documents.

    Check canvases for broken references and layout problems, render the
    findings as an overlay canvas, and apply the suggested repairs.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    ctx.ensure_object(dict)
    ctx.obj["config"] = config_path


_document_argument = click.argument(
    "document",
    type=click.Path(exists=True, file_okay=True, dir_okay=False, path_type=Path),
)


@cli.command()
@_document_argument
@click.option(
    "--fail-on",
    type=click.Choice(["error", "warning"]),
    default="error",
    help="Exit with error if this level or higher found",
)
@click.option(
    "--json",
    "output_json",
    is_flag=True,
    help="Output results as JSON",
)
@click.option(
    "--overlay",
    "overlay_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Write an overlay canvas with the findings drawn on it",
)
@click.pass_context
def check(ctx: click.Context, document: Path, fail_on: str, output_json: bool, overlay_path: Path | None) -> None:
    """Check a canvas document for problems."""
    from .commands.check_cmd import run_check

    try:
        exit_code = run_check(document, ctx.obj["config"], fail_on, output_json, overlay_path)
    except CanvaslintError as e:
        raise click.ClickException(str(e)) from e
    sys.exit(exit_code)


@cli.command()
@_document_argument
@click.option(
    "--output",
    "-o",
    "output_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Write the fixed document here instead of in place",
)
@click.option("--dry-run", is_flag=True, help="Show what would be fixed without writing")
@click.option(
    "--json",
    "output_json",
    is_flag=True,
    help="Output results as JSON",
)
@click.pass_context
def fix(ctx: click.Context, document: Path, output_path: Path | None, dry_run: bool, output_json: bool) -> None:
    """Apply the available repairs to a canvas document.

    Errors are fixed before warnings. The document is rewritten in place
    unless --output is given.
    """
    from .commands.fix_cmd import run_fix

    try:
        exit_code = run_fix(document, ctx.obj["config"], output_path, dry_run, output_json)
    except CanvaslintError as e:
        raise click.ClickException(str(e)) from e
    sys.exit(exit_code)


@cli.command()
@click.option(
    "--json",
    "output_json",
    is_flag=True,
    help="Output rules as JSON",
)
def rules(output_json: bool) -> None:
    """List the available rules."""
    from .commands.rules_cmd import run_rules

    exit_code = run_rules(output_json)
    sys.exit(exit_code)


def main() -> None:
    """Main entrypoint."""
    cli()


if __name__ == "__main__":
    main()
