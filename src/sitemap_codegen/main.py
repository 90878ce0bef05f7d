"""Main CLI entry point for the sitemap code generator."""

import logging
import sys
from typing import Optional, Tuple

import click

from .config import get_config_from_env
from .inspector import SourceParseError
from .renderer import (
    emit_module,
    is_up_to_date,
    render_sitemap,
    validate_sitemap,
    write_module,
)
from .scanner import scan_paths
from .types import GeneratorConfig, ScanResult
from .utils import format_number, setup_logging


def _env_default(name: str):
    """Option default read from the environment when the command runs."""
    return lambda: getattr(get_config_from_env(), name)


@click.command()
@click.argument('paths', nargs=-1, type=click.Path(exists=True))
@click.option(
    '--output', '-o',
    default=_env_default("output_path"),
    help='Path of the generated module',
    show_default=True
)
@click.option(
    '--route-annotation',
    default=_env_default("route_annotation"),
    help='Route decorator name as written on component classes',
    show_default=True
)
@click.option(
    '--sitemap-annotation',
    default=_env_default("sitemap_annotation"),
    help='Sitemap decorator name as written on component classes',
    show_default=True
)
@click.option(
    '--escape-xml/--no-escape-xml',
    default=None,
    help='XML-escape sitemap locations (default from SITEMAP_CODEGEN_ESCAPE_XML)'
)
@click.option(
    '--report-omitted/--no-report-omitted',
    default=None,
    help='Warn about decorated classes left out of the sitemap (default from SITEMAP_CODEGEN_REPORT_OMITTED)'
)
@click.option(
    '--check',
    is_flag=True,
    help='Exit with status 1 if the generated module is out of date; write nothing'
)
@click.option(
    '--preview',
    metavar='BASE_URL',
    help='Print the rendered sitemap for BASE_URL instead of writing the module'
)
@click.option(
    '--validate',
    is_flag=True,
    help='With --preview, exit with status 1 if the rendered sitemap is invalid'
)
@click.option(
    '--log-level',
    default='WARNING',
    type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR']),
    help='Logging level',
    show_default=True
)
@click.option(
    '--log-file',
    help='Log file path (optional)',
    type=click.Path()
)
def main(
    paths: Tuple[str, ...],
    output: str,
    route_annotation: str,
    sitemap_annotation: str,
    escape_xml: Optional[bool],
    report_omitted: Optional[bool],
    check: bool,
    preview: Optional[str],
    validate: bool,
    log_level: str,
    log_file: Optional[str]
) -> None:
    """
    Generate a sitemap.xml endpoint from decorated component classes.

    Scans PATHS (files or directories, default from SITEMAP_CODEGEN_SOURCES)
    for classes carrying both the route and the sitemap_url decorators and
    writes a module whose map_sitemap(app, url) serves the sitemap.
    """
    setup_logging(log_level, log_file)
    logger = logging.getLogger(__name__)

    env = get_config_from_env()
    config = GeneratorConfig(
        source_paths=list(paths) or env.source_paths,
        output_path=output,
        route_annotation=route_annotation,
        sitemap_annotation=sitemap_annotation,
        escape_xml=env.escape_xml if escape_xml is None else escape_xml,
        report_omitted=env.report_omitted if report_omitted is None else report_omitted,
    )

    try:
        result = scan_paths(config.source_paths, config)
        print_summary(result)

        if preview is not None:
            document = render_sitemap(preview, result.entries, escape=config.escape_xml)
            click.echo(document, nl=False)
            if validate and not validate_sitemap(document):
                click.echo("Rendered sitemap is invalid", err=True)
                sys.exit(1)
            return

        source = emit_module(result.entries, escape=config.escape_xml)

        if check:
            if not is_up_to_date(config.output_path, source):
                click.echo(f"Out of date: {config.output_path}", err=True)
                sys.exit(1)
            click.echo(f"Up to date: {config.output_path}", err=True)
            return

        if write_module(config.output_path, source):
            click.echo(f"Wrote {config.output_path}", err=True)
        else:
            click.echo(f"Unchanged {config.output_path}", err=True)

    except KeyboardInterrupt:
        logger.info("Process interrupted by user")
        sys.exit(130)  # Standard exit code for SIGINT

    except (SourceParseError, OSError) as e:
        logger.error(f"Fatal error: {e}")
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


def print_summary(result: ScanResult) -> None:
    """Print scan summary to stderr."""
    click.echo(
        f"Scanned {format_number(result.files_scanned)} files, "
        f"{format_number(result.classes_scanned)} classes: "
        f"{format_number(len(result.entries))} sitemap entries",
        err=True
    )
    for omitted in result.omitted:
        click.echo(f"  omitted {omitted.describe()}", err=True)


if __name__ == '__main__':
    main()
