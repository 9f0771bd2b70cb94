"""CLI entry point - command definitions using Click.

Commands:
    init          Generate a template config file
    convert       Convert a coverage report to a Coveralls job file
    upload        Upload an existing Coveralls job file
    submit        Convert and upload in one go
"""

import sys

import click

from coveralls_submit import __version__


# ---------------------------------------------------------------------------
# Helpers shared by all data commands
# ---------------------------------------------------------------------------

def _load_config(ctx: click.Context):
    """Load config from the --config path. Exits on error."""
    from coveralls_submit.config import ConfigError, load

    try:
        config = load(ctx.obj["config_path"])
    except ConfigError as exc:
        click.echo(f"Configuration error: {exc}", err=True)
        sys.exit(1)

    _verbose(ctx, f"Output directory: {config.output_directory}")
    return config


def _verbose(ctx: click.Context, message: str) -> None:
    if ctx.obj["verbose"]:
        click.echo(f"[verbose] {message}", err=True)


def _handle_errors(func):
    """Decorator that catches pipeline exceptions and exits cleanly."""
    import functools

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        from coveralls_submit.converter import (
            ConverterError,
            PathOutsideRepositoryError,
            ReportWriteError,
        )
        from coveralls_submit.git import VCSError
        from coveralls_submit.models import ReportFormatError
        from coveralls_submit.uploader import ReportReadError, TransportError

        try:
            return func(*args, **kwargs)
        except ReportFormatError as exc:
            click.echo(f"Report error: {exc}", err=True)
            sys.exit(1)
        except VCSError as exc:
            click.echo(f"Git error: {exc}", err=True)
            sys.exit(1)
        except PathOutsideRepositoryError as exc:
            click.echo(f"Path error: {exc}", err=True)
            sys.exit(1)
        except (ReportWriteError, ReportReadError) as exc:
            click.echo(f"I/O error: {exc}", err=True)
            sys.exit(1)
        except ConverterError as exc:
            click.echo(f"Conversion error: {exc}", err=True)
            sys.exit(1)
        except TransportError as exc:
            click.echo(f"Network error: {exc}", err=True)
            sys.exit(1)

    return wrapper


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------

@click.group()
@click.option("--config", "config_path", default="coveralls-config.yaml", show_default=True,
              help="Path to the configuration file.")
@click.option("--verbose", is_flag=True, default=False,
              help="Enable verbose logging.")
@click.version_option(__version__, prog_name="coveralls-submit")
@click.pass_context
def cli(ctx: click.Context, config_path: str, verbose: bool) -> None:
    """Coveralls submitter - convert coverage reports and upload them."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    ctx.obj["verbose"] = verbose


# ---------------------------------------------------------------------------
# init
# ---------------------------------------------------------------------------

@cli.command("init")
@click.option("--output", "output_path", default="coveralls-config.yaml", show_default=True,
              help="Path where the template config file will be written.")
def init_command(output_path: str) -> None:
    """Generate a template coveralls-config.yaml file."""
    from coveralls_submit.config import ConfigError, generate_template
    try:
        generate_template(output_path)
        click.echo(f"Template written to '{output_path}'.")
        click.echo("Edit it with your Coveralls job id, service name and repo token.")
    except ConfigError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)


# ---------------------------------------------------------------------------
# convert
# ---------------------------------------------------------------------------

@cli.command("convert")
@click.argument("report_path")
@click.pass_context
@_handle_errors
def convert_command(ctx: click.Context, report_path: str) -> None:
    """Convert REPORT_PATH and print the path of the Coveralls job file."""
    from coveralls_submit.converter import convert
    from coveralls_submit.models import load_report

    config = _load_config(ctx)
    report = load_report(report_path)
    _verbose(ctx, f"Converting {len(report.targets)} target(s) from {report_path}")

    click.echo(str(convert(report, config)))


# ---------------------------------------------------------------------------
# upload
# ---------------------------------------------------------------------------

@cli.command("upload")
@click.argument("json_path")
@click.pass_context
@_handle_errors
def upload_command(ctx: click.Context, json_path: str) -> None:
    """Upload an already converted Coveralls job file."""
    from coveralls_submit.submit import report_result
    from coveralls_submit.uploader import COVERALLS_JOBS_URL, CoverallsUploader

    config = _load_config(ctx)
    _verbose(ctx, f"Posting {json_path} to {COVERALLS_JOBS_URL}")

    click.secho("Uploading coverage report to coveralls.io", fg="yellow", err=True)
    result = CoverallsUploader(verify=config.verify_ssl).upload(json_path)
    report_result(result)
    if not result.success:
        sys.exit(1)


# ---------------------------------------------------------------------------
# submit
# ---------------------------------------------------------------------------

@cli.command("submit")
@click.argument("report_path")
@click.pass_context
@_handle_errors
def submit_command(ctx: click.Context, report_path: str) -> None:
    """Convert REPORT_PATH and upload it to Coveralls."""
    from coveralls_submit.models import load_report
    from coveralls_submit.submit import submit

    config = _load_config(ctx)
    report = load_report(report_path)
    _verbose(ctx, f"Submitting {len(report.targets)} target(s) from {report_path}")

    result = submit(report, config)
    if not result.success:
        sys.exit(1)
