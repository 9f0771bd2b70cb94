"""Convert-then-upload entry point."""

from collections.abc import Mapping

import click

from coveralls_submit.config import Config
from coveralls_submit.converter import convert
from coveralls_submit.git import VCSClient
from coveralls_submit.models import CoverageReport
from coveralls_submit.uploader import CoverallsUploader, UploadResult


def submit(
    report: CoverageReport,
    config: Config,
    vcs: VCSClient | None = None,
    uploader: CoverallsUploader | None = None,
    environ: Mapping[str, str] | None = None,
) -> UploadResult:
    """Convert *report* and upload it to Coveralls in a single attempt.

    Conversion errors propagate before any network call. A rejected upload is
    returned, not raised.
    """
    report_path = convert(report, config, vcs=vcs, environ=environ)

    if uploader is None:
        uploader = CoverallsUploader(verify=config.verify_ssl)

    click.secho("Uploading coverage report to coveralls.io", fg="yellow", err=True)
    result = uploader.upload(report_path)
    report_result(result)
    return result


def report_result(result: UploadResult) -> None:
    if result.success:
        click.secho("Submitted report to coveralls.io successfully", fg="green", err=True)
    else:
        click.secho("There was an error submitting the report to coveralls.io", fg="red", err=True)
        click.secho(result.body, fg="red", err=True)
