"""Conversion of a coverage report into a Coveralls job file.

Functions:
    encode_coverage(lines)                           -> list[int | None]
    encode_report(report, vcs)                       -> list[EncodedSourceFile]
    build_payload(report, config, vcs)               -> SubmissionPayload
    write_payload(payload, output_directory)         -> Path
    convert(report, config)                          -> Path

``convert`` is the full pipeline: walk the report, add git metadata, write the
pretty-printed JSON to ``<output_directory>/tmp`` and return the file path.
"""

import json
import tempfile
from collections.abc import Mapping, Sequence
from pathlib import Path

from coveralls_submit.config import Config
from coveralls_submit.git import GitClient, VCSClient, git_metadata
from coveralls_submit.models import (
    CoverageReport,
    EncodedSourceFile,
    Line,
    SubmissionPayload,
)

REPORT_PREFIX = "coveralls_report"


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------

class ConverterError(Exception):
    """Base exception for conversion errors."""


class PathOutsideRepositoryError(ConverterError):
    """Raised when a source file does not live under the repository root."""


class ReportWriteError(ConverterError):
    """Raised when the job file or its directory cannot be written."""


# ---------------------------------------------------------------------------
# Encoding
# ---------------------------------------------------------------------------

def encode_coverage(lines: Sequence[Line]) -> list[int | None]:
    """Return one entry per line: the hit count if executable, else None."""
    return [ln.execution_count if ln.executable else None for ln in lines]


def relative_path(location: str, root: str) -> str:
    """Return *location* relative to *root*, with forward slashes.

    Raises:
        PathOutsideRepositoryError: if *location* is not under *root*.
    """
    try:
        relative = Path(location).relative_to(Path(root))
    except ValueError as exc:
        raise PathOutsideRepositoryError(
            f"'{location}' is not inside the repository rooted at '{root}'"
        ) from exc
    return relative.as_posix()


def encode_report(report: CoverageReport, vcs: VCSClient) -> list[EncodedSourceFile]:
    """Encode every non-ignored file of every target, preserving order."""
    root = vcs.repo_root()
    encoded: list[EncodedSourceFile] = []

    for target in report.targets:
        for source in target.files:
            if source.ignored:
                continue
            encoded.append(EncodedSourceFile(
                name=relative_path(source.location, root),
                # hash the file where it lives on disk
                source_digest=vcs.hash_object(source.location),
                coverage=encode_coverage(source.lines),
            ))

    return encoded


def build_payload(
    report: CoverageReport,
    config: Config,
    vcs: VCSClient,
    environ: Mapping[str, str] | None = None,
) -> SubmissionPayload:
    return SubmissionPayload(
        service_job_id=config.service_job_id,
        service_name=config.service_name,
        repo_token=config.repo_token,
        source_files=encode_report(report, vcs),
        git=git_metadata(vcs, environ),
    )


# ---------------------------------------------------------------------------
# Persistence
# ---------------------------------------------------------------------------

def serialize(payload: SubmissionPayload) -> str:
    return json.dumps(payload.to_dict(), indent=2, ensure_ascii=False) + "\n"


def write_payload(payload: SubmissionPayload, output_directory: str) -> Path:
    """Write *payload* to a new uniquely named file under ``<output_directory>/tmp``.

    The file is left in place; removing it is up to the caller.

    Raises:
        ReportWriteError: if the directory or the file cannot be created.
    """
    tmp_dir = Path(output_directory) / "tmp"
    text = serialize(payload)

    try:
        tmp_dir.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            mode="w",
            encoding="utf-8",
            prefix=REPORT_PREFIX,
            suffix=".json",
            dir=tmp_dir,
            delete=False,
        ) as f:
            f.write(text)
    except OSError as exc:
        raise ReportWriteError(f"Unable to write Coveralls report under '{tmp_dir}': {exc}") from exc

    return Path(f.name)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def convert(
    report: CoverageReport,
    config: Config,
    vcs: VCSClient | None = None,
    environ: Mapping[str, str] | None = None,
) -> Path:
    """Convert *report* to a Coveralls job file and return its path.

    Raises:
        VCSError:                    a git lookup failed or came back empty
        PathOutsideRepositoryError:  a source file is outside the repository
        ReportWriteError:            the job file could not be written
    """
    payload = build_payload(report, config, vcs or GitClient(), environ)
    return write_payload(payload, config.output_directory)
