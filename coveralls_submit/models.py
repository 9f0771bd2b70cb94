"""Data models for coverage reports and Coveralls submissions.

Input (built by the caller, read-only here):
    - Line
    - SourceFile
    - Target
    - CoverageReport

Output (the Coveralls job wire object):
    - EncodedSourceFile
    - GitHead
    - GitMetadata
    - SubmissionPayload
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any


class ReportFormatError(Exception):
    """Raised when a coverage report file is missing or malformed."""


# ---------------------------------------------------------------------------
# Coverage report (input)
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Line:
    executable: bool
    execution_count: int = 0


@dataclass(frozen=True)
class SourceFile:
    location: str
    lines: list[Line] = field(default_factory=list)
    ignored: bool = False


@dataclass(frozen=True)
class Target:
    name: str
    files: list[SourceFile] = field(default_factory=list)


@dataclass(frozen=True)
class CoverageReport:
    targets: list[Target] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Submission payload (output)
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class EncodedSourceFile:
    name: str
    source_digest: str
    coverage: list[int | None]

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "source_digest": self.source_digest,
            "coverage": list(self.coverage),
        }


@dataclass(frozen=True)
class GitHead:
    id: str
    author_name: str
    author_email: str
    committer_name: str
    committer_email: str
    message: str

    def to_dict(self) -> dict[str, str]:
        return {
            "id": self.id,
            "author_name": self.author_name,
            "author_email": self.author_email,
            "committer_name": self.committer_name,
            "committer_email": self.committer_email,
            "message": self.message,
        }


@dataclass(frozen=True)
class GitMetadata:
    head: GitHead
    branch: str

    def to_dict(self) -> dict[str, Any]:
        return {"head": self.head.to_dict(), "branch": self.branch}


@dataclass(frozen=True)
class SubmissionPayload:
    service_job_id: str
    service_name: str
    repo_token: str
    source_files: list[EncodedSourceFile]
    git: GitMetadata

    def to_dict(self) -> dict[str, Any]:
        """Return the payload as the exact Coveralls job object.

        Key order follows the Coveralls schema so that serialized output is
        reproducible.
        """
        return {
            "service_job_id": self.service_job_id,
            "service_name": self.service_name,
            "repo_token": self.repo_token,
            "source_files": [f.to_dict() for f in self.source_files],
            "git": self.git.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SubmissionPayload":
        git = data["git"]
        return cls(
            service_job_id=data["service_job_id"],
            service_name=data["service_name"],
            repo_token=data["repo_token"],
            source_files=[
                EncodedSourceFile(
                    name=f["name"],
                    source_digest=f["source_digest"],
                    coverage=list(f["coverage"]),
                )
                for f in data["source_files"]
            ],
            git=GitMetadata(head=GitHead(**git["head"]), branch=git["branch"]),
        )


# ---------------------------------------------------------------------------
# Report loader (used by the CLI)
# ---------------------------------------------------------------------------

def load_report(report_path: str) -> CoverageReport:
    """Load a coverage report from a JSON file.

    Expected shape::

        {"targets": [{"name": "App", "files": [
            {"location": "/abs/path/File.swift", "ignored": false,
             "lines": [{"executable": true, "execution_count": 3}, ...]}]}]}

    Raises:
        ReportFormatError: if the file is missing, is not valid JSON, or does
                           not follow the shape above.
    """
    path = Path(report_path)
    if not path.exists():
        raise ReportFormatError(f"Coverage report not found: '{report_path}'")

    try:
        with path.open(encoding="utf-8") as f:
            raw = json.load(f)
    except json.JSONDecodeError as exc:
        raise ReportFormatError(f"Failed to parse '{report_path}': {exc}") from exc

    if not isinstance(raw, dict) or not isinstance(raw.get("targets"), list):
        raise ReportFormatError(f"'{report_path}' must contain a 'targets' list.")

    try:
        return CoverageReport(targets=[_parse_target(t) for t in raw["targets"]])
    except (KeyError, TypeError, ValueError, AttributeError) as exc:
        raise ReportFormatError(f"Malformed coverage report '{report_path}': {exc!r}") from exc


def _parse_target(raw: dict) -> Target:
    return Target(
        name=raw.get("name", ""),
        files=[_parse_file(f) for f in raw.get("files", [])],
    )


def _parse_file(raw: dict) -> SourceFile:
    return SourceFile(
        location=raw["location"],
        ignored=bool(raw.get("ignored", False)),
        lines=[
            Line(
                executable=bool(ln["executable"]),
                execution_count=int(ln.get("execution_count", 0)),
            )
            for ln in raw.get("lines", [])
        ],
    )
