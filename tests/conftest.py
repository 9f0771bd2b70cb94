"""Shared fixtures: a fixture-backed VCS client and a sample report."""

import pytest

from coveralls_submit.config import Config
from coveralls_submit.models import CoverageReport, Line, SourceFile, Target

ROOT = "/work/repo/"

HEAD = {
    "id":              "3f2a9c1d0b",
    "author_name":     "Ada Author",
    "author_email":    "ada@example.com",
    "committer_name":  "Carl Committer",
    "committer_email": "carl@example.com",
    "message":         "Add coverage upload",
}


class FakeVCS:
    """VCSClient returning canned values and recording every call."""

    def __init__(self, root=ROOT, head=None, decoration="HEAD -> main, origin/main"):
        self.root = root
        self.head = dict(HEAD if head is None else head)
        self.decoration = decoration
        self.calls: list[tuple] = []

    def repo_root(self) -> str:
        self.calls.append(("repo_root",))
        return self.root

    def hash_object(self, path: str) -> str:
        self.calls.append(("hash_object", path))
        return f"digest:{path.rsplit('/', 1)[-1]}"

    def head_attr(self, kind: str) -> str:
        self.calls.append(("head_attr", kind))
        return self.head[kind]

    def head_ref_decoration(self) -> str:
        self.calls.append(("head_ref_decoration",))
        return self.decoration


@pytest.fixture
def vcs() -> FakeVCS:
    return FakeVCS()


@pytest.fixture
def config(tmp_path) -> Config:
    return Config(
        service_job_id="job-42",
        service_name="travis-ci",
        repo_token="tok",
        output_directory=str(tmp_path / "out"),
    )


@pytest.fixture
def report() -> CoverageReport:
    return CoverageReport(targets=[
        Target(name="App", files=[
            SourceFile(
                location=f"{ROOT}Sources/App.swift",
                lines=[Line(False), Line(True, 3), Line(True, 0), Line(False)],
            ),
            SourceFile(
                location=f"{ROOT}Sources/Generated.swift",
                lines=[Line(True, 1)],
                ignored=True,
            ),
            SourceFile(
                location=f"{ROOT}Sources/Model.swift",
                lines=[Line(True, 7)],
            ),
        ]),
        Target(name="Kit", files=[
            SourceFile(
                location=f"{ROOT}Kit/Util.swift",
                lines=[Line(True, 2), Line(False)],
            ),
        ]),
    ])
