"""Tests for coveralls_submit/cli.py"""

import json
from pathlib import Path

import pytest
import requests
from click.testing import CliRunner

from conftest import ROOT, FakeVCS
from coveralls_submit import __version__
from coveralls_submit.cli import cli
from coveralls_submit.git import BRANCH_ENV_KEY, HEAD_ENV_KEYS
from coveralls_submit.uploader import COVERALLS_JOBS_URL

REPORT = {"targets": [{"name": "App", "files": [
    {"location": f"{ROOT}Sources/App.swift",
     "lines": [{"executable": False}, {"executable": True, "execution_count": 2}]},
    {"location": f"{ROOT}Sources/Skip.swift", "ignored": True, "lines": []},
]}]}


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def workspace(tmp_path, monkeypatch):
    """Config + report on disk, git replaced by fixtures."""
    for key in [BRANCH_ENV_KEY, *HEAD_ENV_KEYS.values(), "COVERALLS_REPO_TOKEN",
                "COVERALLS_SERVICE_NAME", "COVERALLS_SERVICE_JOB_ID", "XCOV_OUTPUT_DIRECTORY"]:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setattr("coveralls_submit.converter.GitClient", FakeVCS)

    config = tmp_path / "coveralls-config.yaml"
    config.write_text(
        "coveralls:\n"
        "  service_job_id: \"7\"\n"
        "  service_name: \"travis-ci\"\n"
        "  repo_token: \"tok\"\n"
        f"output_directory: \"{tmp_path / 'out'}\"\n",
        encoding="utf-8",
    )
    report = tmp_path / "report.json"
    report.write_text(json.dumps(REPORT), encoding="utf-8")
    return {"config": str(config), "report": str(report), "out": tmp_path / "out"}


# ---------------------------------------------------------------------------
# Basics
# ---------------------------------------------------------------------------

def test_version(runner):
    result = runner.invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_init_writes_template(runner, tmp_path):
    out = tmp_path / "cfg.yaml"
    result = runner.invoke(cli, ["init", "--output", str(out)])
    assert result.exit_code == 0
    assert out.exists()


def test_init_refuses_overwrite(runner, tmp_path):
    out = tmp_path / "cfg.yaml"
    out.write_text("x")
    result = runner.invoke(cli, ["init", "--output", str(out)])
    assert result.exit_code == 1
    assert "already exists" in result.output


def test_missing_config_exits_1(runner, tmp_path, workspace):
    result = runner.invoke(cli, ["--config", str(tmp_path / "nope.yaml"), "convert", workspace["report"]])
    assert result.exit_code == 1
    assert "Configuration error" in result.output


# ---------------------------------------------------------------------------
# convert
# ---------------------------------------------------------------------------

def test_convert_prints_job_file_path(runner, workspace):
    result = runner.invoke(cli, ["--config", workspace["config"], "convert", workspace["report"]])
    assert result.exit_code == 0, result.output

    path = Path(result.output.strip().splitlines()[-1])
    assert path.parent == workspace["out"] / "tmp"
    data = json.loads(path.read_text(encoding="utf-8"))
    assert data["source_files"] == [
        {"name": "Sources/App.swift", "source_digest": "digest:App.swift", "coverage": [None, 2]},
    ]


def test_convert_bad_report_exits_1(runner, workspace, tmp_path):
    bad = tmp_path / "bad.json"
    bad.write_text("[]", encoding="utf-8")
    result = runner.invoke(cli, ["--config", workspace["config"], "convert", str(bad)])
    assert result.exit_code == 1
    assert "Report error" in result.output


def test_convert_verbose(runner, workspace):
    result = runner.invoke(cli, ["--config", workspace["config"], "--verbose", "convert", workspace["report"]])
    assert result.exit_code == 0
    assert "[verbose] Converting 1 target(s)" in result.output


# ---------------------------------------------------------------------------
# upload / submit
# ---------------------------------------------------------------------------

def test_upload_success(runner, workspace, tmp_path, requests_mock):
    requests_mock.post(COVERALLS_JOBS_URL, status_code=200)
    job = tmp_path / "job.json"
    job.write_text("{}", encoding="utf-8")
    result = runner.invoke(cli, ["--config", workspace["config"], "upload", str(job)])
    assert result.exit_code == 0
    assert "successfully" in result.output


def test_upload_missing_file_exits_1(runner, workspace, tmp_path):
    result = runner.invoke(cli, ["--config", workspace["config"], "upload", str(tmp_path / "nope.json")])
    assert result.exit_code == 1
    assert "I/O error" in result.output


def test_submit_success(runner, workspace, requests_mock):
    adapter = requests_mock.post(COVERALLS_JOBS_URL, status_code=200, text="ok")
    result = runner.invoke(cli, ["--config", workspace["config"], "submit", workspace["report"]])
    assert result.exit_code == 0, result.output
    assert b'"repo_token": "tok"' in adapter.last_request.body


def test_submit_rejected_exits_1(runner, workspace, requests_mock):
    requests_mock.post(COVERALLS_JOBS_URL, status_code=422, text="invalid token")
    result = runner.invoke(cli, ["--config", workspace["config"], "submit", workspace["report"]])
    assert result.exit_code == 1
    assert "invalid token" in result.output


def test_submit_network_error_exits_1(runner, workspace, requests_mock):
    requests_mock.post(COVERALLS_JOBS_URL, exc=requests.exceptions.ConnectionError)
    result = runner.invoke(cli, ["--config", workspace["config"], "submit", workspace["report"]])
    assert result.exit_code == 1
    assert "Network error" in result.output
