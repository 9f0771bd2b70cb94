"""Configuration loading.

Usage:
    config = load("coveralls-config.yaml")       # raises ConfigError on bad config
    generate_template("coveralls-config.yaml")   # writes example file to disk

Values are passed through verbatim to the payload and the output path; only
structurally broken files are rejected.
"""

import os
from dataclasses import dataclass
from pathlib import Path

import yaml

DEFAULT_OUTPUT_DIRECTORY = "xcov_report"


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------

class ConfigError(Exception):
    """Raised when the configuration is missing or invalid."""


# ---------------------------------------------------------------------------
# Config dataclass
# ---------------------------------------------------------------------------

@dataclass
class Config:
    service_job_id: str = ""
    service_name: str = ""
    repo_token: str = ""
    output_directory: str = DEFAULT_OUTPUT_DIRECTORY
    # Disabling certificate verification is only possible from here
    verify_ssl: bool = True


# ---------------------------------------------------------------------------
# Loader
# ---------------------------------------------------------------------------

def load(config_path: str = "coveralls-config.yaml") -> Config:
    """Load configuration from a YAML file.

    Environment variables COVERALLS_SERVICE_JOB_ID, COVERALLS_SERVICE_NAME,
    COVERALLS_REPO_TOKEN and XCOV_OUTPUT_DIRECTORY override file values.

    Raises:
        ConfigError: if the file is missing, malformed, or a section has the
                     wrong type.
    """
    path = Path(config_path)

    if not path.exists():
        raise ConfigError(
            f"Config file not found: '{config_path}'\n"
            "Run `python -m coveralls_submit init` to generate a template."
        )

    try:
        with path.open(encoding="utf-8") as f:
            raw = yaml.safe_load(f)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse '{config_path}': {exc}") from exc

    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ConfigError(f"'{config_path}' must be a YAML mapping at the top level.")

    coveralls = raw.get("coveralls") or {}
    if not isinstance(coveralls, dict):
        raise ConfigError(f"'coveralls' in '{config_path}' must be a mapping.")

    verify_ssl = coveralls.get("verify_ssl", True)
    if not isinstance(verify_ssl, bool):
        raise ConfigError(f"'coveralls.verify_ssl' must be true or false, got {verify_ssl!r}")

    job_id   = os.environ.get("COVERALLS_SERVICE_JOB_ID") or (coveralls.get("service_job_id") or "")
    service  = os.environ.get("COVERALLS_SERVICE_NAME")   or (coveralls.get("service_name") or "")
    token    = os.environ.get("COVERALLS_REPO_TOKEN")     or (coveralls.get("repo_token") or "")
    out_dir  = (os.environ.get("XCOV_OUTPUT_DIRECTORY")
                or raw.get("output_directory")
                or DEFAULT_OUTPUT_DIRECTORY)

    return Config(
        service_job_id=str(job_id),
        service_name=str(service),
        repo_token=str(token),
        output_directory=str(out_dir),
        verify_ssl=verify_ssl,
    )


# ---------------------------------------------------------------------------
# Template generator (used by `init` command)
# ---------------------------------------------------------------------------

TEMPLATE = """\
coveralls:
  service_job_id: "1234567890"     # CI job id, e.g. $TRAVIS_JOB_ID
  service_name: "travis-ci"
  repo_token: "xxxxxxxxxxxx"       # Repository token from coveralls.io
  verify_ssl: true

# The converted report is written to <output_directory>/tmp
output_directory: "xcov_report"
"""


def generate_template(output_path: str = "coveralls-config.yaml") -> None:
    """Write a template coveralls-config.yaml to *output_path*.

    Raises:
        ConfigError: if the file already exists (to avoid overwriting secrets).
    """
    path = Path(output_path)
    if path.exists():
        raise ConfigError(
            f"'{output_path}' already exists. Remove it first or choose a different path."
        )
    path.write_text(TEMPLATE, encoding="utf-8")
