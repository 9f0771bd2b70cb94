"""Git metadata lookups.

Usage:
    vcs  = GitClient()
    root = vcs.repo_root()                      # "/home/me/project/"
    meta = git_metadata(vcs)                    # GitMetadata(head=..., branch=...)
    parse_branch("HEAD -> main, origin/main")   # "main"

Every field can be overridden through the environment (GIT_ID, GIT_BRANCH,
GIT_AUTHOR_NAME, ...). The git query for a field only runs when its override
is absent.
"""

import os
import subprocess
from collections.abc import Callable, Mapping
from typing import Protocol

from coveralls_submit.models import GitHead, GitMetadata

# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------

class VCSError(Exception):
    """Raised when a git query fails or resolves to an empty value."""


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

#: ``git log --pretty=format:`` placeholder for each head attribute
HEAD_FORMATS: dict[str, str] = {
    "id":              "%H",
    "author_name":     "%aN",
    "author_email":    "%ae",
    "committer_name":  "%cN",
    "committer_email": "%ce",
    "message":         "%s",
}

#: Environment override for each head attribute
HEAD_ENV_KEYS: dict[str, str] = {
    "id":              "GIT_ID",
    "author_name":     "GIT_AUTHOR_NAME",
    "author_email":    "GIT_AUTHOR_EMAIL",
    "committer_name":  "GIT_COMMITTER_NAME",
    "committer_email": "GIT_COMMITTER_EMAIL",
    "message":         "GIT_MESSAGE",
}

BRANCH_ENV_KEY = "GIT_BRANCH"


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------

class VCSClient(Protocol):
    """Read-only queries the converter needs from version control."""

    def repo_root(self) -> str: ...

    def hash_object(self, path: str) -> str: ...

    def head_attr(self, kind: str) -> str: ...

    def head_ref_decoration(self) -> str: ...


class GitClient:
    """VCSClient backed by the ``git`` executable."""

    def __init__(self, cwd: str | None = None, git: str = "git") -> None:
        self._cwd = cwd
        self._git = git

    def repo_root(self) -> str:
        """Return the repository top level, always ending with a separator."""
        root = self._run("rev-parse", "--show-toplevel").rstrip("\n")
        if not root:
            raise VCSError("git rev-parse --show-toplevel returned nothing")
        # git prints forward slashes on every platform
        return root if root.endswith("/") else root + "/"

    def hash_object(self, path: str) -> str:
        return self._run("hash-object", "--", path).strip()

    def head_attr(self, kind: str) -> str:
        try:
            fmt = HEAD_FORMATS[kind]
        except KeyError as exc:
            choices = ", ".join(HEAD_FORMATS)
            raise VCSError(f"Unknown head attribute {kind!r}. Available: {choices}") from exc
        return self._run("log", "-1", f"--pretty=format:{fmt}")

    def head_ref_decoration(self) -> str:
        return self._run("log", "-1", "--pretty=format:%D")

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _run(self, *args: str) -> str:
        cmd = [self._git, *args]
        try:
            proc = subprocess.run(
                cmd,
                cwd=self._cwd,
                check=False,
                capture_output=True,
                text=True,
            )
        except FileNotFoundError as exc:
            raise VCSError(f"'{self._git}' executable not found") from exc

        if proc.returncode != 0:
            raise VCSError(
                f"`{' '.join(cmd)}` failed with exit code {proc.returncode}: "
                f"{proc.stderr.strip()}"
            )
        return proc.stdout


# ---------------------------------------------------------------------------
# Resolution helpers
# ---------------------------------------------------------------------------

def resolve(
    env_key: str,
    default: Callable[[], str],
    environ: Mapping[str, str] | None = None,
) -> str:
    """Return the override for *env_key*, else the value computed by *default*.

    *default* is only called when the override is missing or empty.

    Raises:
        VCSError: if neither source yields a non-empty value.
    """
    env = os.environ if environ is None else environ
    value = env.get(env_key) or default()
    if not value:
        raise VCSError(f"Could not resolve {env_key}: set it in the environment or check the repository")
    return value


def parse_branch(decoration: str) -> str:
    """Extract the current branch name from ``git log --pretty=%D`` output.

    ``"HEAD -> main, origin/main"`` → ``"main"``
    """
    after_arrow = decoration.split("->")[-1]
    return after_arrow.split(",")[0].strip()


def git_metadata(vcs: VCSClient, environ: Mapping[str, str] | None = None) -> GitMetadata:
    """Resolve every head field and the branch, overrides first."""
    fields = {
        kind: resolve(env_key, lambda kind=kind: vcs.head_attr(kind), environ)
        for kind, env_key in HEAD_ENV_KEYS.items()
    }
    decoration = resolve(BRANCH_ENV_KEY, vcs.head_ref_decoration, environ)
    branch = parse_branch(decoration)
    if not branch or branch == "HEAD":
        raise VCSError(f"Could not extract a branch name from {decoration!r} (detached HEAD?)")
    return GitMetadata(head=GitHead(**fields), branch=branch)
