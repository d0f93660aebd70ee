"""The version string shown in the title bar and the HTTP user agent."""

from __future__ import annotations

import subprocess

BASE_VERSION = "0.1.0"
DEFAULT_HASH_LENGTH = 6


def _run(args: list[str]) -> str | None:
    try:
        result = subprocess.run(args, capture_output=True, text=True, check=False)
    except OSError:
        return None
    if result.returncode != 0:
        return None
    return result.stdout.strip()


def get_commit_hash(length: int | None = None) -> str | None:
    """Return the short id of the current commit, asking jj first, then git."""
    hash_len = DEFAULT_HASH_LENGTH if length is None else length
    commit = _run(
        [
            "jj",
            "--ignore-working-copy",
            "--color=never",
            "log",
            "--no-graph",
            "-r=@-",
            "-T",
            f"commit_id.short({hash_len})",
        ]
    )
    if commit is not None:
        return commit
    return _run(["git", "rev-parse", f"--short={hash_len}", "HEAD"])


def package_version() -> str:
    """The package version, with the commit hash appended when one is known."""
    commit = get_commit_hash()
    if commit:
        return f"{BASE_VERSION}+{commit}"
    return BASE_VERSION