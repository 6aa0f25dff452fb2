"""Timestamps and repository names taken from git history."""

from __future__ import annotations

import os
import re
import subprocess
from datetime import datetime, timezone

_COMMIT_DATE_FORMAT = "%a %b %d %H:%M:%S %Y"
_INTEGER = re.compile(r"[+-]?\d+")


class GitError(Exception):
    """Raised when a git command fails or its output cannot be understood."""


def _run_git(args: list[str], path: str, timeout: float | None, label: str) -> str:
    try:
        completed = subprocess.run(
            ["git", *args],
            cwd=os.path.dirname(path),
            capture_output=True,
            text=True,
            timeout=timeout,
        )
    except subprocess.TimeoutExpired as exc:
        raise GitError(f"{label} timed out") from exc
    except OSError as exc:
        raise GitError(f"failed to run {label}: {exc}") from exc
    if completed.returncode != 0:
        raise GitError(
            f"failed to run {label}: exit status {completed.returncode}, {completed.stderr}"
        )
    return completed.stdout


def in_git_repo(path: str) -> bool:
    """Return whether the directory holding ``path`` is inside a git work tree."""
    try:
        completed = subprocess.run(
            ["git", "rev-parse", "--is-inside-work-tree"],
            cwd=os.path.dirname(os.path.abspath(path)),
            capture_output=True,
            text=True,
        )
    except OSError:
        return False
    return completed.returncode == 0


def _require_repo(path: str) -> str:
    absolute = os.path.abspath(path)
    if not in_git_repo(absolute):
        raise GitError("not a git repository (or any of the parent directories)")
    return absolute


def parse_commit_date(output: str) -> datetime:
    """Parse a ``git log --date=local`` date such as ``Mon Jan 2 15:04:05 2006``."""
    text = output.strip()
    try:
        parsed = datetime.strptime(text, _COMMIT_DATE_FORMAT)
    except ValueError as exc:
        raise GitError(f"failed to parse time: {exc}") from exc
    return parsed.replace(tzinfo=timezone.utc)


def author_time(output: str) -> datetime:
    """Return the first ``author-time`` found in porcelain blame output."""
    for line in output.split("\n"):
        if not line.startswith("author-time "):
            continue
        parts = line.split()
        if len(parts) != 2:
            continue
        if not _INTEGER.fullmatch(parts[1]):
            raise GitError(f"failed to parse commit time: invalid syntax {parts[1]!r}")
        moment = datetime.fromtimestamp(int(parts[1]), tz=timezone.utc)
        if moment > datetime(1, 1, 1, tzinfo=timezone.utc):
            return moment
    raise GitError("no commit time found")


def git_blame(path: str, timeout: float | None = 30.0) -> str:
    """Return porcelain blame output for the first two lines of ``path``."""
    absolute = os.path.abspath(path)
    return _run_git(["blame", "-p", "-L1,2", absolute], absolute, timeout, "git blame")


def last_modified(path: str, timeout: float | None = 30.0) -> datetime:
    """Return the date of the latest commit touching ``path``."""
    absolute = _require_repo(path)
    output = _run_git(
        ["log", "-1", "--format=%cd", "--date=local", absolute],
        absolute,
        timeout,
        "git cmd",
    )
    return parse_commit_date(output)


def creation_date(path: str, timeout: float | None = 30.0) -> datetime:
    """Return the author time of the opening lines of ``path``."""
    absolute = _require_repo(path)
    return author_time(git_blame(absolute, timeout))


def parent_repo(path: str) -> str:
    """Return the second slash-separated component of ``path``."""
    parts = path.split("/")
    if len(parts) < 2:
        raise ValueError(f"path has no parent component: {path!r}")
    return parts[1]