"""Reading repository files and collecting what is known about each of them."""

from __future__ import annotations

import json
import os
import shutil
import subprocess
from datetime import datetime, timedelta, timezone
from typing import Callable, Iterator, Sequence

from .gitutil import GitError, creation_date, last_modified, parent_repo
from .models import ZERO_TIME, Document

_ORPHAN_AGE = timedelta(days=3 * 365)
_ORPHAN_WORD_COUNT = 200
_URL_PREFIX_LENGTH = len("https://github.com/KiranMahn")

_FILE_TYPES = {
    ".md": "markdown",
    ".txt": "text",
    ".json": "json",
    ".html": "html",
    ".xml": "xml",
    ".go": "go",
    ".py": "python",
    ".java": "java",
    ".js": "javascript",
    ".ts": "typescript",
    ".yaml": "yaml",
    ".yml": "yaml",
    ".toml": "toml",
}


def _git(args: list[str], cwd: str | None = None) -> str:
    """Run git, returning its combined output; raise GitError on failure."""
    try:
        completed = subprocess.run(
            ["git", *args],
            cwd=cwd,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
        )
    except OSError as exc:
        raise GitError(f"failed to run git {args[0]}: {exc}") from exc
    if completed.returncode != 0:
        raise GitError(
            f"git {args[0]} failed with exit status {completed.returncode}: {completed.stdout}"
        )
    return completed.stdout or ""


def read_file_content(document: Document) -> None:
    """Load the file at ``document.path`` into the document's content."""
    with open(document.path, "rb") as handle:
        data = handle.read()
    document.content = data.decode("utf-8", errors="replace")
    document.content_length = len(data)


def extract_keywords(document: Document, num_keywords: int) -> None:
    """Append words of 4 to 14 bytes to the document's keywords, then cap them."""
    document.keywords.extend(
        word
        for word in document.content.split()
        if 3 < len(word.encode("utf-8")) < 15
    )
    count = len(document.keywords)
    if count >= 10 and num_keywords > 0 and count >= num_keywords:
        del document.keywords[num_keywords:]


def clone_repository(repo_url: str, clone_dir: str) -> None:
    """Clone ``repo_url`` afresh, replacing any earlier clone."""
    target = clone_dir + repo_url[_URL_PREFIX_LENGTH:]
    print(f"\ncloning repo: {repo_url}")
    if os.path.lexists(target):
        print(f"Cloned repo folder exists... Updating... {target}")
        remove_repository(target)
    print(f"Cloning {repo_url} into {target}")
    _git(["clone", repo_url, target])


def remove_repository(path: str) -> None:
    """Remove ``path`` and everything beneath it; a missing path is ignored."""
    if os.path.isdir(path) and not os.path.islink(path):
        shutil.rmtree(path)
    elif os.path.lexists(path):
        os.remove(path)


def _walk(path: str) -> Iterator[tuple[str, os.stat_result]]:
    info = os.lstat(path)
    yield path, info
    if os.path.isdir(path) and not os.path.islink(path):
        for name in sorted(os.listdir(path)):
            yield from _walk(os.path.join(path, name))


def walk_and_filter(
    directory: str, predicate: Callable[[str, os.stat_result], bool]
) -> list[str]:
    """Return the non-directory paths under ``directory`` accepted by ``predicate``.

    Paths come in lexical order, directories visited depth first.
    """
    return [
        path
        for path, info in _walk(directory)
        if not os.path.isdir(path) or os.path.islink(path)
        if predicate(path, info)
    ]


def is_orphan(document: Document, now: datetime | None = None) -> bool:
    """Whether a document is stale (over three years old) or under 200 words."""
    moment = now or datetime.now(timezone.utc)
    modified = document.last_modified
    if modified.tzinfo is None:
        modified = modified.replace(tzinfo=timezone.utc)
    if moment - modified > _ORPHAN_AGE:
        return True
    return len(document.content.split()) < _ORPHAN_WORD_COUNT


def file_type(path: str) -> str:
    """Name the type of a file from its extension, or ``unknown``."""
    return _FILE_TYPES.get(os.path.splitext(path)[1].lower(), "unknown")


def find_title(path: str) -> str:
    """Return the first markdown heading or ``title:`` line, or ``none``."""
    try:
        with open(path, encoding="utf-8", errors="replace") as handle:
            for raw in handle:
                line = raw.rstrip("\r\n")
                if line.startswith("#"):
                    return line.lstrip("#").strip()
                if line.startswith("title:"):
                    return line[len("title:"):].strip()
    except OSError:
        return "none"
    return "none"


def load_existing(data_file: str) -> list[Document]:
    """Read the documents stored in a JSON data file."""
    with open(data_file, encoding="utf-8") as handle:
        records = json.load(handle)
    return [Document.from_dict(record) for record in records or []]


def find_document(documents: Sequence[Document], path: str) -> Document | None:
    """Return the document stored for ``path``, if any."""
    return next((document for document in documents if document.path == path), None)


def _modification_time(path: str) -> datetime:
    return datetime.fromtimestamp(os.stat(path).st_mtime, tz=timezone.utc)


def _last_modified(path: str) -> datetime:
    try:
        return last_modified(path)
    except GitError as exc:
        raise GitError(f"failed to get last modified time: {exc}") from exc


def _fill_from_file(document: Document, path: str, num_keywords: int) -> Document:
    read_file_content(document)
    extract_keywords(document, num_keywords)
    document.file_type = file_type(path)
    return document


def new_document(path: str, num_keywords: int) -> Document:
    """Gather everything known about a file not yet in the data file."""
    modified_on_disk = _modification_time(path)
    modified = _last_modified(path)
    try:
        created = creation_date(path)
    except GitError as exc:
        print(f"Warning: Failed to get creation time for {path}: {exc}")
        created = ZERO_TIME
    document = Document(
        name=os.path.basename(path),
        title=find_title(path),
        path=path,
        last_modified=modified,
        created=created,
        is_orphan=is_orphan(Document(last_modified=modified_on_disk, path=path)),
        org=parent_repo(path),
        upvotes=0,
    )
    return _fill_from_file(document, path, num_keywords)


def update_document(document: Document, path: str, num_keywords: int) -> Document:
    """Refresh a stored document from the file at ``path``, keeping votes and comments."""
    modified_on_disk = _modification_time(path)
    modified = _last_modified(path)
    document.name = os.path.basename(path)
    document.title = find_title(path)
    document.last_modified = modified
    document.is_orphan = is_orphan(Document(last_modified=modified_on_disk, path=path))
    return _fill_from_file(document, path, num_keywords)


def document_details(path: str, data_file: str, num_keywords: int) -> Document:
    """Build the document for ``path``, reusing its stored record when there is one."""
    try:
        documents = load_existing(data_file)
    except (OSError, ValueError) as exc:
        print(f"error getting existing files :( : {exc}")
        documents = []
    existing = find_document(documents, path)
    if existing is not None:
        return update_document(existing, path, num_keywords)
    return new_document(path, num_keywords)


def clone_repository_branches(repo_url: str, clone_dir: str) -> None:
    """Clone a repository and then every remote branch not merged into it."""
    repo_name = repo_url[repo_url.rfind("/") + 1:]
    repo_path = clone_dir + repo_name

    if not os.path.exists(repo_path):
        print(f"Cloning {repo_url} into {repo_path}")
        try:
            _git(["clone", repo_url, repo_path])
        except GitError as exc:
            raise GitError(f"failed to clone repository: {exc}") from exc
    if not os.path.isdir(repo_path):
        raise NotADirectoryError(f"failed to change directory: {repo_path}")

    print("Fetching all branches")
    try:
        _git(["fetch", "--all"], cwd=repo_path)
    except GitError as exc:
        raise GitError(f"failed to fetch all branches: {exc}") from exc
    try:
        remote_output = _git(["branch", "-r"], cwd=repo_path)
    except GitError as exc:
        raise GitError(f"failed to list branches: {exc}") from exc
    try:
        merged_output = _git(["branch", "--merged"], cwd=repo_path)
    except GitError as exc:
        raise GitError(f"failed to list merged branches: {exc}") from exc

    merged = {line.strip() for line in merged_output.split("\n") if line.strip()}

    for line in remote_output.split("\n"):
        branch = line.strip()
        if not branch or branch.startswith("origin/HEAD"):
            continue
        if not branch.startswith("origin/"):
            continue
        branch_name = branch[len("origin/"):]
        if branch_name in merged:
            continue
        branch_path = os.path.join(repo_path, "." + clone_dir + branch_name)
        try:
            os.makedirs(branch_path, mode=0o755, exist_ok=True)
        except OSError as exc:
            raise OSError(
                f"failed to create directory for branch {branch_name}: {exc}"
            ) from exc
        print(f"Cloning branch {branch_name} into {branch_path}")
        try:
            _git(["clone", "--branch", branch_name, repo_url, branch_path], cwd=repo_path)
        except GitError as exc:
            raise GitError(f"failed to clone branch {branch_name}: {exc}") from exc