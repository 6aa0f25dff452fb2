import json
import os
from datetime import datetime, timezone

import pytest

from repokeywords.datastore import assign_keywords, build_dataset, write_json_file
from repokeywords.fileutil import load_existing
from repokeywords.gitutil import GitError
from repokeywords.models import Document, Settings


def _document(path, **extra):
    return Document(
        name=os.path.basename(path),
        title="A title",
        path=path,
        last_modified=datetime(2024, 5, 1, 12, 30, tzinfo=timezone.utc),
        created=datetime(2023, 2, 3, 4, 5, 6, tzinfo=timezone.utc),
        content="some content here",
        content_length=17,
        file_type="markdown",
        org="journal",
        **extra,
    )


def test_write_json_file_round_trip(tmp_path):
    target = tmp_path / "data.json"
    documents = [
        _document("repository/journal/a.md", keywords=["alpha", "beta"], upvotes=3),
        _document("repository/journal/b.md", comments=["nice"]),
    ]
    absolute = write_json_file(documents, str(target))
    assert absolute == os.path.abspath(str(target))
    assert load_existing(str(target)) == documents


def test_write_json_file_uses_four_space_indent_and_newline(tmp_path):
    target = tmp_path / "data.json"
    write_json_file([_document("repository/journal/a.md")], str(target))
    text = target.read_text(encoding="utf-8")
    assert text.endswith("\n")
    assert text.startswith("[\n    {\n        \"Name\": ")
    records = json.loads(text)
    assert records[0]["Keywords"] is None
    assert records[0]["Path"] == "repository/journal/a.md"


def test_write_json_file_escapes_html_characters(tmp_path):
    target = tmp_path / "data.json"
    write_json_file([_document("repository/journal/a.md", title=None) if False else
                     Document(path="x/y.md", content="<b> & </b>")], str(target))
    text = target.read_text(encoding="utf-8")
    assert "<" not in text and ">" not in text and "&" not in text
    assert json.loads(text)[0]["Content"] == "<b> & </b>"


def test_write_json_file_empty_is_null(tmp_path):
    target = tmp_path / "data.json"
    write_json_file([], str(target))
    assert target.read_text(encoding="utf-8") == "null\n"
    assert load_existing(str(target)) == []


def test_assign_keywords_orders_by_score_and_limits():
    document = Document(path="p.md", keywords=["old"])
    scores = {"p.md": {"low": 0.5, "high": 3.0, "mid": 1.5, "top": 9.0}}
    assign_keywords([document], scores, 3)
    assert document.keywords == ["top", "high", "mid"]


def test_assign_keywords_drops_long_words():
    long_word = "x" * 40
    document = Document(path="p.md")
    assign_keywords([document], {"p.md": {long_word: 100.0, "short": 1.0}}, 5)
    assert document.keywords == ["short"]


def test_assign_keywords_leaves_unscored_documents_alone():
    scored = Document(path="a.md", keywords=["keep"])
    unscored = Document(path="b.md", keywords=["untouched"])
    assign_keywords([scored, unscored], {"a.md": {}}, 5)
    assert scored.keywords == []
    assert unscored.keywords == ["untouched"]


def test_build_dataset_without_repositories_writes_empty_file(tmp_path):
    data_file = tmp_path / "file_data.json"
    settings = Settings(
        repo_urls=(),
        data_file=str(data_file),
        stopwords_file=str(tmp_path / "missing.txt"),
    )
    assert build_dataset(settings) == []
    assert data_file.read_text(encoding="utf-8") == "null\n"


def test_build_dataset_fails_when_clone_fails(tmp_path):
    data_file = tmp_path / "file_data.json"
    missing_repo = str(tmp_path / "no-such-repository-anywhere" / "really-not-here")
    settings = Settings(
        repo_urls=(missing_repo,),
        clone_dir=str(tmp_path / "clones"),
        data_file=str(data_file),
        stopwords_file=str(tmp_path / "missing.txt"),
    )
    with pytest.raises(GitError):
        build_dataset(settings)
    assert not data_file.exists()